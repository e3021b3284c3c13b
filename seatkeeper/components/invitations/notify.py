"""
Invitation email composition and delivery.
"""

from __future__ import annotations

from html import escape
from urllib.parse import urlencode

from seatkeeper.domain.entities import Invitation
from seatkeeper.domain.roles import role_description, role_label
from seatkeeper.ports.email import EmailPort, EmailResult


def build_signup_url(signup_url: str, code: str) -> str:
    """
    Build the signup link carried in an invitation email.

    Args:
        signup_url: Signup page URL, with or without a query string
        code: Invitation code to prefill

    Returns:
        Full signup URL
    """
    separator = "&" if "?" in signup_url else "?"
    return f"{signup_url}{separator}{urlencode({'code': code})}"


def compose_invitation_email(invitation: Invitation, signup_url: str) -> tuple[str, str, str]:
    """Return (subject, html body, text body) for an invitation."""
    link = build_signup_url(signup_url, invitation.code)
    greeting = f"Hi {invitation.first_name}," if invitation.first_name else "Hi,"
    role = role_label(invitation.intended_role)
    expires = invitation.expires_at.strftime("%d %B %Y")

    subject = f"You're invited to join {invitation.club_name}"

    text = "\n".join(
        [
            greeting,
            "",
            f"You have been invited to join {invitation.club_name} as {role}.",
            role_description(invitation.intended_role),
            "",
            f"Your invitation code is {invitation.code}. It can be used once and expires on {expires}.",
            f"Sign up here: {link}",
        ]
    )

    html = (
        f"<p>{escape(greeting)}</p>"
        f"<p>You have been invited to join <strong>{escape(invitation.club_name)}</strong> "
        f"as {escape(role)}.<br>{escape(role_description(invitation.intended_role))}</p>"
        f"<p>Your invitation code is <strong>{invitation.code}</strong>. "
        f"It can be used once and expires on {expires}.</p>"
        f'<p><a href="{escape(link)}">Accept the invitation</a></p>'
    )
    return subject, html, text


class InvitationMailer:
    """Sends invitation codes to invited members."""

    def __init__(self, email: EmailPort, signup_url: str) -> None:
        self._email = email
        self._signup_url = signup_url

    def send(self, invitation: Invitation) -> EmailResult:
        subject, html, text = compose_invitation_email(invitation, self._signup_url)
        return self._email.send_email(
            recipient=invitation.admin_email,
            subject=subject,
            body_html=html,
            body_text=text,
        )
