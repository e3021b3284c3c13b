"""
Invitations component - Club invitation issuance under seat caps.
"""

from ._impl import (
    InvitationIssuer,
    InvitationRegistry,
    club_scope,
    partition_by_category,
    validate_issue_input,
)
from .component import run_check, run_deactivate, run_issue, run_list
from .models import (
    DeactivateInvitationInput,
    InvitationListOutput,
    InvitationOperationOutput,
    InvitationView,
    IssuanceConfig,
    IssuedInvitation,
    IssueInvitationsInput,
    IssueInvitationsOutput,
    Invitee,
)
from .notify import InvitationMailer, build_signup_url, compose_invitation_email
from .ports import ClockPort, EmailPort, RandomSourcePort, TransactionalStorePort

__all__ = [
    # Entry points
    "run_issue",
    "run_list",
    "run_check",
    "run_deactivate",
    "InvitationIssuer",
    "InvitationRegistry",
    "InvitationMailer",
    "club_scope",
    "validate_issue_input",
    "partition_by_category",
    "build_signup_url",
    "compose_invitation_email",
    # Input models
    "IssueInvitationsInput",
    "Invitee",
    "DeactivateInvitationInput",
    "IssuanceConfig",
    # Output models
    "IssueInvitationsOutput",
    "IssuedInvitation",
    "InvitationView",
    "InvitationListOutput",
    "InvitationOperationOutput",
    # Ports
    "ClockPort",
    "EmailPort",
    "RandomSourcePort",
    "TransactionalStorePort",
]
