"""
Dev Signup Finalizer.

Local stand-in for the signup service that redeems invitation codes. It
follows the same contract: in one club transaction, check redeemability,
count the use, deactivate the code once its uses are spent, and create the
member with the invitation's role and team. A redeemed seat moves from
pending to members, so the club's committed count does not change.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from seatkeeper.adapters.repos import Repos
from seatkeeper.components.codes import normalize_code
from seatkeeper.components.expiry import is_redeemable
from seatkeeper.components.invitations import club_scope
from seatkeeper.domain.entities import Member
from seatkeeper.domain.errors import InvitationNotFoundError, InvitationNotRedeemableError
from seatkeeper.ports.clock import ClockPort
from seatkeeper.ports.store import TransactionalStorePort

logger = logging.getLogger(__name__)


class DevSignupFinalizer:
    def __init__(self, store: TransactionalStorePort, clock: ClockPort) -> None:
        self.store = store
        self.clock = clock

    async def redeem(
        self,
        code: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Member:
        """
        Redeem a code and create the member it was issued for.

        The member's email defaults to the invited address.

        Raises:
            InvitationNotFoundError: unknown code
            InvitationNotRedeemableError: expired, used up or deactivated
        """
        code = normalize_code(code)
        invitation = await Repos.bind(self.store).invitations.get(code)
        if invitation is None:
            raise InvitationNotFoundError(code)

        async with self.store.transaction(club_scope(invitation.club_id)) as tx:
            repos = Repos.bind(tx)
            # Re-read under the club lock
            invitation = await repos.invitations.get(code)
            if invitation is None:
                raise InvitationNotFoundError(code)

            now = self.clock.now_utc()
            verdict = is_redeemable(invitation, now)
            if not verdict.ok:
                raise InvitationNotRedeemableError(code, verdict.message)

            uses = invitation.uses_count + 1
            invitation = invitation.model_copy(
                update={"uses_count": uses, "active": uses < invitation.max_uses}
            )
            await repos.invitations.save(invitation)

            member = Member(
                id=uuid4().hex,
                email=(email or invitation.admin_email).strip().lower(),
                club_id=invitation.club_id,
                team_id=invitation.team_id,
                role=invitation.intended_role,
                first_name=first_name or invitation.first_name,
                last_name=last_name or invitation.last_name,
                referral_code=code,
                created_at=now,
            )
            await repos.members.save(member)

        logger.info(
            "Redeemed invitation %s: %s joined club %s as %s",
            code,
            member.email,
            member.club_id,
            member.role,
        )
        return member
