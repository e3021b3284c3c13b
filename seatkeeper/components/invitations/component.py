"""
Invitations component - Issuing, listing, checking and deactivating codes.

Shell Layer - converts domain and store errors into output models.
"""

from __future__ import annotations

from seatkeeper.domain.errors import (
    CodeCollisionError,
    InvalidInputError,
    QuotaExceededError,
    SeatkeeperError,
)
from seatkeeper.ports.store import StoreError, StoreUnavailableError

from ._impl import InvitationIssuer, InvitationRegistry
from .models import (
    DeactivateInvitationInput,
    InvitationListOutput,
    InvitationOperationOutput,
    IssuedInvitation,
    IssueInvitationsInput,
    IssueInvitationsOutput,
)


async def run_issue(inp: IssueInvitationsInput, issuer: InvitationIssuer) -> IssueInvitationsOutput:
    """Issue a batch and mail member invitations once it is stored."""
    try:
        invitations = await issuer.issue(inp)
    except InvalidInputError as e:
        return IssueInvitationsOutput(error=str(e), errors=e.errors)
    except QuotaExceededError as e:
        return IssueInvitationsOutput(error=str(e), quota_categories=e.categories)
    except (StoreUnavailableError, CodeCollisionError) as e:
        return IssueInvitationsOutput(error=str(e), persisted_codes=e.persisted_codes)
    except (SeatkeeperError, StoreError) as e:
        return IssueInvitationsOutput(error=str(e))

    emails_failed = issuer.notify(invitations)
    return IssueInvitationsOutput(
        invitations=[IssuedInvitation.from_invitation(inv) for inv in invitations],
        success=True,
        emails_failed=emails_failed,
    )


async def run_list(club_id: str, registry: InvitationRegistry) -> InvitationListOutput:
    try:
        items = await registry.list_invitations(club_id)
    except (SeatkeeperError, StoreError) as e:
        return InvitationListOutput(success=False, error=str(e))
    return InvitationListOutput(items=items, total=len(items))


async def run_check(code: str, registry: InvitationRegistry) -> InvitationOperationOutput:
    try:
        view = await registry.check_invitation(code)
    except (SeatkeeperError, StoreError) as e:
        return InvitationOperationOutput(error=str(e))
    return InvitationOperationOutput(view=view, success=True)


async def run_deactivate(
    inp: DeactivateInvitationInput,
    registry: InvitationRegistry,
) -> InvitationOperationOutput:
    try:
        view = await registry.deactivate_invitation(inp.club_id, inp.code)
    except (SeatkeeperError, StoreError) as e:
        return InvitationOperationOutput(error=str(e))
    return InvitationOperationOutput(view=view, success=True)
