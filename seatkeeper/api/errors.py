"""Mapping of domain and store errors to HTTP responses."""

from fastapi import HTTPException

from seatkeeper.domain.errors import (
    ClubNotFoundError,
    CodeCollisionError,
    InvalidInputError,
    InvitationNotFoundError,
    InvitationNotRedeemableError,
    QuotaExceededError,
    SeatkeeperError,
)
from seatkeeper.ports.store import StoreError, StoreUnavailableError


def http_error(exc: SeatkeeperError | StoreError) -> HTTPException:
    if isinstance(exc, InvalidInputError):
        return HTTPException(
            status_code=422,
            detail=[{"code": err.code, "message": err.message, "field": err.field} for err in exc.errors],
        )
    if isinstance(exc, ClubNotFoundError | InvitationNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, QuotaExceededError):
        return HTTPException(
            status_code=409,
            detail={"message": str(exc), "categories": exc.categories},
        )
    if isinstance(exc, InvitationNotRedeemableError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StoreUnavailableError | CodeCollisionError):
        return HTTPException(
            status_code=503,
            detail={"message": str(exc), "persisted_codes": exc.persisted_codes},
        )
    if isinstance(exc, StoreError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
