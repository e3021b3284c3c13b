import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from seatkeeper.app_shell.context import ServiceContext, build_store
from seatkeeper.components.invitations import InvitationIssuer, InvitationRegistry
from seatkeeper.components.onboarding import ClubOnboarder
from seatkeeper.components.seats import SeatAccountant
from seatkeeper.rules.loader import load_rules
from seatkeeper.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("SEATKEEPER_DATA_DIR", "./data"))
        self.rules_path = Path(os.environ.get("SEATKEEPER_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.migrations_dir = self.base_dir / "migrations"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Services ---
@lru_cache
def get_context() -> ServiceContext:
    """One context per process; the store's per-club locks must be shared."""
    settings = get_settings()
    rules = get_rules()
    store = build_store(rules, settings.data_dir, settings.migrations_dir)
    return ServiceContext.create(store, rules)


def get_issuer(ctx: ServiceContext = Depends(get_context)) -> InvitationIssuer:
    return ctx.issuer


def get_registry(ctx: ServiceContext = Depends(get_context)) -> InvitationRegistry:
    return ctx.registry


def get_accountant(ctx: ServiceContext = Depends(get_context)) -> SeatAccountant:
    return ctx.accountant


def get_onboarder(ctx: ServiceContext = Depends(get_context)) -> ClubOnboarder:
    return ctx.onboarder
