from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from seatkeeper.adapters.clock import SystemClock
from seatkeeper.adapters.dev_email import DevEmailAdapter
from seatkeeper.adapters.dev_finalizer import DevSignupFinalizer
from seatkeeper.adapters.memory_store import InMemoryDocumentStore
from seatkeeper.adapters.repos import Repos
from seatkeeper.adapters.sqlite.migrator import SQLiteMigrator
from seatkeeper.adapters.sqlite.store import SQLiteDocumentStore
from seatkeeper.components.invitations import InvitationIssuer, InvitationMailer, InvitationRegistry
from seatkeeper.components.onboarding import ClubOnboarder
from seatkeeper.components.seats import SeatAccountant
from seatkeeper.ports.clock import ClockPort
from seatkeeper.ports.email import EmailPort
from seatkeeper.ports.store import TransactionalStorePort
from seatkeeper.rules.loader import issuance_config
from seatkeeper.rules.models import Rules

logger = logging.getLogger(__name__)


def build_store(rules: Rules, data_dir: Path, migrations_dir: Path) -> TransactionalStorePort:
    if rules.store.backend == "memory":
        logger.warning("Using the in-memory store; data is lost on exit")
        return InMemoryDocumentStore()

    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = str(data_dir / rules.store.sqlite_filename)
    applied = SQLiteMigrator(db_path, str(migrations_dir)).run_migrations()
    if applied:
        logger.info("Applied %d migrations to %s", len(applied), db_path)
    return SQLiteDocumentStore(db_path)


@dataclass
class ServiceContext:
    store: TransactionalStorePort
    clock: ClockPort
    email: EmailPort
    issuer: InvitationIssuer
    registry: InvitationRegistry
    accountant: SeatAccountant
    onboarder: ClubOnboarder
    finalizer: DevSignupFinalizer
    rules: Rules

    @classmethod
    def create(
        cls,
        store: TransactionalStorePort,
        rules: Rules,
        clock: ClockPort | None = None,
        email: EmailPort | None = None,
    ) -> ServiceContext:
        clock = clock or SystemClock()
        email = email or DevEmailAdapter()
        config = issuance_config(rules)

        repos = Repos.bind(store)
        issuer = InvitationIssuer(
            store,
            clock,
            config=config,
            mailer=InvitationMailer(email, config.signup_url),
        )
        return cls(
            store=store,
            clock=clock,
            email=email,
            issuer=issuer,
            registry=InvitationRegistry(store, clock),
            accountant=SeatAccountant(repos.clubs, repos.members, repos.invitations, clock),
            onboarder=ClubOnboarder(store, issuer),
            finalizer=DevSignupFinalizer(store, clock),
            rules=rules,
        )
