from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from seatkeeper.adapters.memory_store import InMemoryDocumentStore
from seatkeeper.adapters.repos import Repos
from seatkeeper.adapters.sqlite.migrator import SQLiteMigrator
from seatkeeper.adapters.sqlite.store import SQLiteDocumentStore
from seatkeeper.domain.entities import Club
from seatkeeper.ports.store import DocumentStorePort
from seatkeeper.rules.loader import load_rules
from seatkeeper.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class FixedClock:
    """Clock frozen at a given instant; tests move it explicitly."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


async def seed_club(
    store: DocumentStorePort,
    club_id: str = "club-1",
    max_coach_accounts: int | None = None,
    max_view_only_users: int | None = None,
) -> Club:
    club = Club(
        id=club_id,
        name="Riverside FC",
        sports=["football"],
        max_coach_accounts=max_coach_accounts,
        max_view_only_users=max_view_only_users,
        created_at=NOW,
    )
    await Repos.bind(store).clubs.save(club)
    return club


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rules() -> Rules:
    """The project's real rules file."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    path = str(tmp_path / "seatkeeper.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def sqlite_store(db_path: str) -> SQLiteDocumentStore:
    return SQLiteDocumentStore(db_path)


@pytest.fixture
def seed():
    """Async helper that stores a club: `await seed(store, max_coach_accounts=3)`."""
    return seed_club
