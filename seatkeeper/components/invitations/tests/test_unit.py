"""
Invitations component unit tests.

Covers batch issuance under seat caps, code collisions, store failures,
member invitation mail, and the registry (listing, lookup, deactivation).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import pytest

from seatkeeper.adapters.dev_email import DevEmailAdapter
from seatkeeper.adapters.memory_store import InMemoryDocumentStore
from seatkeeper.adapters.repos import INVITATIONS, Repos
from seatkeeper.components.invitations import (
    DeactivateInvitationInput,
    InvitationIssuer,
    InvitationMailer,
    InvitationRegistry,
    IssuanceConfig,
    IssueInvitationsInput,
    Invitee,
    build_signup_url,
    partition_by_category,
    run_check,
    run_deactivate,
    run_issue,
    run_list,
)
from seatkeeper.domain.entities import Club, ClubRole
from seatkeeper.domain.errors import (
    ClubNotFoundError,
    CodeCollisionError,
    InvalidInputError,
    InvitationNotFoundError,
    QuotaExceededError,
)
from seatkeeper.ports.email import EmailResult
from seatkeeper.ports.store import StoreUnavailableError

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


# --- Mock Ports ---


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now


class ScriptedRandom:
    """Emits whole codes from a script, one symbol at a time."""

    def __init__(self, *codes: str) -> None:
        self._symbols = [c for code in codes for c in code]

    def choice(self, seq: str) -> str:
        return self._symbols.pop(0)


class FailingEmailSender:
    def __init__(self) -> None:
        self.attempts: list[str] = []

    def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
        body_text: str | None = None,
    ) -> EmailResult:
        self.attempts.append(recipient)
        return EmailResult.failed(recipient, "SMTP connection refused")


class UnreadableStore:
    """Store that fails every read."""

    async def get(self, collection: str, doc_id: str) -> None:
        raise StoreUnavailableError("Document store unavailable")


# --- Helpers ---


def invitees(role: ClubRole, count: int, prefix: str = "person") -> list[Invitee]:
    return [Invitee(email=f"{prefix}{i}@example.com", role=role) for i in range(count)]


def batch(people: list[Invitee], club_id: str = "club-1", **kwargs: object) -> IssueInvitationsInput:
    return IssueInvitationsInput(club_id=club_id, club_name="Riverside FC", invitees=people, **kwargs)  # type: ignore[arg-type]


async def seed_club(store: InMemoryDocumentStore, **caps: int | None) -> Club:
    club = Club(id="club-1", name="Riverside FC", **caps)  # type: ignore[arg-type]
    await Repos.bind(store).clubs.save(club)
    return club


# --- Fixtures ---


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def issuer(store: InMemoryDocumentStore, clock: FixedClock, email: DevEmailAdapter) -> InvitationIssuer:
    config = IssuanceConfig(send_member_emails=True, signup_url="https://portal.example.com/signup")
    return InvitationIssuer(store, clock, config=config, mailer=InvitationMailer(email, config.signup_url))


@pytest.fixture
def naive_issuer(store: InMemoryDocumentStore, clock: FixedClock) -> InvitationIssuer:
    return InvitationIssuer(store, clock, config=IssuanceConfig(serialize_per_club=False))


@pytest.fixture
def registry(store: InMemoryDocumentStore, clock: FixedClock) -> InvitationRegistry:
    return InvitationRegistry(store, clock)


# --- Batch Issuance ---


class TestIssue:
    async def test_issues_one_code_per_invitee(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store, max_coach_accounts=3, max_view_only_users=3)
        people = [
            Invitee(email="  Coach@Example.com ", role="coach", first_name=" Ana "),
            Invitee(email="viewer@example.com", role="view_only"),
        ]

        invitations = await issuer.issue(batch(people, team_id="u12"))

        assert len(invitations) == 2
        assert len({inv.code for inv in invitations}) == 2
        first = invitations[0]
        assert first.admin_email == "coach@example.com"
        assert first.first_name == "Ana"
        assert first.intended_role == "coach"
        assert first.team_id == "u12"
        assert first.max_uses == 1
        assert first.uses_count == 0
        assert first.active is True
        assert first.created_at == NOW
        assert first.expires_at == NOW + timedelta(days=7)
        assert store.count(INVITATIONS) == 2

    async def test_stored_document_uses_portal_field_names(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        await seed_club(store)
        [inv] = await issuer.issue(batch(invitees("coach", 1)))

        doc = await store.get(INVITATIONS, inv.code)
        assert doc is not None
        assert doc["clubId"] == "club-1"
        assert doc["intendedRole"] == "coach"
        assert doc["adminEmail"] == "person0@example.com"
        assert doc["maxUses"] == 1
        assert doc["usesCount"] == 0

    async def test_batch_filling_cap_exactly(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store, max_coach_accounts=3)
        assert len(await issuer.issue(batch(invitees("coach", 3)))) == 3

    async def test_quota_failure_rejects_whole_batch(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        """Coaches fit but view-only users do not: nothing is written."""
        await seed_club(store, max_coach_accounts=5, max_view_only_users=1)
        people = invitees("coach", 2, "c") + invitees("view_only", 2, "v")

        with pytest.raises(QuotaExceededError) as exc_info:
            await issuer.issue(batch(people))

        assert exc_info.value.categories == ["view_only"]
        assert "view-only users" in str(exc_info.value)
        assert store.count(INVITATIONS) == 0

    async def test_every_failing_category_reported(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        await seed_club(store, max_coach_accounts=0, max_view_only_users=0)
        people = invitees("coach", 1, "c") + invitees("view_only", 1, "v")

        with pytest.raises(QuotaExceededError) as exc_info:
            await issuer.issue(batch(people))
        assert set(exc_info.value.categories) == {"coach", "view_only"}

    async def test_admin_coach_uses_coach_seat(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store, max_coach_accounts=1)
        await issuer.issue(batch(invitees("club_admin_coach", 1)))

        with pytest.raises(QuotaExceededError):
            await issuer.issue(batch(invitees("coach", 1, "late")))

    async def test_plain_admins_need_no_seat(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store, max_coach_accounts=0, max_view_only_users=0)
        invitations = await issuer.issue(batch(invitees("club_admin", 2)))
        assert len(invitations) == 2

    async def test_unknown_club(self, issuer: InvitationIssuer) -> None:
        with pytest.raises(ClubNotFoundError):
            await issuer.issue(batch(invitees("coach", 1), club_id="missing"))

    async def test_pending_codes_hold_seats_until_they_expire(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, clock: FixedClock
    ) -> None:
        await seed_club(store, max_coach_accounts=1)
        await issuer.issue(batch(invitees("coach", 1)))

        with pytest.raises(QuotaExceededError):
            await issuer.issue(batch(invitees("coach", 1, "second")))

        clock.now = NOW + timedelta(days=7)
        assert len(await issuer.issue(batch(invitees("coach", 1, "second")))) == 1


class TestValidation:
    @pytest.mark.parametrize(
        ("people", "code"),
        [
            ([], "invitees_required"),
            ([Invitee(email="", role="coach")], "email_required"),
            ([Invitee(email="not-an-email", role="coach")], "email_invalid"),
            ([Invitee(email="a@example.com", role="owner")], "role_invalid"),  # type: ignore[arg-type]
            (
                [Invitee(email="a@example.com", role="coach"), Invitee(email="A@example.com ", role="view_only")],
                "email_duplicate",
            ),
        ],
    )
    async def test_rejected_before_any_store_access(
        self,
        store: InMemoryDocumentStore,
        issuer: InvitationIssuer,
        people: list[Invitee],
        code: str,
    ) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            await issuer.issue(batch(people, club_id="missing"))

        assert code in [e.code for e in exc_info.value.errors]
        assert store.write_count == 0

    async def test_batch_size_limit(self, store: InMemoryDocumentStore, clock: FixedClock) -> None:
        issuer = InvitationIssuer(store, clock, config=IssuanceConfig(max_batch_size=2))
        with pytest.raises(InvalidInputError) as exc_info:
            await issuer.issue(batch(invitees("coach", 3)))
        assert exc_info.value.errors[0].code == "batch_too_large"

    async def test_blank_club_fields(self, issuer: InvitationIssuer) -> None:
        inp = IssueInvitationsInput(club_id=" ", club_name="", invitees=invitees("coach", 1))
        with pytest.raises(InvalidInputError) as exc_info:
            await issuer.issue(inp)
        assert {e.field for e in exc_info.value.errors} == {"club_id", "club_name"}

    def test_partition_by_category(self) -> None:
        people = invitees("coach", 1, "c") + invitees("club_admin", 1, "a") + invitees("view_only", 2, "v")
        partitions = partition_by_category(people)
        assert {k: len(v) for k, v in partitions.items()} == {"coach": 1, "view_only": 2}


class TestCodeCollisions:
    async def test_regenerates_on_collision(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        await seed_club(store)
        first = InvitationIssuer(store, clock, rng=ScriptedRandom("AAAA1111"))
        await first.issue(batch(invitees("coach", 1)))

        second = InvitationIssuer(store, clock, rng=ScriptedRandom("AAAA1111", "BBBB2222"))
        with caplog.at_level(logging.WARNING):
            [inv] = await second.issue(batch(invitees("coach", 1, "other")))

        assert inv.code == "BBBB2222"
        assert "collision" in caplog.text

    async def test_gives_up_after_retry_limit(self, store: InMemoryDocumentStore, clock: FixedClock) -> None:
        await seed_club(store)
        await InvitationIssuer(store, clock, rng=ScriptedRandom("AAAA1111")).issue(batch(invitees("coach", 1)))

        stuck = InvitationIssuer(
            store,
            clock,
            config=IssuanceConfig(collision_retry_limit=3),
            rng=ScriptedRandom(*["AAAA1111"] * 3),
        )
        with pytest.raises(CodeCollisionError) as exc_info:
            await stuck.issue(batch(invitees("coach", 1, "other")))
        assert exc_info.value.attempts == 3
        assert store.count(INVITATIONS) == 1
        assert exc_info.value.persisted_codes == []

    async def test_unserialized_collision_reports_what_was_written(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """The second invitee keeps drawing the first invitee's code."""
        await seed_club(store)
        stuck = InvitationIssuer(
            store,
            clock,
            config=IssuanceConfig(serialize_per_club=False, collision_retry_limit=2),
            rng=ScriptedRandom(*["AAAAAAAA"] * 3),
        )

        with caplog.at_level(logging.ERROR), pytest.raises(CodeCollisionError) as exc_info:
            await stuck.issue(batch(invitees("coach", 2)))

        assert exc_info.value.attempts == 2
        assert exc_info.value.persisted_codes == ["AAAAAAAA"]
        assert store.count(INVITATIONS) == 1
        assert "1 of 2" in caplog.text

    async def test_transactional_collision_writes_nothing(
        self, store: InMemoryDocumentStore, clock: FixedClock
    ) -> None:
        await seed_club(store)
        stuck = InvitationIssuer(
            store,
            clock,
            config=IssuanceConfig(collision_retry_limit=2),
            rng=ScriptedRandom(*["AAAAAAAA"] * 3),
        )

        with pytest.raises(CodeCollisionError) as exc_info:
            await stuck.issue(batch(invitees("coach", 2)))

        assert exc_info.value.persisted_codes == []
        assert store.count(INVITATIONS) == 0


class TestConcurrency:
    async def test_serialized_batches_never_exceed_cap(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        """Two admins each invite 2 coaches against a cap of 3: one batch wins."""
        await seed_club(store, max_coach_accounts=3)

        results = await asyncio.gather(
            issuer.issue(batch(invitees("coach", 2, "a"))),
            issuer.issue(batch(invitees("coach", 2, "b"))),
            return_exceptions=True,
        )

        succeeded = [r for r in results if isinstance(r, list)]
        rejected = [r for r in results if isinstance(r, QuotaExceededError)]
        assert len(succeeded) == 1
        assert len(rejected) == 1
        assert store.count(INVITATIONS) == 2

    async def test_unserialized_batches_can_over_issue(
        self, store: InMemoryDocumentStore, naive_issuer: InvitationIssuer
    ) -> None:
        """Both batches read the same committed count before either writes."""
        await seed_club(store, max_coach_accounts=3)

        results = await asyncio.gather(
            naive_issuer.issue(batch(invitees("coach", 2, "a"))),
            naive_issuer.issue(batch(invitees("coach", 2, "b"))),
        )

        assert [len(r) for r in results] == [2, 2]
        assert store.count(INVITATIONS) == 4

    async def test_last_seat_goes_to_one_issuer(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        await seed_club(store, max_coach_accounts=1)

        results = await asyncio.gather(
            issuer.issue(batch(invitees("coach", 1, "a"))),
            issuer.issue(batch(invitees("coach", 1, "b"))),
            return_exceptions=True,
        )

        assert sum(isinstance(r, list) for r in results) == 1
        assert store.count(INVITATIONS) == 1

    async def test_unserialized_last_seat_goes_to_both(
        self, store: InMemoryDocumentStore, naive_issuer: InvitationIssuer
    ) -> None:
        await seed_club(store, max_coach_accounts=1)

        await asyncio.gather(
            naive_issuer.issue(batch(invitees("coach", 1, "a"))),
            naive_issuer.issue(batch(invitees("coach", 1, "b"))),
        )

        assert store.count(INVITATIONS) == 2


class TestStoreFailure:
    async def test_transactional_batch_leaves_nothing(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer
    ) -> None:
        await seed_club(store)
        store.simulate_outage(after_writes=1)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await issuer.issue(batch(invitees("coach", 3)))

        assert exc_info.value.persisted_codes == []
        store.restore()
        assert store.count(INVITATIONS) == 0

    async def test_unserialized_batch_reports_what_was_written(
        self,
        store: InMemoryDocumentStore,
        naive_issuer: InvitationIssuer,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        await seed_club(store)
        store.simulate_outage(after_writes=1)

        with caplog.at_level(logging.ERROR), pytest.raises(StoreUnavailableError) as exc_info:
            await naive_issuer.issue(batch(invitees("coach", 3)))

        assert exc_info.value.persisted_count == 1
        assert store.count(INVITATIONS) == 1
        assert await store.get(INVITATIONS, exc_info.value.persisted_codes[0]) is not None
        assert "1 of 3" in caplog.text


class TestNotify:
    async def test_member_invitations_are_mailed(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, email: DevEmailAdapter
    ) -> None:
        await seed_club(store)
        invitations = await issuer.issue(batch(invitees("coach", 2)))

        assert issuer.notify(invitations) == []
        assert [e.recipient for e in email.sent_emails] == ["person0@example.com", "person1@example.com"]
        last = email.get_last_email()
        assert last is not None
        assert invitations[1].code in last.body_text
        assert "Riverside FC" in last.subject
        assert f"code={invitations[1].code}" in last.body_html

    async def test_non_member_invitations_are_not_mailed(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, email: DevEmailAdapter
    ) -> None:
        await seed_club(store)
        invitations = await issuer.issue(batch(invitees("club_admin", 1), member_invitation=False))
        issuer.notify(invitations)
        assert email.sent_emails == []

    async def test_mail_failure_keeps_invitations(
        self,
        store: InMemoryDocumentStore,
        clock: FixedClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        await seed_club(store)
        sender = FailingEmailSender()
        config = IssuanceConfig(send_member_emails=True)
        issuer = InvitationIssuer(store, clock, config=config, mailer=InvitationMailer(sender, config.signup_url))

        with caplog.at_level(logging.WARNING):
            result = await run_issue(batch(invitees("coach", 1)), issuer)

        assert result.success is True
        assert result.emails_failed == ["person0@example.com"]
        assert store.count(INVITATIONS) == 1
        assert "SMTP connection refused" in caplog.text

    def test_signup_url(self) -> None:
        assert build_signup_url("https://x.io/signup", "AB12CD34") == "https://x.io/signup?code=AB12CD34"
        assert build_signup_url("https://x.io/s?ref=mail", "AB12CD34") == "https://x.io/s?ref=mail&code=AB12CD34"


class TestRunIssue:
    async def test_success(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store)
        result = await run_issue(batch(invitees("view_only", 2)), issuer)
        assert result.success is True
        assert [i.email for i in result.invitations] == ["person0@example.com", "person1@example.com"]

    async def test_quota(self, store: InMemoryDocumentStore, issuer: InvitationIssuer) -> None:
        await seed_club(store, max_view_only_users=1)
        result = await run_issue(batch(invitees("view_only", 2)), issuer)
        assert result.success is False
        assert result.quota_categories == ["view_only"]
        assert result.invitations == []

    async def test_invalid(self, issuer: InvitationIssuer) -> None:
        result = await run_issue(batch([]), issuer)
        assert result.success is False
        assert result.errors[0].code == "invitees_required"

    async def test_collision_reports_persisted_codes(self, store: InMemoryDocumentStore, clock: FixedClock) -> None:
        await seed_club(store)
        stuck = InvitationIssuer(
            store,
            clock,
            config=IssuanceConfig(serialize_per_club=False, collision_retry_limit=1),
            rng=ScriptedRandom("BBBBBBBB", "BBBBBBBB"),
        )
        result = await run_issue(batch(invitees("coach", 2)), stuck)
        assert result.success is False
        assert result.persisted_codes == ["BBBBBBBB"]


# --- Registry ---


class TestRegistry:
    async def test_list_newest_first_with_status(
        self,
        store: InMemoryDocumentStore,
        issuer: InvitationIssuer,
        registry: InvitationRegistry,
        clock: FixedClock,
    ) -> None:
        await seed_club(store)
        [old] = await issuer.issue(batch(invitees("coach", 1, "old")))
        clock.now = NOW + timedelta(days=6)
        [new] = await issuer.issue(batch(invitees("coach", 1, "new")))
        clock.now = NOW + timedelta(days=8)

        result = await run_list("club-1", registry)

        assert result.total == 2
        assert [v.invitation.code for v in result.items] == [new.code, old.code]
        assert [v.status for v in result.items] == ["active", "expired"]

    async def test_list_unknown_club(self, registry: InvitationRegistry) -> None:
        with pytest.raises(ClubNotFoundError):
            await registry.list_invitations("missing")

    async def test_check_normalizes_typed_code(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, registry: InvitationRegistry
    ) -> None:
        await seed_club(store)
        [inv] = await issuer.issue(batch(invitees("coach", 1)))

        view = await registry.check_invitation(f"  {inv.code.lower()} ")
        assert view.invitation.code == inv.code
        assert view.redeemable is True

    async def test_check_unknown_code(self, registry: InvitationRegistry) -> None:
        with pytest.raises(InvitationNotFoundError):
            await registry.check_invitation("ZZZZ9999")
        result = await run_check("ZZZZ9999", registry)
        assert result.success is False

    async def test_check_malformed_code_skips_store(self, clock: FixedClock) -> None:
        registry = InvitationRegistry(UnreadableStore(), clock)  # type: ignore[arg-type]

        with pytest.raises(InvitationNotFoundError):
            await registry.check_invitation("AB-12")

    async def test_deactivate_releases_seat(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, registry: InvitationRegistry
    ) -> None:
        await seed_club(store, max_coach_accounts=1)
        [inv] = await issuer.issue(batch(invitees("coach", 1)))

        view = await registry.deactivate_invitation("club-1", inv.code)

        assert view.status == "deactivated"
        assert store.count(INVITATIONS) == 1
        assert len(await issuer.issue(batch(invitees("coach", 1, "replacement")))) == 1

    async def test_deactivate_is_idempotent(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, registry: InvitationRegistry
    ) -> None:
        await seed_club(store)
        [inv] = await issuer.issue(batch(invitees("coach", 1)))
        await registry.deactivate_invitation("club-1", inv.code)
        result = await run_deactivate(DeactivateInvitationInput(club_id="club-1", code=inv.code), registry)
        assert result.success is True
        assert result.view is not None
        assert result.view.status == "deactivated"

    async def test_deactivate_other_clubs_code(
        self, store: InMemoryDocumentStore, issuer: InvitationIssuer, registry: InvitationRegistry
    ) -> None:
        await seed_club(store)
        [inv] = await issuer.issue(batch(invitees("coach", 1)))

        with pytest.raises(InvitationNotFoundError):
            await registry.deactivate_invitation("club-2", inv.code)

        view = await registry.check_invitation(inv.code)
        assert view.status == "active"
