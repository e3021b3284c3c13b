from datetime import UTC, datetime
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# --- Enums / Literals ---
RoleType = Literal["super_admin", "club_admin", "club_admin_coach", "coach", "view_only"]
ClubRole = Literal["club_admin", "club_admin_coach", "coach", "view_only"]
SeatCategory = Literal["coach", "view_only"]
ClubStatus = Literal["active", "pending_admin_signup", "suspended"]

SEAT_CATEGORIES: tuple[SeatCategory, ...] = ("coach", "view_only")


def utc_now() -> datetime:
    return datetime.now(UTC)


class Document(BaseModel):
    """
    Base for records persisted in the document store.

    Attribute names are snake_case in Python and camelCase on the wire,
    matching the field names the portal and the signup finalizer read.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Self:
        return cls.model_validate(data)


# --- Clubs ---

class Club(Document):
    id: str
    name: str
    sports: list[str] = Field(default_factory=list)
    # None means the category is uncapped
    max_coach_accounts: int | None = Field(default=None, ge=0)
    max_view_only_users: int | None = Field(default=None, ge=0)
    status: ClubStatus = "active"
    created_at: datetime = Field(default_factory=utc_now)

    def seat_cap(self, category: SeatCategory) -> int | None:
        if category == "coach":
            return self.max_coach_accounts
        return self.max_view_only_users


# --- Members ---

class Member(Document):
    id: str
    email: str
    club_id: str | None = None
    team_id: str | None = None
    role: RoleType
    first_name: str | None = None
    last_name: str | None = None
    referral_code: str | None = None
    created_at: datetime = Field(default_factory=utc_now)


# --- Invitations (referral codes) ---

# Codes are single use unless issued otherwise
DEFAULT_MAX_USES = 1


class Invitation(Document):
    code: str
    club_id: str
    club_name: str
    team_id: str | None = None
    intended_role: ClubRole
    admin_email: str
    first_name: str | None = None
    last_name: str | None = None
    is_member_invitation: bool = False
    max_uses: int = Field(default=DEFAULT_MAX_USES, ge=1)
    uses_count: int = Field(default=0, ge=0)
    active: bool = True
    created_at: datetime
    expires_at: datetime
