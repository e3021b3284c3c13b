import re
from dataclasses import dataclass

MAX_EMAIL_LENGTH = 320
MAX_LOCAL_PART_LENGTH = 64

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class FieldError:
    """Input validation error for a single field."""

    code: str
    message: str
    field: str | None = None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str | None) -> bool:
    if not email or not isinstance(email, str):
        return False

    email = email.strip()
    if len(email) > MAX_EMAIL_LENGTH:
        return False

    parts = email.split("@")
    if len(parts) != 2:
        return False
    local, domain = parts
    if not local or len(local) > MAX_LOCAL_PART_LENGTH:
        return False
    if not domain or "." not in domain:
        return False

    return bool(_EMAIL_PATTERN.match(email))


def email_error(email: str | None, field: str = "email") -> FieldError | None:
    """Return the validation error for an email, or None if it is acceptable."""
    if not email or not email.strip():
        return FieldError(code="email_required", message="Email is required", field=field)
    if not is_valid_email(email):
        return FieldError(
            code="email_invalid",
            message="Please enter a valid email address",
            field=field,
        )
    return None


def required_text_error(value: str | None, field: str, label: str) -> FieldError | None:
    if value is None or not str(value).strip():
        return FieldError(code=f"{field}_required", message=f"{label} is required", field=field)
    return None
