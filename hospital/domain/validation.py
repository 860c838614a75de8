import datetime as dt
import re
from typing import TypeVar

from hospital.domain.exceptions import InvalidDateError, InvalidEmailError, ValidationError

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

NAME_MAX = 100
NATIONAL_ID_MAX = 20
LICENSE_MAX = 20
PHONE_MAX = 15
EMAIL_MAX = 100
REASON_MAX = 200
ALLERGIES_MAX = 500
NOTES_MAX = 1000

T = TypeVar("T")


def require(value: T | None, field: str) -> T:
    """Reject ``None`` for a required field."""
    if value is None:
        raise ValidationError(f"'{field}' is required", field=field)
    return value


def max_length(value: str | None, limit: int, field: str) -> None:
    if value is not None and len(value) > limit:
        raise ValidationError(f"'{field}' must not exceed {limit} characters", field=field)


def require_text(value: str | None, limit: int, field: str) -> str:
    """Return the stripped value, rejecting blank or over-long text."""
    if value is None or not value.strip():
        raise ValidationError(f"'{field}' is required", field=field)
    cleaned = value.strip()
    max_length(cleaned, limit, field)
    return cleaned


def validate_email(email: str | None) -> str:
    cleaned = require_text(email, EMAIL_MAX, "email")
    if not EMAIL_PATTERN.match(cleaned):
        raise InvalidEmailError(cleaned)
    return cleaned


def validate_birth_date(birth_date: dt.date | None, today: dt.date) -> dt.date:
    if birth_date is None:
        raise ValidationError("'birth_date' is required", field="birth_date")
    if birth_date > today:
        raise ValidationError("'birth_date' must not be in the future", field="birth_date")
    return birth_date


def require_future(value: dt.datetime, now: dt.datetime, field: str = "scheduled_at") -> None:
    """Appointments must be strictly after ``now``, both naive clinic-local times."""
    if value.tzinfo is not None:
        raise ValidationError(
            f"'{field}' must be a clinic-local time without a UTC offset", field=field
        )
    if value <= now:
        raise InvalidDateError(value)
