import datetime as dt

import pytest

from hospital.domain.exceptions import InvalidDateError, InvalidEmailError, ValidationError
from hospital.domain.validation import (
    max_length,
    require,
    require_future,
    require_text,
    validate_birth_date,
    validate_email,
)


class TestRequire:
    def test_returns_value(self) -> None:
        assert require(7, "patient_id") == 7

    def test_rejects_none(self) -> None:
        with pytest.raises(ValidationError, match="'patient_id' is required") as excinfo:
            require(None, "patient_id")
        assert excinfo.value.field == "patient_id"


class TestRequireText:
    def test_strips_whitespace(self) -> None:
        assert require_text("  Maria  ", 100, "name") == "Maria"

    @pytest.mark.parametrize("value", [None, "", "   "], ids=["none", "empty", "blank"])
    def test_rejects_blank(self, value: str | None) -> None:
        with pytest.raises(ValidationError, match="'name' is required"):
            require_text(value, 100, "name")

    def test_rejects_too_long(self) -> None:
        with pytest.raises(ValidationError, match="must not exceed 5 characters"):
            require_text("abcdef", 5, "license_number")

    def test_max_length_ignores_none(self) -> None:
        max_length(None, 5, "phone")


class TestValidateEmail:
    @pytest.mark.parametrize(
        "email",
        ["ana@clinic.com", "first.last+tag@sub.domain.org", "a_b-c@x.io"],
        ids=["simple", "plus-tag", "underscore"],
    )
    def test_accepts_valid(self, email: str) -> None:
        assert validate_email(email) == email

    @pytest.mark.parametrize(
        "email",
        ["no-at-sign", "user@host", "user@host.c", "@domain.com", "sp ace@domain.com"],
        ids=["no-at", "no-tld", "short-tld", "no-user", "space"],
    )
    def test_rejects_malformed(self, email: str) -> None:
        with pytest.raises(InvalidEmailError, match="not a valid address"):
            validate_email(email)

    def test_invalid_email_is_a_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            validate_email("broken")


class TestDates:
    def test_birth_date_today_is_fine(self) -> None:
        today = dt.date(2026, 3, 10)
        assert validate_birth_date(today, today) == today

    def test_birth_date_in_future_rejected(self) -> None:
        with pytest.raises(ValidationError, match="future"):
            validate_birth_date(dt.date(2026, 3, 11), dt.date(2026, 3, 10))

    def test_birth_date_required(self) -> None:
        with pytest.raises(ValidationError, match="required"):
            validate_birth_date(None, dt.date(2026, 3, 10))

    def test_require_future_accepts_later_time(self) -> None:
        now = dt.datetime(2026, 3, 10, 8, 0)
        require_future(now + dt.timedelta(minutes=1), now)

    @pytest.mark.parametrize(
        "offset",
        [dt.timedelta(0), dt.timedelta(minutes=-1), dt.timedelta(days=-30)],
        ids=["exactly-now", "one-minute-ago", "last-month"],
    )
    def test_require_future_rejects_now_and_past(self, offset: dt.timedelta) -> None:
        now = dt.datetime(2026, 3, 10, 8, 0)
        with pytest.raises(InvalidDateError, match="future dates") as excinfo:
            require_future(now + offset, now)
        assert excinfo.value.value == now + offset

    def test_require_future_rejects_offset_aware_time(self) -> None:
        now = dt.datetime(2026, 3, 10, 8, 0)
        aware = dt.datetime(2026, 3, 11, 9, 0, tzinfo=dt.timezone.utc)

        with pytest.raises(ValidationError, match="without a UTC offset"):
            require_future(aware, now)
