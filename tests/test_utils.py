"""
Tests for datetime and validation helpers.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from adopt_core.utils.datetime_utils import (
    ensure_utc,
    get_current_utc,
    hours_from_now,
    is_in_past,
    month_window,
)
from adopt_core.utils.validation import (
    card_expiry_valid,
    cvv_valid,
    digits_only,
    is_valid_username,
    luhn_checksum_valid,
    sanitize_string,
    sanitize_text,
    strip_html,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestDatetimeUtils:
    """Test timezone handling."""

    def test_current_utc_is_aware(self):
        assert get_current_utc().tzinfo is not None

    def test_ensure_utc(self):
        naive = datetime(2025, 6, 1, 12, 0)
        plus_two = datetime(2025, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))

        assert ensure_utc(naive) == NOW
        assert ensure_utc(plus_two) == NOW
        assert ensure_utc(None) is None

    def test_is_in_past(self):
        assert is_in_past(NOW, now=NOW)
        assert is_in_past(datetime(2025, 6, 1, 11, 59), now=NOW)
        assert not is_in_past(NOW + timedelta(seconds=1), now=NOW)
        assert not is_in_past(None, now=NOW)

    def test_hours_from_now(self):
        assert hours_from_now(1, now=NOW) == NOW + timedelta(hours=1)

    def test_month_window(self):
        assert month_window(2024, 2) == (
            datetime(2024, 2, 1, tzinfo=timezone.utc),
            datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        assert month_window(2024, 12)[1] == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert month_window(2024) == (
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 1, 1, tzinfo=timezone.utc),
        )

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, month):
        with pytest.raises(ValueError):
            month_window(2024, month)


class TestSanitizing:
    """Test free-text cleaning."""

    def test_strip_html(self):
        assert strip_html("<b>Gentle</b> and calm<script>x()</script>") == "Gentle and calm"

    def test_encoded_tags_removed(self):
        assert strip_html("&lt;img src=x onerror=alert(1)&gt;hi") == "hi"

    def test_sanitize_string(self):
        assert sanitize_string("  lots   of\tspace  ") == "lots of space"
        assert sanitize_string("abcdef", max_length=3) == "abc"

    def test_sanitize_text(self):
        assert sanitize_text(None) is None
        assert sanitize_text("  <p>Loves  hay</p> ") == "Loves hay"

    @pytest.mark.parametrize(
        "username, valid",
        [("cavy_fan", True), ("a.b-c", True), ("ab", False), ("x" * 51, False), ("no spaces", False)],
    )
    def test_usernames(self, username, valid):
        assert is_valid_username(username) is valid


class TestCardChecks:
    """Test card validation used before charging."""

    def test_digits_only(self):
        assert digits_only("4242 4242-4242 4242") == "4242424242424242"

    @pytest.mark.parametrize(
        "number, valid",
        [
            ("4242 4242 4242 4242", True),
            ("4000000000000002", True),
            ("4242 4242 4242 4241", False),
            ("42", False),
        ],
    )
    def test_luhn(self, number, valid):
        assert luhn_checksum_valid(number) is valid

    def test_expiry(self):
        today = date(2025, 6, 15)

        assert card_expiry_valid("06/25", today=today)
        assert card_expiry_valid("01/30", today=today)
        assert not card_expiry_valid("05/25", today=today)
        assert not card_expiry_valid("13/25", today=today)
        assert not card_expiry_valid("0625", today=today)

    @pytest.mark.parametrize("cvv, valid", [("123", True), ("1234", True), ("12", False), ("abc", False)])
    def test_cvv(self, cvv, valid):
        assert cvv_valid(cvv) is valid
