"""
Unit tests for money and datetime helpers.
"""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.utils.datetime_utils import to_naive_utc, utcnow
from app.utils.money import (
    format_usd,
    percent_of,
    plain_amount,
    round2,
    to_decimal,
)


class TestMoney:
    """Tests for money helpers."""

    def test_to_decimal_avoids_float_artifacts(self):
        """Floats go through str."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal("5") == Decimal("5")

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("0.005", "0.01"),
            ("0.004", "0.00"),
            ("2.675", "2.68"),
            ("-1.005", "-1.01"),
            ("5", "5.00"),
        ],
    )
    def test_round2_half_up(self, value, expected):
        """Cents are rounded half up."""
        assert str(round2(value)) == expected

    def test_percent_of(self):
        """Percent is rounded to cents."""
        assert percent_of(Decimal("200"), 5) == Decimal("10.00")
        assert percent_of(Decimal("123.45"), Decimal("5")) == Decimal("6.17")

    def test_format_usd(self):
        """Thousands separator and two decimals."""
        assert format_usd(Decimal("1234.5")) == "$1,234.50"
        assert format_usd("0") == "$0.00"

    def test_plain_amount(self):
        """Trailing zeros are dropped without exponent notation."""
        assert plain_amount(Decimal("10.00000000")) == "10"
        assert plain_amount(Decimal("49.50")) == "49.5"
        assert plain_amount(Decimal("1000")) == "1000"


class TestDatetimeUtils:
    """Tests for naive UTC normalization."""

    def test_utcnow_is_naive(self):
        """Stored timestamps carry no tzinfo."""
        assert utcnow().tzinfo is None

    def test_aware_converted_to_utc(self):
        """Aware datetimes are shifted to UTC."""
        aware = datetime(2026, 1, 1, 15, 0, tzinfo=timezone(timedelta(hours=3)))
        assert to_naive_utc(aware) == datetime(2026, 1, 1, 12, 0)

    def test_naive_kept(self):
        """Naive datetimes are assumed UTC."""
        naive = datetime(2026, 1, 1, 12, 0)
        assert to_naive_utc(naive) is naive
        assert to_naive_utc(naive.replace(tzinfo=UTC)) == naive
