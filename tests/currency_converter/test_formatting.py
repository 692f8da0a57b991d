"""Unit tests for display formatting helpers."""

from datetime import UTC, datetime

import pytest

from currency_converter.formatting import (
    format_currency,
    format_datetime,
    format_history_item,
    format_number,
    format_rate,
)
from currency_converter.models.conversion import ConversionResult, RateSource
from tests.currency_converter.factories import make_record


class TestFormatNumber:
    """Test number formatting."""

    @pytest.mark.parametrize(
        "value,decimals,expected",
        [
            (15000, 4, "15,000"),
            (0.85, 4, "0.85"),
            (1234.56789, 4, "1,234.5679"),
            (1_500_000.0, 2, "1,500,000"),
            (0.00001, 4, "0"),
            (float("nan"), 4, "0"),
        ],
    )
    def test_format_number(self, value, decimals, expected):
        """Test thousands separators and trailing zero trimming."""
        assert format_number(value, decimals) == expected


class TestFormatCurrency:
    """Test currency formatting."""

    @pytest.mark.parametrize(
        "amount,currency,expected",
        [
            (100, "USD", "$ 100"),
            (1_500_000, "IDR", "Rp 1,500,000"),
            (12.5, "EUR", "12.5 €"),
            (99.999, "CHF", "100 CHF"),
            (7, "XYZ", "XYZ 7"),
        ],
    )
    def test_format_currency(self, amount, currency, expected):
        """Test symbol placement per currency."""
        assert format_currency(amount, currency) == expected


class TestFormatResult:
    """Test rate and history formatting."""

    def test_format_rate(self):
        """Test the rate line."""
        result = ConversionResult(
            amount=1,
            from_currency="USD",
            to_currency="IDR",
            converted_amount=15000,
            effective_rate=15000,
            rate_source=RateSource.CACHE,
        )

        assert format_rate(result) == "1 USD = 15,000 IDR"

    def test_format_datetime(self):
        """Test timestamps render in local time."""
        value = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

        assert format_datetime(value) == value.astimezone().strftime("%d %b %Y %H:%M")
        assert format_datetime(None) == ""

    def test_format_history_item(self):
        """Test a history line carries flags, amounts and rate."""
        line = format_history_item(make_record(0))

        assert line.startswith("🇺🇸 $ 1 → 🇮🇩 Rp 15,000")
        assert "Rate: 15,000" in line
