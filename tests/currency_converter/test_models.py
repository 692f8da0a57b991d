"""Unit tests for converter data models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from currency_converter.models.conversion import (
    ConversionRecord,
    ConversionResult,
    DisplayState,
    RateSource,
    RateTable,
)
from currency_converter.models.currency import (
    SUPPORTED_CURRENCIES,
    SymbolPlacement,
    get_currency_info,
    get_supported_codes,
)


class TestRateTable:
    """Test RateTable invariants."""

    def test_base_currency_injected_when_missing(self):
        """Test the base currency is added at 1.0 when the provider omits it."""
        table = RateTable(base_currency="usd", rates={"IDR": 15000})

        assert table.base_currency == "USD"
        assert table.get("USD") == 1.0
        assert table.get("idr") == 15000.0
        assert "IDR" in table
        assert len(table) == 2

    def test_base_currency_must_be_unity(self):
        """Test a contradictory base rate is rejected."""
        with pytest.raises(ValidationError, match="must have rate 1.0"):
            RateTable(base_currency="USD", rates={"USD": 2.0, "IDR": 15000})

    @pytest.mark.parametrize("bad_rate", [0, -1.5, float("inf"), float("nan")])
    def test_rates_must_be_positive_and_finite(self, bad_rate):
        """Test non-positive or non-finite rates are rejected."""
        with pytest.raises(ValidationError):
            RateTable(base_currency="USD", rates={"IDR": bad_rate})

    def test_table_is_frozen(self):
        """Test tables cannot be reassigned after creation."""
        table = RateTable(base_currency="USD", rates={"IDR": 15000})
        with pytest.raises(ValidationError):
            table.base_currency = "EUR"

    def test_missing_currency_returns_none(self):
        """Test lookups of unknown codes."""
        table = RateTable(base_currency="USD", rates={"IDR": 15000})
        assert table.get("JPY") is None
        assert 42 not in table


class TestConversionRecord:
    """Test ConversionRecord validation and persisted shape."""

    def test_persisted_shape(self):
        """Test the persisted item uses nested from/to objects."""
        timestamp = datetime(2026, 10, 18, 9, 30, 0, 250000, tzinfo=UTC)
        record = ConversionRecord(
            source_amount=10,
            source_currency="usd",
            target_amount=150000,
            target_currency="idr",
            rate=15000,
            timestamp=timestamp,
        )

        assert record.to_persisted() == {
            "from": {"amount": 10.0, "currency": "USD"},
            "to": {"amount": 150000.0, "currency": "IDR"},
            "rate": 15000.0,
            "timestamp": "2026-10-18T09:30:00.250000+00:00",
        }

    def test_from_persisted_parses_timestamp(self):
        """Test timestamps come back as aware datetimes."""
        record = ConversionRecord.from_persisted(
            {
                "from": {"amount": 1, "currency": "USD"},
                "to": {"amount": 0.85, "currency": "EUR"},
                "rate": 0.85,
                "timestamp": "2026-10-18T09:30:00.000Z",
            }
        )

        assert record.timestamp == datetime(2026, 10, 18, 9, 30, tzinfo=UTC)
        assert record.target_currency == "EUR"

    def test_naive_timestamp_treated_as_utc(self):
        """Test naive timestamps are normalized to UTC."""
        record = ConversionRecord.from_persisted(
            {
                "from": {"amount": 1, "currency": "USD"},
                "to": {"amount": 0.85, "currency": "EUR"},
                "rate": 0.85,
                "timestamp": "2026-10-18T09:30:00",
            }
        )
        assert record.timestamp.tzinfo is UTC

    @pytest.mark.parametrize(
        "item",
        [
            None,
            [],
            {"from": {"amount": 1, "currency": "USD"}},
            {
                "from": {"amount": 1, "currency": "USD"},
                "to": {"amount": 0.85, "currency": "EUR"},
                "rate": 0.85,
                "timestamp": "yesterday-ish",
            },
            {
                "from": {"amount": -1, "currency": "USD"},
                "to": {"amount": 0.85, "currency": "EUR"},
                "rate": 0.85,
                "timestamp": "2026-10-18T09:30:00Z",
            },
        ],
    )
    def test_from_persisted_rejects_malformed_items(self, item):
        """Test malformed items raise a validation error."""
        with pytest.raises(ValidationError):
            ConversionRecord.from_persisted(item)


class TestConversionResult:
    """Test ConversionResult helpers."""

    def test_to_record(self):
        """Test a result converts into the matching history record."""
        result = ConversionResult(
            amount=2.0,
            from_currency="USD",
            to_currency="IDR",
            converted_amount=30000.0,
            effective_rate=15000.0,
            rate_source=RateSource.CACHE,
        )

        record = result.to_record()

        assert record.source_amount == 2.0
        assert record.target_amount == 30000.0
        assert record.rate == 15000.0
        assert record.timestamp == result.timestamp


class TestDisplayState:
    """Test result and error are mutually exclusive."""

    def test_error_hides_result(self):
        """Test showing an error clears the result."""
        display = DisplayState()
        display.show_result(
            ConversionResult(
                amount=1.0,
                from_currency="USD",
                to_currency="USD",
                converted_amount=1.0,
                effective_rate=1.0,
                rate_source=RateSource.IDENTITY,
            )
        )
        display.show_error("boom")

        assert display.result is None
        assert display.error == "boom"


class TestCurrencyTable:
    """Test the supported currency table."""

    def test_sixteen_supported_currencies(self):
        """Test the allow-list size and contents."""
        assert len(SUPPORTED_CURRENCIES) == 16
        assert "IDR" in get_supported_codes()
        assert get_supported_codes() == sorted(get_supported_codes())

    def test_symbol_placement(self):
        """Test EUR and CHF place the symbol after the amount."""
        assert get_currency_info("eur").placement is SymbolPlacement.AFTER
        assert get_currency_info("CHF").placement is SymbolPlacement.AFTER
        assert get_currency_info("USD").placement is SymbolPlacement.BEFORE

    def test_unknown_currency(self):
        """Test unknown codes have no metadata."""
        assert get_currency_info("XYZ") is None
