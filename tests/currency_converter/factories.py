"""Builders for test data and fake HTTP sessions."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

from currency_converter.models.conversion import ConversionRecord, RateTable

USD_RATES = {"USD": 1.0, "IDR": 15000.0, "EUR": 0.85, "JPY": 150.0, "GBP": 0.75}


def make_usd_table(rates: dict[str, float] | None = None, **kwargs) -> RateTable:
    """Build a USD-based rate table."""
    return RateTable(base_currency="USD", rates=dict(rates or USD_RATES), **kwargs)


def make_record(index: int, base_time: datetime | None = None) -> ConversionRecord:
    """Build a distinct history record; higher index means newer."""
    base_time = base_time or datetime(2026, 10, 18, 12, 0, 0, 123456, tzinfo=UTC)
    return ConversionRecord(
        source_amount=float(index + 1),
        source_currency="USD",
        target_amount=(index + 1) * 15000.0,
        target_currency="IDR",
        rate=15000.0,
        timestamp=base_time + timedelta(minutes=index),
    )


def make_session(status: int = 200, payload: object = None, json_side_effect=None) -> MagicMock:
    """Build a fake aiohttp session whose GET yields a canned response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=payload, side_effect=json_side_effect)

    session = MagicMock()
    session.get.return_value.__aenter__.return_value = response
    session.get.return_value.__aexit__.return_value = False
    session.close = AsyncMock()
    return session
