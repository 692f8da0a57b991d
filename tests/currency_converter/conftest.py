"""Shared fixtures for currency converter tests."""

from unittest.mock import AsyncMock

import pytest

from currency_converter.services.rate_fetcher import RateFetcher
from tests.currency_converter.factories import make_usd_table


@pytest.fixture
def usd_table():
    """USD-based table with a handful of currencies."""
    return make_usd_table()


@pytest.fixture
def fetcher(usd_table):
    """Rate fetcher double returning the USD table."""
    mock_fetcher = AsyncMock(spec=RateFetcher)
    mock_fetcher.fetch_rates_for.return_value = usd_table
    return mock_fetcher
