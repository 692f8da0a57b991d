"""Bounded-time HTTP client for the exchange rate provider."""

import asyncio
import math
import time
from typing import Any

import aiohttp
from pydantic import ValidationError

from currency_converter.config import settings
from currency_converter.exceptions import (
    FetchTimeoutError,
    ProtocolError,
    TransportError,
    UnsupportedCurrencyError,
)
from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import RateTable

logger = get_logger(__name__)


class RateFetcher:
    """Fetches rate tables from ``GET <base_url>/<BASE_CURRENCY>``."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            base_url: Provider base URL (defaults to settings)
            timeout: Request bound in seconds (defaults to settings)
            session: Optional externally owned HTTP session
        """
        self.base_url = (base_url or settings.rates_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "RateFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})
            self._owns_session = True
        return self._session

    async def fetch_rates_for(
        self, base_currency: str, target_currency: str | None = None
    ) -> RateTable:
        """Fetch the rate table for a base currency.

        Args:
            base_currency: Currency used as the request base
            target_currency: Currency that must be present in the response

        Returns:
            Rate table relative to ``base_currency``

        Raises:
            FetchTimeoutError: If the provider does not answer within the timeout
            TransportError: On network failures or non-2xx responses
            ProtocolError: If the response body is malformed
            UnsupportedCurrencyError: If ``target_currency`` is absent from the response
        """
        base_currency = base_currency.upper()
        url = f"{self.base_url}/{base_currency}"
        fetch_logger = logger.bind(base_currency=base_currency, url=url)
        fetch_logger.info(f"Fetching exchange rates for {base_currency}")

        start_time = time.monotonic()
        try:
            # Exceeding the bound cancels the request task, releasing the connection
            async with asyncio.timeout(self.timeout):
                payload = await self._request_json(url)
        except TimeoutError as e:
            fetch_logger.warning(f"Rate provider timed out after {self.timeout}s")
            msg = f"Request timeout - rate provider did not respond within {self.timeout}s"
            raise FetchTimeoutError(msg) from e

        table = self._parse_rate_table(base_currency, payload)
        fetch_logger.info(
            "Exchange rates fetched",
            currencies=len(table),
            elapsed_ms=round((time.monotonic() - start_time) * 1000, 1),
        )

        if target_currency is not None and target_currency.upper() not in table:
            fetch_logger.warning(f"Rate for {target_currency} missing from provider response")
            raise UnsupportedCurrencyError(target_currency.upper(), base_currency)

        return table

    async def _request_json(self, url: str) -> Any:
        """Perform the GET request and decode the JSON body."""
        session = self._get_session()
        try:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    msg = f"HTTP error from rate provider: status {response.status}"
                    raise TransportError(msg, status_code=response.status)
                return await response.json(content_type=None)
        except TimeoutError:
            raise
        except aiohttp.ClientError as e:
            msg = f"Network error calling rate provider: {e}"
            raise TransportError(msg) from e
        except ValueError as e:
            msg = "Rate provider returned a body that is not valid JSON"
            raise ProtocolError(msg) from e

    def _parse_rate_table(self, base_currency: str, payload: Any) -> RateTable:
        """Validate a provider payload and build a rate table."""
        if not isinstance(payload, dict):
            msg = "Invalid API response format: expected a JSON object"
            raise ProtocolError(msg)

        raw_rates = payload.get("rates")
        if not isinstance(raw_rates, dict):
            msg = "Invalid API response format: missing or malformed 'rates' field"
            raise ProtocolError(msg)

        rates: dict[str, float] = {}
        skipped: list[str] = []
        for code, value in raw_rates.items():
            if (
                isinstance(value, bool)
                or not isinstance(value, int | float)
                or not math.isfinite(value)
                or value <= 0
            ):
                skipped.append(str(code))
                continue
            rates[str(code).upper()] = float(value)

        if skipped:
            logger.warning(
                "Dropped invalid rate entries from provider response",
                base_currency=base_currency,
                skipped=sorted(skipped),
            )

        try:
            return RateTable(base_currency=base_currency, rates=rates)
        except ValidationError as e:
            msg = f"Invalid rate table for {base_currency}: {e.error_count()} validation errors"
            raise ProtocolError(msg) from e
