"""Conversion engine: validation, rate resolution and cache refresh."""

import math
import numbers
from collections.abc import Mapping
from decimal import Decimal

from opentelemetry.trace import StatusCode

from currency_converter.config import settings
from currency_converter.exceptions import (
    ConversionFailedError,
    ConversionValidationError,
    FetchError,
    RatesUnavailableError,
    RefreshFailedError,
    UnsupportedCurrencyError,
)
from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import ConversionResult, RateSource, RateTable
from currency_converter.models.currency import SUPPORTED_CURRENCIES, CurrencyInfo
from currency_converter.services.app_state import ApplicationState
from currency_converter.services.rate_cache import RateCache
from currency_converter.services.rate_fetcher import RateFetcher
from currency_converter.tracing_config import add_span_event, get_tracer, set_span_status

logger = get_logger(__name__)
tracer = get_tracer(__name__)

CONVERSION_FAILED_MESSAGE = "Failed to get the exchange rate. Please try again."
REFRESH_FAILED_MESSAGE = "Failed to refresh exchange rates."
RATES_UNAVAILABLE_MESSAGE = "Failed to load exchange rates. Please try again."


class ConversionEngine:
    """Answers "convert amount A from X to Y" using the cache or the provider."""

    def __init__(
        self,
        cache: RateCache,
        fetcher: RateFetcher,
        state: ApplicationState,
        currencies: Mapping[str, CurrencyInfo] = SUPPORTED_CURRENCIES,
        max_amount: float | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            cache: Canonical rate cache, keyed to a single base currency
            fetcher: Rate provider client
            state: Application state receiving API counts and errors
            currencies: Allow-list of supported currencies
            max_amount: Largest accepted amount (defaults to settings)
        """
        self.cache = cache
        self.fetcher = fetcher
        self.state = state
        self.currencies = currencies
        self.max_amount = max_amount if max_amount is not None else settings.max_amount

    def validate_amount(self, amount: object) -> float:
        """Validate a conversion amount.

        Args:
            amount: Amount entered by the user

        Returns:
            The amount as a float

        Raises:
            ConversionValidationError: If the amount is not a finite number in (0, max_amount]
        """
        if isinstance(amount, bool) or not isinstance(amount, numbers.Real | Decimal):
            msg = "Amount must be a number"
            raise ConversionValidationError(msg)

        value = float(amount)
        if not math.isfinite(value):
            msg = "Amount must be a finite number"
            raise ConversionValidationError(msg)
        if value <= 0:
            msg = "Amount must be greater than 0"
            raise ConversionValidationError(msg)
        if value > self.max_amount:
            msg = f"Amount is too large. Maximum is {self.max_amount:,.0f}"
            raise ConversionValidationError(msg)
        return value

    def validate_currency(self, currency_code: object, role: str = "source") -> str:
        """Validate and normalize a currency code.

        Args:
            currency_code: Code to validate
            role: "source" or "target", used in the error message

        Returns:
            Normalized currency code

        Raises:
            ConversionValidationError: If the code is empty or not supported
        """
        if not isinstance(currency_code, str) or not currency_code.strip():
            msg = f"Please select a {role} currency"
            raise ConversionValidationError(msg)

        normalized_code = currency_code.strip().upper()
        if normalized_code not in self.currencies:
            msg = (
                f"Currency code '{currency_code}' is not supported. "
                f"Supported currencies: {sorted(self.currencies)}"
            )
            raise ConversionValidationError(msg)
        return normalized_code

    async def resolve_rate(self, from_currency: str, to_currency: str) -> tuple[float, RateSource]:
        """Get the effective rate between two validated currency codes.

        Returns:
            Tuple of (rate, where the rate came from)

        Raises:
            FetchError: If a fresh fetch was needed and failed
            UnsupportedCurrencyError: If the fetched table lacks the target currency
        """
        with tracer.start_as_current_span("resolve_rate") as span:
            span.set_attribute("currency.from", from_currency)
            span.set_attribute("currency.to", to_currency)

            if from_currency == to_currency:
                span.set_attribute("exchange_rate.type", "same_currency")
                add_span_event("same_currency_conversion")
                return 1.0, RateSource.IDENTITY

            from_rate = self.cache.get(from_currency)
            to_rate = self.cache.get(to_currency)
            if from_rate is not None and to_rate is not None:
                # Both rates share the cache's base, so their ratio is the cross-rate
                rate = to_rate / from_rate
                span.set_attribute("exchange_rate.type", "cached_cross_rate")
                span.set_attribute("exchange_rate.value", rate)
                logger.debug(f"Cached rate {from_currency}->{to_currency}: {rate}")
                return rate, RateSource.CACHE

            span.set_attribute("exchange_rate.type", "fetched")
            logger.info(f"Fetching fresh rate for {from_currency}->{to_currency}")

            # The table fetched here is based on from_currency and stays transient
            with self.state.fetching():
                table = await self.fetcher.fetch_rates_for(from_currency, to_currency)

            rate = table.get(to_currency)
            if rate is None:
                raise UnsupportedCurrencyError(to_currency, from_currency)
            span.set_attribute("exchange_rate.value", rate)
            add_span_event("exchange_rate_fetched", {"rate": rate})
            return rate, RateSource.FETCH

    async def convert(
        self, amount: object, from_currency: object, to_currency: object
    ) -> ConversionResult:
        """Convert an amount between two supported currencies.

        Args:
            amount: Positive amount, at most ``max_amount``
            from_currency: Source currency code
            to_currency: Target currency code

        Returns:
            Conversion result with converted amount and effective rate

        Raises:
            ConversionValidationError: If input validation fails (no network call is made)
            UnsupportedCurrencyError: If the provider does not quote the target currency
            ConversionFailedError: If fetching the rate failed
        """
        with tracer.start_as_current_span("convert_currency") as span:
            conversion_logger = logger.bind(
                amount=str(amount), from_currency=from_currency, to_currency=to_currency
            )

            try:
                value = self.validate_amount(amount)
                source = self.validate_currency(from_currency, "source")
                target = self.validate_currency(to_currency, "target")
            except ConversionValidationError as e:
                span.set_attribute("conversion.status", "invalid")
                set_span_status(StatusCode.ERROR, str(e))
                conversion_logger.warning(f"Conversion rejected: {e}")
                raise

            span.set_attribute("conversion.amount", value)
            span.set_attribute("conversion.from_currency", source)
            span.set_attribute("conversion.to_currency", target)
            pair = {"currencies": f"{source}->{target}"}

            try:
                rate, rate_source = await self.resolve_rate(source, target)
            except UnsupportedCurrencyError as e:
                span.set_attribute("conversion.status", "error")
                set_span_status(StatusCode.ERROR, str(e))
                self.state.record_error(str(e), "convert", pair)
                conversion_logger.warning(f"Conversion failed - unsupported currency: {e}")
                raise
            except FetchError as e:
                span.set_attribute("conversion.status", "error")
                span.set_attribute("conversion.error.type", type(e).__name__)
                set_span_status(StatusCode.ERROR, str(e))
                self.state.record_error(str(e), "convert", pair)
                conversion_logger.warning(
                    f"Conversion failed - rate fetch error: {e}", error_type=type(e).__name__
                )
                raise ConversionFailedError(CONVERSION_FAILED_MESSAGE) from e

            converted_amount = value * rate
            if not math.isfinite(converted_amount) or converted_amount <= 0:
                if converted_amount <= 0:
                    msg = "Amount is too small to convert"
                else:
                    msg = "Converted amount is too large"
                span.set_attribute("conversion.status", "invalid")
                set_span_status(StatusCode.ERROR, msg)
                conversion_logger.warning(
                    f"Conversion rejected: {msg}", converted_amount=converted_amount
                )
                raise ConversionValidationError(msg)

            span.set_attribute("conversion.status", "success")
            span.set_attribute("conversion.result.converted_amount", converted_amount)
            conversion_logger.info(
                f"Currency conversion completed: {value} {source} = {converted_amount} {target}",
                exchange_rate=rate,
                rate_source=rate_source.value,
            )

            return ConversionResult(
                amount=value,
                from_currency=source,
                to_currency=target,
                converted_amount=converted_amount,
                effective_rate=rate,
                rate_source=rate_source,
            )

    async def force_refresh(self) -> RateTable:
        """Reload the canonical rate table regardless of its age.

        Returns:
            The new cached table

        Raises:
            RefreshFailedError: If the provider could not be reached or answered badly
        """
        base_currency = self.cache.base_currency
        with tracer.start_as_current_span("force_refresh") as span:
            span.set_attribute("rates.base_currency", base_currency)
            try:
                with self.state.fetching():
                    table = await self.fetcher.fetch_rates_for(base_currency)
            except FetchError as e:
                set_span_status(StatusCode.ERROR, str(e))
                self.state.record_error(str(e), "force_refresh", {"base_currency": base_currency})
                logger.warning(f"Rate refresh failed: {e}", error_type=type(e).__name__)
                raise RefreshFailedError(REFRESH_FAILED_MESSAGE) from e

            self.cache.replace(table)
            self.state.mark_updated(table.fetched_at)
            span.set_attribute("rates.count", len(table))
            add_span_event("rates_refreshed", {"currencies_count": len(table)})
            return table

    async def fetch_table(self, base_currency: object) -> RateTable:
        """Fetch the rate table for any supported base without touching the cache.

        Args:
            base_currency: Currency to use as the table base

        Returns:
            Freshly fetched table

        Raises:
            ConversionValidationError: If the base currency is not supported
            RatesUnavailableError: If the provider could not be reached or answered badly
        """
        base = self.validate_currency(base_currency, "base")
        with tracer.start_as_current_span("fetch_rate_table") as span:
            span.set_attribute("rates.base_currency", base)
            try:
                with self.state.fetching():
                    table = await self.fetcher.fetch_rates_for(base)
            except FetchError as e:
                set_span_status(StatusCode.ERROR, str(e))
                self.state.record_error(str(e), "fetch_table", {"base_currency": base})
                logger.warning(f"Rate table fetch failed: {e}", error_type=type(e).__name__)
                raise RatesUnavailableError(RATES_UNAVAILABLE_MESSAGE) from e

            span.set_attribute("rates.count", len(table))
            return table

    def supported_currency_count(self) -> int:
        """Count supported currencies, limited to those quoted once rates are loaded."""
        table = self.cache.table
        if table is None:
            return len(self.currencies)
        return sum(1 for code in self.currencies if code in table)
