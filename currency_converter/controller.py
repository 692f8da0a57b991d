"""Controller: the command interface a front end drives."""

import asyncio
from collections.abc import Mapping

from pydantic import BaseModel

from currency_converter.config import ConverterSettings, settings
from currency_converter.exceptions import ConverterError, RefreshFailedError
from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import (
    AppStats,
    ConversionRecord,
    ConversionResult,
    DisplayState,
    RateTable,
)
from currency_converter.models.currency import SUPPORTED_CURRENCIES, CurrencyInfo
from currency_converter.services.app_state import ApplicationState
from currency_converter.services.conversion_engine import ConversionEngine
from currency_converter.services.history_log import HistoryLog
from currency_converter.services.rate_cache import RateCache
from currency_converter.services.rate_fetcher import RateFetcher
from currency_converter.services.scheduling import Debouncer, PeriodicRefresher, Throttler
from currency_converter.storage import HistoryStore

logger = get_logger(__name__)

OFFLINE_ADVISORY = "Internet connection lost. Using the last known exchange rates."
LOAD_FAILED_MESSAGE = "Failed to load currency data from the server."
NO_HISTORY_MESSAGE = "There is no history to clear."
DEFAULT_TARGET_CURRENCY = "IDR"


class Selection(BaseModel):
    """The amount and currency pair currently chosen by the user."""

    amount: float | None = None
    from_currency: str | None = None
    to_currency: str | None = None

    def is_complete(self) -> bool:
        return bool(self.amount) and bool(self.from_currency) and bool(self.to_currency)


class ConverterController:
    """Owns the converter state and translates user commands into core calls."""

    def __init__(
        self,
        fetcher: RateFetcher | None = None,
        history_store: HistoryStore | None = None,
        config: ConverterSettings | None = None,
        currencies: Mapping[str, CurrencyInfo] = SUPPORTED_CURRENCIES,
    ) -> None:
        """Initialize the controller and load persisted history.

        Args:
            fetcher: Rate provider client (built from settings when omitted)
            history_store: Store for the persisted history (in-memory only when omitted)
            config: Settings to use instead of the global settings
            currencies: Supported currency table
        """
        self.config = config or settings
        self.state = ApplicationState()
        self.cache = RateCache(self.config.base_currency)
        self.fetcher = fetcher or RateFetcher(
            self.config.rates_api_base_url, self.config.request_timeout
        )
        self.engine = ConversionEngine(
            self.cache, self.fetcher, self.state, currencies, self.config.max_amount
        )
        if history_store is not None:
            self.history = HistoryLog.load(history_store, self.config.history_capacity)
        else:
            self.history = HistoryLog(capacity=self.config.history_capacity)

        self.display = DisplayState()
        default_target = (
            DEFAULT_TARGET_CURRENCY if DEFAULT_TARGET_CURRENCY in currencies else None
        )
        self.selection = Selection(
            from_currency=self.config.base_currency, to_currency=default_target
        )
        self.is_online = True
        self.is_visible = True

        self._debouncer = Debouncer(self.config.debounce_seconds, self._convert_selection)
        self._swap_throttler = Throttler(self.config.throttle_seconds, self.swap_selection)
        self._refresher = PeriodicRefresher(
            self.config.refresh_interval_seconds,
            self.engine.force_refresh,
            should_run=lambda: self.is_visible and self.is_online,
        )

    async def __aenter__(self) -> "ConverterController":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def start(self, *, auto_refresh: bool = True) -> None:
        """Load the initial rate table and start the auto-refresh loop.

        A failed initial load is shown as an error; conversions can still
        fetch rates on demand.
        """
        logger.info("Initializing currency converter")
        try:
            await self.force_refresh()
        except RefreshFailedError:
            self.display.show_error(LOAD_FAILED_MESSAGE)
        if auto_refresh and self.config.refresh_interval_seconds > 0:
            self._refresher.start()
        logger.info("Currency converter ready", history_count=len(self.history))

    async def stop(self) -> None:
        """Stop background work and release the HTTP session."""
        self._debouncer.cancel()
        await self._refresher.stop()
        await self.fetcher.close()
        logger.info("Currency converter stopped")

    async def convert(
        self, amount: object, from_currency: object, to_currency: object
    ) -> ConversionResult:
        """Convert an amount, record it in history and update the display.

        Raises:
            ConverterError: Any surfaced conversion error, after it is shown
        """
        self.display.error = None
        self.display.is_loading = True
        try:
            result = await self.engine.convert(amount, from_currency, to_currency)
        except ConverterError as e:
            self.display.show_error(str(e))
            raise
        finally:
            self.display.is_loading = False

        self.selection = Selection(
            amount=result.amount,
            from_currency=result.from_currency,
            to_currency=result.to_currency,
        )
        self.history.append(result.to_record())
        self.display.show_result(result)
        return result

    def request_conversion(
        self, amount: float | None, from_currency: str | None, to_currency: str | None
    ) -> asyncio.Task:
        """Update the selection and convert once input has been quiet for a while."""
        self.selection = Selection(
            amount=amount, from_currency=from_currency, to_currency=to_currency
        )
        return self._debouncer.trigger()

    @staticmethod
    def swap(from_currency: str, to_currency: str) -> tuple[str, str]:
        """Swap a currency pair."""
        return to_currency, from_currency

    async def swap_selection(self) -> ConversionResult | None:
        """Swap the selected currencies and re-convert when an amount is set."""
        if not (self.selection.from_currency and self.selection.to_currency):
            return None

        self.selection.from_currency, self.selection.to_currency = self.swap(
            self.selection.from_currency, self.selection.to_currency
        )
        logger.info(
            f"Swapped currencies: {self.selection.to_currency} <-> {self.selection.from_currency}"
        )
        if self.selection.amount:
            return await self._convert_selection()
        return None

    async def request_swap(self) -> bool:
        """Throttled swap; returns False when the swap was dropped."""
        return await self._swap_throttler.trigger()

    async def force_refresh(self, *, reconvert: bool = False) -> RateTable:
        """Replace the cached rates with a fresh table.

        Args:
            reconvert: Re-run the current selection afterwards

        Raises:
            RefreshFailedError: If the provider could not be reached
        """
        try:
            table = await self.engine.force_refresh()
        except RefreshFailedError as e:
            self.display.show_error(str(e))
            raise

        if reconvert and self.selection.is_complete():
            await self._convert_selection()
        return table

    async def refresh_if_stale(self, max_age_seconds: float, *, when_empty: bool = True) -> bool:
        """Refresh rates when they are older than ``max_age_seconds``.

        Args:
            max_age_seconds: Maximum acceptable age of the cached rates
            when_empty: Also refresh when rates were never loaded

        Returns:
            True if a refresh succeeded
        """
        age = self.state.seconds_since_update()
        if age is None and not when_empty:
            return False
        if age is not None and age <= max_age_seconds:
            return False

        logger.info("Refreshing stale exchange rates", age_seconds=age)
        try:
            await self.force_refresh(reconvert=True)
        except RefreshFailedError:
            return False
        return True

    async def handle_visibility_change(self, visible: bool) -> bool:
        """Track visibility; refresh stale rates when the view becomes visible."""
        self.is_visible = visible
        if not visible:
            return False
        return await self.refresh_if_stale(self.config.stale_after_seconds, when_empty=False)

    async def handle_online(self) -> bool:
        """Connection restored: clear the advisory and refresh stale rates."""
        logger.info("Connection restored")
        self.is_online = True
        self.display.advisory = None
        return await self.refresh_if_stale(self.config.reconnect_refresh_after_seconds)

    def handle_offline(self) -> None:
        """Connection lost: keep cache and history, show an advisory."""
        logger.info("Connection lost")
        self.is_online = False
        self.display.advisory = OFFLINE_ADVISORY

    def get_history(self) -> list[ConversionRecord]:
        return self.history.list()

    def clear_history(self) -> bool:
        """Clear the history.

        Returns:
            False (with an error shown) when there was nothing to clear
        """
        if len(self.history) == 0:
            self.display.show_error(NO_HISTORY_MESSAGE)
            return False
        self.history.clear()
        return True

    def use_history_item(self, index: int) -> ConversionRecord | None:
        """Load a past conversion back into the selection."""
        record = self.history.get(index)
        if record is None:
            return None
        self.selection = Selection(
            amount=record.source_amount,
            from_currency=record.source_currency,
            to_currency=record.target_currency,
        )
        logger.info(f"Used history item: {record.source_currency} -> {record.target_currency}")
        return record

    def reset_selection(self) -> None:
        """Clear the entered amount and hide result and error."""
        self.selection.amount = None
        self.display.clear()

    def get_stats(self) -> AppStats:
        return AppStats(
            api_call_count=self.state.api_call_count,
            last_update=self.state.last_update,
            error_count=self.state.error_count,
            supported_currency_count=self.engine.supported_currency_count(),
            history_count=len(self.history),
            is_online=self.is_online,
        )

    async def _convert_selection(self) -> ConversionResult | None:
        """Convert the current selection; errors end up in the display state."""
        if not self.selection.is_complete():
            self.display.result = None
            return None
        try:
            return await self.convert(
                self.selection.amount, self.selection.from_currency, self.selection.to_currency
            )
        except ConverterError:
            return None
