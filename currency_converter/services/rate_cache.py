"""In-memory cache of the canonical rate table."""

from datetime import UTC, datetime, timedelta

from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import RateTable

logger = get_logger(__name__)


class RateCache:
    """Holds the most recent rate table for a single, fixed base currency.

    The whole table is swapped in one assignment, so readers always see
    either the previous table or the new one. No TTL is enforced here;
    callers decide when the table is stale.
    """

    def __init__(self, base_currency: str) -> None:
        """Initialize an empty cache.

        Args:
            base_currency: The only base currency this cache accepts
        """
        self._base_currency = base_currency.upper()
        self._table: RateTable | None = None

    @property
    def base_currency(self) -> str:
        return self._base_currency

    @property
    def table(self) -> RateTable | None:
        return self._table

    @property
    def last_refreshed(self) -> datetime | None:
        return self._table.fetched_at if self._table else None

    def get(self, currency: str) -> float | None:
        """Get the base-relative rate for a currency.

        Args:
            currency: Currency code

        Returns:
            Rate relative to the base currency, or None when not cached
        """
        table = self._table
        if table is None:
            return None
        return table.get(currency)

    def replace(self, table: RateTable) -> None:
        """Replace the cached table.

        Args:
            table: Freshly fetched table for this cache's base currency

        Raises:
            ValueError: If the table uses a different base currency
        """
        if table.base_currency != self._base_currency:
            msg = (
                f"Rate cache is keyed to {self._base_currency}, "
                f"cannot store a table based on {table.base_currency}"
            )
            raise ValueError(msg)

        self._table = table
        logger.info(
            "Rate cache replaced",
            base_currency=table.base_currency,
            currencies=len(table),
            fetched_at=table.fetched_at.isoformat(),
        )

    def age(self, now: datetime | None = None) -> timedelta | None:
        """Get how old the cached table is, or None when empty."""
        if self._table is None:
            return None
        return (now or datetime.now(UTC)) - self._table.fetched_at

    def is_empty(self) -> bool:
        return self._table is None
