"""Session-scoped application state."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from currency_converter.models.conversion import ErrorRecord


class ApplicationState:
    """Tracks fetch activity, refresh time, API usage and past errors.

    Owned by the controller and shared with the engine; never persisted.
    """

    def __init__(self) -> None:
        self.last_update: datetime | None = None
        self.api_call_count = 0
        self.errors: list[ErrorRecord] = []
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        """True while at least one fetch is in flight."""
        return self._in_flight > 0

    @contextmanager
    def fetching(self) -> Iterator[None]:
        """Mark a network fetch as in flight and count it as an API call.

        Fetches may overlap; loading ends when the last one finishes.
        """
        self.api_call_count += 1
        self._in_flight += 1
        try:
            yield
        finally:
            self._in_flight -= 1

    def mark_updated(self, when: datetime | None = None) -> None:
        self.last_update = when or datetime.now(UTC)

    def record_error(
        self, message: str, operation: str, details: dict[str, str] | None = None
    ) -> ErrorRecord:
        """Append an error to the error log.

        Args:
            message: Diagnostic message
            operation: Name of the operation that failed
            details: Extra context such as the currency pair

        Returns:
            The stored error record
        """
        record = ErrorRecord(message=message, operation=operation, details=details or {})
        self.errors.append(record)
        return record

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def seconds_since_update(self, now: datetime | None = None) -> float | None:
        """Get seconds elapsed since the last successful refresh."""
        if self.last_update is None:
            return None
        return ((now or datetime.now(UTC)) - self.last_update).total_seconds()
