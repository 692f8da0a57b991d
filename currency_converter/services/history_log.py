"""Capacity-bounded conversion history with persistence."""

import json
from collections.abc import Iterable, Iterator

from pydantic import ValidationError

from currency_converter.config import settings
from currency_converter.exceptions import PersistenceReadError
from currency_converter.logging_config import get_logger
from currency_converter.models.conversion import ConversionRecord
from currency_converter.storage import HistoryStore

logger = get_logger(__name__)


def _decode_blob(blob: str | bytes | None) -> list[object]:
    """Decode a persisted blob into its raw item list.

    Raises:
        PersistenceReadError: If the blob is not a JSON array
    """
    if not blob:
        return []
    try:
        data = json.loads(blob)
    except (ValueError, TypeError) as e:
        msg = f"history blob is not valid JSON: {e}"
        raise PersistenceReadError(msg) from e
    if not isinstance(data, list):
        msg = f"history blob must be a JSON array, got {type(data).__name__}"
        raise PersistenceReadError(msg)
    return data


class HistoryLog:
    """Newest-first log of past conversions.

    Appending beyond capacity evicts the oldest entry. When a store is
    attached, every append and clear writes the new state to it.
    """

    def __init__(
        self,
        store: HistoryStore | None = None,
        capacity: int | None = None,
        records: Iterable[ConversionRecord] = (),
    ) -> None:
        """Initialize the log.

        Args:
            store: Optional store receiving the serialized log after each mutation
            capacity: Maximum number of records kept (defaults to settings)
            records: Initial records, newest first
        """
        self.store = store
        self.capacity = capacity if capacity is not None else settings.history_capacity
        if self.capacity < 1:
            msg = "History capacity must be at least 1"
            raise ValueError(msg)
        self._records: list[ConversionRecord] = list(records)[: self.capacity]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ConversionRecord]:
        return iter(list(self._records))

    def append(self, record: ConversionRecord) -> None:
        """Insert a record at the front, evicting the oldest past capacity."""
        self._records.insert(0, record)
        if len(self._records) > self.capacity:
            del self._records[self.capacity :]
        self._persist()
        logger.debug(
            f"Added to history: {record.source_amount} {record.source_currency} -> "
            f"{record.target_amount:.4f} {record.target_currency}",
            history_count=len(self._records),
        )

    def list(self) -> list[ConversionRecord]:
        """Get a copy of the records, newest first."""
        return list(self._records)

    def get(self, index: int) -> ConversionRecord | None:
        """Get the record at a position, or None when out of range."""
        if 0 <= index < len(self._records):
            return self._records[index]
        return None

    def clear(self) -> None:
        """Remove all records."""
        self._records.clear()
        self._persist()
        logger.info("History cleared")

    def to_persisted_form(self) -> str:
        """Serialize the log to a JSON array string."""
        return json.dumps([record.to_persisted() for record in self._records], ensure_ascii=False)

    @classmethod
    def from_persisted_form(
        cls,
        blob: str | bytes | None,
        store: HistoryStore | None = None,
        capacity: int | None = None,
    ) -> "HistoryLog":
        """Rebuild a log from its persisted form.

        Malformed or absent input yields an empty log. Individual records
        that fail validation, including unparseable timestamps, are dropped.

        Args:
            blob: Serialized log, or None
            store: Store to attach to the rebuilt log
            capacity: Maximum number of records kept

        Returns:
            The rebuilt history log
        """
        try:
            items = _decode_blob(blob)
        except PersistenceReadError as e:
            logger.warning(f"Could not load history: {e}")
            items = []

        records: list[ConversionRecord] = []
        dropped = 0
        for item in items:
            try:
                records.append(ConversionRecord.from_persisted(item))
            except ValidationError:
                dropped += 1

        if dropped:
            logger.warning(f"Dropped {dropped} malformed history items")
        if records:
            logger.info(f"Loaded {len(records)} history items")

        return cls(store=store, capacity=capacity, records=records)

    @classmethod
    def load(cls, store: HistoryStore, capacity: int | None = None) -> "HistoryLog":
        """Build a log from the contents of a store and attach it."""
        return cls.from_persisted_form(store.load(), store=store, capacity=capacity)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.to_persisted_form())
        except OSError as e:
            logger.warning(f"Could not save history: {e}", exc_info=True)
