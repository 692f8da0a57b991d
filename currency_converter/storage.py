"""Key-value stores for the persisted conversion history."""

from pathlib import Path
from typing import Protocol

from currency_converter.logging_config import get_logger

logger = get_logger(__name__)


class HistoryStore(Protocol):
    """A single read/write slot holding the serialized history."""

    def load(self) -> str | None: ...

    def save(self, blob: str) -> None: ...


class InMemoryHistoryStore:
    """History store backed by a single in-process variable."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob

    def load(self) -> str | None:
        return self.blob

    def save(self, blob: str) -> None:
        self.blob = blob


class JsonFileHistoryStore:
    """History store backed by a JSON file on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> str | None:
        """Read the stored blob.

        Returns:
            File contents, or None when the file is missing or unreadable
        """
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read history file: {e}", path=str(self.path))
            return None

    def save(self, blob: str) -> None:
        """Write the blob, replacing the previous contents."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(blob, encoding="utf-8")
        tmp_path.replace(self.path)
