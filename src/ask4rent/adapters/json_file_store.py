"""JSON file-backed key-value store."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from ask4rent.services.storage import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as a single JSON object on disk."""

    path: Path

    @classmethod
    def create(cls, path: str | Path) -> "JsonFileKeyValueStore":
        """Create a store rooted at the given file path."""
        return cls(path=Path(path).expanduser())

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value and flush the file."""
        entries = self._load()
        entries[key] = value
        self._write(entries)

    def delete(self, key: str) -> None:
        """Remove a key and flush the file."""
        entries = self._load()
        if entries.pop(key, None) is not None:
            self._write(entries)

    def _load(self) -> dict[str, object]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Ignoring unreadable store file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, entries: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".store-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle)
            Path(tmp_name).replace(self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
