"""
Whole-file JSON persistence shared by the mapping and config stores.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, Union

from shared.errors import StorageError
from shared.logging import get_logger


class JsonFileStore:
    """
    Reads and writes a single JSON document.

    There is no locking and no atomic rename: concurrent writers race and the
    last write wins.
    """

    def __init__(self, path: Union[str, Path], logger_name: str = "webflow.store"):
        self._path = Path(path)
        self.logger = get_logger(logger_name)

    @property
    def path(self) -> Path:
        """Return the resolved path to the data file."""
        return self._path

    def load(self) -> Optional[Any]:
        """
        Return the parsed document, or None when the file is missing or unreadable.

        Unreadable files are logged rather than raised so callers can fall back
        to their defaults.
        """
        if not self._path.exists():
            return None

        try:
            with self._path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (ValueError, OSError) as exc:
            self.logger.warning("Failed to read JSON store", path=str(self._path), error=str(exc))
            return None

    def dump(self, payload: Any) -> None:
        """Serialize ``payload`` and overwrite the file."""
        try:
            serialized = json.dumps(payload, indent=2, ensure_ascii=False)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as handle:
                handle.write(serialized)
        except (TypeError, ValueError, OSError) as exc:
            self.logger.error("Failed to write JSON store", path=str(self._path), error=str(exc))
            raise StorageError(str(exc), details={"path": str(self._path)})

        self.logger.info("JSON store written", path=str(self._path))
