"""String-keyed persistence for the stores.

Mirrors the browser's key-value storage: values are opaque strings (the
stores put JSON in them) kept in a single JSON document on disk. Writes go
through a temp file and a rename so a crash never leaves half a document.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional


logger = logging.getLogger(__name__)

HISTORY_KEY = "codeRoaster_history"
BOOKMARKS_KEY = "codeRoaster_bookmarks"
SEARCH_HISTORY_KEY = "codeRoaster_searchHistory"


class StoreItemNotFoundError(KeyError):
    """Raised when an operation names an id the store does not hold."""


class LocalStorage:
    """Key-value storage backed by a JSON file, or by memory when path is None."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._memory: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._read())

    def _read(self) -> Dict[str, str]:
        if self.path is None:
            return dict(self._memory)
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.error("Storage file %s does not hold a JSON object, ignoring it", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        if self.path is None:
            self._memory = dict(data)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".code_roaster_", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
