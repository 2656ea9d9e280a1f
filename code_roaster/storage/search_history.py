from __future__ import annotations

import json
import logging
from typing import List

from code_roaster.storage.local_storage import SEARCH_HISTORY_KEY, LocalStorage


logger = logging.getLogger(__name__)


class SearchHistory:
    """Recent bookmark search terms, newest first."""

    def __init__(self, storage: LocalStorage, *, limit: int = 10) -> None:
        self._storage = storage
        self._limit = limit
        self._terms = self._load()

    @property
    def terms(self) -> List[str]:
        return list(self._terms)

    def add(self, term: str) -> List[str]:
        if term.strip() and term not in self._terms:
            self._terms = [term, *self._terms[: self._limit - 1]]
            self._persist()
        return self.terms

    def clear(self) -> None:
        self._terms = []
        self._persist()

    def _load(self) -> List[str]:
        raw = self._storage.get_item(SEARCH_HISTORY_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.error("Error loading search history: %s", exc)
            return []
        if not isinstance(data, list):
            logger.error("Stored search history is not a list, ignoring it")
            return []
        return [str(term) for term in data][: self._limit]

    def _persist(self) -> None:
        self._storage.set_item(SEARCH_HISTORY_KEY, json.dumps(self._terms))
