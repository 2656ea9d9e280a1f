"""Review history kept in local storage.

The stored value is a JSON array of history items, newest first, capped at
``limit`` entries. Every mutation rewrites the whole array.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from code_roaster.files import language_for_extension
from code_roaster.models import HistoryFilter, HistoryItem, HistoryStats, ReviewResult, UploadedFile
from code_roaster.storage.local_storage import HISTORY_KEY, LocalStorage
from code_roaster.storage.sample_data import sample_history


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


class HistoryStore:
    def __init__(self, storage: LocalStorage, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._storage = storage
        self._limit = limit
        self._items: List[HistoryItem] = self._load()

    @property
    def items(self) -> List[HistoryItem]:
        return list(self._items)

    def append(
        self,
        result: ReviewResult,
        files: Iterable[UploadedFile],
        *,
        review_type: Optional[str] = None,
    ) -> List[HistoryItem]:
        """Record one history item per file, all sharing ``result``."""
        if review_type is None:
            review_type = result.metadata.review_type if result.metadata else "codeQuality"
        timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        created = [
            HistoryItem(
                id=uuid.uuid4().hex,
                filename=file.name,
                language=language_for_extension(file.extension),
                review_result=result,
                timestamp=timestamp,
                file_size=file.size,
                review_type=review_type,
            )
            for file in files
        ]
        self._items = (created + self._items)[: self._limit]
        self._persist()
        logger.info("Added %d history item(s), %d stored", len(created), len(self._items))
        return created

    def get(self, item_id: str) -> Optional[HistoryItem]:
        return next((item for item in self._items if item.id == item_id), None)

    def delete(self, item_id: str) -> bool:
        remaining = [item for item in self._items if item.id != item_id]
        if len(remaining) == len(self._items):
            return False
        self._items = remaining
        self._persist()
        return True

    def clear(self, skip_confirmation: bool = False) -> Optional[Callable[[], None]]:
        """Empty the history and drop the storage key.

        Without ``skip_confirmation`` nothing happens yet: the caller gets a
        callback that performs the clear once the user has confirmed.
        """
        if skip_confirmation:
            self._clear()
            return None
        return self._clear

    def refresh(self) -> List[HistoryItem]:
        raw = self._storage.get_item(HISTORY_KEY)
        if raw is None:
            logger.info("No history found in storage")
            self._items = []
            return self.items
        try:
            self._items = _parse(raw)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.error("Error refreshing history: %s", exc)
        else:
            logger.info("History refreshed: %d items", len(self._items))
        return self.items

    def export(self) -> Tuple[str, str]:
        """Return a download filename and the pretty-printed history JSON."""
        filename = f"codeRoaster_history_{date.today().isoformat()}.json"
        payload = json.dumps([item.to_dict() for item in self._items], indent=2, ensure_ascii=False)
        return filename, payload

    def _clear(self) -> None:
        self._items = []
        self._storage.remove_item(HISTORY_KEY)
        logger.info("History cleared")

    def _load(self) -> List[HistoryItem]:
        raw = self._storage.get_item(HISTORY_KEY)
        if raw is None:
            logger.info("No history found, using sample data")
            return sample_history()
        try:
            items = _parse(raw)
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.error("Error loading history, using sample data: %s", exc)
            return sample_history()
        logger.info("Loaded history from storage: %d items", len(items))
        return items

    def _persist(self) -> None:
        self._storage.set_item(HISTORY_KEY, json.dumps([item.to_dict() for item in self._items]))


def _parse(raw: str) -> List[HistoryItem]:
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("stored history is not a JSON array")
    return [HistoryItem.from_dict(entry) for entry in data]


def filter_history(items: Iterable[HistoryItem], history_filter: HistoryFilter) -> List[HistoryItem]:
    term = history_filter.search_term.lower()
    now = datetime.now(timezone.utc)

    def matches(item: HistoryItem) -> bool:
        suggestions = item.review_result.suggestions
        if term and term not in item.filename.lower() and not any(
            term in s.title.lower() or term in s.description.lower() for s in suggestions
        ):
            return False
        if history_filter.language != "all" and item.language != history_filter.language:
            return False
        if history_filter.review_type != "all" and item.review_type != history_filter.review_type:
            return False
        if history_filter.severity != "all" and not any(
            s.severity == history_filter.severity for s in suggestions
        ):
            return False
        return _in_date_range(item.timestamp, history_filter.date_range, now)

    return [item for item in items if matches(item)]


def _in_date_range(timestamp: str, date_range: str, now: datetime) -> bool:
    max_days = {"today": 0, "week": 7, "month": 30}.get(date_range)
    if max_days is None:
        return True
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    days = (now - moment).days
    if date_range == "today":
        return days == 0
    return days <= max_days


def history_stats(items: List[HistoryItem]) -> HistoryStats:
    total = len(items)
    average = round(sum(item.review_result.score for item in items) / total) if total else 0
    return HistoryStats(
        total_reviews=total,
        average_score=average,
        total_critical_issues=sum(item.review_result.summary.critical for item in items),
        total_languages=len({item.language for item in items}),
    )
