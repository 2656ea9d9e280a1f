from __future__ import annotations

import json
import logging
import time
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping

from code_roaster.models import (
    BOOKMARK_CATEGORIES,
    BookmarkFilter,
    BookmarkItem,
    BookmarkSort,
    BookmarkStats,
)
from code_roaster.storage.local_storage import BOOKMARKS_KEY, LocalStorage, StoreItemNotFoundError


logger = logging.getLogger(__name__)

# Fields a caller may not overwrite through update().
_READ_ONLY_FIELDS = {"id"}


class BookmarkStore:
    """CRUD over user-curated bookmarks. Every change is written through."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._items: List[BookmarkItem] = self._load()

    @property
    def items(self) -> List[BookmarkItem]:
        return list(self._items)

    def get(self, bookmark_id: int) -> BookmarkItem:
        for item in self._items:
            if item.id == bookmark_id:
                return item
        raise StoreItemNotFoundError(bookmark_id)

    def add(self, fields: Mapping[str, Any]) -> BookmarkItem:
        data = dict(fields)
        data["id"] = self._next_id()
        data["dateAdded"] = date.today().isoformat()
        data["usageCount"] = 0
        bookmark = BookmarkItem.from_dict(data)
        self._items = [bookmark, *self._items]
        self._persist()
        return bookmark

    def update(self, bookmark_id: int, updates: Mapping[str, Any]) -> BookmarkItem:
        current = self.get(bookmark_id).to_dict()
        current.update({k: v for k, v in updates.items() if k not in _READ_ONLY_FIELDS})
        return self._replace(bookmark_id, BookmarkItem.from_dict(current))

    def delete(self, bookmark_id: int) -> None:
        self.get(bookmark_id)
        self._items = [item for item in self._items if item.id != bookmark_id]
        self._persist()

    def toggle(self, bookmark_id: int) -> BookmarkItem:
        current = self.get(bookmark_id)
        return self.update(bookmark_id, {"isBookmarked": not current.is_bookmarked})

    def increment_usage(self, bookmark_id: int) -> BookmarkItem:
        current = self.get(bookmark_id)
        return self.update(bookmark_id, {"usageCount": current.usage_count + 1})

    def query(self, bookmark_filter: BookmarkFilter, sort: BookmarkSort) -> List[BookmarkItem]:
        return sort_bookmarks(filter_bookmarks(self._items, bookmark_filter), sort)

    def _replace(self, bookmark_id: int, bookmark: BookmarkItem) -> BookmarkItem:
        self._items = [bookmark if item.id == bookmark_id else item for item in self._items]
        self._persist()
        return bookmark

    def _next_id(self) -> int:
        candidate = int(time.time() * 1000)
        taken = {item.id for item in self._items}
        while candidate in taken:
            candidate += 1
        return candidate

    def _load(self) -> List[BookmarkItem]:
        raw = self._storage.get_item(BOOKMARKS_KEY)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored bookmarks are not a JSON array")
            return [BookmarkItem.from_dict(entry) for entry in data]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            logger.error("Error loading bookmarks from storage: %s", exc)
            return []

    def _persist(self) -> None:
        self._storage.set_item(BOOKMARKS_KEY, json.dumps([item.to_dict() for item in self._items]))


def filter_bookmarks(items: Iterable[BookmarkItem], bookmark_filter: BookmarkFilter) -> List[BookmarkItem]:
    """Order-preserving subset of ``items`` matching every filter criterion."""
    term = bookmark_filter.search_term.lower()
    wanted_tags = [tag.lower() for tag in bookmark_filter.tags]

    def matches(item: BookmarkItem) -> bool:
        if bookmark_filter.category != "all" and item.category != bookmark_filter.category:
            return False
        if bookmark_filter.language != "all" and item.language != bookmark_filter.language:
            return False
        tags = [tag.lower() for tag in item.tags]
        if term and not (
            term in item.title.lower() or term in item.description.lower() or any(term in tag for tag in tags)
        ):
            return False
        return all(any(wanted in tag for tag in tags) for wanted in wanted_tags)

    return [item for item in items if matches(item)]


def sort_bookmarks(items: Iterable[BookmarkItem], sort: BookmarkSort) -> List[BookmarkItem]:
    """Single-field sort. Equal keys keep their input order in either direction."""
    if sort.field == "dateAdded":
        key = lambda item: _parse_date(item.date_added)  # noqa: E731
    elif sort.field == "usageCount":
        key = lambda item: item.usage_count  # noqa: E731
    else:
        attribute = {"title": "title", "category": "category", "language": "language"}[sort.field]
        key = lambda item: getattr(item, attribute).lower()  # noqa: E731
    return sorted(items, key=key, reverse=sort.direction == "desc")


def _parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return datetime.min


def categories_with_counts(items: List[BookmarkItem]) -> List[Dict[str, Any]]:
    counts = Counter(item.category for item in items)
    categories = [{"id": "all", "name": "All Bookmarks", "count": len(items)}]
    for key, meta in BOOKMARK_CATEGORIES.items():
        categories.append({"id": key, "name": meta["name"], "count": counts.get(key, 0)})
    return categories


def available_languages(items: List[BookmarkItem]) -> List[str]:
    return ["all", *sorted({item.language for item in items})]


def available_tags(items: List[BookmarkItem]) -> List[str]:
    return sorted({tag for item in items for tag in item.tags})


def bookmark_stats(items: List[BookmarkItem]) -> BookmarkStats:
    category_counts = Counter(item.category for item in items)
    language_counts = Counter(item.language for item in items)
    recent = sorted(items, key=lambda item: _parse_date(item.date_added), reverse=True)
    return BookmarkStats(
        total_bookmarks=len(items),
        most_used_category=category_counts.most_common(1)[0][0] if category_counts else None,
        top_languages=[{"language": lang, "count": count} for lang, count in language_counts.most_common(5)],
        recently_added=recent[:5],
    )
