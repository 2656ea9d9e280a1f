from __future__ import annotations

from code_roaster.storage.bookmark_store import BookmarkStore, filter_bookmarks, sort_bookmarks
from code_roaster.storage.history_store import HistoryStore, filter_history, history_stats
from code_roaster.storage.local_storage import (
    BOOKMARKS_KEY,
    HISTORY_KEY,
    SEARCH_HISTORY_KEY,
    LocalStorage,
    StoreItemNotFoundError,
)
from code_roaster.storage.search_history import SearchHistory

__all__ = [
    "BOOKMARKS_KEY",
    "BookmarkStore",
    "HISTORY_KEY",
    "HistoryStore",
    "LocalStorage",
    "SEARCH_HISTORY_KEY",
    "SearchHistory",
    "StoreItemNotFoundError",
    "filter_bookmarks",
    "filter_history",
    "history_stats",
    "sort_bookmarks",
]
