from __future__ import annotations

from code_roaster.models.bookmark import (
    BOOKMARK_CATEGORIES,
    BookmarkFilter,
    BookmarkItem,
    BookmarkSort,
    BookmarkStats,
    CodeExample,
)
from code_roaster.models.review import (
    CodeSnippet,
    Completion,
    ConnectionResult,
    HistoryFilter,
    HistoryItem,
    HistoryStats,
    ReviewMetadata,
    ReviewResult,
    ReviewSuggestion,
    ReviewSummary,
    UploadedFile,
)

__all__ = [
    "BOOKMARK_CATEGORIES",
    "BookmarkFilter",
    "BookmarkItem",
    "BookmarkSort",
    "BookmarkStats",
    "CodeExample",
    "CodeSnippet",
    "Completion",
    "ConnectionResult",
    "HistoryFilter",
    "HistoryItem",
    "HistoryStats",
    "ReviewMetadata",
    "ReviewResult",
    "ReviewSuggestion",
    "ReviewSummary",
    "UploadedFile",
]
