from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


BOOKMARK_CATEGORIES: Dict[str, Dict[str, str]] = {
    "best-practices": {
        "name": "Best Practices",
        "description": "Recommended coding patterns and conventions",
    },
    "security": {
        "name": "Security",
        "description": "Security-related improvements and fixes",
    },
    "performance": {
        "name": "Performance",
        "description": "Performance optimizations and improvements",
    },
    "bugs": {
        "name": "Bug Fixes",
        "description": "Common bugs and their solutions",
    },
    "documentation": {
        "name": "Documentation",
        "description": "Documentation and comment improvements",
    },
}

BookmarkSortField = Literal["title", "dateAdded", "usageCount", "category", "language"]
SortDirection = Literal["asc", "desc"]


@dataclass(slots=True)
class CodeExample:
    wrong: str = ""
    correct: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"wrong": self.wrong, "correct": self.correct}


@dataclass(slots=True)
class BookmarkItem:
    """A user-curated code pattern. Unrelated to review history."""

    id: int
    title: str
    category: str
    language: str
    description: str
    code_example: CodeExample
    tags: List[str] = field(default_factory=list)
    date_added: str = ""  # YYYY-MM-DD
    usage_count: int = 0
    source: Optional[str] = None  # from-review | manual-add | preset
    is_bookmarked: Optional[bool] = None
    can_auto_fix: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "language": self.language,
            "description": self.description,
            "codeExample": self.code_example.to_dict(),
            "tags": list(self.tags),
            "dateAdded": self.date_added,
            "usageCount": self.usage_count,
        }
        if self.source is not None:
            data["source"] = self.source
        if self.is_bookmarked is not None:
            data["isBookmarked"] = self.is_bookmarked
        if self.can_auto_fix is not None:
            data["canAutoFix"] = self.can_auto_fix
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookmarkItem":
        example = data.get("codeExample")
        if not isinstance(example, dict):
            example = {}
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            category=data.get("category", "best-practices"),
            language=data.get("language", ""),
            description=data.get("description", ""),
            code_example=CodeExample(wrong=example.get("wrong", ""), correct=example.get("correct", "")),
            tags=list(data.get("tags") or []),
            date_added=data.get("dateAdded", ""),
            usage_count=data.get("usageCount", 0),
            source=data.get("source"),
            is_bookmarked=data.get("isBookmarked"),
            can_auto_fix=data.get("canAutoFix"),
        )


@dataclass(slots=True)
class BookmarkFilter:
    category: str = "all"
    language: str = "all"
    search_term: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass(slots=True)
class BookmarkSort:
    field: BookmarkSortField = "dateAdded"
    direction: SortDirection = "desc"


@dataclass(slots=True)
class BookmarkStats:
    total_bookmarks: int
    most_used_category: Optional[str]
    top_languages: List[Dict[str, Any]]
    recently_added: List[BookmarkItem]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalBookmarks": self.total_bookmarks,
            "mostUsedCategory": self.most_used_category,
            "topLanguages": self.top_languages,
            "recentlyAdded": [b.to_dict() for b in self.recently_added],
        }
