from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Assessment fields a review type may add next to the core result.
ASSESSMENT_FIELDS = (
    "overallAssessment",
    "overallSecurityAssessment",
    "overallRoast",
    "brutalAssessment",
    "positiveAssessment",
    "recommendations",
    "securityChecklist",
    "designPatterns",
    "comedyGold",
    "motivasiSarkastik",
    "harshTruth",
    "growthMindset",
)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(slots=True)
class UploadedFile:
    """A file submitted for review. Never persisted."""

    id: str
    name: str
    size: int
    extension: str
    content: str
    preprocessed: bool = False


@dataclass(slots=True)
class CodeSnippet:
    original: str = ""
    improved: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"original": self.original, "improved": self.improved}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CodeSnippet":
        data = _mapping(data)
        return cls(original=data.get("original") or "", improved=data.get("improved") or "")


@dataclass(slots=True)
class ReviewSuggestion:
    """One issue or recommendation returned by the model."""

    id: str
    type: str
    severity: str
    line: int
    title: str
    description: str
    suggestion: str
    code_snippet: CodeSnippet = field(default_factory=CodeSnippet)
    can_auto_fix: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "severity": self.severity,
            "line": self.line,
            "title": self.title,
            "description": self.description,
            "suggestion": self.suggestion,
            "codeSnippet": self.code_snippet.to_dict(),
            "canAutoFix": self.can_auto_fix,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReviewSuggestion":
        return cls(
            id=data.get("id", ""),
            type=data.get("type", "info"),
            severity=data.get("severity", "low"),
            line=data.get("line", 1),
            title=data.get("title", ""),
            description=data.get("description", ""),
            suggestion=data.get("suggestion", ""),
            code_snippet=CodeSnippet.from_dict(data.get("codeSnippet")),
            can_auto_fix=bool(data.get("canAutoFix", False)),
        )


@dataclass(slots=True)
class ReviewSummary:
    """Aggregate counts as reported by the model.

    The counts are not reconciled with the suggestion list.
    """

    total_issues: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalIssues": self.total_issues,
            "critical": self.critical,
            "warning": self.warning,
            "info": self.info,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReviewSummary":
        data = _mapping(data)
        return cls(
            total_issues=data.get("totalIssues") or 0,
            critical=data.get("critical") or 0,
            warning=data.get("warning") or 0,
            info=data.get("info") or 0,
        )


@dataclass(slots=True)
class ReviewMetadata:
    review_type: str
    language: str
    model: str
    timestamp: str  # ISO-8601 UTC timestamp
    tokens_used: int = 0
    fallback: bool = False
    error: Optional[str] = None
    assessments: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "reviewType": self.review_type,
            "language": self.language,
            "model": self.model,
            "timestamp": self.timestamp,
            "tokensUsed": self.tokens_used,
        }
        if self.fallback:
            data["fallback"] = True
        if self.error:
            data["error"] = self.error
        data.update(self.assessments)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReviewMetadata":
        return cls(
            review_type=data.get("reviewType", ""),
            language=data.get("language", ""),
            model=data.get("model", ""),
            timestamp=data.get("timestamp", ""),
            tokens_used=data.get("tokensUsed") or 0,
            fallback=bool(data.get("fallback", False)),
            error=data.get("error"),
            assessments={key: data[key] for key in ASSESSMENT_FIELDS if data.get(key)},
        )


@dataclass(slots=True)
class ReviewResult:
    """Normalized output of one review call. Score is on a 0-100 scale."""

    score: int
    summary: ReviewSummary
    suggestions: List[ReviewSuggestion] = field(default_factory=list)
    metadata: Optional[ReviewMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "score": self.score,
            "summary": self.summary.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReviewResult":
        metadata = _mapping(data.get("metadata"))
        return cls(
            score=data.get("score", 0),
            summary=ReviewSummary.from_dict(data.get("summary")),
            suggestions=[
                ReviewSuggestion.from_dict(s) for s in data.get("suggestions") or [] if isinstance(s, dict)
            ],
            metadata=ReviewMetadata.from_dict(metadata) if metadata else None,
        )


@dataclass(slots=True)
class HistoryItem:
    """A persisted pairing of one uploaded file with the review it received."""

    id: str
    filename: str
    language: str
    review_result: ReviewResult
    timestamp: str
    file_size: int
    review_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "language": self.language,
            "reviewResult": self.review_result.to_dict(),
            "timestamp": self.timestamp,
            "fileSize": self.file_size,
            "reviewType": self.review_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryItem":
        return cls(
            id=data["id"],
            filename=data.get("filename", ""),
            language=data.get("language", ""),
            review_result=ReviewResult.from_dict(_mapping(data.get("reviewResult"))),
            timestamp=data.get("timestamp", ""),
            file_size=data.get("fileSize", 0),
            review_type=data.get("reviewType", ""),
        )


@dataclass(slots=True)
class HistoryFilter:
    search_term: str = ""
    language: str = "all"
    review_type: str = "all"
    severity: str = "all"
    date_range: str = "all"  # all | today | week | month


@dataclass(slots=True)
class HistoryStats:
    total_reviews: int
    average_score: int
    total_critical_issues: int
    total_languages: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalReviews": self.total_reviews,
            "averageScore": self.average_score,
            "totalCriticalIssues": self.total_critical_issues,
            "totalLanguages": self.total_languages,
        }


@dataclass(slots=True)
class Completion:
    """Raw text returned by one chat-completion call."""

    content: str
    tokens_used: int = 0


@dataclass(slots=True)
class ConnectionResult:
    success: bool
    message: str
    available_models: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "availableModels": self.available_models,
        }
