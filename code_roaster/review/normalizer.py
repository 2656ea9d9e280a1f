"""Turn the model's text reply into a ReviewResult.

Malformed output never raises: the caller gets a fallback result flagged in
its metadata instead.
"""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

from code_roaster.models import (
    CodeSnippet,
    ReviewMetadata,
    ReviewResult,
    ReviewSuggestion,
    ReviewSummary,
)
from code_roaster.models.review import ASSESSMENT_FIELDS


logger = logging.getLogger(__name__)

FALLBACK_SCORE = 5
FALLBACK_EXCERPT_LENGTH = 200
DEFAULT_SCORE = 50

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_FIRST_NUMBER = re.compile(r"-?\d+")


def normalize_review(
    raw: str,
    *,
    review_type: str,
    language: str,
    model: str,
    tokens_used: int = 0,
) -> ReviewResult:
    content = (raw or "").strip() or "{}"
    match = _JSON_OBJECT.search(content)
    if match:
        content = match.group(0)

    metadata = ReviewMetadata(
        review_type=review_type,
        language=language,
        model=model,
        timestamp=_utc_now(),
        tokens_used=tokens_used,
    )

    try:
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            raise ValueError(f"expected a JSON object, got {type(parsed).__name__}")
    except ValueError as exc:
        logger.warning("Failed to parse review response as JSON: %s", exc)
        logger.debug("Raw response: %s", content[:500])
        return fallback_result(raw or "", metadata)

    result = _from_payload(parsed, metadata)
    logger.info(
        "Review parsed: %d issues (%d critical)",
        result.summary.total_issues,
        result.summary.critical,
    )
    return result


def fallback_result(raw: str, metadata: ReviewMetadata) -> ReviewResult:
    metadata.fallback = True
    metadata.error = "The model replied in an unexpected format."
    excerpt = raw.strip()[:FALLBACK_EXCERPT_LENGTH]
    suggestion = ReviewSuggestion(
        id=f"fallback-{int(time.time() * 1000)}",
        type="info",
        severity="low",
        line=1,
        title="Review available (non-standard format)",
        description="The model returned feedback that is not in the expected format.",
        suggestion=excerpt or "Try uploading again or pick a different review type.",
        code_snippet=CodeSnippet(),
        can_auto_fix=False,
    )
    return ReviewResult(
        score=FALLBACK_SCORE,
        summary=ReviewSummary(total_issues=1, critical=0, warning=0, info=1),
        suggestions=[suggestion],
        metadata=metadata,
    )


def _from_payload(payload: Dict[str, Any], metadata: ReviewMetadata) -> ReviewResult:
    metadata.assessments = {key: payload[key] for key in ASSESSMENT_FIELDS if payload.get(key)}
    summary = payload.get("summary")
    if not isinstance(summary, dict):
        summary = {}
    suggestions = payload.get("suggestions")
    return ReviewResult(
        score=_as_int(payload.get("score"), DEFAULT_SCORE),
        summary=ReviewSummary(
            total_issues=_as_int(summary.get("totalIssues"), 0),
            critical=_as_int(summary.get("critical"), 0),
            warning=_as_int(summary.get("warning"), 0),
            info=_as_int(summary.get("info"), 0),
        ),
        suggestions=_suggestions(suggestions) if isinstance(suggestions, list) else [],
        metadata=metadata,
    )


def _suggestions(items: List[Any]) -> List[ReviewSuggestion]:
    suggestions = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            item = {}
        snippet = item.get("codeSnippet")
        suggestions.append(
            ReviewSuggestion(
                id=_as_text(item.get("id"), f"suggestion-{index}"),
                type=_as_text(item.get("type"), "info"),
                severity=_as_text(item.get("severity"), "low"),
                line=_as_int(item.get("line"), 1),
                title=_as_text(item.get("title"), f"Suggestion {index + 1}"),
                description=_as_text(item.get("description"), "No description available"),
                suggestion=_as_text(item.get("suggestion"), "No specific suggestion"),
                code_snippet=CodeSnippet.from_dict(snippet if isinstance(snippet, dict) else None),
                can_auto_fix=item.get("canAutoFix") is True,
            )
        )
    return suggestions


def _as_int(value: Any, default: int) -> int:
    """Integer value of a model-supplied number; "12-14" and "L3" keep their first number."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value) or default
    if isinstance(value, str):
        match = _FIRST_NUMBER.search(value)
        if match:
            return int(match.group(0)) or default
    return default


def _as_text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
