from __future__ import annotations

import json

import pytest  # type: ignore[import]

from code_roaster.review import normalize_review


def _normalize(raw: str):
    return normalize_review(raw, review_type="security", language="python", model="gpt-4o-mini", tokens_used=321)


def test_valid_response_gets_metadata() -> None:
    raw = json.dumps(
        {
            "score": 82,
            "summary": {"totalIssues": 1, "critical": 1, "warning": 0, "info": 0},
            "overallSecurityAssessment": "Mostly fine.",
            "suggestions": [
                {
                    "id": "s-1",
                    "type": "security",
                    "severity": "high",
                    "line": 12,
                    "title": "SQL injection",
                    "description": "Query built from user input.",
                    "suggestion": "Use parameters.",
                    "codeSnippet": {"original": "a", "improved": "b"},
                    "canAutoFix": True,
                }
            ],
        }
    )

    result = _normalize(raw)

    assert result.score == 82
    assert result.summary.critical == 1
    assert result.suggestions[0].title == "SQL injection"
    assert result.suggestions[0].code_snippet.improved == "b"
    assert result.suggestions[0].can_auto_fix is True
    assert result.metadata.review_type == "security"
    assert result.metadata.language == "python"
    assert result.metadata.model == "gpt-4o-mini"
    assert result.metadata.tokens_used == 321
    assert result.metadata.timestamp.endswith("Z")
    assert result.metadata.fallback is False
    assert result.metadata.assessments == {"overallSecurityAssessment": "Mostly fine."}


def test_missing_fields_get_defaults() -> None:
    result = _normalize('{"suggestions": [{}, {"title": "Named"}]}')

    assert result.score == 50
    assert result.summary.total_issues == 0
    first, second = result.suggestions
    assert first.id == "suggestion-0"
    assert first.type == "info"
    assert first.severity == "low"
    assert first.line == 1
    assert first.title == "Suggestion 1"
    assert second.title == "Named"


def test_empty_response_is_an_empty_object() -> None:
    result = _normalize("   ")

    assert result.metadata.fallback is False
    assert result.suggestions == []


def test_json_wrapped_in_prose_is_extracted() -> None:
    result = _normalize('Here you go:\n```json\n{"score": 70, "suggestions": []}\n```')

    assert result.score == 70
    assert result.metadata.fallback is False


@pytest.mark.parametrize(
    "raw",
    [
        "this is not json at all " * 20,
        "{not: valid json}",
        '["not", "an", "object"]',
    ],
)
def test_unparseable_response_falls_back(raw: str) -> None:
    result = _normalize(raw)

    assert result.score == 5
    assert len(result.suggestions) == 1
    assert result.suggestions[0].type == "info"
    assert result.metadata.fallback is True
    assert result.metadata.review_type == "security"


def test_fallback_suggestion_carries_a_bounded_excerpt() -> None:
    raw = "x" * 500

    result = _normalize(raw)

    assert result.suggestions[0].suggestion == "x" * 200
    assert result.to_dict()["metadata"]["fallback"] is True


def test_odd_field_values_keep_the_review() -> None:
    raw = json.dumps(
        {
            "score": 80,
            "summary": {"totalIssues": 2},
            "suggestions": [{"title": "A", "line": 3}, {"title": "B", "line": "12-14"}, {"line": "L7"}],
        }
    )

    result = _normalize(raw)

    assert result.metadata.fallback is False
    assert result.score == 80
    assert result.summary.total_issues == 2
    assert [s.line for s in result.suggestions] == [3, 12, 7]
    assert [s.title for s in result.suggestions] == ["A", "B", "Suggestion 3"]


@pytest.mark.parametrize(
    "payload, score",
    [
        ({"score": "high", "summary": "ok"}, 50),
        ({"score": "85/100", "summary": ["x"]}, 85),
        ({"score": 91.6, "summary": None}, 91),
    ],
)
def test_non_numeric_score_and_summary_use_defaults(payload: dict, score: int) -> None:
    result = _normalize(json.dumps(payload))

    assert result.metadata.fallback is False
    assert result.score == score
    assert result.summary.total_issues == 0


def test_non_object_suggestions_get_default_fields() -> None:
    result = _normalize(json.dumps({"score": 80, "suggestions": ["oops", {"title": 42, "codeSnippet": "x"}]}))

    assert result.metadata.fallback is False
    first, second = result.suggestions
    assert first.id == "suggestion-0"
    assert first.title == "Suggestion 1"
    assert first.description == "No description available"
    assert second.title == "42"
    assert second.code_snippet.original == ""
