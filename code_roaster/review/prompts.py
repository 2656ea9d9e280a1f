"""Prompt profiles, one per review type.

Each profile pairs a system prompt with a user prompt generator taking
``(code, language)``. Every system prompt asks for the same JSON contract so
that a single normalizer handles all review types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from code_roaster.review.errors import InvalidReviewTypeError


_RESPONSE_SCHEMA = """{{
  "score": number (1-100),
  "summary": {{
    "totalIssues": number,
    "critical": number,
    "warning": number,
    "info": number
  }},
  "{assessment_field}": "{assessment_hint}",
  "suggestions": [
    {{
      "id": "suggestion-1",
      "type": "bug|performance|style|security|docs|info",
      "severity": "high|medium|low",
      "line": number,
      "title": "Specific title of the problem",
      "description": "What is wrong, in 1-2 sentences",
      "suggestion": "How to fix it, in 1-2 sentences",
      "codeSnippet": {{
        "original": "problematic code",
        "improved": "fixed code"
      }},
      "canAutoFix": boolean
    }}
  ]{extra_fields}
}}"""

JSON_ENFORCEMENT = """

CRITICAL INSTRUCTIONS:
1. Your response MUST be a valid JSON object only. Do not include any text before or after the JSON. The response must start with { and end with }.
2. Keep responses CONCISE and FOCUSED. Prioritize quality over quantity.
3. Generate 3-5 most important suggestions maximum.
4. Each suggestion should be clear and actionable, not overly verbose.
5. No explanations outside JSON, ONLY valid JSON with focused content."""


@dataclass(frozen=True)
class ReviewPrompt:
    system: str
    user: Callable[[str, str], str]


def _system(persona: str, assessment_field: str, assessment_hint: str, closing: str, extra_fields: str = "") -> str:
    schema = _RESPONSE_SCHEMA.format(
        assessment_field=assessment_field,
        assessment_hint=assessment_hint,
        extra_fields=extra_fields,
    )
    return (
        f"{persona}\n\n"
        "MANDATORY: Respond only with valid JSON, no other text.\n\n"
        f"The JSON MUST follow this format:\n{schema}\n\n"
        f"{closing}"
    )


def _user(instruction: str, closing: str) -> Callable[[str, str], str]:
    def render(code: str, language: str) -> str:
        return f"{instruction.format(language=language)}\n\n```{language}\n{code}\n```\n\n{closing}"

    return render


REVIEW_PROMPTS: Dict[str, ReviewPrompt] = {
    "codeQuality": ReviewPrompt(
        system=_system(
            "You are an expert senior code reviewer. Analyze the code and give a useful, actionable review.",
            "overallAssessment",
            "Overall assessment of the code in 2-3 concise sentences",
            "Give a focused and useful analysis.",
            ',\n  "recommendations": ["Concise improvement 1", "Concise improvement 2"]',
        ),
        user=_user(
            "Analyze the following {language} code and give a concise review in JSON format:",
            "Give the 3-5 most important and actionable suggestions.",
        ),
    ),
    "sarcastic": ReviewPrompt(
        system=_system(
            "You are a sarcastic code ROASTER who still helps. Casual and playful tone, never insulting"
            " or offensive. Stay technical and actionable.",
            "overallRoast",
            "A short, witty roast of the code as a whole",
            "Remember: spicy but polite, no toxicity. Technical value comes first.",
            ',\n  "comedyGold": ["Funny but useful one-liner"],\n  "motivasiSarkastik": "Sarcastic motivation"',
        ),
        user=_user(
            "Roast the following {language} code, spicy but helpful, short and focused:",
            "Give 3-5 funny but useful roasts, keep them short.",
        ),
    ),
    "brutal": ReviewPrompt(
        system=_system(
            "You are a harsh but constructive code reviewer.",
            "brutalAssessment",
            "A direct, unvarnished assessment",
            "Give a firm but constructive review.",
            ',\n  "harshTruth": "The one thing the author must hear"',
        ),
        user=_user(
            "Review the following {language} code firmly and honestly:",
            "Give direct, to-the-point feedback.",
        ),
    ),
    "encouraging": ReviewPrompt(
        system=_system(
            "You are a supportive and encouraging code reviewer.",
            "positiveAssessment",
            "What the author did well, in 2-3 sentences",
            "Give a supportive review.",
            ',\n  "growthMindset": "A note on what to learn next"',
        ),
        user=_user(
            "Review the following {language} code with a supportive approach:",
            "Give encouraging, constructive feedback.",
        ),
    ),
    "security": ReviewPrompt(
        system=_system(
            "You are a security expert focused on vulnerabilities.",
            "overallSecurityAssessment",
            "Overall security posture in 2-3 sentences",
            "Focus on identifying critical security problems.",
            ',\n  "securityChecklist": ["Checklist item 1", "Checklist item 2"]',
        ),
        user=_user(
            "Analyze the security of the following {language} code:",
            "Give a focused and actionable security analysis.",
        ),
    ),
    "bestPractices": ReviewPrompt(
        system=_system(
            "You are an expert in best practices and coding standards.",
            "overallAssessment",
            "How well the code follows established conventions",
            "Focus on the most impactful best practices.",
            ',\n  "designPatterns": ["Applicable pattern 1"],\n  "recommendations": ["Concise recommendation"]',
        ),
        user=_user(
            "Review the best practices of the following {language} code:",
            "Give concise and actionable best-practice recommendations.",
        ),
    ),
}

REVIEW_TYPE_OPTIONS: List[Dict[str, str]] = [
    {"key": "sarcastic", "label": "Roasting", "description": "Sarcastic but helpful"},
    {"key": "brutal", "label": "Brutal Honesty", "description": "No mercy"},
    {"key": "encouraging", "label": "Supportive Mentor", "description": "Positive and encouraging"},
    {"key": "codeQuality", "label": "Professional", "description": "Serious and thorough"},
    {"key": "security", "label": "Security Focus", "description": "Security-specific"},
    {"key": "bestPractices", "label": "Best Practices", "description": "Design patterns and conventions"},
]

BEST_PRACTICES_PROMPT = (
    "Generate best practices and common patterns for the {language} programming language."
    " Include code examples and detailed explanations."
    ' Respond as a JSON object of the form {{"language": "...", "practices": [{{"title": "...",'
    ' "explanation": "...", "example": "..."}}]}}.'
)


def get_review_prompt(review_type: str) -> ReviewPrompt:
    try:
        return REVIEW_PROMPTS[review_type]
    except KeyError:
        raise InvalidReviewTypeError(f"Invalid review type: {review_type}") from None


def build_messages(review_type: str, code: str, language: str) -> tuple[str, str]:
    """Return the (system, user) prompt pair for a review."""
    prompt = get_review_prompt(review_type)
    return prompt.system + JSON_ENFORCEMENT, prompt.user(code, language)
