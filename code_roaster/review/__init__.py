from __future__ import annotations

from code_roaster.review.errors import (
    CodeReviewError,
    InvalidApiKeyError,
    InvalidReviewTypeError,
    QuotaExceededError,
    ReviewFailedError,
    ServiceNotConnectedError,
)
from code_roaster.review.normalizer import normalize_review
from code_roaster.review.prompts import REVIEW_PROMPTS, REVIEW_TYPE_OPTIONS, build_messages, get_review_prompt
from code_roaster.review.review_agent import BaseReviewAgent, LangChainReviewAgent

__all__ = [
    "BaseReviewAgent",
    "CodeReviewError",
    "InvalidApiKeyError",
    "InvalidReviewTypeError",
    "LangChainReviewAgent",
    "QuotaExceededError",
    "REVIEW_PROMPTS",
    "REVIEW_TYPE_OPTIONS",
    "ReviewFailedError",
    "ServiceNotConnectedError",
    "build_messages",
    "get_review_prompt",
    "normalize_review",
]
