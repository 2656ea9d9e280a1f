from __future__ import annotations


class CodeReviewError(RuntimeError):
    """Base class for review failures surfaced to callers."""


class InvalidReviewTypeError(CodeReviewError, ValueError):
    """Raised when a review type is not in the prompt table."""


class ServiceNotConnectedError(CodeReviewError):
    """Raised when the completion endpoint failed its connectivity check."""


class QuotaExceededError(CodeReviewError):
    pass


class InvalidApiKeyError(CodeReviewError):
    pass


class ReviewFailedError(CodeReviewError):
    pass


def wrap_completion_error(exc: Exception) -> CodeReviewError:
    """Map an upstream exception to the error the caller sees."""
    if isinstance(exc, CodeReviewError):
        return exc
    message = str(exc)
    lowered = message.lower()
    if "insufficient_quota" in lowered or "quota exceeded" in lowered:
        return QuotaExceededError("OpenAI API quota exceeded. Please check your billing settings.")
    if "invalid_api_key" in lowered or "invalid api key" in lowered:
        return InvalidApiKeyError("Invalid OpenAI API key. Please check your configuration.")
    return ReviewFailedError(f"Code review failed: {message}")
