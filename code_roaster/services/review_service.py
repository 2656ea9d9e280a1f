from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from rich.console import Console  # type: ignore[import]
from rich.markup import escape  # type: ignore[import]
from rich.table import Table  # type: ignore[import]

from code_roaster.files import language_for_extension
from code_roaster.models import ConnectionResult, ReviewResult, UploadedFile
from code_roaster.review import BaseReviewAgent, ServiceNotConnectedError, build_messages, normalize_review
from code_roaster.review.errors import ReviewFailedError, wrap_completion_error
from code_roaster.storage import HistoryStore


logger = logging.getLogger(__name__)

_SEVERITY_STYLE = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


class ReviewService:
    """Coordinates prompt building, the completion call and normalization."""

    def __init__(
        self,
        agent: BaseReviewAgent,
        *,
        model: str,
        max_tokens: int = 0,
        history: Optional[HistoryStore] = None,
    ) -> None:
        self._agent = agent
        self._model = model
        self._max_tokens = max_tokens
        self._history = history
        self._connection: Optional[ConnectionResult] = None

    def check_connection(self) -> ConnectionResult:
        self._connection = self._agent.check_connection()
        return self._connection

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._connection.success

    def connection_status(self) -> Dict[str, Any]:
        return {
            "isConnected": self.is_connected,
            "model": self._model,
            "maxTokens": self._max_tokens,
        }

    def review_code(self, code: str, language: str, review_type: str = "codeQuality") -> ReviewResult:
        """
        Review a block of source code.

        Args:
            code: Source text sent to the model.
            language: Language label used in the prompt and metadata.
            review_type: Key of the prompt profile to use.

        Returns:
            The normalized ReviewResult. Unparseable model output yields a
            fallback result rather than an error.

        Raises:
            InvalidReviewTypeError: before any network call, for unknown types.
            ServiceNotConnectedError: when the connectivity check failed.
            QuotaExceededError, InvalidApiKeyError, ReviewFailedError: upstream failures.
        """
        system_prompt, user_prompt = build_messages(review_type, code, language)
        self._ensure_connected()

        logger.info("Starting %s review for %s code", review_type, language)
        try:
            completion = self._agent.complete(system_prompt, user_prompt)
        except Exception as exc:
            logger.error("Code review failed: %s", exc)
            raise wrap_completion_error(exc) from exc

        logger.info("Model response length: %d characters", len(completion.content))
        return normalize_review(
            completion.content,
            review_type=review_type,
            language=language,
            model=self._model,
            tokens_used=completion.tokens_used,
        )

    def review_files(self, files: Sequence[UploadedFile], review_type: str = "codeQuality") -> ReviewResult:
        """Review uploaded files in one call and record a history item per file."""
        if not files:
            raise ValueError("At least one file is required")
        language = language_for_extension(files[0].extension)
        result = self.review_code(_combine(files), language, review_type)
        if self._history is not None:
            self._history.append(result, files, review_type=review_type)
        return result

    def generate_best_practices(self, language: str) -> str:
        self._ensure_connected()
        try:
            return self._agent.generate_best_practices(language)
        except Exception as exc:
            logger.error("Failed to generate best practices: %s", exc)
            raise ReviewFailedError(f"Failed to generate best practices: {exc}") from exc

    def _ensure_connected(self) -> None:
        if self._connection is None:
            self.check_connection()
        if not self.is_connected:
            raise ServiceNotConnectedError("OpenAI API is not connected. Please check your API key.")

    @staticmethod
    def render_console_summary(
        result: ReviewResult,
        files: Iterable[UploadedFile] = (),
        *,
        console: Optional[Console] = None,
    ) -> None:
        console = console or Console()
        names = ", ".join(f.name for f in files) or "code"
        review_type = result.metadata.review_type if result.metadata else "review"
        console.rule(f"[bold cyan]{review_type}[/bold cyan] {escape(names)}")
        console.print(f"Score: [bold]{result.score}/100[/bold]")
        summary = result.summary
        console.print(
            f"Issues: {summary.total_issues} "
            f"(critical {summary.critical}, warning {summary.warning}, info {summary.info})"
        )
        if result.metadata and result.metadata.fallback:
            console.print("[yellow]The model reply could not be parsed; showing an excerpt.[/yellow]")

        if not result.suggestions:
            console.print("[green]No actionable suggestions.[/green]")
            return

        table = Table("Severity", "Type", "Line", "Title", "Suggestion", show_header=True, header_style="bold magenta")
        for suggestion in result.suggestions:
            style = _SEVERITY_STYLE.get(suggestion.severity, "white")
            table.add_row(
                f"[{style}]{suggestion.severity}[/{style}]",
                escape(suggestion.type),
                str(suggestion.line),
                escape(suggestion.title),
                escape(suggestion.suggestion),
            )
        console.print(table)


def _combine(files: Sequence[UploadedFile]) -> str:
    if len(files) == 1:
        return files[0].content
    sections: List[str] = [f"// File: {f.name}\n{f.content}" for f in files]
    return "\n\n".join(sections)
