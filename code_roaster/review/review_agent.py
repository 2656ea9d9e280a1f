from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel  # type: ignore[import]
from langchain_core.prompts import ChatPromptTemplate  # type: ignore[import]
from langchain_openai import ChatOpenAI  # type: ignore[import]
from openai import OpenAI  # type: ignore[import]

from code_roaster.models import Completion, ConnectionResult
from code_roaster.review.prompts import BEST_PRACTICES_PROMPT


logger = logging.getLogger(__name__)


class BaseReviewAgent(ABC):
    """Interface for completion clients."""

    @abstractmethod
    def check_connection(self) -> ConnectionResult:
        raise NotImplementedError

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        raise NotImplementedError

    def generate_best_practices(self, language: str) -> str:
        system_prompt = BEST_PRACTICES_PROMPT.format(language=language)
        return self.complete(system_prompt, f"Language: {language}").content


class LangChainReviewAgent(BaseReviewAgent):
    """LangChain-based agent that prompts an OpenAI-compatible chat model.

    Every call sends the same sampling parameters and forces a JSON object
    response. A single attempt is made; errors propagate to the caller.
    """

    def __init__(
        self,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_output_tokens: int = 2000,
        llm: Optional[BaseChatModel] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.model = model
        self._client = client

        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{system_prompt}"),
                ("user", "{user_prompt}"),
            ]
        )

        llm_kwargs: Dict[str, Any] = {"model": model, "temperature": temperature}
        if max_output_tokens:
            llm_kwargs["max_tokens"] = max_output_tokens

        self.request_params: Dict[str, Any] = {
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0,
            "response_format": {"type": "json_object"},
        }

        base_llm = llm or ChatOpenAI(**llm_kwargs)
        self._llm = base_llm
        self._chain = self._prompt | base_llm.bind(**self.request_params)

    def check_connection(self) -> ConnectionResult:
        try:
            client = self._client or OpenAI()
            models = [item.id for item in client.models.list()]
        except Exception as exc:
            logger.error("OpenAI connection failed: %s", exc)
            return ConnectionResult(success=False, message=f"Connection failed: {exc}")

        logger.info("OpenAI API connected successfully (%d models available)", len(models))
        return ConnectionResult(
            success=True,
            message="OpenAI API connected successfully",
            available_models=models[:10],
        )

    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        message = self._chain.invoke({"system_prompt": system_prompt, "user_prompt": user_prompt})
        content = message.content if isinstance(message.content, str) else ""
        return Completion(content=content, tokens_used=_total_tokens(message))


def _total_tokens(message: Any) -> int:
    usage = getattr(message, "usage_metadata", None) or {}
    if usage.get("total_tokens"):
        return int(usage["total_tokens"])
    metadata = getattr(message, "response_metadata", None) or {}
    return int((metadata.get("token_usage") or {}).get("total_tokens") or 0)
