from __future__ import annotations

from types import SimpleNamespace
from typing import Any, List

from langchain_core.language_models.fake_chat_models import FakeListChatModel  # type: ignore[import]
from langchain_core.messages import AIMessage  # type: ignore[import]

from code_roaster.review import LangChainReviewAgent
from code_roaster.review.review_agent import _total_tokens


CALLS: List[Any] = []


class RecordingChatModel(FakeListChatModel):
    def _call(self, messages, stop=None, run_manager=None, **kwargs):  # noqa: D401 - simple stub
        CALLS.append((messages, kwargs))
        return super()._call(messages, stop=stop, run_manager=run_manager, **kwargs)


class DummyClient:
    def __init__(self, ids: List[str], error: Exception | None = None) -> None:
        self._ids = ids
        self._error = error
        self.models = self

    def list(self):  # noqa: D401 - simple stub
        if self._error is not None:
            raise self._error
        return [SimpleNamespace(id=model_id) for model_id in self._ids]


def setup_function() -> None:
    CALLS.clear()


def test_complete_sends_system_and_user_messages_with_fixed_params() -> None:
    llm = RecordingChatModel(responses=['{"score": 90}'])
    agent = LangChainReviewAgent(model="gpt-4o-mini", llm=llm)

    completion = agent.complete("You review {code}.", "Review this: {x}")

    assert completion.content == '{"score": 90}'
    assert completion.tokens_used == 0
    messages, kwargs = CALLS[0]
    assert [m.type for m in messages] == ["system", "human"]
    assert messages[0].content == "You review {code}."
    assert messages[1].content == "Review this: {x}"
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["top_p"] == 1
    assert kwargs["frequency_penalty"] == 0
    assert kwargs["presence_penalty"] == 0


def test_best_practices_uses_the_same_chain() -> None:
    llm = RecordingChatModel(responses=['{"practices": []}'])
    agent = LangChainReviewAgent(llm=llm)

    text = agent.generate_best_practices("go")

    assert text == '{"practices": []}'
    messages, _ = CALLS[0]
    assert "go programming language" in messages[0].content
    assert "JSON" in messages[0].content


def test_check_connection_lists_models() -> None:
    agent = LangChainReviewAgent(
        llm=FakeListChatModel(responses=["{}"]),
        client=DummyClient([f"model-{i}" for i in range(15)]),
    )

    result = agent.check_connection()

    assert result.success is True
    assert len(result.available_models) == 10


def test_check_connection_reports_failure() -> None:
    agent = LangChainReviewAgent(
        llm=FakeListChatModel(responses=["{}"]),
        client=DummyClient([], error=RuntimeError("invalid_api_key")),
    )

    result = agent.check_connection()

    assert result.success is False
    assert "invalid_api_key" in result.message


def test_total_tokens_reads_usage_metadata() -> None:
    message = AIMessage(
        content="{}",
        usage_metadata={"input_tokens": 10, "output_tokens": 5, "total_tokens": 15},
    )
    legacy = AIMessage(content="{}", response_metadata={"token_usage": {"total_tokens": 42}})

    assert _total_tokens(message) == 15
    assert _total_tokens(legacy) == 42
    assert _total_tokens(AIMessage(content="{}")) == 0
