from __future__ import annotations

import os
from typing import Any, Dict

import pytest  # type: ignore[import]
from langchain_core.language_models.fake_chat_models import FakeListChatModel  # type: ignore[import]

from code_roaster import main
from code_roaster.config import Settings


@pytest.fixture()
def base_settings() -> Settings:
    return Settings()


def test_build_llm_openai(monkeypatch, base_settings: Settings) -> None:
    captured: Dict[str, Any] = {}

    class DummyLLM:  # noqa: D401 - simple stub
        def __init__(self, **kwargs: Any) -> None:
            captured.update(kwargs)

    monkeypatch.setattr(main, "ChatOpenAI", DummyLLM)

    cfg = base_settings.model_copy(
        update={
            "llm_provider": "openai",
            "openai_api_key": "sk-test",
            "openai_model": "test-model",
            "openai_temperature": 0.2,
            "max_output_tokens": 256,
        }
    )

    llm = main._build_llm(cfg)

    assert isinstance(llm, DummyLLM)
    assert captured["model"] == "test-model"
    assert captured["api_key"] == "sk-test"
    assert captured["temperature"] == 0.2
    assert captured["max_tokens"] == 256


def test_build_llm_azure_requires_fields(base_settings: Settings) -> None:
    cfg = base_settings.model_copy(
        update={
            "llm_provider": "azure-openai",
            "azure_openai_api_key": None,
            "azure_openai_endpoint": None,
            "azure_openai_deployment": None,
        }
    )

    with pytest.raises(ValueError, match="AZURE_OPENAI_API_KEY"):
        main._build_llm(cfg)


def test_build_llm_azure(monkeypatch, base_settings: Settings) -> None:
    captured: Dict[str, Any] = {}

    class DummyAzureLLM:  # noqa: D401 - simple stub
        def __init__(self, **kwargs: Any) -> None:
            captured.update(kwargs)

    monkeypatch.setattr(main, "AzureChatOpenAI", DummyAzureLLM)

    cfg = base_settings.model_copy(
        update={
            "llm_provider": "azure-openai",
            "max_output_tokens": 512,
            "azure_openai_api_key": "test-key",
            "azure_openai_endpoint": "https://example.openai.azure.com/",
            "azure_openai_deployment": "gpt4o",
            "azure_openai_api_version": "2024-06-01",
        }
    )

    llm = main._build_llm(cfg)

    assert isinstance(llm, DummyAzureLLM)
    assert captured["azure_deployment"] == "gpt4o"
    assert captured["azure_endpoint"] == "https://example.openai.azure.com/"
    assert captured["api_version"] == "2024-06-01"
    assert captured["api_key"] == "test-key"
    assert captured["max_tokens"] == 512


def test_build_client_passes_credentials(monkeypatch, base_settings: Settings) -> None:
    captured: Dict[str, Any] = {}

    class DummyAzureClient:  # noqa: D401 - simple stub
        def __init__(self, **kwargs: Any) -> None:
            captured.update(kwargs)

    monkeypatch.setattr(main, "AzureOpenAI", DummyAzureClient)
    monkeypatch.delenv("AZURE_OPENAI_API_KEY", raising=False)

    cfg = base_settings.model_copy(
        update={
            "llm_provider": "azure-openai",
            "azure_openai_api_key": "test-key",
            "azure_openai_endpoint": "https://example.openai.azure.com/",
            "azure_openai_api_version": "2024-06-01",
        }
    )

    client = main._build_client(cfg)

    assert isinstance(client, DummyAzureClient)
    assert captured == {
        "api_key": "test-key",
        "azure_endpoint": "https://example.openai.azure.com/",
        "api_version": "2024-06-01",
    }


def test_build_service_leaves_environment_untouched(monkeypatch, base_settings: Settings) -> None:
    captured: Dict[str, Any] = {}

    def fake_llm(**kwargs: Any) -> FakeListChatModel:
        captured["llm"] = kwargs
        return FakeListChatModel(responses=["{}"])

    class DummyClient:  # noqa: D401 - simple stub
        def __init__(self, **kwargs: Any) -> None:
            captured["client"] = kwargs

    monkeypatch.setattr(main, "ChatOpenAI", fake_llm)
    monkeypatch.setattr(main, "OpenAI", DummyClient)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    cfg = base_settings.model_copy(update={"llm_provider": "openai", "openai_api_key": "sk-test"})

    service = main._build_service(cfg)

    assert service.connection_status()["model"] == cfg.openai_model
    assert captured["llm"]["api_key"] == "sk-test"
    assert captured["client"] == {"api_key": "sk-test"}
    assert "OPENAI_API_KEY" not in os.environ
