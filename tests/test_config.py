from __future__ import annotations

import logging

from code_roaster.config import Settings, log_environment_problems, validate_environment


def _settings(**overrides) -> Settings:
    base = Settings().model_copy(
        update={
            "openai_api_key": "sk-valid",
            "openai_model": "gpt-4o-mini",
            "max_output_tokens": 2000,
            "openai_temperature": 0.7,
        }
    )
    return base.model_copy(update=overrides)


def test_valid_configuration_has_no_problems() -> None:
    assert validate_environment(_settings()) == []


def test_missing_key_is_reported() -> None:
    errors = validate_environment(_settings(openai_api_key=None))

    assert errors == ["OPENAI_API_KEY is required"]


def test_malformed_key_and_ranges_are_reported() -> None:
    errors = validate_environment(
        _settings(openai_api_key="abc", openai_model="davinci", max_output_tokens=50, openai_temperature=3.0)
    )

    assert len(errors) == 4
    assert any("sk-" in e for e in errors)
    assert any("OPENAI_MODEL" in e for e in errors)
    assert any("OPENAI_MAX_TOKENS" in e for e in errors)
    assert any("OPENAI_TEMPERATURE" in e for e in errors)


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "1500")
    monkeypatch.setenv("OPENAI_TEMPERATURE", "0.3")

    cfg = Settings()

    assert cfg.openai_model == "gpt-4.1-mini"
    assert cfg.max_output_tokens == 1500
    assert cfg.openai_temperature == 0.3
    assert cfg.history_limit == 100


def test_problems_are_logged_as_warnings(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="code_roaster.config"):
        log_environment_problems(_settings(openai_api_key=None))

    assert "OPENAI_API_KEY is required" in caplog.text
