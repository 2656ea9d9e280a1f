from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field  # type: ignore[import]
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import]


logger = logging.getLogger(__name__)

ALLOWED_MODELS = (
    "gpt-5-mini",
    "gpt-5-nano",
    "gpt-4.1-mini",
    "gpt-4.1-nano",
    "gpt-4o-mini",
    "o1-mini",
    "o4-mini",
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    app_name: str = Field(default="Code Roaster", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")

    llm_provider: Literal["openai", "azure-openai"] = Field(default="openai", alias="LLM_PROVIDER")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    openai_temperature: float = Field(default=0.7, alias="OPENAI_TEMPERATURE")
    max_output_tokens: int = Field(default=2000, alias="OPENAI_MAX_TOKENS")

    azure_openai_api_key: Optional[str] = Field(default=None, alias="AZURE_OPENAI_API_KEY")
    azure_openai_endpoint: Optional[str] = Field(default=None, alias="AZURE_OPENAI_ENDPOINT")
    azure_openai_deployment: Optional[str] = Field(default=None, alias="AZURE_OPENAI_DEPLOYMENT")
    azure_openai_api_version: str = Field(default="2024-06-01", alias="AZURE_OPENAI_API_VERSION")

    storage_path: Path = Field(
        default=Path(".code_roaster.json"),
        alias="CODE_ROASTER_STORAGE",
        description="JSON document holding history, bookmarks and search history",
    )
    history_limit: int = Field(default=100, ge=1)
    search_history_limit: int = Field(default=10, ge=1)
    max_files_per_review: int = Field(default=5, ge=1)
    max_file_size: int = Field(default=50 * 1024, description="Files above this size are reduced before review")
    compress_threshold: int = Field(default=30 * 1024)
    small_file_threshold: int = Field(default=10 * 1024)

    console_width: Optional[int] = Field(default=None, description="Override console width for Rich output")


def validate_environment(cfg: Settings) -> List[str]:
    """Return configuration problems. None of them are fatal."""
    errors: List[str] = []

    if not cfg.openai_api_key:
        errors.append("OPENAI_API_KEY is required")
    elif not cfg.openai_api_key.startswith("sk-"):
        errors.append('Invalid OpenAI API key format. Should start with "sk-"')

    if cfg.openai_model not in ALLOWED_MODELS:
        errors.append(f"OPENAI_MODEL must be one of: {', '.join(ALLOWED_MODELS)}")

    if not 100 <= cfg.max_output_tokens <= 8000:
        errors.append("OPENAI_MAX_TOKENS should be between 100-8000")

    if not 0 <= cfg.openai_temperature <= 2:
        errors.append("OPENAI_TEMPERATURE should be between 0-2")

    return errors


def log_environment_problems(cfg: Settings) -> None:
    errors = validate_environment(cfg)
    if not errors:
        logger.info("Environment configuration is valid")
        return
    for error in errors:
        logger.warning("Environment configuration: %s", error)


settings = Settings()
