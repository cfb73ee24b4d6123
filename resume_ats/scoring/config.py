"""Configuration settings for resume analysis."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringConfig(BaseSettings):
    """Resume analysis configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `ATS_` prefix or a .env file.

    The calibration constants of the deterministic analyzer (weights,
    divisors, rating thresholds) are deliberately not configurable.
    """

    model_config = SettingsConfigDict(
        env_prefix="ATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Strategy selection
    scoring_mode: Literal["deterministic", "llm"] = Field(
        default="deterministic",
        description="Analyzer strategy: 'deterministic' (keyword) or 'llm' (remote model)",
    )
    fallback_to_deterministic: bool = Field(
        default=False,
        description="Use the deterministic analyzer when the remote analyzer fails",
    )

    # Taxonomy
    taxonomy_path: Path | None = Field(
        default=None,
        description="Optional YAML/JSON keyword taxonomy (None = built-in taxonomy)",
    )

    # Remote model settings
    llm_provider: str = Field(
        default="gemini",
        description="LiteLLM provider prefix (gemini, openai, anthropic, ...)",
    )
    llm_model: str = Field(
        default="gemini-2.0-flash",
        description="Model ID used by the remote analyzer",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for the provider (falls back to provider env vars)",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_timeout: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Timeout in seconds for one remote analysis call",
    )
    llm_max_retries: Annotated[int, Field(ge=0)] = Field(
        default=0,
        description="Retries for transient remote failures (timeouts are never retried)",
    )
    llm_reasoning_effort: str | None = Field(
        default=None,
        description="Reasoning effort for supported models (e.g. 'low', 'medium')",
    )

    # Batch analysis
    batch_max_workers: Annotated[int, Field(gt=0)] = Field(
        default=4,
        description="Worker threads used when analyzing many resumes",
    )

    @field_validator("scoring_mode", mode="before")
    @classmethod
    def normalize_scoring_mode(cls, v: object) -> object:
        """Accept mode names case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("llm_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: object) -> object:
        """Normalize the provider prefix."""
        if isinstance(v, str):
            value = v.strip().lower()
            if not value:
                raise ValueError("llm_provider must not be empty")
            return value
        return v


# Singleton instance for easy import
_scoring_config: ScoringConfig | None = None


def get_scoring_config() -> ScoringConfig:
    """Get the scoring configuration singleton."""
    global _scoring_config
    if _scoring_config is None:
        _scoring_config = ScoringConfig()
    return _scoring_config


def reset_scoring_config() -> None:
    """Reset the scoring configuration singleton (useful for testing)."""
    global _scoring_config
    _scoring_config = None
