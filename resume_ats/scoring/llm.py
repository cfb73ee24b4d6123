"""LLM client for the remote resume analyzer.

Uses LiteLLM so any supported provider (Gemini by default) can back the
analysis. The client only returns raw text; response validation lives in
the analyzer.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any

from resume_ats.errors import (
    ConfigurationError,
    ParseError,
    RemoteAnalyzerError,
    RemoteTimeoutError,
)
from resume_ats.scoring.config import ScoringConfig, get_scoring_config

logger = logging.getLogger(__name__)


# LiteLLM loads `.env` into process environment by default (DEV mode).
# This can cause surprising side-effects (e.g., tests unintentionally picking up
# local config). We default to PRODUCTION unless the user explicitly opted into DEV.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


def _provider_keys_present(model: str) -> bool:
    """Return True when LiteLLM finds credentials for ``model`` in the environment."""
    from litellm import validate_environment

    result = validate_environment(model=model)
    return bool(result.get("keys_in_environment"))


class ScoringLLM:
    """Generative text model client used by the remote analyzer."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or get_scoring_config()

    @property
    def model_name(self) -> str:
        """Return provider-qualified model name for LiteLLM routing."""
        if "/" in self.config.llm_model:
            return self.config.llm_model

        if self.config.llm_base_url and self.config.llm_provider != "anthropic":
            return f"openai/{self.config.llm_model}"

        if self.config.llm_provider == "openai":
            return self.config.llm_model

        return f"{self.config.llm_provider}/{self.config.llm_model}"

    def ensure_configured(self) -> None:
        """Raise ConfigurationError when no credential is available."""
        if self.config.llm_api_key or self.config.llm_base_url:
            return
        if not _provider_keys_present(self.model_name):
            raise ConfigurationError(
                f"No API key configured for {self.model_name}. "
                "Set ATS_LLM_API_KEY or the provider's API key environment variable."
            )

    def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        """Send one prompt and return the raw text of the model's answer."""
        from litellm.exceptions import Timeout

        self.ensure_configured()

        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        last_error: Exception | None = None
        for attempt in range(self.config.llm_max_retries + 1):
            try:
                response = self._call_completion(messages=messages)
                return self._response_text(response)

            except ParseError:
                raise

            except Timeout as e:
                raise RemoteTimeoutError(
                    "LLM request timed out. "
                    f"Increase ATS_LLM_TIMEOUT (timeout={self.config.llm_timeout}s).",
                    e,
                ) from e

            except Exception as e:
                last_error = e
                if attempt < self.config.llm_max_retries:
                    delay = min(0.5 * (2**attempt), 8.0)
                    logger.warning(
                        "LLM call failed (attempt %s), retrying in %.1fs: %s",
                        attempt + 1,
                        delay,
                        e,
                    )
                    time.sleep(delay)
                    continue
                raise RemoteAnalyzerError(f"LLM call failed: {e}", e) from e

        raise RemoteAnalyzerError(f"LLM call failed: {last_error}", last_error)

    def _call_completion(self, *, messages: list[dict[str, str]]):
        from litellm import completion

        kwargs: dict[str, Any] = {
            "model": self.model_name,
            "messages": messages,
            "timeout": self.config.llm_timeout,
        }

        reasoning_effort = _normalize_reasoning_effort(self.config.llm_reasoning_effort)
        if reasoning_effort is not None:
            kwargs["reasoning_effort"] = reasoning_effort

        if self.config.llm_api_key:
            kwargs["api_key"] = self.config.llm_api_key

        if self.config.llm_base_url:
            kwargs["base_url"] = self.config.llm_base_url

        return completion(**kwargs)

    def _response_text(self, response) -> str:
        message = response.choices[0].message
        content = getattr(message, "content", None)

        if content is None:
            tool_calls = getattr(message, "tool_calls", None) or []
            if tool_calls:
                function = getattr(tool_calls[0], "function", None)
                arguments = getattr(function, "arguments", None)
                if isinstance(arguments, str) and arguments.strip():
                    content = arguments

        if content is None or not str(content).strip():
            raise ParseError("LLM returned no content to parse.")

        return str(content)


def extract_json_text(content: str) -> str:
    """Strip markdown code fences and surrounding prose from a JSON answer."""
    content = content.strip()

    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        else:
            content = content[3:]
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
        content = content.strip()

    if content.startswith("{"):
        return content

    start = content.find("{")
    if start == -1:
        return content

    depth = 0
    for idx in range(start, len(content)):
        ch = content[idx]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return content[start : idx + 1].strip()
    return content


def _normalize_reasoning_effort(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in {"off", "disabled", "0", "false"}:
        return "disable"
    return normalized
