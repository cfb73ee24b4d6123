"""Unit tests for ScoringLLM."""

from __future__ import annotations

import pytest


class _DummyFunction:
    def __init__(self, arguments: str):
        self.arguments = arguments


class _DummyToolCall:
    def __init__(self, arguments: str):
        self.function = _DummyFunction(arguments)


class _DummyMessage:
    def __init__(self, content: str | None, tool_calls: list[object] | None = None):
        self.content = content
        self.tool_calls = tool_calls


class _DummyChoice:
    def __init__(self, message: _DummyMessage):
        self.message = message


class _DummyResponse:
    def __init__(self, message: _DummyMessage):
        self.choices = [_DummyChoice(message)]


def _llm(**overrides):
    from resume_ats.scoring.config import ScoringConfig
    from resume_ats.scoring.llm import ScoringLLM

    values = {"llm_api_key": "test-key", "llm_max_retries": 0}
    values.update(overrides)
    return ScoringLLM(config=ScoringConfig(_env_file=None, **values))  # type: ignore[call-arg]


class TestScoringLLM:
    def test_generate_returns_message_content(self, monkeypatch) -> None:
        """generate should return the message content."""
        llm = _llm()
        seen: dict[str, object] = {}

        def _fake_call_completion(*, messages):
            seen["messages"] = messages
            return _DummyResponse(_DummyMessage('{"atsScore": 70}'))

        monkeypatch.setattr(llm, "_call_completion", _fake_call_completion)

        result = llm.generate("analyze this", system_prompt="be strict")

        assert result == '{"atsScore": 70}'
        assert seen["messages"] == [
            {"role": "system", "content": "be strict"},
            {"role": "user", "content": "analyze this"},
        ]

    def test_generate_reads_tool_call_arguments(self, monkeypatch) -> None:
        """generate should fall back to tool call arguments."""
        llm = _llm()
        tool_calls: list[object] = [_DummyToolCall('{"atsScore": 55}')]

        monkeypatch.setattr(
            llm,
            "_call_completion",
            lambda **_kwargs: _DummyResponse(_DummyMessage(None, tool_calls=tool_calls)),
        )

        assert llm.generate("x") == '{"atsScore": 55}'

    def test_generate_empty_content_raises_parse_error(self, monkeypatch) -> None:
        """An empty response should raise ParseError."""
        from resume_ats.errors import ParseError

        llm = _llm()
        monkeypatch.setattr(
            llm, "_call_completion", lambda **_kwargs: _DummyResponse(_DummyMessage("  "))
        )

        with pytest.raises(ParseError):
            llm.generate("x")

    def test_generate_wraps_provider_errors(self, monkeypatch) -> None:
        """Provider errors should be wrapped in RemoteAnalyzerError."""
        from resume_ats.errors import RemoteAnalyzerError, RemoteTimeoutError

        llm = _llm()

        def _raise(**_kwargs):
            raise RuntimeError("503 Service Unavailable")

        monkeypatch.setattr(llm, "_call_completion", _raise)

        with pytest.raises(RemoteAnalyzerError, match="503") as excinfo:
            llm.generate("x")
        assert not isinstance(excinfo.value, RemoteTimeoutError)
        assert isinstance(excinfo.value.original_error, RuntimeError)

    def test_generate_maps_timeouts(self, monkeypatch) -> None:
        """Provider timeouts should raise RemoteTimeoutError."""
        from litellm.exceptions import Timeout

        from resume_ats.errors import RemoteTimeoutError

        llm = _llm(llm_max_retries=2)
        calls = {"count": 0}

        def _raise(**_kwargs):
            calls["count"] += 1
            raise Timeout(message="slow", model="gemini/gemini-2.0-flash", llm_provider="gemini")

        monkeypatch.setattr(llm, "_call_completion", _raise)

        with pytest.raises(RemoteTimeoutError):
            llm.generate("x")
        assert calls["count"] == 1

    def test_generate_retries_transient_failures(self, monkeypatch) -> None:
        """generate should retry transient failures up to the configured limit."""
        llm = _llm(llm_max_retries=1)
        calls = {"count": 0}

        def _flaky(**_kwargs):
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("connection reset")
            return _DummyResponse(_DummyMessage('{"atsScore": 61}'))

        monkeypatch.setattr(llm, "_call_completion", _flaky)
        monkeypatch.setattr("resume_ats.scoring.llm.time.sleep", lambda _s: None)

        assert llm.generate("x") == '{"atsScore": 61}'
        assert calls["count"] == 2

    def test_missing_credentials_raise_configuration_error(self, monkeypatch) -> None:
        """Missing credentials should raise ConfigurationError before any call."""
        from resume_ats.errors import ConfigurationError

        llm = _llm(llm_api_key=None)
        monkeypatch.setattr("resume_ats.scoring.llm._provider_keys_present", lambda _model: False)

        def _unexpected(**_kwargs):
            raise AssertionError("completion should not be called")

        monkeypatch.setattr(llm, "_call_completion", _unexpected)

        with pytest.raises(ConfigurationError, match="ATS_LLM_API_KEY"):
            llm.generate("x")

    def test_provider_environment_credentials_are_accepted(self, monkeypatch) -> None:
        """Credentials in the provider's environment should be accepted."""
        llm = _llm(llm_api_key=None)
        monkeypatch.setattr("resume_ats.scoring.llm._provider_keys_present", lambda _model: True)

        llm.ensure_configured()

    def test_call_completion_passes_config(self, monkeypatch) -> None:
        """Completion calls should carry the configured model settings."""
        import litellm

        llm = _llm(llm_timeout=12.5, llm_reasoning_effort="Off", llm_base_url="http://localhost:8000/v1")
        seen: dict[str, object] = {}

        def _fake_completion(**kwargs):
            seen.update(kwargs)
            return _DummyResponse(_DummyMessage("{}"))

        monkeypatch.setattr(litellm, "completion", _fake_completion)

        llm._call_completion(messages=[{"role": "user", "content": "x"}])

        assert seen["model"] == "openai/gemini-2.0-flash"
        assert seen["timeout"] == 12.5
        assert seen["reasoning_effort"] == "disable"
        assert seen["api_key"] == "test-key"
        assert seen["base_url"] == "http://localhost:8000/v1"


class TestModelName:
    @pytest.mark.parametrize(
        "provider,model,base_url,expected",
        [
            ("gemini", "gemini-2.0-flash", None, "gemini/gemini-2.0-flash"),
            ("openai", "gpt-4o-mini", None, "gpt-4o-mini"),
            ("anthropic", "claude-3-5-haiku", None, "anthropic/claude-3-5-haiku"),
            ("gemini", "openrouter/some-model", None, "openrouter/some-model"),
            ("ollama", "llama3", "http://localhost:11434/v1", "openai/llama3"),
        ],
    )
    def test_model_name(self, provider, model, base_url, expected) -> None:
        """The model name should be qualified with the provider."""
        llm = _llm(llm_provider=provider, llm_model=model, llm_base_url=base_url)

        assert llm.model_name == expected


class TestExtractJsonText:
    def test_strips_code_fences(self) -> None:
        """Code fences around JSON should be stripped."""
        from resume_ats.scoring.llm import extract_json_text

        assert extract_json_text('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_extracts_object_from_prose(self) -> None:
        """A JSON object embedded in prose should be extracted."""
        from resume_ats.scoring.llm import extract_json_text

        assert extract_json_text('Sure! {"a": {"b": 2}} Hope this helps.') == '{"a": {"b": 2}}'

    def test_returns_content_without_object(self) -> None:
        """Content with no object should be returned unchanged."""
        from resume_ats.scoring.llm import extract_json_text

        assert extract_json_text("  no json  ") == "no json"
