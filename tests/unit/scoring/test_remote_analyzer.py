"""Unit tests for the remote (model-backed) analyzer."""

from __future__ import annotations

import json

import pytest


class _DummyLLM:
    """Stands in for ScoringLLM and records prompts."""

    model_name = "gemini/gemini-2.0-flash"

    def __init__(self, response: str | Exception):
        self.response = response
        self.prompts: list[tuple[str, str | None]] = []

    def generate(self, prompt: str, system_prompt: str | None = None) -> str:
        self.prompts.append((prompt, system_prompt))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _payload(**overrides) -> str:
    data = {
        "atsScore": 82,
        "breakdown": {
            "technical": 25,
            "structure": 18,
            "actionVerbs": 12,
            "achievements": 15,
            "formatting": 12,
        },
        "strengths": ["Clear technical focus", " Clear technical focus ", ""],
        "weaknesses": ["Few metrics"],
        "recommendations": ["Quantify impact", "Quantify impact", "Add a summary"],
        "extractedSkills": {
            "programming_languages": ["Python", "JS"],
            "frameworks": ["React", "FastAPI"],
            "soft_skills": ["Leadership"],
        },
        "rating": "Excellent",
        "summary": "  Backend engineer.  ",
    }
    data.update(overrides)
    return json.dumps(data)


def _analyzer(llm, scoring_config, fixed_clock):
    from resume_ats.scoring.service import RemoteAnalyzer

    return RemoteAnalyzer(llm=llm, config=scoring_config, clock=fixed_clock)


class TestRemoteAnalyzer:
    def test_normalizes_model_response(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """The model response should be normalized into a report."""
        from resume_ats.scoring.models import Rating

        llm = _DummyLLM(_payload())

        report = _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text, "docx")

        assert report.total_score == 82
        assert report.breakdown == {
            "technical": 25,
            "structure": 18,
            "action_verbs": 12,
            "achievements": 15,
            "formatting": 12,
        }
        # Rating always follows the score, not the model's label.
        assert report.rating is Rating.GOOD
        assert report.strengths == ["Clear technical focus"]
        assert report.recommendations == ["Quantify impact", "Add a summary"]
        assert report.summary == "Backend engineer."
        assert report.extracted_skills["programming_language"] == ["javascript", "python"]
        assert report.extracted_skills["framework"] == ["fastapi", "react"]
        assert report.extracted_skills["soft_skill"] == ["leadership"]
        assert report.metadata.method == "llm"
        assert report.metadata.model == "gemini/gemini-2.0-flash"
        assert report.metadata.source_format == "docx"
        assert report.metadata.word_count == len(sample_resume_text.split())

    def test_prompt_contains_resume_and_categories(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """The prompt should include the resume and the category caps."""
        from resume_ats.scoring.prompts import RESUME_ANALYSIS_SYSTEM_PROMPT

        llm = _DummyLLM(_payload())

        _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text)

        prompt, system_prompt = llm.prompts[0]
        assert system_prompt == RESUME_ANALYSIS_SYSTEM_PROMPT
        assert prompt.endswith(sample_resume_text)
        for name in ("technical", "structure", "action_verbs", "achievements", "formatting"):
            assert f'"{name}"' in prompt

    def test_accepts_fenced_json(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """JSON wrapped in code fences should parse."""
        llm = _DummyLLM(f"Here you go:\n```json\n{_payload(atsScore=64)}\n```")

        report = _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text)

        assert report.total_score == 64
        assert sum(report.breakdown.values()) == 64

    def test_zero_score_is_valid(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """A zero atsScore should produce an all-zero breakdown."""
        llm = _DummyLLM(_payload(atsScore=0, breakdown=None))

        report = _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text)

        assert report.total_score == 0
        assert set(report.breakdown.values()) == {0}

    @pytest.mark.parametrize(
        "score,expected",
        [(82.5, 83), (120, 100), (-4, 0)],
    )
    def test_score_is_rounded_and_clamped(
        self, sample_resume_text, scoring_config, fixed_clock, score, expected
    ) -> None:
        """atsScore should be rounded half up and clamped to 0-100."""
        llm = _DummyLLM(_payload(atsScore=score))

        report = _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text)

        assert report.total_score == expected
        assert sum(report.breakdown.values()) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "[1, 2, 3]",
            json.dumps({"strengths": ["no score"]}),
            json.dumps({"atsScore": "85"}),
        ],
    )
    def test_invalid_response_raises_parse_error(
        self, sample_resume_text, scoring_config, fixed_clock, raw
    ) -> None:
        """Unusable responses should raise ParseError."""
        from resume_ats.errors import ParseError

        with pytest.raises(ParseError):
            _analyzer(_DummyLLM(raw), scoring_config, fixed_clock).analyze(sample_resume_text)

    def test_oversized_integer_score_is_clamped(
        self, sample_resume_text, scoring_config, fixed_clock
    ) -> None:
        """A score too large to convert to float should clamp to 100."""
        raw = '{"atsScore": 1' + "0" * 400 + "}"

        report = _analyzer(_DummyLLM(raw), scoring_config, fixed_clock).analyze(sample_resume_text)

        assert report.total_score == 100
        assert sum(report.breakdown.values()) == 100

    def test_integer_beyond_digit_limit_raises_parse_error(
        self, sample_resume_text, scoring_config, fixed_clock
    ) -> None:
        """An integer literal the JSON decoder refuses should surface as ParseError."""
        from resume_ats.errors import ParseError

        raw = '{"atsScore": 1' + "0" * 5000 + "}"

        with pytest.raises(ParseError):
            _analyzer(_DummyLLM(raw), scoring_config, fixed_clock).analyze(sample_resume_text)

    def test_null_feedback_fields_are_tolerated(
        self, sample_resume_text, scoring_config, fixed_clock
    ) -> None:
        """Null feedback fields should read as empty rather than failing the parse."""
        raw = json.dumps(
            {
                "atsScore": 72,
                "summary": None,
                "strengths": None,
                "weaknesses": None,
                "recommendations": None,
                "rating": None,
                "breakdown": {"technical": None, "structure": 10**400},
            }
        )

        report = _analyzer(_DummyLLM(raw), scoring_config, fixed_clock).analyze(sample_resume_text)

        assert report.total_score == 72
        assert report.summary == ""
        assert report.strengths == []
        assert report.weaknesses == []
        assert report.recommendations == []
        assert sum(report.breakdown.values()) == 72

    def test_short_text_never_reaches_model(self, scoring_config, fixed_clock) -> None:
        """Short text should be rejected before calling the model."""
        from resume_ats.errors import InsufficientContent

        llm = _DummyLLM(_payload())

        with pytest.raises(InsufficientContent):
            _analyzer(llm, scoring_config, fixed_clock).analyze("too short")
        assert llm.prompts == []

    def test_transport_errors_propagate(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """Transport errors should propagate unchanged."""
        from resume_ats.errors import RemoteTimeoutError

        llm = _DummyLLM(RemoteTimeoutError("timed out"))

        with pytest.raises(RemoteTimeoutError):
            _analyzer(llm, scoring_config, fixed_clock).analyze(sample_resume_text)


class TestReconcileBreakdown:
    def test_consistent_breakdown_is_kept(self) -> None:
        """A breakdown that fits the total should be kept as is."""
        from resume_ats.scoring.models import LLMBreakdown
        from resume_ats.scoring.service import reconcile_breakdown

        breakdown = LLMBreakdown(
            technical=30, structure=20, action_verbs=15, achievements=20, formatting=15
        )

        assert reconcile_breakdown(breakdown, 100) == {
            "technical": 30,
            "structure": 20,
            "action_verbs": 15,
            "achievements": 20,
            "formatting": 15,
        }

    def test_values_are_clamped_to_caps(self) -> None:
        """Category values should be clamped to their caps."""
        from resume_ats.scoring.models import LLMBreakdown
        from resume_ats.scoring.service import reconcile_breakdown

        breakdown = LLMBreakdown(
            technical=40, structure=20, action_verbs=15, achievements=20, formatting=15
        )

        assert reconcile_breakdown(breakdown, 100)["technical"] == 30

    def test_missing_breakdown_is_apportioned_by_caps(self) -> None:
        """A missing breakdown should be split in proportion to the caps."""
        from resume_ats.scoring.service import reconcile_breakdown

        assert reconcile_breakdown(None, 50) == {
            "technical": 15,
            "structure": 10,
            "action_verbs": 8,
            "achievements": 10,
            "formatting": 7,
        }

    def test_mismatched_breakdown_is_rescaled(self) -> None:
        """A breakdown that disagrees with the total should be rescaled."""
        from resume_ats.scoring.models import CATEGORY_WEIGHTS, LLMBreakdown
        from resume_ats.scoring.service import reconcile_breakdown

        breakdown = LLMBreakdown(
            technical=20, structure=10, action_verbs=10, achievements=10, formatting=10
        )

        result = reconcile_breakdown(breakdown, 90)

        assert sum(result.values()) == 90
        for name, cap in CATEGORY_WEIGHTS.items():
            assert 0 <= result[name] <= cap


class TestFallbackAnalyzer:
    def test_falls_back_on_remote_failure(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """A remote failure should fall back to the deterministic analyzer."""
        from resume_ats.errors import RemoteAnalyzerError
        from resume_ats.scoring.service import DeterministicAnalyzer, FallbackAnalyzer

        remote = _analyzer(_DummyLLM(RemoteAnalyzerError("503")), scoring_config, fixed_clock)
        deterministic = DeterministicAnalyzer(config=scoring_config, clock=fixed_clock)

        report = FallbackAnalyzer(primary=remote, fallback=deterministic).analyze(sample_resume_text)

        assert report.metadata.method == "deterministic"
        assert report.to_dict() == deterministic.analyze(sample_resume_text).to_dict()

    def test_falls_back_on_parse_error(self, sample_resume_text, scoring_config, fixed_clock) -> None:
        """A parse error should fall back to the deterministic analyzer."""
        from resume_ats.scoring.service import DeterministicAnalyzer, FallbackAnalyzer

        remote = _analyzer(_DummyLLM("{}"), scoring_config, fixed_clock)
        deterministic = DeterministicAnalyzer(config=scoring_config, clock=fixed_clock)

        report = FallbackAnalyzer(primary=remote, fallback=deterministic).analyze(sample_resume_text)

        assert report.metadata.method == "deterministic"

    def test_insufficient_content_is_not_recovered(self, scoring_config, fixed_clock) -> None:
        """Insufficient content should not trigger the fallback."""
        from resume_ats.errors import InsufficientContent
        from resume_ats.scoring.service import DeterministicAnalyzer, FallbackAnalyzer

        remote = _analyzer(_DummyLLM(_payload()), scoring_config, fixed_clock)
        deterministic = DeterministicAnalyzer(config=scoring_config, clock=fixed_clock)

        with pytest.raises(InsufficientContent):
            FallbackAnalyzer(primary=remote, fallback=deterministic).analyze("short")
