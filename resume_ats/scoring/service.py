"""Resume analyzer implementations.

Two strategies share one contract (``ResumeAnalyzer``): the deterministic
keyword analyzer and the remote model-backed analyzer. Callers pick one via
``ScoringConfig.scoring_mode`` (see ``create_analyzer``) and may wrap the
remote analyzer in a ``FallbackAnalyzer``.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import ValidationError

from resume_ats.errors import (
    ConfigurationError,
    InsufficientContent,
    ParseError,
    RemoteAnalyzerError,
    ResumeScoringError,
    ScoringInternalError,
)
from resume_ats.extractor.models import SourceFormat
from resume_ats.scoring.config import ScoringConfig, get_scoring_config
from resume_ats.scoring.feedback import dedupe, synthesize_feedback
from resume_ats.scoring.llm import ScoringLLM, extract_json_text
from resume_ats.scoring.matchers import match_categories
from resume_ats.scoring.models import (
    CATEGORY_WEIGHTS,
    MAX_TOTAL_SCORE,
    AnalysisReport,
    LLMBreakdown,
    LLMResumeEvaluation,
    ReportMetadata,
    rating_for_score,
)
from resume_ats.scoring.prompts import (
    RESUME_ANALYSIS_SYSTEM_PROMPT,
    build_resume_analysis_prompt,
)
from resume_ats.scoring.scorers import (
    ScoringInput,
    aggregate,
    count_words,
    run_components,
)
from resume_ats.scoring.skills import matches_from_llm_skills, skills_from_matches
from resume_ats.scoring.taxonomy import KeywordTaxonomy, default_taxonomy, load_taxonomy

logger = logging.getLogger(__name__)

MIN_CONTENT_CHARS = 100

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ResumeAnalyzer(Protocol):
    """Capability shared by every analyzer strategy."""

    method: str

    def analyze(
        self, text: str, source_format: SourceFormat | str | None = None
    ) -> AnalysisReport: ...


def ensure_sufficient_content(text: str | None) -> str:
    """Reject text shorter than MIN_CONTENT_CHARS once trimmed."""
    if text is None or len(text.strip()) < MIN_CONTENT_CHARS:
        length = 0 if text is None else len(text.strip())
        raise InsufficientContent(
            "Resume content is too short or empty "
            f"({length} characters, minimum {MIN_CONTENT_CHARS})"
        )
    return text


def resolve_taxonomy(config: ScoringConfig) -> KeywordTaxonomy:
    """Return the configured taxonomy, or the built-in one."""
    if config.taxonomy_path is not None:
        return load_taxonomy(config.taxonomy_path)
    return default_taxonomy()


def _format_tag(source_format: SourceFormat | str | None) -> str | None:
    resolved = SourceFormat.coerce(source_format)
    return resolved.value if resolved is not None else None


class DeterministicAnalyzer:
    """Keyword-based analyzer: pure, synchronous and thread-safe."""

    method = "deterministic"

    def __init__(
        self,
        taxonomy: KeywordTaxonomy | None = None,
        config: ScoringConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or get_scoring_config()
        self.taxonomy = taxonomy or resolve_taxonomy(self.config)
        self._clock = clock or _utc_now

    def analyze(
        self, text: str, source_format: SourceFormat | str | None = None
    ) -> AnalysisReport:
        """Score resume text and synthesize feedback."""
        ensure_sufficient_content(text)
        format_tag = _format_tag(source_format)

        try:
            report = self._build_report(text, format_tag)
        except ResumeScoringError:
            raise
        except Exception as e:
            raise ScoringInternalError(f"Deterministic analysis failed: {e}", e) from e

        logger.info(
            "Deterministic analysis complete: score=%s rating=%s words=%s",
            report.total_score,
            report.rating.value,
            report.metadata.word_count,
        )
        return report

    def _build_report(self, text: str, format_tag: str | None) -> AnalysisReport:
        matches = match_categories(text, self.taxonomy)
        sub_scores = run_components(
            ScoringInput(text=text, matches=matches, taxonomy=self.taxonomy)
        )
        total_score, breakdown = aggregate(sub_scores)
        feedback = synthesize_feedback(sub_scores, total_score)

        keywords: dict[str, Any] = dict(matches)
        signals = {sub.category: sub.raw_signal for sub in sub_scores}
        keywords["structure"] = signals["structure"]
        keywords["achievements"] = signals["achievements"]
        keywords["formatting"] = signals["formatting"]

        return AnalysisReport(
            total_score=total_score,
            breakdown=breakdown,
            keywords=keywords,
            strengths=feedback.strengths,
            weaknesses=feedback.weaknesses,
            recommendations=feedback.recommendations,
            rating=rating_for_score(total_score),
            extracted_skills=skills_from_matches(matches, self.taxonomy),
            metadata=ReportMetadata(
                analyzed_at=self._clock(),
                word_count=signals["formatting"].word_count,
                source_format=format_tag,
                method="deterministic",
            ),
        )


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_llm_evaluation(raw: str) -> LLMResumeEvaluation:
    """Parse and validate the model's raw answer.

    Raises:
        ParseError: the answer is not JSON, not an object, or fails validation
            (including a missing or non-numeric ``atsScore``).
    """
    content = extract_json_text(raw)
    try:
        data = json.loads(content)
    except ValueError as e:
        # JSONDecodeError, or integers beyond the interpreter's digit limit.
        logger.debug("Unparseable LLM response: %.200s", raw)
        raise ParseError(f"Failed to parse LLM response as JSON: {e}", e) from e

    if not isinstance(data, dict):
        raise ParseError(f"LLM response must be a JSON object (got {type(data).__name__})")

    try:
        return LLMResumeEvaluation.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Invalid LLM response - validation error: {e}", e) from e


def reconcile_breakdown(breakdown: LLMBreakdown | None, total_score: int) -> dict[str, int]:
    """Fit the model's category scores to the caps and to ``total_score``.

    Each category is clamped to its cap; if the clamped values do not sum to
    the total, the total is re-apportioned in proportion to them (largest
    remainder, never exceeding a cap). Without usable category scores the
    total is apportioned by the caps themselves.
    """
    raw = {
        name: min(max(float(getattr(breakdown, name)), 0.0), float(cap)) if breakdown else 0.0
        for name, cap in CATEGORY_WEIGHTS.items()
    }

    if all(value.is_integer() for value in raw.values()) and sum(raw.values()) == total_score:
        return {name: int(value) for name, value in raw.items()}

    weights = raw if sum(raw.values()) > 0 else {n: float(c) for n, c in CATEGORY_WEIGHTS.items()}
    weight_sum = sum(weights.values())
    targets = {name: total_score * weight / weight_sum for name, weight in weights.items()}

    allocated = {
        name: min(int(math.floor(target)), CATEGORY_WEIGHTS[name])
        for name, target in targets.items()
    }
    remaining = total_score - sum(allocated.values())

    names = list(CATEGORY_WEIGHTS)
    order = sorted(
        names,
        key=lambda n: (-(targets[n] - math.floor(targets[n])), names.index(n)),
    )
    while remaining > 0:
        progressed = False
        for name in order:
            if remaining == 0:
                break
            if allocated[name] < CATEGORY_WEIGHTS[name]:
                allocated[name] += 1
                remaining -= 1
                progressed = True
        if not progressed:
            break

    return allocated


class RemoteAnalyzer:
    """Analyzer that delegates scoring to a generative text model."""

    method = "llm"

    def __init__(
        self,
        llm: ScoringLLM | None = None,
        taxonomy: KeywordTaxonomy | None = None,
        config: ScoringConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or get_scoring_config()
        self.llm = llm or ScoringLLM(config=self.config)
        self.taxonomy = taxonomy or resolve_taxonomy(self.config)
        self._clock = clock or _utc_now

    def analyze(
        self, text: str, source_format: SourceFormat | str | None = None
    ) -> AnalysisReport:
        """Ask the model for an evaluation and normalize it into a report."""
        ensure_sufficient_content(text)
        format_tag = _format_tag(source_format)

        raw = self.llm.generate(
            build_resume_analysis_prompt(text),
            system_prompt=RESUME_ANALYSIS_SYSTEM_PROMPT,
        )
        evaluation = parse_llm_evaluation(raw)

        try:
            report = self._build_report(evaluation, text, format_tag)
        except ResumeScoringError:
            raise
        except Exception as e:
            raise ScoringInternalError(f"Remote analysis normalization failed: {e}", e) from e

        logger.info(
            "Remote analysis complete: score=%s rating=%s model=%s",
            report.total_score,
            report.rating.value,
            report.metadata.model,
        )
        return report

    def _build_report(
        self, evaluation: LLMResumeEvaluation, text: str, format_tag: str | None
    ) -> AnalysisReport:
        total_score = max(0, min(MAX_TOTAL_SCORE, round_half_up(evaluation.ats_score)))
        breakdown = reconcile_breakdown(evaluation.breakdown, total_score)

        rating = rating_for_score(total_score)
        if evaluation.rating and evaluation.rating.strip().lower() != rating.value.lower():
            logger.debug(
                "Model rating %r disagrees with score %s; using %r",
                evaluation.rating,
                total_score,
                rating.value,
            )

        matches = matches_from_llm_skills(evaluation.extracted_skills, self.taxonomy)

        return AnalysisReport(
            total_score=total_score,
            breakdown=breakdown,
            keywords=dict(matches),
            strengths=dedupe(_clean(evaluation.strengths)),
            weaknesses=dedupe(_clean(evaluation.weaknesses)),
            recommendations=dedupe(_clean(evaluation.recommendations)),
            rating=rating,
            extracted_skills=skills_from_matches(matches, self.taxonomy),
            summary=evaluation.summary.strip(),
            metadata=ReportMetadata(
                analyzed_at=self._clock(),
                word_count=count_words(text),
                source_format=format_tag,
                method="llm",
                model=self.llm.model_name,
            ),
        )


def _clean(items: list[str]) -> list[str]:
    return [item.strip() for item in items if item and item.strip()]


# Failures of the primary analyzer that a fallback may recover from.
RECOVERABLE_ERRORS: tuple[type[ResumeScoringError], ...] = (
    ConfigurationError,
    ParseError,
    RemoteAnalyzerError,
)


class FallbackAnalyzer:
    """Run ``primary``; on a recoverable failure, run ``fallback`` instead."""

    def __init__(self, primary: ResumeAnalyzer, fallback: ResumeAnalyzer) -> None:
        self.primary = primary
        self.fallback = fallback

    @property
    def method(self) -> str:
        return self.primary.method

    def analyze(
        self, text: str, source_format: SourceFormat | str | None = None
    ) -> AnalysisReport:
        try:
            return self.primary.analyze(text, source_format)
        except RECOVERABLE_ERRORS as e:
            logger.warning(
                "%s analyzer failed, falling back to %s: %s",
                self.primary.method,
                self.fallback.method,
                e,
            )
            return self.fallback.analyze(text, source_format)


def create_analyzer(
    config: ScoringConfig | None = None, *, clock: Clock | None = None
) -> ResumeAnalyzer:
    """Build the analyzer selected by configuration."""
    config = config or get_scoring_config()
    taxonomy = resolve_taxonomy(config)

    deterministic = DeterministicAnalyzer(taxonomy=taxonomy, config=config, clock=clock)
    if config.scoring_mode != "llm":
        return deterministic

    remote = RemoteAnalyzer(taxonomy=taxonomy, config=config, clock=clock)
    if config.fallback_to_deterministic:
        return FallbackAnalyzer(primary=remote, fallback=deterministic)
    return remote


def analyze_many(
    analyzer: ResumeAnalyzer,
    texts: Sequence[str],
    *,
    source_format: SourceFormat | str | None = None,
    max_workers: int | None = None,
) -> list[AnalysisReport]:
    """Analyze independent resumes concurrently.

    Reports are returned in input order. The first failure is raised once
    all submitted work has finished.
    """
    if not texts:
        return []

    workers = max_workers or get_scoring_config().batch_max_workers
    with ThreadPoolExecutor(max_workers=min(workers, len(texts))) as executor:
        futures = [executor.submit(analyzer.analyze, text, source_format) for text in texts]
        return [future.result() for future in futures]


def quick_score(
    text: str,
    analyzer: ResumeAnalyzer | None = None,
    source_format: SourceFormat | str | None = None,
) -> int:
    """Return only the total score for ``text``."""
    return (analyzer or create_analyzer()).analyze(text, source_format).total_score


def format_report(report: AnalysisReport) -> str:
    """Format an AnalysisReport for CLI output."""
    lines: list[str] = []
    lines.append(
        f"ATS score: {report.total_score}/{MAX_TOTAL_SCORE} ({report.rating.value})"
    )
    lines.append(
        "Breakdown: "
        + " ".join(
            f"{name}={report.breakdown[name]}/{cap}" for name, cap in CATEGORY_WEIGHTS.items()
        )
    )
    source = report.metadata.method.upper()
    if report.metadata.model:
        source += f" ({report.metadata.model})"
    lines.append(f"Method: {source} | words={report.metadata.word_count}")

    if report.summary:
        lines.append(f"Summary: {report.summary}")
    if report.strengths:
        lines.append(f"Strengths: {'; '.join(report.strengths)}")
    if report.weaknesses:
        lines.append(f"Weaknesses: {'; '.join(report.weaknesses)}")
    if report.extracted_skills:
        skills = ", ".join(
            f"{category}: {', '.join(names)}"
            for category, names in report.extracted_skills.items()
        )
        lines.append(f"Skills: {skills}")
    if report.recommendations:
        lines.append("Recommendations:")
        lines.extend(f"- {item}" for item in report.recommendations)
    return "\n".join(lines)
