"""Data models for resume analysis."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Weighted score categories in report order. Fixed calibration constants.
CATEGORY_WEIGHTS: dict[str, int] = {
    "technical": 30,
    "structure": 20,
    "action_verbs": 15,
    "achievements": 20,
    "formatting": 15,
}

MAX_TOTAL_SCORE = 100


class Rating(str, Enum):
    """Qualitative rating tier derived from the total score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    NEEDS_IMPROVEMENT = "Needs Improvement"


# Inclusive lower bounds, highest first.
RATING_THRESHOLDS: tuple[tuple[int, Rating], ...] = (
    (85, Rating.EXCELLENT),
    (70, Rating.GOOD),
    (50, Rating.AVERAGE),
)


def rating_for_score(score: int) -> Rating:
    """Map a total score to its rating tier."""
    for threshold, rating in RATING_THRESHOLDS:
        if score >= threshold:
            return rating
    return Rating.NEEDS_IMPROVEMENT


class SkillCategory(str, Enum):
    """Skill categories understood by skill-ingestion consumers."""

    PROGRAMMING_LANGUAGE = "programming_language"
    FRAMEWORK = "framework"
    DATABASE = "database"
    CLOUD = "cloud"
    TOOL = "tool"
    SOFT_SKILL = "soft_skill"
    OTHER = "other"


@dataclass(frozen=True)
class CategoryMatchResult:
    """Keyword hits for one taxonomy category."""

    category: str
    hit_count: int = 0
    matched_terms: frozenset[str] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "hit_count": self.hit_count,
            "matched_terms": sorted(self.matched_terms),
        }


@dataclass(frozen=True)
class StructuralSections:
    """Presence of the core resume sections."""

    has_contact: bool = False
    has_education: bool = False
    has_experience: bool = False
    has_skills: bool = False
    has_summary: bool = False

    @property
    def present_count(self) -> int:
        return sum(
            (
                self.has_contact,
                self.has_education,
                self.has_experience,
                self.has_skills,
                self.has_summary,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_contact": self.has_contact,
            "has_education": self.has_education,
            "has_experience": self.has_experience,
            "has_skills": self.has_skills,
            "has_summary": self.has_summary,
        }


@dataclass(frozen=True)
class AchievementSignal:
    """Quantified-achievement evidence found in the text."""

    has_metrics: bool
    percentage_count: int
    number_count: int
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_metrics": self.has_metrics,
            "percentage_count": self.percentage_count,
            "number_count": self.number_count,
            "score": self.score,
        }


@dataclass(frozen=True)
class FormattingSignal:
    """Length and layout evidence with any resulting feedback."""

    word_count: int
    line_count: int
    score: int
    issues: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "word_count": self.word_count,
            "line_count": self.line_count,
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class SubScore:
    """Score for one weighted category."""

    category: str
    raw_signal: Any
    score: int
    cap: int

    def __post_init__(self) -> None:
        if not (0 <= self.score <= self.cap):
            raise ValueError(
                f"{self.category} score must be between 0 and {self.cap} "
                f"(got {self.score})"
            )


@dataclass(frozen=True)
class SkillRecord:
    """A single skill extracted from a resume."""

    name: str
    category: SkillCategory

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "category": self.category.value}


@dataclass(frozen=True)
class ReportMetadata:
    """Provenance of an analysis report."""

    word_count: int
    method: Literal["deterministic", "llm"]
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    source_format: str | None = None
    model: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "analyzed_at": self.analyzed_at.isoformat(),
            "word_count": self.word_count,
            "source_format": self.source_format,
            "method": self.method,
            "model": self.model,
        }


@dataclass(frozen=True)
class AnalysisReport:
    """Structured result shared by every analyzer strategy."""

    total_score: int
    breakdown: dict[str, int]
    keywords: dict[str, Any]
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]
    rating: Rating
    metadata: ReportMetadata
    extracted_skills: dict[str, list[str]] = field(default_factory=dict)
    summary: str = ""

    def __post_init__(self) -> None:
        if not (0 <= self.total_score <= MAX_TOTAL_SCORE):
            raise ValueError(
                f"total_score must be between 0 and {MAX_TOTAL_SCORE} "
                f"(got {self.total_score})"
            )
        if set(self.breakdown) != set(CATEGORY_WEIGHTS):
            raise ValueError(
                f"breakdown must contain exactly {list(CATEGORY_WEIGHTS)} "
                f"(got {list(self.breakdown)})"
            )
        for name, value in self.breakdown.items():
            cap = CATEGORY_WEIGHTS[name]
            if not (0 <= value <= cap):
                raise ValueError(f"breakdown.{name} must be between 0 and {cap} (got {value})")
        if self.total_score != sum(self.breakdown.values()):
            raise ValueError(
                "total_score must equal the sum of the breakdown "
                f"(total_score={self.total_score}, sum={sum(self.breakdown.values())})"
            )
        if self.rating is not rating_for_score(self.total_score):
            raise ValueError(
                f"rating {self.rating.value!r} does not match score {self.total_score}"
            )
        if len(set(self.recommendations)) != len(self.recommendations):
            raise ValueError("recommendations must not contain duplicates")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-safe primitives."""
        keywords: dict[str, Any] = {}
        for name, value in self.keywords.items():
            to_dict = getattr(value, "to_dict", None)
            keywords[name] = to_dict() if callable(to_dict) else value

        return {
            "total_score": self.total_score,
            "breakdown": dict(self.breakdown),
            "keywords": keywords,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "recommendations": list(self.recommendations),
            "rating": self.rating.value,
            "extracted_skills": {k: list(v) for k, v in self.extracted_skills.items()},
            "summary": self.summary,
            "metadata": self.metadata.to_dict(),
        }


def _clamp_int_score(value: int) -> int:
    # Oversized ints cannot be converted to float; the score is clamped later anyway.
    return min(max(value, 0), MAX_TOTAL_SCORE)


class LLMBreakdown(BaseModel):
    """Per-category scores returned by the remote model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    technical: float = 0.0
    structure: float = 0.0
    action_verbs: float = Field(
        default=0.0, validation_alias=AliasChoices("action_verbs", "actionVerbs")
    )
    achievements: float = 0.0
    formatting: float = 0.0

    @field_validator(
        "technical", "structure", "action_verbs", "achievements", "formatting", mode="before"
    )
    @classmethod
    def tolerate_missing_category_scores(cls, v: object) -> object:
        """Treat null and non-finite category scores as zero."""
        if v is None or isinstance(v, bool):
            return 0.0
        if isinstance(v, int):
            return _clamp_int_score(v)
        if isinstance(v, float) and not math.isfinite(v):
            return 0.0
        return v


class LLMResumeEvaluation(BaseModel):
    """Raw JSON payload returned by the remote model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ats_score: float = Field(validation_alias=AliasChoices("atsScore", "ats_score"))
    breakdown: LLMBreakdown | None = None
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    extracted_skills: dict[str, list[str]] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("extractedSkills", "extracted_skills"),
    )
    rating: str | None = None
    summary: str = ""

    @field_validator("ats_score", mode="before")
    @classmethod
    def require_numeric_score(cls, v: object) -> object:
        """Reject strings, booleans and non-finite values for atsScore."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"atsScore must be a number (got {type(v).__name__})")
        if isinstance(v, int):
            return _clamp_int_score(v)
        if not math.isfinite(v):
            raise ValueError("atsScore must be finite")
        return v

    @field_validator("strengths", "weaknesses", "recommendations", mode="before")
    @classmethod
    def drop_null_feedback(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if item is not None]
        return v

    @field_validator("summary", mode="before")
    @classmethod
    def null_summary_is_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("extracted_skills", mode="before")
    @classmethod
    def drop_null_skill_lists(cls, v: object) -> object:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {key: value for key, value in v.items() if value is not None}
        return v
