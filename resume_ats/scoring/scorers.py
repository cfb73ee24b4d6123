"""Sub-scorers and aggregation for the deterministic analyzer.

Each scorer is a pure function of the matcher output or the raw text and
returns a ``SubScore`` whose value is clamped to the category cap. The
divisors and caps below are fixed calibration constants.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from resume_ats.scoring.models import (
    CATEGORY_WEIGHTS,
    MAX_TOTAL_SCORE,
    AchievementSignal,
    CategoryMatchResult,
    FormattingSignal,
    StructuralSections,
    SubScore,
)
from resume_ats.scoring.taxonomy import KeywordTaxonomy

TECHNICAL_HITS_FOR_FULL_SCORE = 20
ACTION_VERB_HITS_FOR_FULL_SCORE = 10
POINTS_PER_SECTION = 4
POINTS_PER_PERCENTAGE = 5
POINTS_PER_NUMBER = 2
MAX_COUNTED_NUMBERS = 5

OPTIMAL_WORDS_MIN = 400
OPTIMAL_WORDS_MAX = 800
LONG_RESUME_WORDS = 1200
STRUCTURED_LINE_COUNT = 20

TOO_SHORT_ISSUE = "Resume is too short"
TOO_SHORT_RECOMMENDATION = "Add more details about your experience and projects"
TOO_LONG_ISSUE = "Resume is too long"
TOO_LONG_RECOMMENDATION = "Keep resume concise, ideally 1-2 pages"

_PERCENTAGE_RE = re.compile(r"\d+%")
_NUMBER_RE = re.compile(r"\b\d+\b")


def ratio_score(count: int, divisor: int, cap: int) -> int:
    """Return ``round(count / divisor * cap)`` rounded half up, clamped to cap."""
    if count <= 0:
        return 0
    # Integer arithmetic keeps 4.5 -> 5 exact (Python's round() would give 4).
    rounded = (2 * count * cap + divisor) // (2 * divisor)
    return min(rounded, cap)


def count_words(text: str) -> int:
    return len(text.split())


def count_lines(text: str) -> int:
    return text.count("\n") + 1


def score_technical(matches: Mapping[str, CategoryMatchResult], taxonomy: KeywordTaxonomy) -> SubScore:
    """Score technical keyword density across all technical subgroups."""
    cap = CATEGORY_WEIGHTS["technical"]
    hits = sum(
        matches[c.name].hit_count for c in taxonomy.group("technical") if c.name in matches
    )
    return SubScore(
        category="technical",
        raw_signal=hits,
        score=ratio_score(hits, TECHNICAL_HITS_FOR_FULL_SCORE, cap),
        cap=cap,
    )


def detect_sections(text: str, taxonomy: KeywordTaxonomy) -> StructuralSections:
    """Detect core sections by topic-keyword presence anywhere in the text."""
    lower_text = text.lower()

    def present(section: str) -> bool:
        return any(topic in lower_text for topic in taxonomy.topics(section))

    return StructuralSections(
        has_contact=present("contact"),
        has_education=present("education"),
        has_experience=present("experience"),
        has_skills=present("skills"),
        has_summary=present("summary"),
    )


def score_structure(sections: StructuralSections) -> SubScore:
    cap = CATEGORY_WEIGHTS["structure"]
    return SubScore(
        category="structure",
        raw_signal=sections,
        score=min(sections.present_count * POINTS_PER_SECTION, cap),
        cap=cap,
    )


def score_action_verbs(matches: Mapping[str, CategoryMatchResult], taxonomy: KeywordTaxonomy) -> SubScore:
    cap = CATEGORY_WEIGHTS["action_verbs"]
    hits = sum(
        matches[c.name].hit_count for c in taxonomy.group("action") if c.name in matches
    )
    return SubScore(
        category="action_verbs",
        raw_signal=hits,
        score=ratio_score(hits, ACTION_VERB_HITS_FOR_FULL_SCORE, cap),
        cap=cap,
    )


def analyze_achievements(text: str) -> AchievementSignal:
    """Count percentage tokens and standalone integers.

    A token such as ``30%`` counts both as a percentage and as a number.
    """
    cap = CATEGORY_WEIGHTS["achievements"]
    percentage_count = len(_PERCENTAGE_RE.findall(text))
    number_count = len(_NUMBER_RE.findall(text))
    score = min(
        percentage_count * POINTS_PER_PERCENTAGE
        + min(number_count, MAX_COUNTED_NUMBERS) * POINTS_PER_NUMBER,
        cap,
    )
    return AchievementSignal(
        has_metrics=percentage_count > 0 or number_count > 2,
        percentage_count=percentage_count,
        number_count=number_count,
        score=score,
    )


def score_achievements(signal: AchievementSignal) -> SubScore:
    return SubScore(
        category="achievements",
        raw_signal=signal,
        score=signal.score,
        cap=CATEGORY_WEIGHTS["achievements"],
    )


def analyze_formatting(text: str) -> FormattingSignal:
    """Score length (word-count band) and layout (line count)."""
    word_count = count_words(text)
    line_count = count_lines(text)
    issues: list[str] = []
    recommendations: list[str] = []

    if OPTIMAL_WORDS_MIN <= word_count <= OPTIMAL_WORDS_MAX:
        score = 10
    elif word_count < OPTIMAL_WORDS_MIN:
        issues.append(TOO_SHORT_ISSUE)
        recommendations.append(TOO_SHORT_RECOMMENDATION)
        score = 5
    elif word_count > LONG_RESUME_WORDS:
        issues.append(TOO_LONG_ISSUE)
        recommendations.append(TOO_LONG_RECOMMENDATION)
        score = 5
    else:
        score = 8

    if line_count > STRUCTURED_LINE_COUNT:
        score += 5

    return FormattingSignal(
        word_count=word_count,
        line_count=line_count,
        score=min(score, CATEGORY_WEIGHTS["formatting"]),
        issues=tuple(issues),
        recommendations=tuple(recommendations),
    )


def score_formatting(signal: FormattingSignal) -> SubScore:
    return SubScore(
        category="formatting",
        raw_signal=signal,
        score=signal.score,
        cap=CATEGORY_WEIGHTS["formatting"],
    )


@dataclass(frozen=True)
class ScoringInput:
    """Everything a score component may read."""

    text: str
    matches: Mapping[str, CategoryMatchResult]
    taxonomy: KeywordTaxonomy


@dataclass(frozen=True)
class ScoreComponent:
    """A weighted score category and the formula that produces it."""

    name: str
    max_weight: int
    formula: Callable[[ScoringInput], SubScore]


SCORE_COMPONENTS: tuple[ScoreComponent, ...] = (
    ScoreComponent(
        "technical",
        CATEGORY_WEIGHTS["technical"],
        lambda data: score_technical(data.matches, data.taxonomy),
    ),
    ScoreComponent(
        "structure",
        CATEGORY_WEIGHTS["structure"],
        lambda data: score_structure(detect_sections(data.text, data.taxonomy)),
    ),
    ScoreComponent(
        "action_verbs",
        CATEGORY_WEIGHTS["action_verbs"],
        lambda data: score_action_verbs(data.matches, data.taxonomy),
    ),
    ScoreComponent(
        "achievements",
        CATEGORY_WEIGHTS["achievements"],
        lambda data: score_achievements(analyze_achievements(data.text)),
    ),
    ScoreComponent(
        "formatting",
        CATEGORY_WEIGHTS["formatting"],
        lambda data: score_formatting(analyze_formatting(data.text)),
    ),
)


def validate_components(components: tuple[ScoreComponent, ...]) -> None:
    """Check that component weights sum to exactly the maximum total score."""
    total = sum(component.max_weight for component in components)
    if total != MAX_TOTAL_SCORE:
        raise ValueError(
            f"Score component weights must sum to {MAX_TOTAL_SCORE} (got {total})"
        )


validate_components(SCORE_COMPONENTS)


def run_components(data: ScoringInput) -> list[SubScore]:
    """Evaluate every score component in order."""
    sub_scores: list[SubScore] = []
    for component in SCORE_COMPONENTS:
        sub_score = component.formula(data)
        if sub_score.cap != component.max_weight:
            raise ValueError(
                f"{component.name} produced cap {sub_score.cap}, "
                f"expected {component.max_weight}"
            )
        sub_scores.append(sub_score)
    return sub_scores


def aggregate(sub_scores: list[SubScore]) -> tuple[int, dict[str, int]]:
    """Sum sub-scores into ``(total_score, breakdown)``."""
    breakdown = {sub.category: sub.score for sub in sub_scores}
    return sum(breakdown.values()), breakdown
