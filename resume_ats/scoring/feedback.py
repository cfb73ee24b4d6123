"""Rule-based feedback for deterministic analysis."""

from __future__ import annotations

from dataclasses import dataclass, field

from resume_ats.scoring.models import (
    FormattingSignal,
    Rating,
    StructuralSections,
    SubScore,
    rating_for_score,
)

TECHNICAL_STRENGTH_MIN = 25
TECHNICAL_WEAKNESS_BELOW = 15
STRUCTURE_STRENGTH_RATIO = 0.4
ACTION_VERBS_STRENGTH_MIN = 12
ACHIEVEMENTS_STRENGTH_MIN = 15

# Global escalation thresholds (total score).
LOW_SCORE_BELOW = 50
MODERATE_SCORE_BELOW = 70

LOW_SCORE_RECOMMENDATIONS = (
    "Focus on adding relevant technical skills and certifications",
    "Use industry-standard keywords from job descriptions",
)
MODERATE_SCORE_RECOMMENDATIONS = (
    "Ensure all sections (Contact, Education, Experience, Skills) are present",
    "Add more details about projects and internships",
)


@dataclass
class Feedback:
    """Accumulated strengths, weaknesses and recommendations."""

    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def dedupe(items: list[str]) -> list[str]:
    """Remove duplicates, keeping the first occurrence of each entry."""
    return list(dict.fromkeys(items))


def _technical(sub: SubScore, feedback: Feedback) -> None:
    if sub.score >= TECHNICAL_STRENGTH_MIN:
        feedback.strengths.append("Strong technical skills showcase")
    elif sub.score < TECHNICAL_WEAKNESS_BELOW:
        feedback.weaknesses.append("Limited technical keywords")
        feedback.recommendations.append(
            "Add more specific technical skills and technologies you've worked with"
        )


def _structure(sub: SubScore, sections: StructuralSections, feedback: Feedback) -> None:
    if sub.score >= sub.cap * STRUCTURE_STRENGTH_RATIO:
        feedback.strengths.append("Well-structured resume with clear sections")
        return
    if not sections.has_contact:
        feedback.recommendations.append("Add clear contact information section")
    if not sections.has_skills:
        feedback.recommendations.append("Include a dedicated skills section")
    if not sections.has_summary:
        feedback.recommendations.append("Add a professional summary or objective")


def _action_verbs(sub: SubScore, feedback: Feedback) -> None:
    if sub.score >= ACTION_VERBS_STRENGTH_MIN:
        feedback.strengths.append("Good use of action verbs")
    else:
        feedback.weaknesses.append("Limited use of strong action verbs")
        feedback.recommendations.append(
            'Start bullet points with strong action verbs like "developed", '
            '"implemented", "led"'
        )


def _achievements(sub: SubScore, feedback: Feedback) -> None:
    if sub.score >= ACHIEVEMENTS_STRENGTH_MIN:
        feedback.strengths.append("Quantifiable achievements demonstrated")
    else:
        feedback.weaknesses.append("Lack of quantifiable achievements")
        feedback.recommendations.append(
            'Include measurable results (e.g., "Improved performance by 30%")'
        )


def _formatting(signal: FormattingSignal, feedback: Feedback) -> None:
    feedback.weaknesses.extend(signal.issues)
    feedback.recommendations.extend(signal.recommendations)


def _rating(rating: Rating, feedback: Feedback) -> None:
    if rating is Rating.EXCELLENT:
        feedback.strengths.append("Resume is highly optimized for ATS systems")
    elif rating is Rating.AVERAGE:
        feedback.recommendations.append(
            "Consider enhancing your resume with more details and keywords"
        )
    elif rating is Rating.NEEDS_IMPROVEMENT:
        feedback.recommendations.append(
            "Resume needs significant improvements to pass ATS screening"
        )


def escalation_recommendations(total_score: int) -> list[str]:
    """General recommendations appended for low overall scores."""
    recommendations: list[str] = []
    if total_score < LOW_SCORE_BELOW:
        recommendations.extend(LOW_SCORE_RECOMMENDATIONS)
    if total_score < MODERATE_SCORE_BELOW:
        recommendations.extend(MODERATE_SCORE_RECOMMENDATIONS)
    return recommendations


def synthesize_feedback(sub_scores: list[SubScore], total_score: int) -> Feedback:
    """Build feedback from each category's signal and the total score.

    Category feedback comes first (in component order), then rating-tier
    feedback, then the global escalation recommendations. The final
    recommendation list is de-duplicated.
    """
    feedback = Feedback()
    by_category = {sub.category: sub for sub in sub_scores}

    _technical(by_category["technical"], feedback)

    structure = by_category["structure"]
    _structure(structure, structure.raw_signal, feedback)

    _action_verbs(by_category["action_verbs"], feedback)
    _achievements(by_category["achievements"], feedback)
    _formatting(by_category["formatting"].raw_signal, feedback)

    _rating(rating_for_score(total_score), feedback)
    feedback.recommendations.extend(escalation_recommendations(total_score))

    feedback.strengths = dedupe(feedback.strengths)
    feedback.weaknesses = dedupe(feedback.weaknesses)
    feedback.recommendations = dedupe(feedback.recommendations)
    return feedback
