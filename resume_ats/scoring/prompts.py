"""Prompt builders for the remote (model-backed) resume analyzer."""

from __future__ import annotations

from resume_ats.scoring.models import CATEGORY_WEIGHTS, RATING_THRESHOLDS, Rating

RESUME_ANALYSIS_SYSTEM_PROMPT = """You are an expert ATS (Applicant Tracking System) resume analyzer.

You must follow these rules:
- Be strict but fair. Judge only what is written in the resume text.
- Do NOT invent skills, employers, degrees or metrics that are not in the text.
- Output MUST be valid JSON only (no markdown, no commentary), matching the required schema.
"""

_BREAKDOWN_GUIDANCE: dict[str, str] = {
    "technical": "programming languages, frameworks, databases, cloud and tooling keywords",
    "structure": "presence of contact, education, experience, skills and summary sections",
    "action_verbs": "bullets that start with strong action verbs",
    "achievements": "quantified, measurable results (percentages, counts, amounts)",
    "formatting": "length, readability and line-by-line layout",
}


def build_resume_analysis_prompt(resume_text: str) -> str:
    """Build the user prompt asking the model for a strict JSON evaluation."""
    breakdown_lines = [
        f'    "{name}": <integer 0-{cap}: {_BREAKDOWN_GUIDANCE[name]}>,'
        for name, cap in CATEGORY_WEIGHTS.items()
    ]
    breakdown_lines[-1] = breakdown_lines[-1].rstrip(",")

    rating_lines = [
        f'- "{rating.value}": atsScore >= {threshold}' for threshold, rating in RATING_THRESHOLDS
    ]
    rating_lines.append(f'- "{Rating.NEEDS_IMPROVEMENT.value}": below that')

    weights_sum = " + ".join(CATEGORY_WEIGHTS)
    rating_choices = ", ".join(f'"{rating.value}"' for rating in Rating)

    return "\n".join(
        [
            "Analyze the following resume and return a JSON object with this structure:",
            "",
            "{",
            '  "atsScore": <integer 0-100>,',
            '  "breakdown": {',
            *breakdown_lines,
            "  },",
            '  "strengths": [<3-5 key strengths>],',
            '  "weaknesses": [<3-5 areas for improvement>],',
            '  "recommendations": [<5-7 specific, actionable recommendations>],',
            '  "extractedSkills": {',
            '    "programming_languages": [<e.g. "Python", "Java", "C++">],',
            '    "frameworks": [<e.g. "React", "Node.js", "Django">],',
            '    "databases": [<e.g. "MySQL", "MongoDB", "PostgreSQL">],',
            '    "cloud_platforms": [<e.g. "AWS", "Azure", "GCP">],',
            '    "tools": [<e.g. "Git", "Docker", "Jenkins">],',
            '    "soft_skills": [<e.g. "Leadership", "Communication">]',
            "  },",
            f'  "rating": <one of {rating_choices}>,',
            '  "summary": <2-3 sentence summary of the candidate profile>',
            "}",
            "",
            "Scoring rules:",
            f"- atsScore MUST equal {weights_sum}.",
            "- Rating buckets:",
            *rating_lines,
            "- Extract ALL skills mentioned in the resume and categorize them.",
            "- Return ONLY the JSON object.",
            "",
            "RESUME TEXT:",
            resume_text,
        ]
    )
