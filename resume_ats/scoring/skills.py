"""Skill-category mapping shared by both analyzer strategies."""

from __future__ import annotations

from collections.abc import Mapping

from resume_ats.scoring.matchers import canonical_term
from resume_ats.scoring.models import (
    AnalysisReport,
    CategoryMatchResult,
    SkillCategory,
    SkillRecord,
)
from resume_ats.scoring.taxonomy import KeywordTaxonomy

# extractedSkills keys used in the remote model's response.
LLM_SKILL_CATEGORIES: dict[str, SkillCategory] = {
    "programming_languages": SkillCategory.PROGRAMMING_LANGUAGE,
    "languages": SkillCategory.PROGRAMMING_LANGUAGE,
    "frameworks": SkillCategory.FRAMEWORK,
    "databases": SkillCategory.DATABASE,
    "cloud_platforms": SkillCategory.CLOUD,
    "cloud": SkillCategory.CLOUD,
    "tools": SkillCategory.TOOL,
    "soft_skills": SkillCategory.SOFT_SKILL,
}


def _taxonomy_category_for(skill_category: SkillCategory, taxonomy: KeywordTaxonomy) -> str | None:
    for category in taxonomy.categories:
        if category.skill_category is skill_category:
            return category.name
    return None


def _extend(
    grouped: dict[str, list[str]], skill_category: SkillCategory, terms: frozenset[str]
) -> None:
    if not terms:
        return
    bucket = grouped.setdefault(skill_category.value, [])
    bucket.extend(term for term in sorted(terms) if term not in bucket)


def matches_from_llm_skills(
    extracted: Mapping[str, list[str]], taxonomy: KeywordTaxonomy
) -> dict[str, CategoryMatchResult]:
    """Translate the model's extractedSkills into taxonomy-keyed match results.

    Skills known to the taxonomy land in their taxonomy category under their
    canonical term; unknown skills go to the category implied by the model's
    grouping (or ``other`` when the grouping is unknown).
    """
    terms_by_category: dict[str, set[str]] = {}
    hits_by_category: dict[str, int] = {}

    for raw_category, skills in extracted.items():
        skill_category = LLM_SKILL_CATEGORIES.get(
            raw_category.strip().lower(), SkillCategory.OTHER
        )
        fallback_name = (
            _taxonomy_category_for(skill_category, taxonomy) or skill_category.value
        )
        for skill in skills:
            term, category_name = canonical_term(str(skill), taxonomy)
            if not term:
                continue
            name = category_name or fallback_name
            terms_by_category.setdefault(name, set()).add(term)
            hits_by_category[name] = hits_by_category.get(name, 0) + 1

    ordered: dict[str, CategoryMatchResult] = {}
    known = [c.name for c in taxonomy.categories]
    extra = sorted(name for name in terms_by_category if name not in known)
    for name in known + extra:
        if name in terms_by_category:
            ordered[name] = CategoryMatchResult(
                category=name,
                hit_count=hits_by_category[name],
                matched_terms=frozenset(terms_by_category[name]),
            )
    return ordered


def skills_from_matches(
    matches: Mapping[str, CategoryMatchResult], taxonomy: KeywordTaxonomy
) -> dict[str, list[str]]:
    """Group matched terms by skill category.

    Taxonomy categories without a skill category (action verbs, education,
    experience) do not contribute; match results keyed by a name outside the
    taxonomy are grouped by that name when it is a skill category, else as
    ``other``. Empty groups are omitted.
    """
    grouped: dict[str, list[str]] = {}
    known: set[str] = set()
    for category in taxonomy.categories:
        known.add(category.name)
        if category.skill_category is None or category.name not in matches:
            continue
        _extend(grouped, category.skill_category, matches[category.name].matched_terms)

    for name, result in matches.items():
        if name in known:
            continue
        try:
            skill_category = SkillCategory(name)
        except ValueError:
            skill_category = SkillCategory.OTHER
        _extend(grouped, skill_category, result.matched_terms)
    return grouped


def skill_records(report: AnalysisReport) -> list[SkillRecord]:
    """Flatten a report's extracted skills into one record per skill."""
    records: list[SkillRecord] = []
    seen: set[str] = set()
    for skill_category in SkillCategory:
        for name in report.extracted_skills.get(skill_category.value, []):
            if name in seen:
                continue
            seen.add(name)
            records.append(SkillRecord(name=name, category=skill_category))
    return records
