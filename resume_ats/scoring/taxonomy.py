"""Keyword taxonomy used by the deterministic analyzer.

The taxonomy is an immutable value built once (``default_taxonomy()`` is
cached) and passed explicitly into the matcher and scorers, so a single
instance can be shared by any number of concurrent analyses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from resume_ats.scoring.models import SkillCategory

CategoryGroup = Literal["technical", "soft", "action", "education", "experience"]

SECTION_NAMES: tuple[str, ...] = ("contact", "education", "experience", "skills", "summary")

# Keys used in report keywords for non-keyword signals.
RESERVED_CATEGORY_NAMES: frozenset[str] = frozenset({"structure", "achievements", "formatting"})

DEFAULT_TAXONOMY_VERSION = "2024.1"


@dataclass(frozen=True)
class KeywordCategory:
    """One named keyword list of the taxonomy."""

    name: str
    group: CategoryGroup
    keywords: tuple[str, ...]
    skill_category: SkillCategory | None = None


@dataclass(frozen=True)
class KeywordTaxonomy:
    """Ordered, read-only set of keyword categories and section topics."""

    version: str
    categories: tuple[KeywordCategory, ...]
    section_topics: tuple[tuple[str, tuple[str, ...]], ...]

    def __post_init__(self) -> None:
        names = [category.name for category in self.categories]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate category names in taxonomy: {names}")
        reserved = RESERVED_CATEGORY_NAMES.intersection(names)
        if reserved:
            raise ValueError(f"Reserved category names in taxonomy: {sorted(reserved)}")
        sections = [name for name, _ in self.section_topics]
        if sorted(sections) != sorted(SECTION_NAMES):
            raise ValueError(
                f"section_topics must define exactly {list(SECTION_NAMES)} (got {sections})"
            )

    def group(self, group: CategoryGroup) -> tuple[KeywordCategory, ...]:
        """Return the categories belonging to ``group`` in taxonomy order."""
        return tuple(c for c in self.categories if c.group == group)

    def category(self, name: str) -> KeywordCategory:
        for category in self.categories:
            if category.name == name:
                return category
        raise KeyError(name)

    def topics(self, section: str) -> tuple[str, ...]:
        for name, topics in self.section_topics:
            if name == section:
                return topics
        raise KeyError(section)


_DEFAULT_CATEGORIES: tuple[tuple[str, CategoryGroup, SkillCategory | None, list[str]], ...] = (
    (
        "languages",
        "technical",
        SkillCategory.PROGRAMMING_LANGUAGE,
        ["javascript", "python", "java", "c++", "c#", "ruby", "php", "go", "rust",
         "kotlin", "swift", "typescript", "sql", "html", "css"],
    ),
    (
        "frameworks",
        "technical",
        SkillCategory.FRAMEWORK,
        ["react", "angular", "vue", "node.js", "express", "django", "flask", "spring",
         "laravel", "rails", ".net", "next.js", "nuxt"],
    ),
    (
        "databases",
        "technical",
        SkillCategory.DATABASE,
        ["mysql", "postgresql", "mongodb", "redis", "oracle", "sql server", "dynamodb",
         "cassandra", "elasticsearch"],
    ),
    (
        "cloud",
        "technical",
        SkillCategory.CLOUD,
        ["aws", "azure", "gcp", "google cloud", "docker", "kubernetes", "jenkins",
         "ci/cd", "terraform", "ansible"],
    ),
    (
        "tools",
        "technical",
        SkillCategory.TOOL,
        ["git", "github", "gitlab", "jira", "postman", "vs code", "intellij", "eclipse",
         "maven", "gradle", "npm", "webpack"],
    ),
    (
        "concepts",
        "technical",
        SkillCategory.OTHER,
        ["oop", "design patterns", "data structures", "algorithms", "rest api",
         "graphql", "microservices", "agile", "scrum", "devops", "testing", "tdd",
         "solid"],
    ),
    (
        "soft",
        "soft",
        SkillCategory.SOFT_SKILL,
        ["leadership", "communication", "teamwork", "problem solving", "analytical",
         "creative", "organized", "detail-oriented", "adaptable", "collaborative"],
    ),
    (
        "action",
        "action",
        None,
        ["developed", "created", "implemented", "designed", "built", "led", "managed",
         "improved", "optimized", "achieved", "delivered", "launched", "coordinated",
         "analyzed"],
    ),
    (
        "education",
        "education",
        None,
        ["bachelor", "master", "phd", "b.tech", "m.tech", "bca", "mca", "b.e", "m.e",
         "degree", "diploma", "certification", "certified"],
    ),
    (
        "experience",
        "experience",
        None,
        ["internship", "project", "experience", "worked", "volunteered", "contributed",
         "participated", "hackathon", "competition"],
    ),
)

_DEFAULT_SECTION_TOPICS: dict[str, list[str]] = {
    "contact": ["email", "phone", "linkedin", "github", "portfolio"],
    "education": ["education", "academic", "degree", "university", "college"],
    "experience": ["experience", "work", "employment", "internship", "project"],
    "skills": ["skills", "technical", "technologies", "tools", "languages"],
    "summary": ["summary", "objective", "profile", "about"],
}


def _dedupe(keywords: list[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for keyword in keywords:
        value = keyword.strip().lower()
        if value:
            seen.setdefault(value, None)
    return tuple(seen)


def build_taxonomy(
    *,
    version: str,
    categories: list[tuple[str, CategoryGroup, SkillCategory | None, list[str]]],
    section_topics: dict[str, list[str]],
) -> KeywordTaxonomy:
    """Build a taxonomy, lower-casing and de-duplicating every keyword list."""
    return KeywordTaxonomy(
        version=version,
        categories=tuple(
            KeywordCategory(
                name=name,
                group=group,
                keywords=_dedupe(keywords),
                skill_category=skill_category,
            )
            for name, group, skill_category, keywords in categories
        ),
        section_topics=tuple(
            (section, _dedupe(section_topics[section])) for section in SECTION_NAMES
        ),
    )


@lru_cache(maxsize=1)
def default_taxonomy() -> KeywordTaxonomy:
    """Return the built-in taxonomy (constructed once per process)."""
    return build_taxonomy(
        version=DEFAULT_TAXONOMY_VERSION,
        categories=list(_DEFAULT_CATEGORIES),
        section_topics=_DEFAULT_SECTION_TOPICS,
    )


class _CategorySpec(BaseModel):
    name: str = Field(..., min_length=1)
    group: CategoryGroup
    keywords: list[str] = Field(..., min_length=1)
    skill_category: SkillCategory | None = None


class _TaxonomySpec(BaseModel):
    version: str = Field(default="custom")
    categories: list[_CategorySpec] = Field(..., min_length=1)
    section_topics: dict[str, list[str]] = Field(
        default_factory=lambda: dict(_DEFAULT_SECTION_TOPICS)
    )

    @field_validator("section_topics")
    @classmethod
    def fill_missing_sections(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        unknown = set(v) - set(SECTION_NAMES)
        if unknown:
            raise ValueError(f"Unknown sections in section_topics: {sorted(unknown)}")
        merged = dict(_DEFAULT_SECTION_TOPICS)
        merged.update(v)
        return merged


def load_taxonomy(path: Path | str) -> KeywordTaxonomy:
    """Load and validate a taxonomy from a YAML or JSON file."""
    taxonomy_path = Path(path)
    if not taxonomy_path.exists():
        raise FileNotFoundError(f"Taxonomy not found: {taxonomy_path}")

    raw = taxonomy_path.read_text(encoding="utf-8")
    if taxonomy_path.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON taxonomy: {taxonomy_path}") from e
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML taxonomy: {taxonomy_path}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Taxonomy must be a mapping/dict: {taxonomy_path}")

    try:
        spec = _TaxonomySpec.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid taxonomy {taxonomy_path}: {e}") from e

    return build_taxonomy(
        version=spec.version,
        categories=[
            (c.name, c.group, c.skill_category, c.keywords) for c in spec.categories
        ],
        section_topics=spec.section_topics,
    )
