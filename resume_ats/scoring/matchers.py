"""Keyword matching utilities for resume analysis."""

from __future__ import annotations

import re
from functools import lru_cache

from resume_ats.scoring.models import CategoryMatchResult
from resume_ats.scoring.taxonomy import KeywordTaxonomy

# Characters that extend a technical term: "c" must not match inside "c++"
# or "c#", and "node" must not match inside "node.js".
_LEFT_BOUNDARY = r"(?<![\w+#])(?<!\w\.)"
_RIGHT_BOUNDARY = r"(?![\w+#])(?!\.\w)"

_SKILL_ALIASES: dict[str, str] = {
    "js": "javascript",
    "python3": "python",
    "golang": "go",
    "ts": "typescript",
    "nodejs": "node.js",
    "node js": "node.js",
    "node": "node.js",
    "reactjs": "react",
    "react.js": "react",
    "react js": "react",
    "vue.js": "vue",
    "vuejs": "vue",
    "angularjs": "angular",
    "nextjs": "next.js",
    "next js": "next.js",
    "express.js": "express",
    "expressjs": "express",
    "spring boot": "spring",
    "ruby on rails": "rails",
    "asp.net": ".net",
    "dotnet": ".net",
    "html5": "html",
    "css3": "css",
    "postgres": "postgresql",
    "mongo db": "mongodb",
    "mongo": "mongodb",
    "mssql": "sql server",
    "amazon web services": "aws",
    "google cloud platform": "gcp",
    "k8s": "kubernetes",
    "visual studio code": "vs code",
    "vscode": "vs code",
    "restful api": "rest api",
    "rest apis": "rest api",
    "object oriented programming": "oop",
    "team work": "teamwork",
    "problem-solving": "problem solving",
}


@lru_cache(maxsize=1024)
def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Compile a boundary-aware pattern that treats ``keyword`` literally."""
    return re.compile(_LEFT_BOUNDARY + re.escape(keyword.lower()) + _RIGHT_BOUNDARY)


def count_keyword(text: str, keyword: str) -> int:
    """Count occurrences of ``keyword`` in already lower-cased text."""
    return len(keyword_pattern(keyword).findall(text))


def match_keywords(text: str, keywords: tuple[str, ...], category: str) -> CategoryMatchResult:
    """Match one keyword list against text.

    Every occurrence counts towards ``hit_count``; each keyword appears in
    ``matched_terms`` at most once.
    """
    lower_text = text.lower()
    hit_count = 0
    matched: set[str] = set()

    for keyword in keywords:
        occurrences = count_keyword(lower_text, keyword)
        if occurrences:
            hit_count += occurrences
            matched.add(keyword)

    return CategoryMatchResult(
        category=category, hit_count=hit_count, matched_terms=frozenset(matched)
    )


def match_categories(text: str, taxonomy: KeywordTaxonomy) -> dict[str, CategoryMatchResult]:
    """Match every taxonomy category against text, in taxonomy order."""
    return {
        category.name: match_keywords(text, category.keywords, category.name)
        for category in taxonomy.categories
    }


def normalize_skill(skill: str) -> str:
    """Normalize a skill string for comparison.

    Performs lowercasing, whitespace normalization, and trims common
    surrounding punctuation while preserving meaningful characters
    like "+", "#", and "." (e.g. "C++", "C#", "Node.js").
    """
    value = skill.strip().lower()
    value = re.sub(r"\([^)]*\)", "", value)
    value = re.sub(r"\s+", " ", value)
    return value.strip(" ,;:")


def canonical_term(skill: str, taxonomy: KeywordTaxonomy) -> tuple[str, str | None]:
    """Return ``(term, category_name)`` for a free-form skill name.

    The term is the taxonomy keyword when the skill (or a known alias of it)
    is in the taxonomy, otherwise the normalized skill name with no category.
    """
    normalized = normalize_skill(skill)
    term = _SKILL_ALIASES.get(normalized, normalized)
    for category in taxonomy.categories:
        if category.skill_category is not None and term in category.keywords:
            return term, category.name
    return term, None
