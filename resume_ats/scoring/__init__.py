"""Resume quality (ATS) scoring.

This module scores extracted resume text on a 0-100 scale and produces
qualitative feedback, using either a deterministic keyword analyzer or a
remote generative model behind the same contract.

Public API:
    - create_analyzer: Build the analyzer selected by configuration
    - DeterministicAnalyzer / RemoteAnalyzer / FallbackAnalyzer: Strategies
    - AnalysisReport: Report shared by every strategy
    - KeywordTaxonomy: Immutable keyword configuration
    - ScoringConfig: Configuration settings
"""

from resume_ats.scoring.config import ScoringConfig, get_scoring_config, reset_scoring_config
from resume_ats.scoring.models import (
    AnalysisReport,
    CategoryMatchResult,
    Rating,
    SkillCategory,
    SkillRecord,
    rating_for_score,
)
from resume_ats.scoring.service import (
    DeterministicAnalyzer,
    FallbackAnalyzer,
    RemoteAnalyzer,
    ResumeAnalyzer,
    analyze_many,
    create_analyzer,
    quick_score,
)
from resume_ats.scoring.skills import skill_records
from resume_ats.scoring.taxonomy import KeywordTaxonomy, default_taxonomy, load_taxonomy

__all__ = [
    "create_analyzer",
    "ResumeAnalyzer",
    "DeterministicAnalyzer",
    "RemoteAnalyzer",
    "FallbackAnalyzer",
    "analyze_many",
    "quick_score",
    "AnalysisReport",
    "CategoryMatchResult",
    "Rating",
    "rating_for_score",
    "SkillCategory",
    "SkillRecord",
    "skill_records",
    "KeywordTaxonomy",
    "default_taxonomy",
    "load_taxonomy",
    "ScoringConfig",
    "get_scoring_config",
    "reset_scoring_config",
]
