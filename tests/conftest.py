"""Pytest configuration and shared fixtures."""

import os
from datetime import UTC, datetime

import pytest

SAMPLE_RESUME = """Jane Doe
Email: jane.doe@example.com | Phone: 555-0100 | LinkedIn: linkedin.com/in/janedoe

Summary
Backend engineer with 5 years of experience building Python services.

Skills
Python, JavaScript, React, Django, PostgreSQL, Redis, Docker, AWS, Git

Experience
Senior Engineer, Acme Corp (2019 - 2024)
- Developed a Django REST API serving 2 million requests per day
- Optimized PostgreSQL queries, reducing latency by 40%
- Led a team of 4 engineers and delivered 3 product launches
- Implemented CI/CD pipelines with Docker and Jenkins

Education
Bachelor of Science in Computer Science, State University
"""

FIXED_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep local ATS_* variables and cached singletons out of tests."""
    from resume_ats.config.settings import reset_settings
    from resume_ats.scoring.config import reset_scoring_config
    from resume_ats.utils.logging import reset_logging

    for key in list(os.environ):
        if key.upper().startswith("ATS_") or key.upper() in {"LOG_LEVEL", "OUTPUT_DIR"}:
            monkeypatch.delenv(key, raising=False)

    reset_settings()
    reset_scoring_config()
    yield
    reset_settings()
    reset_scoring_config()
    reset_logging()


@pytest.fixture
def sample_resume_text() -> str:
    """A short but complete resume."""
    return SAMPLE_RESUME


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: FIXED_TIME


@pytest.fixture
def scoring_config():
    """ScoringConfig that ignores any local .env file."""
    from resume_ats.scoring.config import ScoringConfig

    return ScoringConfig(_env_file=None)  # type: ignore[call-arg]
