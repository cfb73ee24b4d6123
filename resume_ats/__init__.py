"""resume-ats: resume quality (ATS) scoring engine."""

__version__ = "0.1.0"
