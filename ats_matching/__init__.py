"""
Deterministic ATS CV-to-Job Scoring

This package provides a three-step analysis:
1. LLM extraction of structured facts from a CV and a job description
2. Deterministic, reproducible scoring of those facts
3. LLM recruiter feedback seeded with the score

Usage:
    from ats_matching import analyze_cv

    result = analyze_cv(cv_text, job_description)
    print(f"Score: {result.overall_score}")
"""

from .config import WEIGHTS
from .errors import (
    AnalysisFailedError,
    AtsMatchingError,
    DocumentExtractionError,
    ExtractionError,
    JsonParseError,
    OracleCallError,
    OracleError,
    OracleResponseError,
    OracleTimeoutError,
    PersistenceError,
)
from .keyword_matcher import match_keywords
from .matcher import AnalysisProgress, AnalysisState, analyze_cv, run_analysis
from .oracle import TextOracle
from .schemas import AnalysisResult, EducationLevel, ExtractedCvFacts, ExtractedJobFacts
from .scoring_engine import score_analysis

__all__ = [
    "WEIGHTS",
    "AnalysisFailedError",
    "AnalysisProgress",
    "AnalysisResult",
    "AnalysisState",
    "AtsMatchingError",
    "DocumentExtractionError",
    "EducationLevel",
    "ExtractedCvFacts",
    "ExtractedJobFacts",
    "ExtractionError",
    "JsonParseError",
    "OracleCallError",
    "OracleError",
    "OracleResponseError",
    "OracleTimeoutError",
    "PersistenceError",
    "TextOracle",
    "analyze_cv",
    "match_keywords",
    "run_analysis",
    "score_analysis",
]
__version__ = "1.0.0"
