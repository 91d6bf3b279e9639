"""
Data models shared by the extraction, scoring and feedback stages.

Every model is frozen: facts, scores and results are created once per
analysis run and never edited afterwards. Serialized field names are
camelCase so a stored scan reads back verbatim.
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .config import EDUCATION_LEVEL_ALIASES, EDUCATION_LEVEL_LABELS

# Scanned when no alias matches exactly
_EDUCATION_KEYWORDS = [
    ("phd", "PHD"),
    ("doctor", "PHD"),
    ("master", "MASTERS"),
    ("bachelor", "BACHELORS"),
    ("high school", "HIGH_SCHOOL"),
    ("highschool", "HIGH_SCHOOL"),
]


class EducationLevel(IntEnum):
    """Ordinal education levels: NONE < HIGH_SCHOOL < BACHELORS < MASTERS < PHD."""

    NONE = 0
    HIGH_SCHOOL = 1
    BACHELORS = 2
    MASTERS = 3
    PHD = 4

    @property
    def label(self) -> str:
        return EDUCATION_LEVEL_LABELS[self.name]

    @classmethod
    def from_label(cls, value: Any, lowest: bool = False) -> "EducationLevel":
        """
        Map an oracle-supplied education value onto the enum.

        Unknown, empty or missing values map to NONE, the lowest level. When a
        label names several levels ("Bachelor's or Master's") the highest is
        used, or the lowest with `lowest=True` (for requirements).
        """
        if isinstance(value, EducationLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value) if 0 <= value <= cls.PHD else cls.NONE
        if not isinstance(value, str):
            return cls.NONE

        key = re.sub(r"[^a-z/ ]", "", value.lower().replace("-", " ").replace("_", " "))
        key = " ".join(key.split())
        if key in EDUCATION_LEVEL_ALIASES:
            return cls[EDUCATION_LEVEL_ALIASES[key]]
        found = [cls[name] for keyword, name in _EDUCATION_KEYWORDS if keyword in key]
        if not found:
            return cls.NONE
        return min(found) if lowest else max(found)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TimelineEntry(_FrozenModel):
    role: str = ""
    company: str = ""
    start_date: str = ""
    end_date: str = ""


class ExtractedCvFacts(_FrozenModel):
    """Comparable facts pulled out of a CV."""
    hard_skills: Tuple[str, ...] = ()
    soft_skills: Tuple[str, ...] = ()
    total_experience_years: float = Field(default=0, ge=0, allow_inf_nan=False)
    highest_education: EducationLevel = EducationLevel.NONE
    action_verb_count: int = Field(default=0, ge=0)
    quantified_result_count: int = Field(default=0, ge=0)
    job_timeline: Tuple[TimelineEntry, ...] = ()

    @field_validator("highest_education", mode="before")
    @classmethod
    def _education(cls, v: Any) -> EducationLevel:
        return EducationLevel.from_label(v)


class ExtractedJobFacts(_FrozenModel):
    """Requirements pulled out of a job description."""
    required_hard_skills: Tuple[str, ...] = ()
    required_soft_skills: Tuple[str, ...] = ()
    required_experience_years: float = Field(default=0, ge=0, allow_inf_nan=False)
    required_education: EducationLevel = EducationLevel.NONE

    @field_validator("required_education", mode="before")
    @classmethod
    def _education(cls, v: Any) -> EducationLevel:
        return EducationLevel.from_label(v, lowest=True)


class KeywordMatchResult(_FrozenModel):
    matched: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()


class SkillsDimension(_FrozenModel):
    score: int
    weight: int
    matched: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()


class ExperienceDimension(_FrozenModel):
    score: int
    weight: int
    required: float = 0
    found: float = 0


class ImpactDimension(_FrozenModel):
    score: int
    weight: int
    action_verbs: int = 0
    quantified_results: int = 0


class EducationDimension(_FrozenModel):
    score: int
    weight: int
    required: str = EDUCATION_LEVEL_LABELS["NONE"]
    found: str = EDUCATION_LEVEL_LABELS["NONE"]


class ScoreBreakdown(_FrozenModel):
    hard_skills: SkillsDimension
    soft_skills: SkillsDimension
    experience: ExperienceDimension
    impact: ImpactDimension
    education: EducationDimension

    def dimensions(self) -> Dict[str, BaseModel]:
        """Dimensions keyed by their serialized name, in weight order."""
        return {
            "hardSkills": self.hard_skills,
            "softSkills": self.soft_skills,
            "experience": self.experience,
            "impact": self.impact,
            "education": self.education,
        }


class ScoreResult(_FrozenModel):
    overall_score: int = Field(ge=0, le=100)
    score_breakdown: ScoreBreakdown


class QualitativeFeedback(_FrozenModel):
    recruiter_gut_reaction: str
    final_summary: str
    suggested_interview_questions: Tuple[str, ...] = ()


class AnalysisResult(_FrozenModel):
    """The outcome of one analysis run, persisted as-is."""
    overall_score: int = Field(ge=0, le=100)
    score_breakdown: ScoreBreakdown
    qualitative_feedback: QualitativeFeedback
    timeline: Tuple[TimelineEntry, ...] = ()


class ScanRecord(_FrozenModel):
    """A stored scan: the analysis result plus listing metadata."""
    scan_id: str
    overall_score: int
    job_title_snippet: str
    cv_file_name: str = ""
    created_at: Optional[datetime] = None
    full_result: AnalysisResult
