"""
LLM Extraction Module

Asks the oracle for two structured fact sheets, one from the CV and one from
the job description, and validates them field by field.
"""

import asyncio
import logging
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from .config import LLM_CONFIG
from .errors import SchemaValidationError
from .json_extractor import parse_json_object
from .schemas import EducationLevel, ExtractedCvFacts, ExtractedJobFacts, TimelineEntry

logger = logging.getLogger(__name__)


_SKILL_RULES = """Hard skills include:
1. Technical concepts and processes (e.g., Accounts Payable, General Ledger, Reconciliations, IFRS, GAAP, SEO, Agile).
2. Software and tools (e.g., SAP, QuickBooks, Excel, Python, PowerBI, Figma, Jira).
Soft skills are named interpersonal or behavioural competencies (e.g., Leadership, Stakeholder Management).
Only return terms that are technical processes, tools, or named competencies. Do NOT return generic words
such as "work", "team", "experience" or "responsible".
Be literal and extract any term that matches these categories, even if it appears in a sentence."""

_EDUCATION_CHOICES = '"None", "High School", "Bachelors", "Masters" or "PhD"'


def build_cv_prompt(cv_text: str) -> str:
    return f"""Your task is to analyze the following CV text and extract a comprehensive list of hard skills.
{_SKILL_RULES}
Also extract soft skills, the total years of professional experience, the highest education level
(one of {_EDUCATION_CHOICES}), the number of bullet points that start with a strong action verb,
the number of results quantified with numbers, percentages or metrics, and the job timeline.
Return ONLY a single minified JSON object with exactly this structure:
{{"cvKeywords": {{"hardSkills": ["<string>"], "softSkills": ["<string>"]}}, "cvQualifications": {{"totalExperienceYears": <number>, "highestEducation": "<string>"}}, "impactMetrics": {{"actionVerbCount": <integer>, "quantifiedResultsCount": <integer>}}, "jobTimeline": [{{"role": "<string>", "company": "<string>", "startDate": "<YYYY-MM>", "endDate": "<YYYY-MM or 'Present'>"}}]}}
CV: --- {cv_text} ---"""


def build_job_prompt(job_text: str) -> str:
    return f"""Your task is to analyze the following Job Description and extract a comprehensive list of required hard skills.
{_SKILL_RULES}
Also extract required soft skills, the minimum years of experience required (0 if not specified) and the
minimum education level required (one of {_EDUCATION_CHOICES}; "None" if not specified).
Return ONLY a single minified JSON object with exactly this structure:
{{"jdKeywords": {{"hardSkills": ["<string>"], "softSkills": ["<string>"]}}, "jdRequirements": {{"experienceYears": <number>, "educationLevel": "<string>"}}}}
JD: --- {job_text} ---"""


def _section(data: Dict[str, Any], key: str, raw_text: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SchemaValidationError(f"'{key}' must be an object, got {type(value).__name__}", raw_text=raw_text)
    return value


def coerce_string_list(value: Any, field: str, raw_text: str) -> Tuple[str, ...]:
    """
    Validate a list of strings, accepting a single comma-separated string.

    Blank items are dropped and duplicates (case-insensitive) removed, keeping
    the first spelling seen.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        raise SchemaValidationError(f"'{field}' must be a list, got {type(value).__name__}", raw_text=raw_text)

    items: List[str] = []
    seen = set()
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        text = str(item).strip()
        if text and text.lower() not in seen:
            seen.add(text.lower())
            items.append(text)
    return tuple(items)


def coerce_number(value: Any, field: str, raw_text: str) -> float:
    """
    Validate a non-negative number.

    Strings like "5+ years" use the first number they contain; strings with no
    number count as 0. Negative values clamp to 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise SchemaValidationError(f"'{field}' must be a number, got bool", raw_text=raw_text)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise SchemaValidationError(f"'{field}' is too large", raw_text=raw_text)
        if not math.isfinite(number):
            raise SchemaValidationError(f"'{field}' must be a finite number", raw_text=raw_text)
        return max(0.0, number)
    if isinstance(value, str):
        numbers = re.findall(r'-?\d+\.?\d*', value)
        return max(0.0, float(numbers[0])) if numbers else 0.0
    raise SchemaValidationError(f"'{field}' must be a number, got {type(value).__name__}", raw_text=raw_text)


def coerce_count(value: Any, field: str, raw_text: str) -> int:
    return int(coerce_number(value, field, raw_text))


def coerce_education(value: Any, field: str, raw_text: str, lowest: bool = False) -> EducationLevel:
    if value is None or isinstance(value, (str, int)) and not isinstance(value, bool):
        return EducationLevel.from_label(value, lowest=lowest)
    raise SchemaValidationError(f"'{field}' must be a string, got {type(value).__name__}", raw_text=raw_text)


def coerce_timeline(value: Any, raw_text: str) -> Tuple[TimelineEntry, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise SchemaValidationError(f"'jobTimeline' must be a list, got {type(value).__name__}", raw_text=raw_text)

    entries = []
    for item in value:
        if not isinstance(item, dict):
            raise SchemaValidationError("'jobTimeline' entries must be objects", raw_text=raw_text)
        entries.append(TimelineEntry(
            role=str(item.get("role") or ""),
            company=str(item.get("company") or ""),
            start_date=str(item.get("startDate") or ""),
            end_date=str(item.get("endDate") or ""),
        ))
    return tuple(entries)


def parse_cv_facts(raw_text: str) -> ExtractedCvFacts:
    """Turn a raw CV-extraction response into validated facts."""
    data = parse_json_object(raw_text)
    keywords = _section(data, "cvKeywords", raw_text)
    qualifications = _section(data, "cvQualifications", raw_text)
    impact = _section(data, "impactMetrics", raw_text)

    return ExtractedCvFacts(
        hard_skills=coerce_string_list(keywords.get("hardSkills"), "hardSkills", raw_text),
        soft_skills=coerce_string_list(keywords.get("softSkills"), "softSkills", raw_text),
        total_experience_years=coerce_number(qualifications.get("totalExperienceYears"), "totalExperienceYears", raw_text),
        highest_education=coerce_education(qualifications.get("highestEducation"), "highestEducation", raw_text),
        action_verb_count=coerce_count(impact.get("actionVerbCount"), "actionVerbCount", raw_text),
        quantified_result_count=coerce_count(impact.get("quantifiedResultsCount"), "quantifiedResultsCount", raw_text),
        job_timeline=coerce_timeline(data.get("jobTimeline"), raw_text),
    )


def parse_job_facts(raw_text: str) -> ExtractedJobFacts:
    """Turn a raw job-extraction response into validated requirements."""
    data = parse_json_object(raw_text)
    keywords = _section(data, "jdKeywords", raw_text)
    requirements = _section(data, "jdRequirements", raw_text)

    return ExtractedJobFacts(
        required_hard_skills=coerce_string_list(keywords.get("hardSkills"), "hardSkills", raw_text),
        required_soft_skills=coerce_string_list(keywords.get("softSkills"), "softSkills", raw_text),
        required_experience_years=coerce_number(requirements.get("experienceYears"), "experienceYears", raw_text),
        required_education=coerce_education(
            requirements.get("educationLevel"), "educationLevel", raw_text, lowest=True
        ),
    )


async def extract_facts(
    cv_text: str,
    job_text: str,
    oracle,
    temperature: Optional[float] = None,
) -> Tuple[ExtractedCvFacts, ExtractedJobFacts]:
    """
    Extract CV facts and job requirements with two concurrent oracle calls.

    Args:
        cv_text: Plain CV text
        job_text: Plain job description text
        oracle: Object exposing `async acomplete(prompt, temperature) -> str`
        temperature: Override for the extraction temperature (defaults to 0)

    Returns:
        (ExtractedCvFacts, ExtractedJobFacts)

    Raises:
        OracleError: either call failed, timed out, or returned unusable text
    """
    if temperature is None:
        temperature = LLM_CONFIG["extraction_temperature"]

    cv_response, job_response = await asyncio.gather(
        oracle.acomplete(build_cv_prompt(cv_text), temperature),
        oracle.acomplete(build_job_prompt(job_text), temperature),
    )

    cv_facts = parse_cv_facts(cv_response)
    job_facts = parse_job_facts(job_response)

    logger.info(f"CV: {len(cv_facts.hard_skills)} hard skills, {len(cv_facts.soft_skills)} soft skills, "
                f"{cv_facts.total_experience_years} years exp, {cv_facts.highest_education.label}")
    logger.info(f"Job: {len(job_facts.required_hard_skills)} required hard skills, "
                f"{len(job_facts.required_soft_skills)} soft skills, "
                f"{job_facts.required_experience_years} years exp, {job_facts.required_education.label}")
    return cv_facts, job_facts
