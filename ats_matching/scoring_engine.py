"""
Deterministic Scoring Engine

All scoring functions are deterministic - same inputs produce same outputs.
No AI/LLM is used in this module.

Each dimension is worth `weight * 100` points. Sub-scores are rounded up
independently and only then summed; summing first and rounding once gives
different results at the boundaries, so the order must not change.
Arithmetic is done on exact fractions built from each value's decimal form.
"""

import logging
import math
from fractions import Fraction
from typing import Iterable

from .config import IMPACT_SPLIT, IMPACT_TARGETS, MAX_SCORE, WEIGHTS
from .keyword_matcher import match_keywords
from .schemas import (
    EducationDimension,
    EducationLevel,
    ExperienceDimension,
    ExtractedCvFacts,
    ExtractedJobFacts,
    ImpactDimension,
    ScoreBreakdown,
    ScoreResult,
    SkillsDimension,
)

logger = logging.getLogger(__name__)


def _exact(value) -> Fraction:
    return Fraction(str(value))


def weight_points(dimension: str) -> Fraction:
    """Points a dimension is worth (weight * 100)."""
    return _exact(WEIGHTS[dimension]) * 100


def calculate_skills_score(
    required_skills: Iterable[str],
    candidate_skills: Iterable[str],
    dimension: str = "hard_skills",
) -> SkillsDimension:
    """
    Calculate a skills dimension.

    Formula:
    - ceil(matched / required * points)
    - No required skills = full points

    Args:
        required_skills: Skills the job asks for
        candidate_skills: Skills found in the CV
        dimension: "hard_skills" or "soft_skills"
    """
    points = weight_points(dimension)
    result = match_keywords(required_skills, candidate_skills)
    total = len(result.matched) + len(result.missing)

    if total:
        score = math.ceil(Fraction(len(result.matched), total) * points)
        logger.debug(f"{dimension}: {len(result.matched)}/{total} matched, score = {score}")
    else:
        score = math.ceil(points)
        logger.debug(f"{dimension}: no requirements, score = {score}")

    return SkillsDimension(
        score=score,
        weight=int(points),
        matched=result.matched,
        missing=result.missing,
    )


def calculate_experience_score(required_years: float, candidate_years: float) -> ExperienceDimension:
    """
    Calculate the experience dimension.

    Formula:
    - ceil(min(1, candidate / required) * points)
    - No experience required = full points
    """
    points = weight_points("experience")

    if required_years > 0:
        ratio = min(Fraction(1), _exact(candidate_years) / _exact(required_years))
        score = math.ceil(ratio * points)
        logger.debug(f"Experience: {candidate_years}/{required_years} years, score = {score}")
    else:
        score = math.ceil(points)
        logger.debug("Experience: none required, score = full")

    return ExperienceDimension(
        score=score,
        weight=int(points),
        required=required_years,
        found=candidate_years,
    )


def calculate_impact_score(action_verb_count: int, quantified_result_count: int) -> ImpactDimension:
    """
    Calculate the impact dimension.

    Formula:
    - verbs = min(1, action_verbs / 5), quantified = min(1, quantified_results / 3)
    - ceil((0.5 * verbs + 0.5 * quantified) * points)
    """
    points = weight_points("impact")
    verb_ratio = min(Fraction(1), Fraction(action_verb_count, IMPACT_TARGETS["action_verbs"]))
    quantified_ratio = min(Fraction(1), Fraction(quantified_result_count, IMPACT_TARGETS["quantified_results"]))

    blended = (
        _exact(IMPACT_SPLIT["action_verbs"]) * verb_ratio
        + _exact(IMPACT_SPLIT["quantified_results"]) * quantified_ratio
    )
    score = math.ceil(blended * points)
    logger.debug(f"Impact: {action_verb_count} verbs, {quantified_result_count} quantified, score = {score}")

    return ImpactDimension(
        score=score,
        weight=int(points),
        action_verbs=action_verb_count,
        quantified_results=quantified_result_count,
    )


def calculate_education_score(required_level: EducationLevel, candidate_level: EducationLevel) -> EducationDimension:
    """
    Calculate the education dimension.

    Binary: full points if the candidate's level is at least the required
    level, otherwise 0.
    """
    points = weight_points("education")
    score = math.ceil(points) if candidate_level >= required_level else 0
    logger.debug(f"Education: {candidate_level.label} vs required {required_level.label}, score = {score}")

    return EducationDimension(
        score=score,
        weight=int(points),
        required=required_level.label,
        found=candidate_level.label,
    )


def score_analysis(cv_facts: ExtractedCvFacts, job_facts: ExtractedJobFacts) -> ScoreResult:
    """
    Calculate the overall score and its breakdown.

    Args:
        cv_facts: Facts extracted from the CV
        job_facts: Requirements extracted from the job description

    Returns:
        ScoreResult with overall_score (0-100) and score_breakdown
    """
    logger.info("=" * 60)
    logger.info("Starting deterministic score calculation")
    logger.info("=" * 60)

    breakdown = ScoreBreakdown(
        hard_skills=calculate_skills_score(
            job_facts.required_hard_skills, cv_facts.hard_skills, "hard_skills"
        ),
        soft_skills=calculate_skills_score(
            job_facts.required_soft_skills, cv_facts.soft_skills, "soft_skills"
        ),
        experience=calculate_experience_score(
            job_facts.required_experience_years, cv_facts.total_experience_years
        ),
        impact=calculate_impact_score(
            cv_facts.action_verb_count, cv_facts.quantified_result_count
        ),
        education=calculate_education_score(
            job_facts.required_education, cv_facts.highest_education
        ),
    )

    total = sum(dimension.score for dimension in breakdown.dimensions().values())
    overall_score = min(MAX_SCORE, math.ceil(total))

    for name, dimension in breakdown.dimensions().items():
        logger.info(f"{name}: {dimension.score}/{dimension.weight}")
    logger.info(f"FINAL MATCH SCORE: {overall_score}")
    logger.info("=" * 60)

    return ScoreResult(overall_score=overall_score, score_breakdown=breakdown)
