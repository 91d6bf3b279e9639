"""
Qualitative Feedback Module

One creative oracle call that turns the deterministic score into recruiter
commentary. The commentary is advisory and never feeds back into the score.
"""

import logging
from typing import Optional, Sequence

from .config import FEEDBACK_MISSING_SKILLS_LIMIT, LLM_CONFIG
from .errors import SchemaValidationError
from .json_extractor import parse_json_object
from .llm_extractor import coerce_string_list
from .schemas import QualitativeFeedback

logger = logging.getLogger(__name__)


def build_feedback_prompt(overall_score: int, missing_hard_skills: Sequence[str]) -> str:
    missing = ", ".join(missing_hard_skills) if missing_hard_skills else "none"
    return (
        f"You are a senior recruiter. A candidate has a {overall_score}% match score for a job. "
        f"Their missing keywords include: {missing}. "
        "Your response MUST be ONLY a single minified JSON object. Do NOT include markdown. "
        'JSON: { "recruiterGutReaction": "<string, your 15-second gut reaction>", '
        '"finalSummary": "<string, a strategic summary for the candidate on how to improve>", '
        '"suggestedInterviewQuestions": ["<question 1 based on potential gaps>", "<question 2 about their strengths>"] }'
    )


def _required_text(data: dict, field: str, raw_text: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise SchemaValidationError(f"'{field}' must be a non-empty string", raw_text=raw_text)
    return value.strip()


def parse_feedback(raw_text: str) -> QualitativeFeedback:
    """Validate a raw feedback response."""
    data = parse_json_object(raw_text)
    return QualitativeFeedback(
        recruiter_gut_reaction=_required_text(data, "recruiterGutReaction", raw_text),
        final_summary=_required_text(data, "finalSummary", raw_text),
        suggested_interview_questions=coerce_string_list(
            data.get("suggestedInterviewQuestions"), "suggestedInterviewQuestions", raw_text
        ),
    )


async def generate_feedback(
    overall_score: int,
    missing_hard_skills: Sequence[str],
    oracle,
    temperature: Optional[float] = None,
) -> QualitativeFeedback:
    """
    Ask the oracle for recruiter feedback on a scored analysis.

    Only the first five missing hard skills are included in the prompt.

    Raises:
        OracleError: the call failed, timed out, or returned unusable text
    """
    if temperature is None:
        temperature = LLM_CONFIG["feedback_temperature"]

    top_missing = list(missing_hard_skills)[:FEEDBACK_MISSING_SKILLS_LIMIT]
    raw_text = await oracle.acomplete(build_feedback_prompt(overall_score, top_missing), temperature)
    feedback = parse_feedback(raw_text)
    logger.info(f"Feedback received with {len(feedback.suggested_interview_questions)} interview questions")
    return feedback
