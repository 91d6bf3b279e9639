"""
Bullet Point Analyzer

Flags resume bullet points that do not lead with an action verb and asks the
oracle for a stronger rewrite.
"""

import logging
import re
from typing import List, Optional, Sequence

from .config import LLM_CONFIG
from .errors import OracleCallError

logger = logging.getLogger(__name__)

# A leading word with a typical verb ending: "Managed", "Led"... "Leading", "Builds"
_ACTION_VERB_START = re.compile(r"^\w+(ed|d|ing|s)\b", re.IGNORECASE)
_BULLET_MARKERS = re.compile(r"^\s*(?:[-*•▪●–]|\d+[.)])\s+")


def is_weak_bullet(bullet: str) -> bool:
    """A bullet is weak if it doesn't start with an action verb, or starts with 'responsible for'."""
    text = (bullet or "").strip()
    return not _ACTION_VERB_START.match(text) or text.lower().startswith("responsible for")


def extract_bullet_points(cv_text: str) -> List[str]:
    """Return the lines of a CV that are written as bullet points, markers stripped."""
    bullets = []
    for line in (cv_text or "").splitlines():
        if _BULLET_MARKERS.match(line):
            text = _BULLET_MARKERS.sub("", line, count=1).strip()
            if text:
                bullets.append(text)
    return bullets


def find_weak_bullets(cv_text: str) -> List[str]:
    return [b for b in extract_bullet_points(cv_text) if is_weak_bullet(b)]


def build_rewrite_prompt(
    bullet_point: str,
    job_title: str,
    job_description: str,
    missing_keywords: Sequence[str] = (),
) -> str:
    keyword_context = ""
    if missing_keywords:
        keyword_context = (
            "Try to naturally incorporate one of these missing keywords if relevant: "
            f"{', '.join(list(missing_keywords)[:3])}."
        )

    return f"""You are an expert CV writer for a "{job_title}" role.
Rewrite the following bullet point to be more impactful.
- Start with a strong, specific action verb.
- Quantify the result with numbers, percentages, or metrics where possible.
- Frame it using the STAR method (Situation, Task, Action, Result) if applicable.
{keyword_context}

Job Description for context: ---{job_description}---
Original bullet point: "{bullet_point}"

Return ONLY the single rewritten bullet point as a string, with no extra text or quotation marks."""


def rewrite_bullet_point(
    bullet_point: str,
    job_title: str,
    job_description: str,
    oracle,
    missing_keywords: Sequence[str] = (),
    temperature: Optional[float] = None,
) -> str:
    """
    Ask the oracle for a stronger version of one bullet point.

    Args:
        oracle: Object exposing `complete(prompt, temperature) -> str`

    Raises:
        ValueError: empty bullet point
        OracleError: the call failed or returned nothing usable
    """
    if not bullet_point or not bullet_point.strip():
        raise ValueError("bullet_point must not be empty")
    if temperature is None:
        temperature = LLM_CONFIG["rewrite_temperature"]

    prompt = build_rewrite_prompt(bullet_point.strip(), job_title, job_description, missing_keywords)
    rewritten = oracle.complete(prompt, temperature).strip().strip('"').strip()
    if not rewritten:
        raise OracleCallError("No content received from AI.")

    logger.debug(f"Rewrote bullet: {bullet_point!r} -> {rewritten!r}")
    return rewritten
