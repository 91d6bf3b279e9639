"""
Keyword Matching Module

Tolerant ("fuzzy") comparison of a job's required keywords against a
candidate's keywords. Skill phrasing varies ("SQL" vs "MS SQL Server",
"report" vs "reporting"), so a required keyword counts as matched on exact,
singular/plural or substring equivalence in either direction.

Known limitation: substring containment gives false positives for short
acronyms ("bi" matches inside unrelated words).
"""

import logging
from typing import Iterable, List

from .schemas import KeywordMatchResult

logger = logging.getLogger(__name__)


def normalize_keywords(keywords: Iterable[str]) -> List[str]:
    """Lower-case and trim keywords, dropping blanks and duplicates (order kept)."""
    normalized: List[str] = []
    seen = set()
    for keyword in keywords or []:
        if keyword is None:
            continue
        k = str(keyword).lower().strip()
        if k and k not in seen:
            seen.add(k)
            normalized.append(k)
    return normalized


def singular(keyword: str) -> str:
    """Naive singular: strip one trailing 's'."""
    return keyword[:-1] if keyword.endswith("s") else keyword


def plural(keyword: str) -> str:
    """Naive plural: append 's' unless already present."""
    return keyword if keyword.endswith("s") else keyword + "s"


def keywords_match(required: str, candidate: str) -> bool:
    """
    Whether one normalized required keyword is equivalent to one normalized
    candidate keyword.
    """
    required_singular = singular(required)
    candidate_singular = singular(candidate)

    # Exact match or simple plural match
    if required == candidate or required_singular == candidate_singular:
        return True
    # Required keyword inside the candidate phrase ("sql" in "ms sql server")
    if required in candidate or required_singular in candidate or plural(required) in candidate:
        return True
    # Candidate keyword inside the required phrase ("bi" in "power bi")
    if candidate in required or candidate_singular in required_singular:
        return True
    return False


def match_keywords(required: Iterable[str], candidate: Iterable[str]) -> KeywordMatchResult:
    """
    Split required keywords into matched and missing.

    Args:
        required: Keywords the job asks for
        candidate: Keywords found in the CV

    Returns:
        KeywordMatchResult whose matched and missing lists partition the
        normalized required keywords
    """
    required_keywords = normalize_keywords(required)
    candidate_keywords = normalize_keywords(candidate)

    matched: List[str] = []
    missing: List[str] = []
    for keyword in required_keywords:
        if any(keywords_match(keyword, c) for c in candidate_keywords):
            matched.append(keyword)
        else:
            missing.append(keyword)

    logger.debug(f"Keywords: {len(matched)}/{len(required_keywords)} matched, missing={missing}")
    return KeywordMatchResult(matched=tuple(matched), missing=tuple(missing))
