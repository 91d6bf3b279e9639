"""
Main Matcher Module

Orchestrates one ATS analysis run:
1. Extract CV facts and job requirements with the LLM (two concurrent calls)
2. Calculate the deterministic match score
3. Generate qualitative recruiter feedback
4. Save the scan (best effort)

Progress is tracked by an explicit, immutable AnalysisProgress value; each
transition produces a new value and hands it to the caller's callback.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict

from .config import JOB_TITLE_SNIPPET_LENGTH, PERSIST_TIMEOUT_SECONDS, PROGRESS_LABELS, UNTITLED_JOB
from .errors import AnalysisFailedError, InvalidTransitionError, OracleError
from .feedback import generate_feedback
from .llm_extractor import extract_facts
from .oracle import TextOracle
from .schemas import AnalysisResult
from .scoring_engine import score_analysis

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "IDLE"
    EXTRACTING_FACTS = "EXTRACTING_FACTS"
    SCORING = "SCORING"
    GENERATING_FEEDBACK = "GENERATING_FEEDBACK"
    PERSISTING = "PERSISTING"
    DONE = "DONE"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS: Dict[AnalysisState, FrozenSet[AnalysisState]] = {
    AnalysisState.IDLE: frozenset({AnalysisState.EXTRACTING_FACTS}),
    AnalysisState.EXTRACTING_FACTS: frozenset({AnalysisState.SCORING, AnalysisState.FAILED}),
    AnalysisState.SCORING: frozenset({AnalysisState.GENERATING_FEEDBACK, AnalysisState.FAILED}),
    AnalysisState.GENERATING_FEEDBACK: frozenset({AnalysisState.PERSISTING, AnalysisState.FAILED}),
    AnalysisState.PERSISTING: frozenset({AnalysisState.DONE, AnalysisState.FAILED}),
    AnalysisState.DONE: frozenset(),
    AnalysisState.FAILED: frozenset(),
}


class AnalysisProgress(BaseModel):
    """Where an analysis run currently is, with a label for display."""
    model_config = ConfigDict(frozen=True)

    state: AnalysisState = AnalysisState.IDLE
    label: str = PROGRESS_LABELS["IDLE"]
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (AnalysisState.DONE, AnalysisState.FAILED)

    def advance(self, state: AnalysisState, error: Optional[str] = None) -> "AnalysisProgress":
        if state not in ALLOWED_TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"Cannot move from {self.state.value} to {state.value}")
        return AnalysisProgress(state=state, label=PROGRESS_LABELS[state.value], error=error)


ProgressCallback = Callable[[AnalysisProgress], None]


def job_title_snippet(job_text: str) -> str:
    """First line of the first 100 characters of the job description."""
    snippet = (job_text or "")[:JOB_TITLE_SNIPPET_LENGTH].split("\n")[0].strip()
    return snippet or UNTITLED_JOB


def _failure_message(error: BaseException) -> str:
    if isinstance(error, OracleError):
        return f"Analysis failed. Reason: {error.user_message} {error}"
    return f"Analysis failed. Reason: {error}"


async def persist_scan(
    store,
    owner_id: str,
    result: AnalysisResult,
    job_text: str,
    source_file_name: str,
    timeout_seconds: float = PERSIST_TIMEOUT_SECONDS,
) -> Optional[str]:
    """
    Save a scan without letting a failure reach the caller.

    Returns:
        The scan id, or None when saving failed or timed out
    """
    try:
        scan_id = await asyncio.wait_for(
            asyncio.to_thread(
                store.save_scan, owner_id, result, job_title_snippet(job_text), source_file_name
            ),
            timeout=timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Saving scan for {owner_id} timed out after {timeout_seconds}s; result not stored")
        return None
    except Exception as e:
        logger.warning(f"Error saving scan for {owner_id}: {e}", exc_info=True)
        return None

    logger.info(f"✓ Scan saved: {scan_id}")
    return scan_id


async def run_analysis(
    cv_text: str,
    job_text: str,
    oracle=None,
    store=None,
    owner_id: Optional[str] = None,
    source_file_name: str = "",
    on_progress: Optional[ProgressCallback] = None,
    persist_timeout_seconds: float = PERSIST_TIMEOUT_SECONDS,
) -> AnalysisResult:
    """
    Score a CV against a job description.

    Args:
        cv_text: Plain CV text
        job_text: Plain job description text
        oracle: Text oracle (defaults to a TextOracle built from config)
        store: Scan store exposing `save_scan(owner_id, result, job_title_snippet, source_file_name)`
        owner_id: Owner of the scan; nothing is saved without one
        source_file_name: Name of the uploaded CV file
        on_progress: Called with every new AnalysisProgress

    Returns:
        AnalysisResult

    Raises:
        AnalysisFailedError: extraction, scoring or feedback failed

    Example:
        >>> result = await run_analysis(cv_text, job_text)
        >>> print(f"Score: {result.overall_score}")
    """
    oracle = oracle or TextOracle()
    progress = AnalysisProgress()

    def transition(state: AnalysisState, error: Optional[str] = None) -> None:
        nonlocal progress
        progress = progress.advance(state, error)
        logger.info(progress.label)
        if on_progress is not None:
            on_progress(progress)

    logger.info("=" * 80)
    logger.info("STARTING ATS ANALYSIS")
    logger.info("=" * 80)

    transition(AnalysisState.EXTRACTING_FACTS)
    try:
        if not cv_text or not cv_text.strip():
            raise ValueError("CV text is empty")
        if not job_text or not job_text.strip():
            raise ValueError("Job description is empty")

        cv_facts, job_facts = await extract_facts(cv_text, job_text, oracle)

        transition(AnalysisState.SCORING)
        score = score_analysis(cv_facts, job_facts)

        transition(AnalysisState.GENERATING_FEEDBACK)
        feedback = await generate_feedback(
            score.overall_score, score.score_breakdown.hard_skills.missing, oracle
        )
    except Exception as e:
        stage = progress.state.value
        message = _failure_message(e)
        logger.error(f"Analysis pipeline failed during {stage}: {e}", exc_info=True)
        transition(AnalysisState.FAILED, error=message)
        raise AnalysisFailedError(
            message, stage=stage, cause=e, raw_text=getattr(e, "raw_text", None)
        ) from e

    result = AnalysisResult(
        overall_score=score.overall_score,
        score_breakdown=score.score_breakdown,
        qualitative_feedback=feedback,
        timeline=cv_facts.job_timeline,
    )

    transition(AnalysisState.PERSISTING)
    if store is not None and owner_id:
        await persist_scan(store, owner_id, result, job_text, source_file_name, persist_timeout_seconds)
    else:
        logger.info("No owner or store given, scan not saved")
    transition(AnalysisState.DONE)

    logger.info("=" * 80)
    logger.info(f"ANALYSIS COMPLETE - Score: {result.overall_score}")
    logger.info("=" * 80)
    return result


def analyze_cv(cv_text: str, job_text: str, **kwargs) -> AnalysisResult:
    """
    Blocking wrapper around run_analysis for scripts and sync callers.

    Runs on a private event loop whose worker threads are not joined on exit,
    so an oracle call or scan write abandoned by its timeout cannot delay the
    result or the error.
    """
    loop = asyncio.new_event_loop()
    executor = ThreadPoolExecutor(thread_name_prefix="ats-analysis")
    loop.set_default_executor(executor)
    try:
        return loop.run_until_complete(run_analysis(cv_text, job_text, **kwargs))
    finally:
        pending = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()
        loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        executor.shutdown(wait=False)
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
