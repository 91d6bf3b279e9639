"""
Unit tests for the analysis orchestrator.
"""

import logging
import time
import unittest

from fakes import EXPECTED_SCORE, FakeOracle, RecordingStore

from ats_matching import analyze_cv
from ats_matching.errors import (
    AnalysisFailedError,
    InvalidTransitionError,
    OracleCallError,
    OracleTimeoutError,
    PersistenceError,
)
from ats_matching.matcher import AnalysisProgress, AnalysisState, job_title_snippet, run_analysis
from ats_matching.oracle import TextOracle

# Configure logging for tests
logging.basicConfig(level=logging.INFO)


SAMPLE_JOB_DESCRIPTION = """Senior Data Analyst
Northwind Freight is hiring a Senior Data Analyst to own reporting for our logistics network.

Requirements:
- 5+ years of analytics experience
- Master's degree in Statistics, Economics or a related field
- SQL, Python and AWS
- Clear communication and leadership of small projects
"""

SAMPLE_CV = """Jordan Example
Data Analyst | Acme | 2021-01 - Present
- Built weekly SQL Server dashboards used by 40 regional managers
- Automated invoice matching in Python 3, cutting manual effort by 30%
- Reduced month-end close by 2 days with Excel models
- Presented findings to the finance leadership team
- Migrated 12 legacy reports to the new warehouse

EDUCATION
BSc Economics
"""


class TestRunAnalysis(unittest.IsolatedAsyncioTestCase):

    async def test_successful_run(self):
        oracle = FakeOracle()
        store = RecordingStore()
        seen = []

        result = await run_analysis(
            SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=oracle, store=store,
            owner_id="user-1", source_file_name="jordan.pdf", on_progress=seen.append,
        )

        self.assertEqual(result.overall_score, EXPECTED_SCORE)
        self.assertEqual(set(result.score_breakdown.hard_skills.missing), {"aws"})
        self.assertEqual(result.qualitative_feedback.recruiter_gut_reaction, "Solid analyst, light on cloud.")
        self.assertEqual(result.timeline[0].company, "Acme")

        self.assertEqual(
            [p.state for p in seen],
            [AnalysisState.EXTRACTING_FACTS, AnalysisState.SCORING, AnalysisState.GENERATING_FEEDBACK,
             AnalysisState.PERSISTING, AnalysisState.DONE],
        )
        self.assertTrue(seen[-1].is_terminal)
        self.assertEqual(seen[0].label, "Step 1/4: Analyzing your CV and job description...")

        self.assertEqual(len(store.saved), 1)
        owner_id, saved_result, snippet, file_name = store.saved[0]
        self.assertEqual(owner_id, "user-1")
        self.assertEqual(saved_result, result)
        self.assertEqual(snippet, "Senior Data Analyst")
        self.assertEqual(file_name, "jordan.pdf")

    async def test_feedback_receives_missing_hard_skills(self):
        oracle = FakeOracle()
        await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=oracle)

        self.assertEqual(sorted(oracle.kinds()[:2]), ["cv", "job"])
        self.assertEqual(oracle.kinds()[2], "feedback")
        feedback_prompt = oracle.calls[2][1]
        self.assertIn(f"{EXPECTED_SCORE}%", feedback_prompt)
        self.assertIn("aws", feedback_prompt)

    async def test_nothing_saved_without_owner(self):
        store = RecordingStore()
        seen = []
        result = await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=FakeOracle(),
                                    store=store, on_progress=seen.append)
        self.assertEqual(result.overall_score, EXPECTED_SCORE)
        self.assertEqual(store.saved, [])
        self.assertIn(AnalysisState.PERSISTING, [p.state for p in seen])
        self.assertEqual(seen[-1].state, AnalysisState.DONE)

    async def test_save_failure_does_not_fail_analysis(self):
        store = RecordingStore(error=PersistenceError("permission denied"))
        seen = []
        with self.assertLogs("ats_matching.matcher", level="WARNING"):
            result = await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=FakeOracle(),
                                        store=store, owner_id="user-1", on_progress=seen.append)
        self.assertEqual(result.overall_score, EXPECTED_SCORE)
        self.assertEqual(seen[-1].state, AnalysisState.DONE)

    async def test_slow_save_is_abandoned(self):
        store = RecordingStore(delay=0.3)
        result = await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=FakeOracle(),
                                    store=store, owner_id="user-1", persist_timeout_seconds=0.05)
        self.assertEqual(result.overall_score, EXPECTED_SCORE)

    async def test_extraction_failure(self):
        oracle = FakeOracle(cv="I'm sorry, I can't read this CV.")
        seen = []
        with self.assertRaises(AnalysisFailedError) as ctx:
            await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=oracle, on_progress=seen.append)

        error = ctx.exception
        self.assertEqual(error.stage, "EXTRACTING_FACTS")
        self.assertEqual(error.raw_text, "I'm sorry, I can't read this CV.")
        self.assertIn("unusable response", error.message)
        self.assertEqual(seen[-1].state, AnalysisState.FAILED)
        self.assertEqual(seen[-1].error, error.message)
        self.assertNotIn("feedback", oracle.kinds())

    async def test_feedback_failure(self):
        store = RecordingStore()
        oracle = FakeOracle(feedback=OracleCallError("connection reset"))
        with self.assertRaises(AnalysisFailedError) as ctx:
            await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=oracle,
                               store=store, owner_id="user-1")
        self.assertEqual(ctx.exception.stage, "GENERATING_FEEDBACK")
        self.assertIsInstance(ctx.exception.cause, OracleCallError)
        self.assertEqual(store.saved, [])

    async def test_timeout_is_reported(self):
        oracle = FakeOracle(job=OracleTimeoutError("no answer within 60 seconds"))
        with self.assertRaises(AnalysisFailedError) as ctx:
            await run_analysis(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=oracle)
        self.assertIn("took too long", ctx.exception.message)

    async def test_empty_inputs_fail_before_calling_the_oracle(self):
        for cv_text, job_text in (("", SAMPLE_JOB_DESCRIPTION), ("   ", SAMPLE_JOB_DESCRIPTION), (SAMPLE_CV, "")):
            with self.subTest(cv_text=cv_text, job_text=job_text):
                oracle = FakeOracle()
                with self.assertRaises(AnalysisFailedError) as ctx:
                    await run_analysis(cv_text, job_text, oracle=oracle)
                self.assertEqual(ctx.exception.stage, "EXTRACTING_FACTS")
                self.assertEqual(oracle.calls, [])


class TestAnalysisProgress(unittest.TestCase):

    def test_initial_state(self):
        progress = AnalysisProgress()
        self.assertEqual(progress.state, AnalysisState.IDLE)
        self.assertFalse(progress.is_terminal)

    def test_illegal_transitions(self):
        progress = AnalysisProgress()
        with self.assertRaises(InvalidTransitionError):
            progress.advance(AnalysisState.SCORING)

        done = (progress.advance(AnalysisState.EXTRACTING_FACTS)
                .advance(AnalysisState.SCORING)
                .advance(AnalysisState.GENERATING_FEEDBACK)
                .advance(AnalysisState.PERSISTING)
                .advance(AnalysisState.DONE))
        with self.assertRaises(InvalidTransitionError):
            done.advance(AnalysisState.FAILED)

    def test_progress_is_immutable(self):
        progress = AnalysisProgress()
        progress.advance(AnalysisState.EXTRACTING_FACTS)
        self.assertEqual(progress.state, AnalysisState.IDLE)
        with self.assertRaises(Exception):
            progress.state = AnalysisState.DONE


class TestJobTitleSnippet(unittest.TestCase):

    def test_first_line_of_first_100_chars(self):
        self.assertEqual(job_title_snippet("  Payroll Specialist \nWe are hiring"), "Payroll Specialist")
        self.assertEqual(job_title_snippet("x" * 150), "x" * 100)

    def test_empty_job_is_untitled(self):
        self.assertEqual(job_title_snippet(""), "Untitled Job")
        self.assertEqual(job_title_snippet("\nSecond line"), "Untitled Job")


class SleepingOracle(TextOracle):
    """TextOracle whose blocking call outlives its timeout."""

    def complete(self, prompt, temperature):
        time.sleep(2)
        return "{}"


class TestAnalyzeCv(unittest.TestCase):

    def test_blocking_wrapper(self):
        result = analyze_cv(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=FakeOracle())
        self.assertEqual(result.overall_score, EXPECTED_SCORE)

    def test_timeout_is_not_held_up_by_the_stuck_call(self):
        started = time.monotonic()
        with self.assertRaises(AnalysisFailedError) as ctx:
            analyze_cv(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=SleepingOracle(timeout_seconds=0.1))
        self.assertLess(time.monotonic() - started, 1.5)
        self.assertIsInstance(ctx.exception.cause, OracleTimeoutError)

    def test_slow_save_does_not_hold_up_the_result(self):
        started = time.monotonic()
        result = analyze_cv(SAMPLE_CV, SAMPLE_JOB_DESCRIPTION, oracle=FakeOracle(),
                            store=RecordingStore(delay=2), owner_id="user-1",
                            persist_timeout_seconds=0.1)
        self.assertEqual(result.overall_score, EXPECTED_SCORE)
        self.assertLess(time.monotonic() - started, 1.5)


if __name__ == "__main__":
    unittest.main()
