"""
Example usage of the ATS scorer.

Run this file to see the system in action:
    python -m ats_matching.example_usage
"""

import os
import logging

from ats_matching import AnalysisFailedError, analyze_cv, score_analysis
from ats_matching.bullet_analyzer import find_weak_bullets
from ats_matching.schemas import ExtractedCvFacts, ExtractedJobFacts

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Sample job description
JOB_DESCRIPTION = """Senior Financial Analyst
Northwind Logistics is hiring a Senior Financial Analyst for its Lisbon office.

Requirements:
- 5+ years of experience in FP&A or corporate finance
- Bachelor's degree in Finance, Accounting or Economics
- Advanced MS Excel and SQL; Power BI dashboards
- Experience with SAP and month-end close / reconciliations
- Strong communication and stakeholder management skills

Responsibilities:
- Own the monthly forecasting and budgeting cycle
- Build variance reports for the leadership team
- Automate recurring reporting
"""

# Sample CV
CV_TEXT = """Maria Costa
Financial Analyst

EXPERIENCE
Financial Analyst | Atlas Freight | 2021-03 - Present
- Reduced month-end close from 8 to 5 days by automating reconciliations in SQL
- Built Power BI dashboards used by 40+ managers
- Responsible for weekly cash reports

Junior Accountant | Brightside Retail | 2019-01 - 2021-02
- Managed accounts payable for 300 suppliers
- Prepared IFRS statutory reports

EDUCATION
BSc Economics, University of Porto

SKILLS
Excel, SQL, Power BI, SAP FI, IFRS, Communication, Teamwork
"""


def example_full_analysis():
    """Example 1: Full analysis with the LLM."""
    print("\n" + "="*80)
    print("EXAMPLE 1: Full Analysis")
    print("="*80)

    def show_progress(progress):
        print(f"  ... {progress.label}")

    result = analyze_cv(CV_TEXT, JOB_DESCRIPTION, on_progress=show_progress)

    print(f"\n📊 ATS RESULT")
    print(f"{'='*80}")
    print(f"Overall Score: {result.overall_score}/100")
    print(f"\nDimension Breakdown:")
    for name, dimension in result.score_breakdown.dimensions().items():
        bar = "█" * dimension.score
        print(f"  {name:12} {dimension.score:3}/{dimension.weight:<3} {bar}")

    hard = result.score_breakdown.hard_skills
    print(f"\nMatched hard skills: {', '.join(hard.matched) or '-'}")
    print(f"Missing hard skills: {', '.join(hard.missing) or '-'}")

    feedback = result.qualitative_feedback
    print(f"\n🗣  Recruiter: {feedback.recruiter_gut_reaction}")
    print(f"\n📝 Summary: {feedback.final_summary}")
    for question in feedback.suggested_interview_questions:
        print(f"  ? {question}")

    print(f"\n📅 Timeline:")
    for entry in result.timeline:
        print(f"  {entry.start_date} - {entry.end_date}: {entry.role} @ {entry.company}")
    print(f"{'='*80}\n")


def example_deterministic_scoring():
    """Example 2: Scoring is a pure function of the extracted facts."""
    print("\n" + "="*80)
    print("EXAMPLE 2: Deterministic Scoring (no LLM)")
    print("="*80)

    cv_facts = ExtractedCvFacts(
        hard_skills=("Excel", "SQL", "Power BI", "SAP FI", "IFRS"),
        soft_skills=("Communication", "Teamwork"),
        total_experience_years=5,
        highest_education="Bachelors",
        action_verb_count=4,
        quantified_result_count=3,
    )
    job_facts = ExtractedJobFacts(
        required_hard_skills=("MS Excel", "SQL", "Power BI", "SAP", "Reconciliations", "Forecasting"),
        required_soft_skills=("Communication", "Stakeholder Management"),
        required_experience_years=5,
        required_education="Bachelors",
    )

    scores = [score_analysis(cv_facts, job_facts) for _ in range(3)]
    for i, score in enumerate(scores, 1):
        print(f"  Run {i}: {score.overall_score}")

    if len({s.model_dump_json() for s in scores}) == 1:
        print(f"\n✅ DETERMINISTIC: All runs produced the same score ({scores[0].overall_score})")
    else:
        print(f"\n⚠️  WARNING: Scores varied: {[s.overall_score for s in scores]}")
    print(f"{'='*80}\n")


def example_weak_bullets():
    """Example 3: Bullet points that don't lead with an action verb."""
    print("\n" + "="*80)
    print("EXAMPLE 3: Weak Bullet Points")
    print("="*80)
    for bullet in find_weak_bullets(CV_TEXT):
        print(f"  ⚠️  {bullet}")
    print(f"{'='*80}\n")


def main():
    """Run all examples."""
    print("\n" + "="*80)
    print("ATS CV SCORER - EXAMPLES")
    print("="*80)

    example_deterministic_scoring()
    example_weak_bullets()

    # Check for API key
    if not os.getenv("OPENAI_API_KEY"):
        print("❌ OPENAI_API_KEY environment variable not set, skipping the full analysis")
        print("   Please set it: export OPENAI_API_KEY='sk-...'")
        return

    try:
        example_full_analysis()
    except AnalysisFailedError as e:
        print(f"\n❌ {e.message}")


if __name__ == "__main__":
    main()
