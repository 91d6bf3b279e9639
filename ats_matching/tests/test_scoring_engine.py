"""
Unit tests for the deterministic scoring engine.
"""

import unittest

from ats_matching.config import WEIGHTS
from ats_matching.schemas import EducationLevel, ExtractedCvFacts, ExtractedJobFacts
from ats_matching.scoring_engine import (
    calculate_education_score,
    calculate_experience_score,
    calculate_impact_score,
    calculate_skills_score,
    score_analysis,
)


def make_cv(**overrides):
    fields = dict(
        hard_skills=("ms sql server", "Python 3", "Excel"),
        soft_skills=("Communication",),
        total_experience_years=3,
        highest_education=EducationLevel.BACHELORS,
        action_verb_count=5,
        quantified_result_count=3,
    )
    fields.update(overrides)
    return ExtractedCvFacts(**fields)


def make_job(**overrides):
    fields = dict(
        required_hard_skills=("SQL", "Python", "AWS"),
        required_soft_skills=("communication", "leadership"),
        required_experience_years=5,
        required_education=EducationLevel.MASTERS,
    )
    fields.update(overrides)
    return ExtractedJobFacts(**fields)


class TestScoringComponents(unittest.TestCase):
    """Test individual scoring dimensions."""

    def test_hard_skills_partial_match_rounds_up(self):
        dimension = calculate_skills_score(["SQL", "Python", "AWS"], ["ms sql server", "Python 3", "Excel"])
        # 2/3 * 40 = 26.67 -> 27
        self.assertEqual(dimension.score, 27)
        self.assertEqual(dimension.weight, 40)
        self.assertEqual(set(dimension.matched), {"sql", "python"})
        self.assertEqual(set(dimension.missing), {"aws"})

    def test_no_required_skills_is_full_credit(self):
        self.assertEqual(calculate_skills_score([], ["Python"]).score, 40)
        self.assertEqual(calculate_skills_score([], [], "soft_skills").score, 10)

    def test_no_matching_skills_is_zero(self):
        self.assertEqual(calculate_skills_score(["Kubernetes"], []).score, 0)

    def test_experience_below_requirement(self):
        # 3/5 * 25 = 15
        dimension = calculate_experience_score(5, 3)
        self.assertEqual(dimension.score, 15)
        self.assertEqual(dimension.required, 5)
        self.assertEqual(dimension.found, 3)

    def test_experience_fractional_years_are_exact(self):
        # 1.5/2.5 = 0.6 exactly, so no float drift above 15
        self.assertEqual(calculate_experience_score(2.5, 1.5).score, 15)

    def test_experience_capped_when_exceeding_requirement(self):
        self.assertEqual(calculate_experience_score(2, 40).score, 25)

    def test_experience_not_required_is_full_credit(self):
        self.assertEqual(calculate_experience_score(0, 0).score, 25)

    def test_impact_full_credit_at_targets(self):
        dimension = calculate_impact_score(5, 3)
        self.assertEqual(dimension.score, 15)
        self.assertEqual(calculate_impact_score(50, 30).score, 15)

    def test_impact_partial(self):
        # (0.5 * 2/5 + 0.5 * 1/3) * 15 = 5.5 -> 6
        self.assertEqual(calculate_impact_score(2, 1).score, 6)
        self.assertEqual(calculate_impact_score(0, 0).score, 0)

    def test_education_under_qualified_gets_nothing(self):
        dimension = calculate_education_score(EducationLevel.MASTERS, EducationLevel.BACHELORS)
        self.assertEqual(dimension.score, 0)
        self.assertEqual(dimension.required, "Masters")
        self.assertEqual(dimension.found, "Bachelors")

    def test_education_meets_or_exceeds(self):
        self.assertEqual(calculate_education_score(EducationLevel.MASTERS, EducationLevel.MASTERS).score, 10)
        self.assertEqual(calculate_education_score(EducationLevel.BACHELORS, EducationLevel.PHD).score, 10)
        self.assertEqual(calculate_education_score(EducationLevel.NONE, EducationLevel.NONE).score, 10)


class TestOverallScore(unittest.TestCase):

    def test_overall_score_sums_dimensions(self):
        result = score_analysis(make_cv(), make_job())
        # 27 + 5 + 15 + 15 + 0
        self.assertEqual(result.overall_score, 62)
        breakdown = result.score_breakdown
        self.assertEqual(breakdown.soft_skills.score, 5)
        self.assertEqual(breakdown.education.score, 0)

    def test_each_dimension_is_rounded_before_summing(self):
        cv = make_cv(
            hard_skills=("a-tool",),
            soft_skills=("calm",),
            total_experience_years=1,
            highest_education=EducationLevel.PHD,
            action_verb_count=1,
            quantified_result_count=1,
        )
        job = make_job(
            required_hard_skills=("a-tool", "xyz", "qqq"),
            required_soft_skills=("calm", "kind", "bold"),
            required_experience_years=3,
        )
        result = score_analysis(cv, job)
        # 14 + 4 + 9 + 4 + 10; rounding once at the end would give 39
        self.assertEqual(result.overall_score, 41)

    def test_weights_sum_to_100_points(self):
        self.assertAlmostEqual(sum(WEIGHTS.values()), 1.0)
        result = score_analysis(make_cv(), make_job())
        weights = [d.weight for d in result.score_breakdown.dimensions().values()]
        self.assertEqual(weights, [40, 10, 25, 15, 10])
        self.assertEqual(sum(weights), 100)

    def test_score_bounds(self):
        perfect = score_analysis(
            make_cv(total_experience_years=1000, highest_education=EducationLevel.PHD,
                    action_verb_count=999, quantified_result_count=999),
            make_job(required_hard_skills=(), required_soft_skills=(), required_experience_years=0),
        )
        self.assertEqual(perfect.overall_score, 100)

        empty = score_analysis(
            ExtractedCvFacts(),
            make_job(required_hard_skills=("Go",), required_soft_skills=("Empathy",),
                     required_experience_years=10, required_education=EducationLevel.PHD),
        )
        self.assertEqual(empty.overall_score, 0)
        self.assertIsInstance(empty.overall_score, int)

    def test_absent_hard_skill_requirement_is_satisfied(self):
        result = score_analysis(make_cv(hard_skills=()), make_job(required_hard_skills=()))
        self.assertEqual(result.score_breakdown.hard_skills.score, 40)

    def test_breakdown_serializes_with_camel_case_names(self):
        data = score_analysis(make_cv(), make_job()).model_dump(by_alias=True)
        self.assertEqual(data["overallScore"], 62)
        self.assertEqual(
            set(data["scoreBreakdown"]),
            {"hardSkills", "softSkills", "experience", "impact", "education"},
        )
        self.assertIn("actionVerbs", data["scoreBreakdown"]["impact"])


class TestDeterminism(unittest.TestCase):
    """Test that scoring is deterministic."""

    def test_score_determinism(self):
        first = score_analysis(make_cv(), make_job())
        second = score_analysis(make_cv(), make_job())
        self.assertEqual(first, second)
        self.assertEqual(first.model_dump_json(), second.model_dump_json())


if __name__ == "__main__":
    unittest.main()
