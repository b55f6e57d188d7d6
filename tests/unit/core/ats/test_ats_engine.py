#!/usr/bin/env python3
"""
Tests for AtsScoringEngine weighting and degraded sub-scores.
"""

import unittest

from core.ats import AtsScoringEngine, EducationEntry, JobRequirements, StructuredResume
from core.config_loader import AtsWeights


class TestAtsScoringEngine(unittest.TestCase):
    def setUp(self):
        self.engine = AtsScoringEngine()

    def test_partial_match_with_missing_inputs(self):
        resume = StructuredResume(skills=["react", "python"], total_years_experience=2)
        job = JobRequirements(
            title="Senior Frontend Engineer",
            required_skills=["React", "Node.js"],
            experience_level="senior",
        )

        result = self.engine.score(resume, None, job)

        # 0.5 * 0.5 + 0.4 * 0.2
        self.assertEqual(result.score, 33)
        self.assertEqual(result.common_skills, ["react"])
        self.assertEqual(result.missing_skills, ["Node.js"])
        self.assertEqual(
            result.details["degraded"],
            ["education_match", "keyword_density", "semantic_similarity"]
        )
        self.assertEqual(result.details["required_years"], 5)

    def test_perfect_match(self):
        text = "Python Django PostgreSQL Docker"
        resume = StructuredResume(
            skills=["Python", "Django"],
            total_years_experience=6,
            education=[EducationEntry(degree="Master of Science")],
        )
        job = JobRequirements(
            title="Backend Engineer",
            required_skills=["Python", "Django"],
            experience_level="senior",
            min_education="bachelor",
            description=text,
        )

        result = self.engine.score(resume, text, job)

        self.assertEqual(result.score, 100)
        self.assertEqual(result.details["degraded"], [])

    def test_score_is_bounded(self):
        resume = StructuredResume()
        job = JobRequirements(title="Anything", required_skills=["Rust"])
        result = self.engine.score(resume, "", job)
        self.assertGreaterEqual(result.score, 0)
        self.assertLessEqual(result.score, 100)
        self.assertEqual(result.score, 0)

    def test_custom_weights(self):
        engine = AtsScoringEngine(AtsWeights(
            skill_match=1.0,
            experience_match=0.0,
            education_match=0.0,
            keyword_density=0.0,
            semantic_similarity=0.0,
        ))
        resume = StructuredResume(skills=["react"])
        job = JobRequirements(title="Frontend", required_skills=["React", "Vue"])
        self.assertEqual(engine.score(resume, None, job).score, 50)

    def test_weights_must_sum_to_one(self):
        with self.assertRaises(ValueError):
            AtsWeights(skill_match=0.9)

    def test_sub_scores_exposed(self):
        resume = StructuredResume(skills=["react"])
        job = JobRequirements(title="Frontend", required_skills=["React"])
        subs = self.engine.score(resume, None, job).sub_scores()
        self.assertEqual(set(subs), {
            "skill_match", "experience_match", "education_match", "keyword_density", "semantic_similarity"
        })
        self.assertEqual(subs["skill_match"], 1.0)


if __name__ == '__main__':
    unittest.main()
