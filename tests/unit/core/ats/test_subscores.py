#!/usr/bin/env python3
"""
Tests for the individual ATS sub-scores and the resume/job boundary records.
"""

import unittest

from core.ats import EducationEntry, JobRequirements, StructuredResume
from core.ats import subscores
from core.ats.models import degree_rank
from core.config_loader import ExperienceBands
from core.errors import ValidationError


def make_job(**kwargs):
    kwargs.setdefault("title", "Frontend Engineer")
    return JobRequirements(**kwargs)


class TestSkillMatch(unittest.TestCase):
    def test_half_of_required_matched(self):
        resume = StructuredResume(skills=["react", "python"])
        job = make_job(required_skills=["React", "Node.js"])

        score, common, missing = subscores.skill_match(resume, job)

        self.assertEqual(score, 0.5)
        self.assertEqual(common, ["react"])
        self.assertEqual(missing, ["Node.js"])

    def test_nice_to_have_counts_and_is_clamped(self):
        resume = StructuredResume(skills=["React", "GraphQL", "Jest"])
        job = make_job(required_skills=["React"], nice_to_have_skills=["GraphQL", "Jest"])

        score, common, missing = subscores.skill_match(resume, job)

        self.assertEqual(score, 1.0)
        self.assertEqual(common, ["React", "GraphQL", "Jest"])
        self.assertEqual(missing, [])

    def test_synonyms_match(self):
        resume = StructuredResume(skills=["ReactJS", "nodejs"])
        job = make_job(required_skills=["React", "Node.js"])
        score, common, missing = subscores.skill_match(resume, job)
        self.assertEqual(score, 1.0)
        self.assertEqual(common, ["ReactJS", "nodejs"])

    def test_no_required_skills_is_full_match(self):
        score, _, missing = subscores.skill_match(StructuredResume(skills=[]), make_job())
        self.assertEqual(score, 1.0)
        self.assertEqual(missing, [])

    def test_duplicate_required_skills_reported_once(self):
        resume = StructuredResume(skills=[])
        job = make_job(required_skills=["Go", "go", "Rust"])
        score, _, missing = subscores.skill_match(resume, job)
        self.assertEqual(score, 0.0)
        self.assertEqual(missing, ["Go", "Rust"])


class TestExperienceMatch(unittest.TestCase):
    def setUp(self):
        self.bands = ExperienceBands()

    def test_senior_with_two_years(self):
        resume = StructuredResume(total_years_experience=2)
        score, required, degraded = subscores.experience_match(resume, make_job(experience_level="senior"), self.bands)
        self.assertAlmostEqual(score, 0.4)
        self.assertEqual(required, 5)
        self.assertFalse(degraded)

    def test_entry_level_always_matches(self):
        resume = StructuredResume()
        score, _, degraded = subscores.experience_match(resume, make_job(experience_level="entry"), self.bands)
        self.assertEqual(score, 1.0)
        self.assertFalse(degraded)

    def test_more_years_than_needed_is_capped(self):
        resume = StructuredResume(total_years_experience=10)
        score, _, _ = subscores.experience_match(resume, make_job(experience_level="mid"), self.bands)
        self.assertEqual(score, 1.0)

    def test_missing_years_is_degraded(self):
        score, _, degraded = subscores.experience_match(
            StructuredResume(), make_job(experience_level="mid"), self.bands
        )
        self.assertEqual(score, 0.0)
        self.assertTrue(degraded)

    def test_missing_level_is_degraded(self):
        score, required, degraded = subscores.experience_match(
            StructuredResume(total_years_experience=4), make_job(), self.bands
        )
        self.assertEqual(score, 0.0)
        self.assertIsNone(required)
        self.assertTrue(degraded)


class TestEducationMatch(unittest.TestCase):
    def test_any_entry_without_minimum(self):
        resume = StructuredResume(education=[EducationEntry(institution="State College")])
        self.assertEqual(subscores.education_match(resume, make_job()), (1.0, False))

    def test_degree_meets_minimum(self):
        resume = StructuredResume(education=[EducationEntry(degree="M.Sc. Computer Science")])
        self.assertEqual(subscores.education_match(resume, make_job(min_education="bachelor")), (1.0, False))

    def test_degree_below_minimum(self):
        resume = StructuredResume(education=[EducationEntry(degree="Bachelor of Arts")])
        self.assertEqual(subscores.education_match(resume, make_job(min_education="master")), (0.0, False))

    def test_no_education_is_degraded(self):
        self.assertEqual(subscores.education_match(StructuredResume(), make_job()), (0.0, True))

    def test_unrecognised_minimum_is_degraded(self):
        resume = StructuredResume(education=[EducationEntry(degree="PhD in Physics")])
        self.assertEqual(subscores.education_match(resume, make_job(min_education="guild apprenticeship")), (0.0, True))

    def test_unrecognised_candidate_degree_is_degraded(self):
        resume = StructuredResume(education=[EducationEntry(degree="Bootcamp certificate", institution="Le Wagon")])
        self.assertEqual(subscores.education_match(resume, make_job(min_education="bachelor")), (0.0, True))

    def test_one_recognised_degree_is_enough(self):
        resume = StructuredResume(education=[
            EducationEntry(degree="Bootcamp certificate"),
            EducationEntry(degree="Bachelor of Engineering"),
        ])
        self.assertEqual(subscores.education_match(resume, make_job(min_education="bachelor")), (1.0, False))

    def test_degree_ranks(self):
        self.assertEqual(degree_rank("PhD in Physics"), 5)
        self.assertEqual(degree_rank("B.Tech"), 3)
        self.assertIsNone(degree_rank("Bootcamp certificate"))
        self.assertIsNone(degree_rank(None))


class TestKeywordAnalyzer(unittest.TestCase):
    def test_drops_english_and_job_ad_stop_words(self):
        analyze = subscores.keyword_analyzer()
        self.assertEqual(analyze("We are looking for a Python developer"), ["python", "developer"])

    def test_keeps_symbols_in_tech_names(self):
        tokens = subscores.keyword_analyzer()("Experience with C++, C# and Node.js.")
        self.assertIn("c++", tokens)
        self.assertIn("c#", tokens)
        self.assertIn("node.js", tokens)

    def test_numbers_are_not_keywords(self):
        self.assertEqual(subscores.keyword_analyzer()("5+ years of Rust"), ["rust"])

    def test_empty_input(self):
        self.assertEqual(subscores.keyword_analyzer()(""), [])


class TestTextScores(unittest.TestCase):
    def test_keyword_density(self):
        score, matched, degraded = subscores.keyword_density(
            "Python developer using Django and Docker",
            "Python Django PostgreSQL Docker"
        )
        self.assertEqual(score, 0.75)
        self.assertEqual(matched, ["python", "django", "docker"])
        self.assertFalse(degraded)

    def test_keyword_density_without_text(self):
        self.assertEqual(subscores.keyword_density(None, "Python"), (0.0, [], True))
        self.assertEqual(subscores.keyword_density("Python", ""), (0.0, [], True))

    def test_identical_text_similarity(self):
        text = "Build React dashboards with TypeScript and GraphQL"
        score, degraded = subscores.semantic_similarity(text, text)
        self.assertAlmostEqual(score, 1.0)
        self.assertFalse(degraded)

    def test_disjoint_text_similarity(self):
        score, degraded = subscores.semantic_similarity("kubernetes terraform", "photoshop illustrator")
        self.assertEqual(score, 0.0)
        self.assertFalse(degraded)

    def test_similarity_without_text_is_degraded(self):
        self.assertEqual(subscores.semantic_similarity("", "python"), (0.0, True))


class TestModels(unittest.TestCase):
    def test_negative_experience_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            StructuredResume(total_years_experience=-1)
        self.assertEqual(ctx.exception.field, "total_years_experience")

    def test_unknown_level_rejected(self):
        with self.assertRaises(ValidationError):
            make_job(experience_level="principal")

    def test_level_is_normalised(self):
        self.assertEqual(make_job(experience_level=" Senior ").experience_level, "senior")

    def test_title_required(self):
        with self.assertRaises(ValidationError):
            JobRequirements(title="")


if __name__ == '__main__':
    unittest.main()
