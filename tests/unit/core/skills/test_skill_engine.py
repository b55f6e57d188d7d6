#!/usr/bin/env python3
"""
Tests for SkillConfidenceEngine.recompute against an in-memory store.
"""

import unittest
from datetime import timedelta
from unittest.mock import patch

from core.config_loader import SkillConfig
from core.errors import ComputationError, ValidationError
from core.locks import KeyedLock
from core.skills import LinkedInEvidence, RepoEvidence, SkillConfidenceEngine
from tests import FIXED_NOW, add_user, make_store
from tests.mocks.sources import repo_facts


class SkillEngineTestCase(unittest.TestCase):
    def setUp(self):
        self.store = make_store()
        self.addCleanup(self.store.dispose)
        self.engine = SkillConfidenceEngine(self.store, SkillConfig(), KeyedLock())
        add_user(self.store, "u1", github_username="octocat")

    def add_repo(self, facts, user_id="u1"):
        with self.store.unit_of_work() as repo:
            repo.evidence.upsert_repo_snapshot(user_id, facts.owner, facts.name, facts.to_snapshot_values())

    def set_linkedin(self, skills, user_id="u1"):
        with self.store.unit_of_work() as repo:
            repo.evidence.upsert_linkedin_profile(
                user_id, "https://www.linkedin.com/in/octocat", {"skills_listed": skills}
            )

    def skills(self, user_id="u1"):
        with self.store.unit_of_work() as repo:
            return {s.skill_key: s for s in repo.evidence.list_skills(user_id)}

    def seed_standard_profile(self):
        self.add_repo(repo_facts(
            "web-app",
            languages={"TypeScript": 8000, "CSS": 2000},
            frameworks=["React"],
            stars=12,
            commits=120,
            pushed_at=FIXED_NOW - timedelta(days=30),
            has_tests=True,
            has_readme=True,
            readme_text="A dashboard built with React and TypeScript.",
        ))
        self.add_repo(repo_facts(
            "api",
            languages={"Python": 5000},
            frameworks=["FastAPI"],
            commits=30,
            pushed_at=FIXED_NOW - timedelta(days=400),
        ))
        self.set_linkedin(["React", "Go"])


class TestRecompute(SkillEngineTestCase):
    def test_sources_and_scores(self):
        self.seed_standard_profile()

        result = self.engine.recompute("u1", now=FIXED_NOW)
        skills = self.skills()

        self.assertEqual(set(skills), {"typescript", "css", "react", "python", "fastapi", "go"})

        react = skills["react"]
        self.assertEqual(react.source, "both")
        # 10 + 10 (commits) + 5 (stars) + 10 (recently active) + 3 + 5 + 5, +5 corroboration
        self.assertEqual(react.confidence_score, 53)
        self.assertTrue(react.verified)
        self.assertIsNotNone(react.verified_at)

        go = skills["go"]
        self.assertEqual(go.source, "linkedin")
        self.assertEqual(go.confidence_score, 20)
        self.assertFalse(go.verified)
        self.assertEqual(go.display_label, "Go self-reported on LinkedIn (20/100)")

        python = skills["python"]
        self.assertEqual(python.source, "github")
        self.assertEqual(python.confidence_score, 10)
        self.assertFalse(python.verified)

        self.assertEqual(len(result.skills_added), 6)
        self.assertTrue(result.changes_found)

    def test_scores_always_in_range(self):
        self.seed_standard_profile()
        self.engine.recompute("u1", now=FIXED_NOW)
        for skill in self.skills().values():
            self.assertGreaterEqual(skill.confidence_score, 0)
            self.assertLessEqual(skill.confidence_score, 100)

    def test_recompute_is_idempotent(self):
        self.seed_standard_profile()
        self.engine.recompute("u1", now=FIXED_NOW)
        first = {k: (s.confidence_score, s.verified, s.verified_at) for k, s in self.skills().items()}

        result = self.engine.recompute("u1", now=FIXED_NOW + timedelta(hours=1))
        second = {k: (s.confidence_score, s.verified, s.verified_at) for k, s in self.skills().items()}

        self.assertEqual(first, second)
        self.assertEqual(result.skills_added, [])
        self.assertEqual(result.skills_strengthened, [])
        self.assertFalse(result.changes_found)

    def test_strengthened_skills_are_reported(self):
        self.seed_standard_profile()
        self.engine.recompute("u1", now=FIXED_NOW)

        self.add_repo(repo_facts(
            "web-app",
            languages={"TypeScript": 8000, "CSS": 2000},
            frameworks=["React"],
            stars=12,
            commits=300,
            pushed_at=FIXED_NOW - timedelta(days=30),
            has_tests=True,
            has_readme=True,
            readme_text="A dashboard built with React and TypeScript.",
        ))
        result = self.engine.recompute("u1", now=FIXED_NOW)

        strengthened = {s["skill_name"]: s for s in result.skills_strengthened}
        self.assertIn("React", strengthened)
        self.assertEqual(strengthened["React"]["previous_score"], 53)
        self.assertEqual(strengthened["React"]["new_score"], 68)

    def test_no_evidence_creates_no_records(self):
        result = self.engine.recompute("u1", now=FIXED_NOW)
        self.assertEqual(self.skills(), {})
        self.assertEqual(result.assessments, [])

    def test_linkedin_only_user(self):
        self.set_linkedin(["Kotlin", "kotlin", "Swift"])
        self.engine.recompute("u1", now=FIXED_NOW)

        skills = self.skills()
        self.assertEqual(set(skills), {"kotlin", "swift"})
        for skill in skills.values():
            self.assertEqual(skill.source, "linkedin")
            self.assertFalse(skill.verified)

    def test_skills_are_never_deleted(self):
        self.seed_standard_profile()
        self.engine.recompute("u1", now=FIXED_NOW)

        self.set_linkedin(["React"])
        self.engine.recompute("u1", now=FIXED_NOW)

        skills = self.skills()
        self.assertIn("go", skills)
        self.assertEqual(skills["go"].confidence_score, 20)

    def test_one_failing_skill_does_not_block_others(self):
        self.seed_standard_profile()
        original = self.engine.assess

        def flaky_assess(group, all_repos, now):
            if group.key == "python":
                raise ComputationError("bad evidence")
            return original(group, all_repos, now)

        with patch.object(self.engine, "assess", side_effect=flaky_assess):
            result = self.engine.recompute("u1", now=FIXED_NOW)

        self.assertEqual(result.failed_skills, ["Python"])
        skills = self.skills()
        self.assertNotIn("python", skills)
        self.assertIn("react", skills)
        self.assertIn("fastapi", skills)

    def test_users_are_independent(self):
        add_user(self.store, "u2", github_username="hubot")
        self.seed_standard_profile()
        self.engine.recompute("u1", now=FIXED_NOW)
        self.engine.recompute("u2", now=FIXED_NOW)
        self.assertEqual(self.skills("u2"), {})


class TestGrouping(SkillEngineTestCase):
    def test_synonyms_share_one_group(self):
        repos = [
            RepoEvidence(owner="o", name="a", frameworks=["ReactJS"], user_commit_count=1),
            RepoEvidence(owner="o", name="b", topics=["react"], user_commit_count=1),
        ]
        groups = self.engine.group_skills(repos, LinkedInEvidence("https://www.linkedin.com/in/o", ["React"]))
        self.assertEqual(list(groups), ["react"])
        self.assertEqual(len(groups["react"].repos), 2)
        self.assertTrue(groups["react"].on_linkedin)

    def test_language_percentage_uses_byte_share(self):
        repos = [
            RepoEvidence(owner="o", name="a", languages={"Python": 750, "Shell": 250}, user_commit_count=100),
        ]
        groups = self.engine.group_skills(repos, None)
        metrics = self.engine.build_metrics(groups["python"], repos, FIXED_NOW)
        self.assertEqual(metrics.language_percentage, 75.0)

    def test_repo_evidence_requires_owner_and_name(self):
        with self.assertRaises(ValidationError) as ctx:
            RepoEvidence(owner="", name="x")
        self.assertEqual(ctx.exception.field, "owner")

    def test_assess_without_evidence_raises(self):
        groups = self.engine.group_skills([], LinkedInEvidence("https://www.linkedin.com/in/o", ["Go"]))
        group = groups["go"]
        group.on_linkedin = False
        with self.assertRaises(ComputationError):
            self.engine.assess(group, [], FIXED_NOW)


if __name__ == '__main__':
    unittest.main()
