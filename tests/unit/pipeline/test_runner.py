#!/usr/bin/env python3
"""
Tests for JobRunner: evidence fetch, history, notifications and re-checks.
"""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from core.config_loader import SkillConfig
from core.errors import UpstreamError, ValidationError
from core.locks import KeyedLock
from core.skills import SkillConfidenceEngine
from core.utils import utc_now
from notification.emitter import InAppNotificationEmitter
from pipeline import JobRunner
from tests import add_user, make_store
from tests.mocks.sources import FakeGitHubSource, FakeLinkedInSource, SlowGitHubSource, repo_facts

LINKEDIN_URL = "https://www.linkedin.com/in/octocat"


class RunnerTestCase(unittest.TestCase):
    def setUp(self):
        self.store = make_store()
        self.addCleanup(self.store.dispose)
        self.github = FakeGitHubSource([
            repo_facts("api", languages={"Python": 5000}, commits=60, pushed_at=utc_now() - timedelta(days=10)),
        ])
        self.linkedin = FakeLinkedInSource(["Python", "Go"])
        self.schedule_recheck = MagicMock()
        self.runner = self.make_runner()
        add_user(self.store, "u1", github_username="octocat", linkedin_url=LINKEDIN_URL)

    def make_runner(self, github=None, fetch_timeout_seconds=5):
        runner = JobRunner(
            self.store,
            github or self.github,
            self.linkedin,
            SkillConfidenceEngine(self.store, SkillConfig(), KeyedLock()),
            InAppNotificationEmitter(self.store),
            fetch_timeout_seconds=fetch_timeout_seconds,
            schedule_recheck=self.schedule_recheck
        )
        self.addCleanup(runner.shutdown)
        return runner

    def history(self, user_id="u1"):
        with self.store.unit_of_work() as repo:
            return repo.history.list_for_user(user_id)

    def notifications(self, user_id="u1"):
        with self.store.unit_of_work() as repo:
            return repo.notifications.list_for_user(user_id)


class TestGithubRun(RunnerTestCase):
    def test_run_stores_evidence_and_history(self):
        changed = self.runner.run("job-1", "u1", "github", "webhook")

        self.assertTrue(changed)
        self.assertEqual(self.github.calls, ["octocat"])
        with self.store.unit_of_work() as repo:
            self.assertEqual(len(repo.evidence.list_repo_snapshots("u1")), 1)
            self.assertIsNotNone(repo.users.get_by_user_id("u1").last_github_synced_at)
            self.assertEqual([s.skill_key for s in repo.evidence.list_skills("u1")], ["python"])

        entries = self.history()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].update_type, "github_webhook")
        self.assertEqual(entries[0].scrape_job_id, "job-1")
        self.assertEqual(entries[0].skills_added, ["Python"])
        self.assertEqual(entries[0].repos_scraped, 1)

        notes = self.notifications()
        self.assertEqual(len(notes), 1)
        self.assertEqual(notes[0].type, "profile_update")
        self.assertEqual(notes[0].event_data["scrape_job_id"], "job-1")
        self.schedule_recheck.assert_not_called()

    def test_unchanged_rerun_writes_history_without_notification(self):
        self.runner.run("job-1", "u1", "github", "user")
        changed = self.runner.run("job-2", "u1", "github", "schedule")

        self.assertFalse(changed)
        entries = self.history()
        self.assertEqual(len(entries), 2)
        self.assertIn("scheduled_rescrape", [e.update_type for e in entries])
        self.assertEqual(len(self.notifications()), 1)

    def test_missing_username(self):
        add_user(self.store, "u2")
        with self.assertRaises(ValidationError) as ctx:
            self.runner.run("job-1", "u2", "github", "user")
        self.assertEqual(ctx.exception.field, "githubUsername")
        self.assertEqual(self.history("u2"), [])

    def test_upstream_failure_propagates(self):
        runner = self.make_runner(github=FakeGitHubSource(error=UpstreamError("GitHub is down")))
        with self.assertRaisesRegex(UpstreamError, "GitHub is down"):
            runner.run("job-1", "u1", "github", "user")

    def test_fetch_timeout(self):
        slow = SlowGitHubSource()
        runner = self.make_runner(github=slow, fetch_timeout_seconds=0.05)
        try:
            with self.assertRaisesRegex(UpstreamError, "timed out"):
                runner.run("job-1", "u1", "github", "user")
        finally:
            slow.release.set()

    def test_emit_failure_does_not_fail_run(self):
        self.runner.emitter = MagicMock()
        self.runner.emitter.emit.side_effect = RuntimeError("redis down")
        self.assertTrue(self.runner.run("job-1", "u1", "github", "user"))


class TestLinkedInRun(RunnerTestCase):
    def test_linkedin_run_schedules_recheck(self):
        self.runner.run("job-1", "u1", "linkedin", "user")

        self.assertEqual(self.linkedin.calls, [LINKEDIN_URL])
        self.assertEqual(self.github.calls, [])
        entries = self.history()
        self.assertEqual(entries[0].update_type, "linkedin_sync")
        self.assertTrue(entries[0].changes_detected["linkedin_synced"])
        self.schedule_recheck.assert_called_once_with("u1", "linkedin")

        with self.store.unit_of_work() as repo:
            self.assertEqual(repo.evidence.get_linkedin_profile("u1").skills_listed, ["Python", "Go"])

    def test_missing_url(self):
        add_user(self.store, "u2", github_username="hubot")
        with self.assertRaises(ValidationError) as ctx:
            self.runner.run("job-1", "u2", "linkedin", "user")
        self.assertEqual(ctx.exception.field, "linkedinUrl")

    def test_provider_not_configured(self):
        self.runner.linkedin = None
        with self.assertRaises(UpstreamError):
            self.runner.run("job-1", "u1", "linkedin", "user")


class TestFullRun(RunnerTestCase):
    def test_full_run_combines_sources(self):
        changed = self.runner.run("job-1", "u1", "full", "admin")

        self.assertTrue(changed)
        self.assertEqual(self.github.calls, ["octocat"])
        self.assertEqual(self.linkedin.calls, [LINKEDIN_URL])
        with self.store.unit_of_work() as repo:
            skills = {s.skill_key: s for s in repo.evidence.list_skills("u1")}
        self.assertEqual(skills["python"].source, "both")
        self.assertEqual(skills["go"].source, "linkedin")

        entry = self.history()[0]
        self.assertEqual(entry.update_type, "admin_rescrape")
        self.assertEqual(sorted(entry.skills_added), ["Go", "Python"])
        self.schedule_recheck.assert_called_once_with("u1", "linkedin")

    def test_full_run_without_linkedin_url(self):
        add_user(self.store, "u2", github_username="octocat2")
        self.runner.run("job-1", "u2", "full", "user")
        self.assertEqual(self.linkedin.calls, [])
        self.schedule_recheck.assert_not_called()


if __name__ == '__main__':
    unittest.main()
