#!/usr/bin/env python3
"""
API tests for the candidate profile endpoints.
"""

import unittest

from core.errors import ValidationError
from tests import add_user
from tests.mocks.api import ApiTestCase
from web.backend.routers.profile import validate_linkedin_url


def skill_values(name, source, score, verified):
    return {
        "skill_name": name,
        "source": source,
        "confidence_score": score,
        "verified": verified,
        "display_label": f"{name} ({score}/100)",
        "improvement_tips": ["Add a README"],
        "repo_count": 0 if source == "linkedin" else 1,
    }


class TestLinkedInUrlValidation(unittest.TestCase):
    def test_accepts_and_normalises(self):
        self.assertEqual(
            validate_linkedin_url("https://www.linkedin.com/in/octocat/?trk=abc"),
            "https://www.linkedin.com/in/octocat"
        )
        self.assertEqual(validate_linkedin_url(" https://uk.linkedin.com/in/jane "), "https://uk.linkedin.com/in/jane")

    def test_rejects(self):
        for url in (
            "http://www.linkedin.com/in/octocat",
            "https://linkedin.evil.com/in/octocat",
            "https://www.linkedin.com/company/acme",
            "https://www.linkedin.com/in/",
            "not a url",
        ):
            with self.assertRaises(ValidationError, msg=url):
                validate_linkedin_url(url)


class TestIdentity(ApiTestCase):
    def test_missing_identity_header(self):
        response = self.client.get("/api/profile/skills")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"success": False, "error": "Unauthorized", "type": "AuthError"})


class TestRefresh(ApiTestCase):
    def test_refresh_then_rate_limited(self):
        add_user(self.store, "u1", github_username="octocat")

        first = self.client.post("/api/profile/refresh", headers=self.as_user("u1"))
        second = self.client.post("/api/profile/refresh", headers=self.as_user("u1"))

        self.assertEqual(first.status_code, 200)
        self.assertTrue(first.json()["ok"])
        self.assertEqual(second.status_code, 429)
        body = second.json()
        self.assertEqual(body["type"], "RateLimitError")
        self.assertIn("nextAllowedAt", body)
        self.assertIn("Retry-After", second.headers)
        self.assertEqual(len(self.jobs("u1")), 1)

    def test_refresh_without_github_username(self):
        add_user(self.store, "u1")
        response = self.client.post("/api/profile/refresh", headers=self.as_user("u1"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "githubUsername")
        self.assertEqual(self.jobs("u1"), [])


class TestLinkedIn(ApiTestCase):
    def test_link_profile_starts_sync(self):
        response = self.client.put(
            "/api/profile/linkedin",
            json={"linkedinUrl": "https://www.linkedin.com/in/octocat/"},
            headers=self.as_user("new-user")
        )

        self.assertEqual(response.status_code, 200)
        with self.store.unit_of_work() as repo:
            self.assertEqual(
                repo.users.get_by_user_id("new-user").linkedin_url, "https://www.linkedin.com/in/octocat"
            )
        jobs = self.jobs("new-user")
        self.assertEqual([(j.kind, j.trigger) for j in jobs], [("linkedin", "user")])

    def test_invalid_url(self):
        response = self.client.put(
            "/api/profile/linkedin",
            json={"linkedinUrl": "https://example.com/in/octocat"},
            headers=self.as_user("u1")
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "linkedinUrl")

    def test_missing_body_field(self):
        response = self.client.put("/api/profile/linkedin", json={}, headers=self.as_user("u1"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "linkedinUrl")


class TestSkills(ApiTestCase):
    def test_partitions(self):
        with self.store.unit_of_work() as repo:
            repo.evidence.upsert_skill("u1", "react", skill_values("React", "both", 53, True))
            repo.evidence.upsert_skill("u1", "python", skill_values("Python", "github", 45, True))
            repo.evidence.upsert_skill("u1", "go", skill_values("Go", "linkedin", 20, False))
            repo.evidence.upsert_skill("u1", "css", skill_values("CSS", "github", 10, False))

        response = self.client.get("/api/profile/skills", headers=self.as_user("u1"))

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["total"], 4)
        self.assertEqual([s["skillName"] for s in body["verified"]], ["React", "Python"])
        self.assertEqual([s["skillName"] for s in body["selfReported"]], ["Go"])
        self.assertEqual([s["skillName"] for s in body["unverifiedGithub"]], ["CSS"])
        self.assertEqual(body["verified"][0]["improvementTips"], ["Add a README"])
        self.assertIn("languagesPercentage", body["verified"][0]["evidence"])

    def test_no_skills(self):
        body = self.client.get("/api/profile/skills", headers=self.as_user("u1")).json()
        self.assertEqual(body, {"total": 0, "verified": [], "selfReported": [], "unverifiedGithub": []})


class TestHistoryAndNotifications(ApiTestCase):
    def test_update_history(self):
        add_user(self.store, "u1", github_username="octocat")
        job_id = self.client.post("/api/profile/refresh", headers=self.as_user("u1")).json()["jobId"]
        with self.store.unit_of_work() as repo:
            repo.history.add("u1", "manual_refresh", "user", job_id, ["Go"], [])

        body = self.client.get("/api/profile/update-history", headers=self.as_user("u1")).json()

        self.assertEqual(body["history"][0]["skillsAdded"], ["Go"])
        self.assertEqual(body["history"][0]["scrapeJobId"], job_id)
        self.assertEqual(body["recentJobs"][0]["id"], job_id)
        self.assertEqual(body["recentJobs"][0]["status"], "pending")

    def test_notifications_read_flow(self):
        with self.store.unit_of_work() as repo:
            first = repo.notifications.add("u1", "Your profile was updated", "profile_update").id
            repo.notifications.add("u1", "Another")

        body = self.client.get("/api/profile/notifications", headers=self.as_user("u1")).json()
        self.assertEqual(body["unreadCount"], 2)
        self.assertEqual(len(body["notifications"]), 2)

        marked = self.client.post("/api/profile/notifications", json={"ids": [first]}, headers=self.as_user("u1"))
        self.assertEqual(marked.json()["updated"], 1)

        body = self.client.get("/api/profile/notifications", headers=self.as_user("u1")).json()
        self.assertEqual(body["unreadCount"], 1)

        everything = self.client.get(
            "/api/profile/notifications", params={"unread": "false"}, headers=self.as_user("u1")
        ).json()
        self.assertEqual(len(everything["notifications"]), 2)

        self.client.post("/api/profile/notifications", json={"markAll": True}, headers=self.as_user("u1"))
        self.assertEqual(
            self.client.get("/api/profile/notifications", headers=self.as_user("u1")).json()["unreadCount"], 0
        )

    def test_mark_read_requires_selection(self):
        response = self.client.post("/api/profile/notifications", json={}, headers=self.as_user("u1"))
        self.assertEqual(response.status_code, 400)


if __name__ == '__main__':
    unittest.main()
