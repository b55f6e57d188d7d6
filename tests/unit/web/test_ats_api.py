#!/usr/bin/env python3
"""
API tests for resume ingestion and scoring.
"""

import unittest

from database.models import JobApplication, JobPosting
from tests.mocks.api import ApiTestCase

RESUME = {
    "fileName": "cv.pdf",
    "rawText": "Frontend developer building React dashboards in TypeScript",
    "skills": ["react", "python", " "],
    "education": [{"degree": "BSc Computer Science", "institution": "State University"}],
    "totalYearsExperience": 2,
}


class AtsApiTestCase(ApiTestCase):
    def setUp(self):
        super().setUp()
        with self.store.unit_of_work() as repo:
            job = JobPosting(
                title="Senior Frontend Engineer",
                required_skills=["React", "Node.js"],
                experience_level="senior",
                min_education="bachelor",
                description="React TypeScript dashboards",
            )
            repo.db.add(job)
            repo.db.flush()
            self.job_id = job.id

    def upload(self, user_id="u1", **overrides):
        body = dict(RESUME, **overrides)
        return self.client.post("/api/ats/resumes", json=body, headers=self.as_user(user_id))


class TestResumes(AtsApiTestCase):
    def test_upload_and_list(self):
        created = self.upload()
        self.assertEqual(created.status_code, 200)
        resume_id = created.json()["resumeId"]
        self.assertEqual(len(created.json()["fingerprint"]), 32)

        listing = self.client.get("/api/ats/resumes", headers=self.as_user("u1")).json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["resumes"][0]["resumeId"], resume_id)
        self.assertEqual(listing["resumes"][0]["skills"], ["react", "python"])

    def test_uploads_are_not_merged(self):
        self.upload()
        self.upload()
        self.assertEqual(self.client.get("/api/ats/resumes", headers=self.as_user("u1")).json()["count"], 2)

    def test_negative_experience_rejected(self):
        response = self.upload(totalYearsExperience=-1)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "totalYearsExperience")


class TestScore(AtsApiTestCase):
    def test_score_breakdown(self):
        resume_id = self.upload().json()["resumeId"]

        response = self.client.post(
            "/api/ats/score", json={"resumeId": resume_id, "jobId": self.job_id}, headers=self.as_user("u1")
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        breakdown = body["breakdown"]
        self.assertEqual(breakdown["skillMatch"], 50)
        self.assertEqual(breakdown["experienceMatch"], 40)
        self.assertEqual(breakdown["educationMatch"], 100)
        self.assertEqual(breakdown["commonSkills"], ["react"])
        self.assertEqual(breakdown["missingSkills"], ["Node.js"])
        self.assertGreaterEqual(body["score"], 0)
        self.assertLessEqual(body["score"], 100)
        self.assertFalse(body["applicationUpdated"])

    def test_rescore_reuses_record_and_updates_application(self):
        resume_id = self.upload().json()["resumeId"]
        with self.store.unit_of_work() as repo:
            repo.db.add(JobApplication(job_id=self.job_id, user_id="u1"))

        payload = {"resumeId": resume_id, "jobId": self.job_id}
        first = self.client.post("/api/ats/score", json=payload, headers=self.as_user("u1")).json()
        second = self.client.post("/api/ats/score", json=payload, headers=self.as_user("u1")).json()

        self.assertEqual(first["scoreRecordId"], second["scoreRecordId"])
        self.assertTrue(second["applicationUpdated"])
        with self.store.unit_of_work() as repo:
            self.assertEqual(repo.jobs.get_application(self.job_id, "u1").ai_score, second["score"])

    def test_unknown_job(self):
        resume_id = self.upload().json()["resumeId"]
        response = self.client.post(
            "/api/ats/score", json={"resumeId": resume_id, "jobId": "missing"}, headers=self.as_user("u1")
        )
        self.assertEqual(response.status_code, 404)

    def test_someone_elses_resume(self):
        resume_id = self.upload(user_id="u2").json()["resumeId"]
        response = self.client.post(
            "/api/ats/score", json={"resumeId": resume_id, "jobId": self.job_id}, headers=self.as_user("u1")
        )
        self.assertEqual(response.status_code, 404)

    def test_resume_without_text(self):
        resume_id = self.upload(rawText=None).json()["resumeId"]
        response = self.client.post(
            "/api/ats/score", json={"resumeId": resume_id, "jobId": self.job_id}, headers=self.as_user("u1")
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "resumeId")

    def test_missing_ids(self):
        response = self.client.post("/api/ats/score", json={"resumeId": "x"}, headers=self.as_user("u1"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["field"], "jobId")


if __name__ == '__main__':
    unittest.main()
