"""Base TestCase for API tests: a wired AppContext behind a TestClient."""

import json
import unittest

from fastapi.testclient import TestClient

from core.app_context import AppContext
from core.webhooks import compute_signature
from tests import make_config, make_store
from tests.mocks.sources import FakeGitHubSource, FakeLinkedInSource
from web.backend.app import create_app
from web.backend.routers.webhooks import limiter


class ApiTestCase(unittest.TestCase):
    """
    Workers and scheduler are never started: triggered jobs stay pending
    so tests can inspect them.
    """

    config_sections = {}

    def setUp(self):
        limiter.reset()
        self.store = make_store()
        self.github = FakeGitHubSource()
        self.linkedin = FakeLinkedInSource()
        self.ctx = AppContext.build(
            make_config(**self.config_sections),
            store=self.store,
            github=self.github,
            linkedin=self.linkedin
        )
        self.addCleanup(self.ctx.shutdown)
        self.client = TestClient(create_app(self.ctx))

    @staticmethod
    def as_user(user_id):
        return {"X-User-Id": user_id}

    def jobs(self, user_id):
        with self.store.unit_of_work() as repo:
            return repo.scrape_jobs.list_for_user(user_id)

    def post_webhook(self, event, payload, secret="global-secret", hook_id=None, signature=None, raw=None, repo=None):
        body = raw if raw is not None else json.dumps(payload).encode()
        headers = {
            "X-GitHub-Event": event,
            "Content-Type": "application/json",
        }
        if signature is None and secret is not None:
            signature = compute_signature(body, secret)
        if signature is not None:
            headers["X-Hub-Signature-256"] = signature
        if hook_id is not None:
            headers["X-GitHub-Hook-ID"] = str(hook_id)
        params = {"repo": repo} if repo is not None else None
        return self.client.post("/api/webhooks/github", content=body, headers=headers, params=params)
