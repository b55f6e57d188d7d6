"""Fake evidence sources for pipeline and engine tests."""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from core.errors import UpstreamError
from core.sources.interfaces import (
    GitHubEvidenceSource,
    LinkedInEvidenceSource,
    LinkedInFacts,
    RepoFacts,
)


def repo_facts(
    name: str,
    languages: Optional[Dict[str, int]] = None,
    stars: int = 0,
    commits: int = 0,
    pushed_at: Optional[datetime] = None,
    owner: str = "octocat",
    **kwargs
) -> RepoFacts:
    return RepoFacts(
        owner=owner,
        name=name,
        languages=languages or {},
        stars=stars,
        user_commit_count=commits,
        total_commit_count=commits,
        pushed_at=pushed_at,
        **kwargs
    )


class FakeGitHubSource(GitHubEvidenceSource):
    def __init__(self, repos: Optional[List[RepoFacts]] = None, error: Optional[Exception] = None):
        self.repos = repos or []
        self.error = error
        self.calls: List[str] = []
        self.hooks: List[tuple] = []

    def fetch_repositories(self, github_username: str) -> List[RepoFacts]:
        self.calls.append(github_username)
        if self.error is not None:
            raise self.error
        return list(self.repos)

    def register_repo_webhook(self, owner: str, repo: str, secret: str, events: List[str]) -> Optional[str]:
        self.hooks.append((owner, repo, secret, tuple(events)))
        return "98765"


class FakeLinkedInSource(LinkedInEvidenceSource):
    def __init__(self, skills: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.skills = skills or []
        self.error = error
        self.calls: List[str] = []

    def fetch_profile(self, linkedin_url: str) -> LinkedInFacts:
        self.calls.append(linkedin_url)
        if self.error is not None:
            raise self.error
        return LinkedInFacts(linkedin_url=linkedin_url, headline="Engineer", skills_listed=list(self.skills))


class SlowGitHubSource(FakeGitHubSource):
    """Blocks until released, to exercise fetch timeouts."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def fetch_repositories(self, github_username: str) -> List[RepoFacts]:
        self.calls.append(github_username)
        if not self.release.wait(5):
            raise UpstreamError("never released")
        return []
