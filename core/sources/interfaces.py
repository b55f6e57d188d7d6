"""
Evidence Source Interfaces - abstract bases for third-party fetchers.

The orchestrator only depends on these; the concrete clients live next to
them and can be swapped for fakes in tests.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class RepoFacts:
    """One repository as fetched from GitHub, before it is stored."""
    owner: str
    name: str
    description: Optional[str] = None
    html_url: Optional[str] = None
    stars: int = 0
    is_fork: bool = False
    default_branch: str = "main"
    pushed_at: Optional[datetime] = None
    has_readme: bool = False
    readme_text: Optional[str] = None
    live_url: Optional[str] = None
    has_tests: bool = False
    has_deployment: bool = False
    languages: Dict[str, int] = field(default_factory=dict)
    topics: List[str] = field(default_factory=list)
    frameworks: List[str] = field(default_factory=list)
    total_commit_count: int = 0
    user_commit_count: int = 0

    def to_snapshot_values(self) -> Dict[str, Any]:
        return {
            'description': self.description,
            'html_url': self.html_url,
            'stars': self.stars,
            'is_fork': self.is_fork,
            'default_branch': self.default_branch,
            'pushed_at': self.pushed_at,
            'has_readme': self.has_readme,
            'readme_text': self.readme_text,
            'live_url': self.live_url,
            'has_tests': self.has_tests,
            'has_deployment': self.has_deployment,
            'languages': dict(self.languages),
            'topics': list(self.topics),
            'frameworks': list(self.frameworks),
            'total_commit_count': self.total_commit_count,
            'user_commit_count': self.user_commit_count,
        }


@dataclass
class LinkedInFacts:
    linkedin_url: str
    headline: Optional[str] = None
    current_company: Optional[str] = None
    current_role: Optional[str] = None
    skills_listed: List[str] = field(default_factory=list)
    experience: List[Dict[str, Any]] = field(default_factory=list)
    education: List[Dict[str, Any]] = field(default_factory=list)

    def to_profile_values(self) -> Dict[str, Any]:
        return {
            'headline': self.headline,
            'current_company': self.current_company,
            'current_role': self.current_role,
            'skills_listed': list(self.skills_listed),
            'experience': list(self.experience),
            'education': list(self.education),
        }


class GitHubEvidenceSource(ABC):
    """
    Abstract interface for fetching a user's GitHub evidence.
    """

    @abstractmethod
    def fetch_repositories(self, github_username: str) -> List[RepoFacts]:
        """
        Fetch and analyse the user's public, owned repositories.

        Raises:
            UpstreamError: GitHub is unreachable, rate limited or returned an error.
        """
        pass

    @abstractmethod
    def register_repo_webhook(self, owner: str, repo: str, secret: str, events: List[str]) -> Optional[str]:
        """
        Create a push webhook on the repository. Returns GitHub's hook id.
        """
        pass


class LinkedInEvidenceSource(ABC):
    """
    Abstract interface for fetching a LinkedIn profile.
    """

    @abstractmethod
    def fetch_profile(self, linkedin_url: str) -> LinkedInFacts:
        """
        Raises:
            UpstreamError: provider failure or timeout.
        """
        pass
