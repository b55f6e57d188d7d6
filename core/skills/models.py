#!/usr/bin/env python3
"""
Skill Models - boundary records for the skill confidence engine.

RepoEvidence and LinkedInEvidence are built from store rows (or from a
source client) and reject missing required fields at construction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.errors import ValidationError
from core.utils import as_utc


@dataclass
class RepoEvidence:
    """Facts about one repository that can back a skill claim."""
    owner: str
    name: str
    stars: int = 0
    is_fork: bool = False
    pushed_at: Optional[datetime] = None
    description: Optional[str] = None
    has_readme: bool = False
    readme_text: Optional[str] = None
    live_url: Optional[str] = None
    has_tests: bool = False
    has_deployment: bool = False
    languages: Dict[str, int] = field(default_factory=dict)
    topics: List[str] = field(default_factory=list)
    frameworks: List[str] = field(default_factory=list)
    user_commit_count: int = 0
    total_commit_count: int = 0

    def __post_init__(self):
        if not self.owner:
            raise ValidationError("Repository owner is required", field="owner")
        if not self.name:
            raise ValidationError("Repository name is required", field="name")
        if self.stars < 0 or self.user_commit_count < 0:
            raise ValidationError("Repository counts must be non-negative", field="stars")
        self.pushed_at = as_utc(self.pushed_at)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def language_total_bytes(self) -> int:
        return sum(max(0, b) for b in self.languages.values())

    def skill_names(self) -> List[str]:
        """Languages, frameworks and topics, in that order."""
        return list(self.languages.keys()) + list(self.frameworks) + list(self.topics)

    @classmethod
    def from_snapshot(cls, snapshot: Any) -> "RepoEvidence":
        return cls(
            owner=snapshot.owner,
            name=snapshot.name,
            stars=snapshot.stars or 0,
            is_fork=bool(snapshot.is_fork),
            pushed_at=snapshot.pushed_at,
            description=snapshot.description,
            has_readme=bool(snapshot.has_readme),
            readme_text=snapshot.readme_text,
            live_url=snapshot.live_url,
            has_tests=bool(snapshot.has_tests),
            has_deployment=bool(snapshot.has_deployment),
            languages=dict(snapshot.languages or {}),
            topics=list(snapshot.topics or []),
            frameworks=list(snapshot.frameworks or []),
            user_commit_count=snapshot.user_commit_count or 0,
            total_commit_count=snapshot.total_commit_count or 0,
        )


@dataclass
class LinkedInEvidence:
    """Self-reported skills. No numeric backing."""
    linkedin_url: str
    skills_listed: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.linkedin_url:
            raise ValidationError("LinkedIn URL is required", field="linkedin_url")

    @classmethod
    def from_profile(cls, profile: Any) -> "LinkedInEvidence":
        return cls(linkedin_url=profile.linkedin_url, skills_listed=list(profile.skills_listed or []))


@dataclass
class StrongestRepo:
    name: str
    stars: int
    commits: int
    has_readme: bool
    has_live_demo: bool
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'stars': self.stars,
            'commits': self.commits,
            'has_readme': self.has_readme,
            'has_live_demo': self.has_live_demo,
            'description': self.description,
        }


@dataclass
class SkillMetrics:
    """Aggregated GitHub evidence for one skill."""
    repo_count: int = 0
    total_commits: int = 0
    stars_on_skill_repos: int = 0
    starred_repo_count: int = 0
    has_production_project: bool = False
    language_percentage: float = 0.0
    last_used: Optional[datetime] = None
    readme_mentions: bool = False
    has_tests: bool = False
    strongest_repo: Optional[StrongestRepo] = None

    @property
    def last_used_period(self) -> Optional[str]:
        return self.last_used.strftime("%Y-%m") if self.last_used else None


@dataclass
class SkillAssessment:
    """Engine output for one skill, ready to upsert."""
    skill_key: str
    skill_name: str
    source: str  # github | linkedin | both
    metrics: SkillMetrics
    confidence_score: int
    verified: bool
    display_label: str
    improvement_tips: List[str] = field(default_factory=list)

    def to_values(self) -> Dict[str, Any]:
        return {
            'skill_name': self.skill_name,
            'source': self.source,
            'repo_count': self.metrics.repo_count,
            'total_commits': self.metrics.total_commits,
            'stars_on_skill_repos': self.metrics.stars_on_skill_repos,
            'has_production_project': self.metrics.has_production_project,
            'language_percentage': self.metrics.language_percentage,
            'last_used_period': self.metrics.last_used_period,
            'strongest_repo': self.metrics.strongest_repo.to_dict() if self.metrics.strongest_repo else None,
            'improvement_tips': self.improvement_tips,
            'confidence_score': self.confidence_score,
            'verified': self.verified,
            'display_label': self.display_label,
        }


@dataclass
class RecomputeResult:
    """What one recompute wrote, and how it differs from before."""
    user_id: str
    assessments: List[SkillAssessment] = field(default_factory=list)
    skills_added: List[str] = field(default_factory=list)
    skills_strengthened: List[Dict[str, Any]] = field(default_factory=list)
    failed_skills: List[str] = field(default_factory=list)

    @property
    def changes_found(self) -> bool:
        return bool(self.skills_added or self.skills_strengthened)
