import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from core.utils import utc_now
from database.models import GitRepoSnapshot, LinkedInProfile, SkillEvidence
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_SNAPSHOT_FIELDS = (
    'description', 'html_url', 'stars', 'is_fork', 'default_branch', 'pushed_at',
    'has_readme', 'readme_text', 'live_url', 'has_tests', 'has_deployment',
    'languages', 'topics', 'frameworks', 'total_commit_count', 'user_commit_count',
)

_LINKEDIN_FIELDS = (
    'headline', 'current_company', 'current_role', 'skills_listed', 'experience', 'education',
)

_SKILL_FIELDS = (
    'skill_name', 'source', 'repo_count', 'total_commits', 'stars_on_skill_repos',
    'has_production_project', 'language_percentage', 'last_used_period', 'strongest_repo',
    'improvement_tips', 'confidence_score', 'verified', 'display_label', 'verified_at',
)


class EvidenceRepository(BaseRepository):
    """Raw GitHub/LinkedIn evidence and the derived SkillEvidence rows."""

    # ---- GitHub snapshots ----

    def upsert_repo_snapshot(self, user_id: str, owner: str, name: str, facts: Dict[str, Any]) -> GitRepoSnapshot:
        stmt = select(GitRepoSnapshot).where(
            GitRepoSnapshot.user_id == user_id,
            GitRepoSnapshot.owner == owner,
            GitRepoSnapshot.name == name
        )
        snapshot = self.db.execute(stmt).scalar_one_or_none()
        if snapshot is None:
            snapshot = GitRepoSnapshot(user_id=user_id, owner=owner, name=name)
            self.db.add(snapshot)
        for field in _SNAPSHOT_FIELDS:
            if field in facts:
                setattr(snapshot, field, facts[field])
        snapshot.fetched_at = utc_now()
        self.db.flush()
        return snapshot

    def list_repo_snapshots(self, user_id: str) -> List[GitRepoSnapshot]:
        stmt = (
            select(GitRepoSnapshot)
            .where(GitRepoSnapshot.user_id == user_id)
            .order_by(GitRepoSnapshot.owner, GitRepoSnapshot.name)
        )
        return list(self.db.execute(stmt).scalars().all())

    # ---- LinkedIn ----

    def upsert_linkedin_profile(self, user_id: str, linkedin_url: str, facts: Dict[str, Any]) -> LinkedInProfile:
        stmt = select(LinkedInProfile).where(LinkedInProfile.user_id == user_id)
        profile = self.db.execute(stmt).scalar_one_or_none()
        if profile is None:
            profile = LinkedInProfile(user_id=user_id, linkedin_url=linkedin_url)
            self.db.add(profile)
        profile.linkedin_url = linkedin_url
        for field in _LINKEDIN_FIELDS:
            if field in facts:
                setattr(profile, field, facts[field])
        profile.scraped_at = utc_now()
        self.db.flush()
        return profile

    def get_linkedin_profile(self, user_id: str) -> Optional[LinkedInProfile]:
        stmt = select(LinkedInProfile).where(LinkedInProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    # ---- SkillEvidence ----

    def list_skills(self, user_id: str) -> List[SkillEvidence]:
        stmt = (
            select(SkillEvidence)
            .where(SkillEvidence.user_id == user_id)
            .order_by(SkillEvidence.confidence_score.desc(), SkillEvidence.skill_name)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_skill(self, user_id: str, skill_key: str) -> Optional[SkillEvidence]:
        stmt = select(SkillEvidence).where(
            SkillEvidence.user_id == user_id,
            SkillEvidence.skill_key == skill_key
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_skill(self, user_id: str, skill_key: str, values: Dict[str, Any]) -> SkillEvidence:
        """
        Insert or update the (user_id, skill_key) row.

        The insert runs inside a savepoint; if a concurrent writer created the
        row first, the unique constraint fires and we update that row instead.
        """
        existing = self.get_skill(user_id, skill_key)
        if existing is None:
            try:
                with self.db.begin_nested():
                    existing = SkillEvidence(user_id=user_id, skill_key=skill_key)
                    self._apply_skill_values(existing, values)
                    self.db.add(existing)
                    self.db.flush()
                return existing
            except IntegrityError:
                logger.info(f"Concurrent insert for skill {skill_key} of {user_id}, updating instead")
                existing = self.get_skill(user_id, skill_key)
        self._apply_skill_values(existing, values)
        self.db.flush()
        return existing

    @staticmethod
    def _apply_skill_values(record: SkillEvidence, values: Dict[str, Any]) -> None:
        for field in _SKILL_FIELDS:
            if field in values:
                setattr(record, field, values[field])
        record.updated_at = utc_now()
