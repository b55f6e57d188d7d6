from sqlalchemy import (
    Column, String, Text, TIMESTAMP, Boolean, Integer, Float, UniqueConstraint, Index
)

from core.utils import utc_now
from .base import Base, JSONType, new_id


class GitRepoSnapshot(Base):
    """
    Raw facts about one GitHub repository of a user, as last fetched.

    user_commit_count only counts commits authored by the user;
    total_commit_count includes every contributor.
    """
    __tablename__ = 'git_repo_snapshot'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    owner = Column(String(128), nullable=False)
    name = Column(String(256), nullable=False)

    description = Column(Text)
    html_url = Column(Text)
    stars = Column(Integer, nullable=False, default=0)
    is_fork = Column(Boolean, nullable=False, default=False)
    default_branch = Column(String(128), default='main')
    pushed_at = Column(TIMESTAMP(timezone=True))

    has_readme = Column(Boolean, default=False)
    readme_text = Column(Text)
    live_url = Column(Text)
    has_tests = Column(Boolean, default=False)
    has_deployment = Column(Boolean, default=False)

    languages = Column(JSONType, default=dict)  # {language: bytes}
    topics = Column(JSONType, default=list)
    frameworks = Column(JSONType, default=list)

    total_commit_count = Column(Integer, default=0)
    user_commit_count = Column(Integer, default=0)

    fetched_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint('user_id', 'owner', 'name', name='uq_git_repo_user_repo'),
        Index('idx_git_repo_user', 'user_id'),
    )


class LinkedInProfile(Base):
    """Self-reported profile facts. One row per user, overwritten on re-scrape."""
    __tablename__ = 'linkedin_profile'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False, unique=True)
    linkedin_url = Column(Text, nullable=False)

    headline = Column(Text)
    current_company = Column(Text)
    current_role = Column(Text)
    skills_listed = Column(JSONType, default=list)
    experience = Column(JSONType, default=list)
    education = Column(JSONType, default=list)

    scraped_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class SkillEvidence(Base):
    """
    Confidence-scored skill claim for one user.

    Written only by the skill confidence engine, as an upsert keyed by
    (user_id, skill_key). Rows are never deleted.
    """
    __tablename__ = 'skill_evidence'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    skill_name = Column(Text, nullable=False)
    skill_key = Column(String(128), nullable=False)
    source = Column(String(16), nullable=False)  # github | linkedin | both

    repo_count = Column(Integer, nullable=False, default=0)
    total_commits = Column(Integer, nullable=False, default=0)
    stars_on_skill_repos = Column(Integer, nullable=False, default=0)
    has_production_project = Column(Boolean, nullable=False, default=False)
    language_percentage = Column(Float, nullable=False, default=0.0)
    last_used_period = Column(String(7))  # YYYY-MM
    strongest_repo = Column(JSONType, nullable=True)
    improvement_tips = Column(JSONType, default=list)

    confidence_score = Column(Integer, nullable=False, default=0)
    verified = Column(Boolean, nullable=False, default=False)
    display_label = Column(Text, nullable=False, default='')

    verified_at = Column(TIMESTAMP(timezone=True))
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint('user_id', 'skill_key', name='uq_skill_evidence_user_skill'),
        Index('idx_skill_evidence_user_score', 'user_id', 'confidence_score'),
    )
