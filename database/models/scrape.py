from sqlalchemy import (
    Column, String, Text, TIMESTAMP, Boolean, Integer, UniqueConstraint, Index
)
from sqlalchemy.orm import deferred

from core.utils import utc_now
from .base import Base, JSONType, new_id


JOB_KINDS = ('github', 'linkedin', 'full')
JOB_STATUSES = ('pending', 'running', 'completed', 'failed')
TERMINAL_STATUSES = ('completed', 'failed')
TRIGGERS = ('webhook', 'schedule', 'user', 'admin')


class ScrapeJob(Base):
    """
    One tracked evidence refresh.

    status moves pending -> running -> completed|failed and never leaves a
    terminal state; see pipeline/state.py.
    """
    __tablename__ = 'scrape_job'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    kind = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default='pending')
    trigger = Column(String(16), nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    scheduled_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    started_at = Column(TIMESTAMP(timezone=True))
    completed_at = Column(TIMESTAMP(timezone=True))

    error_message = Column(Text)
    changes_found = Column(Boolean)
    details = Column(JSONType, default=dict)

    __table_args__ = (
        Index('idx_scrape_job_user_kind_status', 'user_id', 'kind', 'status'),
        Index('idx_scrape_job_user_trigger_created', 'user_id', 'kind', 'trigger', 'created_at'),
        Index('idx_scrape_job_due', 'status', 'scheduled_at'),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class WebhookRegistration(Base):
    """
    A repository connected for push notifications.

    The shared secret is a deferred column so ordinary queries never load it;
    only the webhook route asks for it explicitly.
    """
    __tablename__ = 'webhook_registration'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    repo_owner = Column(String(128), nullable=False)
    repo_name = Column(String(256), nullable=False)
    github_hook_id = Column(String(64), nullable=True)
    secret = deferred(Column(Text, nullable=False))
    events = Column(JSONType, default=list)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    last_triggered_at = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        UniqueConstraint('repo_owner', 'repo_name', name='uq_webhook_registration_repo'),
        Index('idx_webhook_registration_hook', 'github_hook_id'),
        Index('idx_webhook_registration_user', 'user_id'),
    )


class ProfileUpdateHistory(Base):
    """Audit trail of what each completed refresh changed on a profile."""
    __tablename__ = 'profile_update_history'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    update_type = Column(String(32), nullable=False)
    trigger = Column(String(16), nullable=False)
    scrape_job_id = Column(String(36))

    changes_detected = Column(JSONType, default=dict)
    skills_added = Column(JSONType, default=list)
    skills_strengthened = Column(JSONType, default=list)  # [{skill_name, previous_score, new_score}]
    repos_scraped = Column(Integer, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index('idx_profile_history_user_created', 'user_id', 'created_at'),
    )
