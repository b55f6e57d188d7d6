from sqlalchemy import (
    Column, String, Text, TIMESTAMP, Boolean, Integer, UniqueConstraint, Index
)

from core.utils import utc_now
from .base import Base, JSONType, new_id


class JobPosting(Base):
    """Recruiter-authored job posting with the fields the ATS engine reads."""
    __tablename__ = 'job_posting'

    id = Column(String(36), primary_key=True, default=new_id)
    recruiter_id = Column(String(128), nullable=True)
    title = Column(Text, nullable=False)
    company = Column(Text)
    description = Column(Text)

    required_skills = Column(JSONType, default=list)
    nice_to_have_skills = Column(JSONType, default=list)
    experience_level = Column(String(16), nullable=True)  # entry | mid | senior
    min_education = Column(String(32), nullable=True)

    is_open = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class JobApplication(Base):
    __tablename__ = 'job_application'

    id = Column(String(36), primary_key=True, default=new_id)
    job_id = Column(String(36), nullable=False)
    user_id = Column(String(128), nullable=False)
    status = Column(String(32), nullable=False, default='applied')
    ai_score = Column(Integer, nullable=True)
    applied_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint('job_id', 'user_id', name='uq_job_application_job_user'),
        Index('idx_job_application_user', 'user_id'),
    )
