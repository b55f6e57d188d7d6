from sqlalchemy import Column, String, TIMESTAMP, Integer, Float, UniqueConstraint, Index

from core.utils import utc_now
from .base import Base, JSONType, new_id


class MatchScore(Base):
    """
    ATS score of one resume against one job posting.

    Upserted on (resume_id, job_id); re-scoring overwrites, no history is kept.
    """
    __tablename__ = 'match_score'

    id = Column(String(36), primary_key=True, default=new_id)
    resume_id = Column(String(36), nullable=False)
    job_id = Column(String(36), nullable=False)
    user_id = Column(String(128), nullable=False)

    score = Column(Integer, nullable=False)
    skill_match = Column(Float, nullable=False)
    experience_match = Column(Float, nullable=False)
    education_match = Column(Float, nullable=False)
    keyword_density = Column(Float, nullable=False)
    semantic_similarity = Column(Float, nullable=False)

    common_skills = Column(JSONType, default=list)
    missing_skills = Column(JSONType, default=list)
    breakdown = Column(JSONType, default=dict)
    weights = Column(JSONType, default=dict)

    calculated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint('resume_id', 'job_id', name='uq_match_score_resume_job'),
        Index('idx_match_score_user', 'user_id'),
        Index('idx_match_score_job_score', 'job_id', 'score'),
    )
