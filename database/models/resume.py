from sqlalchemy import Column, String, Text, TIMESTAMP, Boolean, Float, Index

from core.utils import utc_now
from .base import Base, JSONType, new_id


class ResumeEvidence(Base):
    """
    One uploaded resume: extracted text plus parsed structure.

    Rows are immutable once written. A newer upload supersedes older ones;
    "latest resume" means most recent uploaded_at for the user.
    """
    __tablename__ = 'resume_evidence'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)

    file_name = Column(Text)
    raw_text = Column(Text, nullable=True)  # null until text extraction has run
    content_fingerprint = Column(String(64), nullable=True)

    # Structured fields, populated by the external resume parser
    parsed = Column(Boolean, nullable=False, default=False)
    name = Column(Text)
    email = Column(Text)
    phone = Column(Text)
    skills = Column(JSONType, default=list)
    work_history = Column(JSONType, default=list)  # [{company, role, duration}]
    education = Column(JSONType, default=list)  # [{degree, institution, field, year}]
    total_years_experience = Column(Float, nullable=True)

    uploaded_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index('idx_resume_user_uploaded', 'user_id', 'uploaded_at'),
        Index('idx_resume_fingerprint', 'content_fingerprint'),
    )
