import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from core.utils import text_fingerprint
from database.models import ResumeEvidence
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ResumeRepository(BaseRepository):
    def create(self, user_id: str, data: Dict[str, Any]) -> ResumeEvidence:
        """Insert a new, immutable resume upload."""
        raw_text = data.get('raw_text')
        resume = ResumeEvidence(
            user_id=user_id,
            file_name=data.get('file_name'),
            raw_text=raw_text,
            content_fingerprint=text_fingerprint(raw_text) if raw_text else None,
            parsed=bool(data.get('parsed')),
            name=data.get('name'),
            email=data.get('email'),
            phone=data.get('phone'),
            skills=list(data.get('skills') or []),
            work_history=list(data.get('work_history') or []),
            education=list(data.get('education') or []),
            total_years_experience=data.get('total_years_experience'),
        )
        self.db.add(resume)
        self.db.flush()
        logger.info(f"Stored resume {resume.id} for user {user_id}")
        return resume

    def get_for_user(self, resume_id: str, user_id: str) -> Optional[ResumeEvidence]:
        stmt = select(ResumeEvidence).where(
            ResumeEvidence.id == resume_id,
            ResumeEvidence.user_id == user_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def latest_for_user(self, user_id: str) -> Optional[ResumeEvidence]:
        stmt = (
            select(ResumeEvidence)
            .where(ResumeEvidence.user_id == user_id)
            .order_by(ResumeEvidence.uploaded_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> List[ResumeEvidence]:
        stmt = (
            select(ResumeEvidence)
            .where(ResumeEvidence.user_id == user_id)
            .order_by(ResumeEvidence.uploaded_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())
