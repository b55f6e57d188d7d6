import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from core.utils import utc_now
from database.models import MatchScore
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

_MATCH_FIELDS = (
    'user_id', 'score', 'skill_match', 'experience_match', 'education_match',
    'keyword_density', 'semantic_similarity', 'common_skills', 'missing_skills',
    'breakdown', 'weights',
)


class MatchRepository(BaseRepository):
    def get_match(self, resume_id: str, job_id: str) -> Optional[MatchScore]:
        stmt = select(MatchScore).where(
            MatchScore.resume_id == resume_id,
            MatchScore.job_id == job_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> List[MatchScore]:
        stmt = (
            select(MatchScore)
            .where(MatchScore.user_id == user_id)
            .order_by(MatchScore.calculated_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def upsert_match(self, resume_id: str, job_id: str, values: Dict[str, Any]) -> MatchScore:
        """Overwrite the (resume_id, job_id) score, creating it on first use."""
        match = self.get_match(resume_id, job_id)
        if match is None:
            try:
                with self.db.begin_nested():
                    match = MatchScore(resume_id=resume_id, job_id=job_id)
                    self._apply(match, values)
                    self.db.add(match)
                    self.db.flush()
                return match
            except IntegrityError:
                logger.info(f"Concurrent score insert for resume {resume_id} / job {job_id}, updating instead")
                match = self.get_match(resume_id, job_id)
        self._apply(match, values)
        self.db.flush()
        return match

    @staticmethod
    def _apply(match: MatchScore, values: Dict[str, Any]) -> None:
        for field in _MATCH_FIELDS:
            if field in values:
                setattr(match, field, values[field])
        match.calculated_at = utc_now()
