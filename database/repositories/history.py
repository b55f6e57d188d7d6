from typing import Any, Dict, List, Optional

from sqlalchemy import select

from database.models import ProfileUpdateHistory
from database.repositories.base import BaseRepository


class HistoryRepository(BaseRepository):
    def add(
        self,
        user_id: str,
        update_type: str,
        trigger: str,
        scrape_job_id: Optional[str],
        skills_added: List[str],
        skills_strengthened: List[Dict[str, Any]],
        repos_scraped: int = 0,
        changes_detected: Optional[Dict[str, Any]] = None
    ) -> ProfileUpdateHistory:
        entry = ProfileUpdateHistory(
            user_id=user_id,
            update_type=update_type,
            trigger=trigger,
            scrape_job_id=scrape_job_id,
            skills_added=skills_added,
            skills_strengthened=skills_strengthened,
            repos_scraped=repos_scraped,
            changes_detected=changes_detected or {}
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_for_user(self, user_id: str, limit: int = 50) -> List[ProfileUpdateHistory]:
        stmt = (
            select(ProfileUpdateHistory)
            .where(ProfileUpdateHistory.user_id == user_id)
            .order_by(ProfileUpdateHistory.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
