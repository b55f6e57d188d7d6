import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete, or_, and_

from database.models import ScrapeJob, TERMINAL_STATUSES
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ScrapeJobRepository(BaseRepository):
    def create(self, user_id: str, kind: str, trigger: str, scheduled_at: datetime, now: datetime) -> ScrapeJob:
        job = ScrapeJob(
            user_id=user_id,
            kind=kind,
            trigger=trigger,
            status='pending',
            created_at=now,
            scheduled_at=scheduled_at
        )
        self.db.add(job)
        self.db.flush()
        return job

    def get(self, job_id: str) -> Optional[ScrapeJob]:
        return self.db.get(ScrapeJob, job_id)

    def latest_user_triggered(self, user_id: str, kind: str, since: datetime) -> Optional[ScrapeJob]:
        """Most recent user-triggered job of this kind created at or after `since`."""
        stmt = (
            select(ScrapeJob)
            .where(
                ScrapeJob.user_id == user_id,
                ScrapeJob.kind == kind,
                ScrapeJob.trigger == 'user',
                ScrapeJob.created_at >= since
            )
            .order_by(ScrapeJob.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_active(
        self,
        user_id: str,
        kind: str,
        now: datetime,
        stale_before: Optional[datetime] = None
    ) -> Optional[ScrapeJob]:
        """
        A running job, or a pending job already due, for (user, kind).

        Running jobs started before `stale_before` are abandoned and ignored.
        """
        running = ScrapeJob.status == 'running'
        if stale_before is not None:
            running = and_(running, ScrapeJob.started_at >= stale_before)
        stmt = (
            select(ScrapeJob)
            .where(
                ScrapeJob.user_id == user_id,
                ScrapeJob.kind == kind,
                or_(
                    running,
                    and_(ScrapeJob.status == 'pending', ScrapeJob.scheduled_at <= now)
                )
            )
            .order_by(ScrapeJob.created_at.asc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def stale_running(self, stale_before: datetime, limit: int = 100) -> List[ScrapeJob]:
        """Running jobs that started before `stale_before` (or never recorded a start)."""
        stmt = (
            select(ScrapeJob)
            .where(
                ScrapeJob.status == 'running',
                or_(ScrapeJob.started_at.is_(None), ScrapeJob.started_at < stale_before)
            )
            .order_by(ScrapeJob.created_at.asc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def has_pending(self, user_id: str, kind: str) -> bool:
        stmt = select(ScrapeJob.id).where(
            ScrapeJob.user_id == user_id,
            ScrapeJob.kind == kind,
            ScrapeJob.status == 'pending'
        ).limit(1)
        return self.db.execute(stmt).first() is not None

    def due_pending(self, now: datetime, limit: int = 100) -> List[ScrapeJob]:
        stmt = (
            select(ScrapeJob)
            .where(ScrapeJob.status == 'pending', ScrapeJob.scheduled_at <= now)
            .order_by(ScrapeJob.scheduled_at.asc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_for_user(self, user_id: str, limit: int = 20) -> List[ScrapeJob]:
        stmt = (
            select(ScrapeJob)
            .where(ScrapeJob.user_id == user_id)
            .order_by(ScrapeJob.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def delete_terminal_before(self, cutoff: datetime) -> int:
        stmt = delete(ScrapeJob).where(
            ScrapeJob.status.in_(TERMINAL_STATUSES),
            ScrapeJob.completed_at < cutoff
        )
        result = self.db.execute(stmt)
        count = result.rowcount or 0
        if count:
            logger.info(f"Deleted {count} finished scrape jobs completed before {cutoff.isoformat()}")
        return count
