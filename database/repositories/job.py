from typing import Optional

from sqlalchemy import select

from database.models import JobPosting, JobApplication
from database.repositories.base import BaseRepository


class JobRepository(BaseRepository):
    def get_job(self, job_id: str) -> Optional[JobPosting]:
        return self.db.get(JobPosting, job_id)

    def get_application(self, job_id: str, user_id: str) -> Optional[JobApplication]:
        stmt = select(JobApplication).where(
            JobApplication.job_id == job_id,
            JobApplication.user_id == user_id
        )
        return self.db.execute(stmt).scalar_one_or_none()
