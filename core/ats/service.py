import logging
from dataclasses import dataclass
from typing import Optional

from core.errors import NotFoundError, ValidationError
from database.uow import EvidenceStore
from .engine import AtsScoringEngine
from .models import AtsResult, JobRequirements, StructuredResume

logger = logging.getLogger(__name__)


@dataclass
class ScoredPair:
    record_id: str
    resume_id: str
    job_id: str
    result: AtsResult


class MatchScoreService:
    """Loads a resume and a job, scores them and upserts the MatchScore.

    Usage:
        service = MatchScoreService(store, engine)
        scored = service.score_pair(user_id, resume_id, job_id)
        service.apply_application_score(job_id, user_id, scored.result.score)
    """

    def __init__(self, store: EvidenceStore, engine: AtsScoringEngine):
        self.store = store
        self.engine = engine

    def score_pair(self, user_id: str, resume_id: str, job_id: str) -> ScoredPair:
        """
        Score one of the caller's resumes against a job.

        Raises:
            NotFoundError: resume (owned by user_id) or job does not exist.
            ValidationError: resume has no text or no parsed structure yet.
        """
        with self.store.unit_of_work() as repo:
            resume_row = repo.resumes.get_for_user(resume_id, user_id)
            if resume_row is None:
                raise NotFoundError("Resume not found")
            job_row = repo.jobs.get_job(job_id)
            if job_row is None:
                raise NotFoundError("Job not found")

            if not resume_row.raw_text or not resume_row.raw_text.strip():
                raise ValidationError("Resume has no extracted text", field="resumeId")
            if not resume_row.parsed:
                raise ValidationError("Resume not yet parsed. Upload again.", field="resumeId")

            resume = StructuredResume.from_record(resume_row)
            job = JobRequirements.from_record(job_row)
            result = self.engine.score(resume, resume_row.raw_text, job)

            record = repo.matches.upsert_match(resume_id, job_id, {
                'user_id': user_id,
                'score': result.score,
                'common_skills': result.common_skills,
                'missing_skills': result.missing_skills,
                'breakdown': result.details,
                'weights': self.engine.weights.model_dump(),
                **result.sub_scores(),
            })
            record_id = record.id

        logger.info(f"Scored resume {resume_id} against job {job_id}: {result.score}")
        return ScoredPair(record_id=record_id, resume_id=resume_id, job_id=job_id, result=result)

    def apply_application_score(self, job_id: str, user_id: str, score: int) -> bool:
        """Write score onto the user's application for the job, if one exists."""
        with self.store.unit_of_work() as repo:
            application = repo.jobs.get_application(job_id, user_id)
            if application is None:
                return False
            application.ai_score = score
        logger.info(f"Updated application score for user {user_id} on job {job_id}")
        return True

    def get_score(self, resume_id: str, job_id: str) -> Optional[int]:
        with self.store.unit_of_work() as repo:
            match = repo.matches.get_match(resume_id, job_id)
            return match.score if match else None
