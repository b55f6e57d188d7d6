"""Background scheduler for due jobs, periodic re-checks and retention."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.config_loader import OrchestratorConfig
from core.utils import as_utc, utc_now
from database.uow import EvidenceStore
from .orchestrator import ScrapeOrchestrator
from .state import transition
from .worker_pool import WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    submitted: int = 0
    scheduled: int = 0
    deleted: int = 0
    abandoned: int = 0


class ScrapeScheduler:
    def __init__(
        self,
        store: EvidenceStore,
        orchestrator: ScrapeOrchestrator,
        pool: WorkerPool,
        config: OrchestratorConfig
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.pool = pool
        self.config = config
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="scrape-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Scheduler started (poll every {self.config.poll_interval_seconds}s)")

    def stop(self, timeout: Optional[float] = 10.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.info("Scheduler stopped")

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Scheduler tick failed")
            self._stop_event.wait(self.config.poll_interval_seconds)

    def tick(self, now: Optional[datetime] = None) -> TickResult:
        now = as_utc(now) or utc_now()
        result = TickResult()

        result.abandoned = self._fail_abandoned(now)

        with self.store.unit_of_work() as repo:
            due = [job.id for job in repo.scrape_jobs.due_pending(now, limit=self.config.queue_size)]
        for job_id in due:
            if self.pool.is_in_flight(job_id):
                continue
            if self.pool.submit(job_id):
                result.submitted += 1

        with self.store.unit_of_work() as repo:
            github_users = [u.user_id for u in repo.users.list_with_github()]
        for user_id in github_users:
            if self.orchestrator.schedule_recheck(user_id, 'github', now=now) is not None:
                result.scheduled += 1

        cutoff = now - timedelta(days=self.config.job_retention_days)
        with self.store.unit_of_work() as repo:
            result.deleted = repo.scrape_jobs.delete_terminal_before(cutoff)

        if result.submitted or result.scheduled or result.deleted or result.abandoned:
            logger.info(
                f"Scheduler tick: {result.submitted} submitted, {result.scheduled} re-checks scheduled, "
                f"{result.deleted} old jobs deleted, {result.abandoned} abandoned jobs failed"
            )
        return result

    def _fail_abandoned(self, now: datetime) -> int:
        """Fail running jobs whose worker died or never reported back."""
        stale_before = self.orchestrator.stale_before(now)
        message = f"Abandoned: still running after {self.config.stale_job_minutes} minutes"
        count = 0
        with self.store.unit_of_work() as repo:
            for job in repo.scrape_jobs.stale_running(stale_before, limit=self.config.queue_size):
                if self.pool.is_in_flight(job.id):
                    continue
                transition(job, 'failed', now, error_message=message)
                logger.warning(f"Failed abandoned {job.kind} job {job.id} for {job.user_id}")
                count += 1
        return count
