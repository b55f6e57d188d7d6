"""
Bounded worker pool that executes ScrapeJobs off the request path.

Jobs are identified by id only; the worker re-reads the row under the
user's lock and skips it if it is no longer pending.
"""

import logging
import queue
import threading
from typing import List, Optional, Set

from core.locks import KeyedLock
from core.utils import utc_now
from database.uow import EvidenceStore
from .state import transition

logger = logging.getLogger(__name__)

_STOP = object()


class WorkerPool:
    def __init__(
        self,
        store: EvidenceStore,
        runner,
        user_locks: KeyedLock,
        worker_count: int = 4,
        queue_size: int = 100
    ):
        self.store = store
        self.runner = runner
        self.user_locks = user_locks
        self.worker_count = worker_count
        self._queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self._in_flight: Set[str] = set()
        self._in_flight_lock = threading.Lock()
        self._threads: List[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            return
        for i in range(self.worker_count):
            thread = threading.Thread(target=self._work, name=f"scrape-worker-{i}", daemon=True)
            thread.start()
            self._threads.append(thread)
        logger.info(f"Started {self.worker_count} scrape workers")

    def stop(self, timeout: Optional[float] = 10.0) -> None:
        for _ in self._threads:
            self._queue.put(_STOP)
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []
        logger.info("Scrape workers stopped")

    def is_in_flight(self, job_id: str) -> bool:
        with self._in_flight_lock:
            return job_id in self._in_flight

    def submit(self, job_id: str) -> bool:
        """
        Queue a job for execution.

        Returns False when the job is already queued or the queue is full;
        the job then stays pending and the scheduler retries it.
        """
        with self._in_flight_lock:
            if job_id in self._in_flight:
                return False
            try:
                self._queue.put_nowait(job_id)
            except queue.Full:
                logger.warning(f"Worker queue full, job {job_id} stays pending")
                return False
            self._in_flight.add(job_id)
        return True

    def wait_idle(self) -> None:
        """Block until every submitted job has been processed."""
        self._queue.join()

    def _work(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self.process(item)
            except Exception:
                logger.exception(f"Worker crashed on job {item}")
            finally:
                if item is not _STOP:
                    with self._in_flight_lock:
                        self._in_flight.discard(item)
                self._queue.task_done()

    def process(self, job_id: str) -> Optional[str]:
        """
        Run one job to a terminal state. Returns the final status, or None
        when the job was skipped.
        """
        with self.store.unit_of_work() as repo:
            job = repo.scrape_jobs.get(job_id)
            if job is None:
                logger.warning(f"Job {job_id} disappeared before it ran")
                return None
            user_id = job.user_id

        with self.user_locks.hold(user_id):
            with self.store.unit_of_work() as repo:
                job = repo.scrape_jobs.get(job_id)
                if job is None or job.status != 'pending':
                    logger.info(f"Skipping job {job_id}: no longer pending")
                    return None
                transition(job, 'running', utc_now())
                kind, trigger = job.kind, job.trigger

            logger.info(f"Running {kind} job {job_id} for {user_id} (trigger={trigger})")
            try:
                changes_found = self.runner.run(job_id, user_id, kind, trigger)
            except Exception as e:
                logger.exception(f"Job {job_id} failed")
                return self._finish(job_id, 'failed', error_message=str(e) or type(e).__name__)

            status = self._finish(job_id, 'completed', changes_found=changes_found)
            logger.info(f"Job {job_id} finished as {status} (changes_found={changes_found})")
            return status

    def _finish(
        self,
        job_id: str,
        status: str,
        error_message: Optional[str] = None,
        changes_found: bool = False
    ) -> Optional[str]:
        """Record the outcome; returns the status the job ends up in."""
        with self.store.unit_of_work() as repo:
            job = repo.scrape_jobs.get(job_id)
            if job is None:
                return None
            if job.status != 'running':
                logger.warning(f"Job {job_id} was marked {job.status} while running; keeping it")
                return job.status
            transition(job, status, utc_now(), error_message=error_message, changes_found=changes_found)
            return status
