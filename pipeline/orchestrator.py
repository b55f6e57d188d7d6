#!/usr/bin/env python3
"""
Scrape job orchestrator.

Every trigger (webhook, schedule, user, admin) goes through
request_refresh(), which applies the user rate limit, coalesces onto an
already active job and otherwise creates a pending ScrapeJob. Due jobs are
handed to the dispatcher (the worker pool); future jobs wait for the
scheduler.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.config_loader import OrchestratorConfig
from core.errors import RateLimitError, ValidationError
from core.locks import KeyedLock
from core.utils import as_utc, utc_now
from database.models import JOB_KINDS, TRIGGERS
from database.uow import EvidenceStore
from .state import stagger_offset

logger = logging.getLogger(__name__)


@dataclass
class TriggerResult:
    job_id: str
    status: str
    coalesced: bool
    scheduled_at: datetime
    dispatched: bool = False


class ScrapeOrchestrator:
    def __init__(
        self,
        store: EvidenceStore,
        config: OrchestratorConfig,
        dispatcher: Optional[Callable[[str], bool]] = None
    ):
        self.store = store
        self.config = config
        self.dispatcher = dispatcher
        # Serialises check-and-create per user; separate from the evidence
        # write lock so triggers never wait on a running job.
        self._trigger_locks = KeyedLock()

    def set_dispatcher(self, dispatcher: Callable[[str], bool]) -> None:
        self.dispatcher = dispatcher

    @property
    def user_window(self) -> timedelta:
        return timedelta(minutes=self.config.user_refresh_window_minutes)

    def stale_before(self, now: datetime) -> datetime:
        """Running jobs started before this are treated as abandoned."""
        return now - timedelta(minutes=self.config.stale_job_minutes)

    def _check_user_window(self, repo, user_id: str, kind: str, now: datetime) -> None:
        recent = repo.scrape_jobs.latest_user_triggered(user_id, kind, since=now - self.user_window)
        if recent is not None:
            raise RateLimitError(
                f"Rate limited: you can refresh once every {self.config.user_refresh_window_minutes} minutes",
                next_allowed_at=as_utc(recent.created_at) + self.user_window
            )

    def check_user_rate_limit(self, user_id: str, kind: str, now: Optional[datetime] = None) -> None:
        """Raise RateLimitError if a user-triggered job would be refused right now."""
        now = as_utc(now) or utc_now()
        with self.store.unit_of_work() as repo:
            self._check_user_window(repo, user_id, kind, now)

    def request_refresh(
        self,
        user_id: str,
        kind: str,
        trigger: str,
        run_at: Optional[datetime] = None,
        now: Optional[datetime] = None
    ) -> TriggerResult:
        """
        Create (or reuse) a ScrapeJob for (user_id, kind).

        Raises:
            ValidationError: unknown kind or trigger.
            RateLimitError: a user-triggered job of this kind was created
                inside the rate-limit window.
        """
        if kind not in JOB_KINDS:
            raise ValidationError(f"Unknown job kind '{kind}'", field="kind")
        if trigger not in TRIGGERS:
            raise ValidationError(f"Unknown trigger '{trigger}'", field="trigger")

        now = as_utc(now) or utc_now()
        run_at = as_utc(run_at) or now
        due = run_at <= now

        with self._trigger_locks.hold(user_id):
            with self.store.unit_of_work() as repo:
                if trigger == 'user':
                    self._check_user_window(repo, user_id, kind, now)

                if due:
                    active = repo.scrape_jobs.find_active(user_id, kind, now, stale_before=self.stale_before(now))
                    if active is not None:
                        logger.info(
                            f"Coalesced {trigger} trigger for {user_id}/{kind} onto job {active.id} ({active.status})"
                        )
                        return TriggerResult(
                            job_id=active.id,
                            status=active.status,
                            coalesced=True,
                            scheduled_at=as_utc(active.scheduled_at)
                        )

                job = repo.scrape_jobs.create(user_id, kind, trigger, scheduled_at=run_at, now=now)
                job_id = job.id

        logger.info(f"Created {kind} job {job_id} for {user_id} (trigger={trigger}, due={due})")

        dispatched = False
        if due and self.dispatcher is not None:
            dispatched = self.dispatcher(job_id)
            if not dispatched:
                logger.warning(f"Job {job_id} left pending for the scheduler")

        return TriggerResult(
            job_id=job_id,
            status='pending',
            coalesced=False,
            scheduled_at=run_at,
            dispatched=dispatched
        )

    def next_recheck_at(self, user_id: str, kind: str, now: datetime) -> datetime:
        stagger_hours = int(stagger_offset(user_id, self.config.stagger_hours).total_seconds() // 3600)
        if kind == 'linkedin':
            # Half a day away from the user's github slot, wrapped into the same day
            return now + timedelta(days=self.config.linkedin_recheck_days, hours=(stagger_hours + 12) % 24)
        return now + timedelta(days=self.config.github_recheck_days, hours=stagger_hours)

    def schedule_recheck(self, user_id: str, kind: str, now: Optional[datetime] = None) -> Optional[TriggerResult]:
        """
        Schedule a future re-check unless one is already pending.
        """
        now = as_utc(now) or utc_now()
        with self._trigger_locks.hold(user_id):
            with self.store.unit_of_work() as repo:
                if repo.scrape_jobs.has_pending(user_id, kind):
                    return None
            return self.request_refresh(
                user_id,
                kind,
                trigger='schedule',
                run_at=self.next_recheck_at(user_id, kind, now),
                now=now
            )
