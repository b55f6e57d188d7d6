"""Job runners: fetch evidence, store it, recompute skills, record history.

Called by the worker pool once a ScrapeJob has moved to running. Errors
propagate so the pool can mark the job failed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from core.errors import UpstreamError, ValidationError
from core.skills import RecomputeResult, SkillConfidenceEngine
from core.sources.interfaces import GitHubEvidenceSource, LinkedInEvidenceSource
from core.utils import utc_now
from database.uow import EvidenceStore
from notification.emitter import NotificationEmitter
from notification.events import profile_updated_event

logger = logging.getLogger(__name__)


UPDATE_TYPES = {
    'webhook': 'github_webhook',
    'schedule': 'scheduled_rescrape',
    'user': 'manual_refresh',
    'admin': 'admin_rescrape',
}


@dataclass
class RunOutcome:
    repos_scraped: int = 0
    linkedin_synced: bool = False
    skills_added: List[str] = field(default_factory=list)
    skills_strengthened: List[Dict[str, Any]] = field(default_factory=list)
    failed_skills: List[str] = field(default_factory=list)

    def merge(self, result: RecomputeResult) -> None:
        self.skills_added = list(dict.fromkeys(self.skills_added + result.skills_added))
        seen = {s['skill_name'] for s in self.skills_strengthened}
        self.skills_strengthened += [s for s in result.skills_strengthened if s['skill_name'] not in seen]
        self.failed_skills = list(dict.fromkeys(self.failed_skills + result.failed_skills))

    @property
    def changes_found(self) -> bool:
        return bool(self.skills_added or self.skills_strengthened)


class JobRunner:
    def __init__(
        self,
        store: EvidenceStore,
        github: GitHubEvidenceSource,
        linkedin: Optional[LinkedInEvidenceSource],
        skill_engine: SkillConfidenceEngine,
        emitter: NotificationEmitter,
        fetch_timeout_seconds: float = 30,
        schedule_recheck: Optional[Callable[[str, str], Any]] = None
    ):
        self.store = store
        self.github = github
        self.linkedin = linkedin
        self.skill_engine = skill_engine
        self.emitter = emitter
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.schedule_recheck = schedule_recheck
        self._fetch_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="evidence-fetch")

    def shutdown(self) -> None:
        # Abandoned fetches are not cancelled; they finish against their own request timeout
        self._fetch_executor.shutdown(wait=False)

    def _fetch(self, description: str, fn: Callable, *args):
        future = self._fetch_executor.submit(fn, *args)
        try:
            return future.result(timeout=self.fetch_timeout_seconds)
        except FutureTimeoutError as e:
            raise UpstreamError(f"{description} timed out after {self.fetch_timeout_seconds}s") from e

    def run(self, job_id: str, user_id: str, kind: str, trigger: str) -> bool:
        """Run one job. Returns changes_found."""
        outcome = RunOutcome()
        if kind in ('github', 'full'):
            self._run_github(user_id, outcome, required=(kind == 'github'))
        if kind in ('linkedin', 'full'):
            self._run_linkedin(user_id, outcome, required=(kind == 'linkedin'))

        update_type = 'linkedin_sync' if kind == 'linkedin' else UPDATE_TYPES.get(trigger, 'manual_refresh')
        with self.store.unit_of_work() as repo:
            repo.history.add(
                user_id=user_id,
                update_type=update_type,
                trigger=trigger,
                scrape_job_id=job_id,
                skills_added=outcome.skills_added,
                skills_strengthened=outcome.skills_strengthened,
                repos_scraped=outcome.repos_scraped,
                changes_detected={
                    'kind': kind,
                    'linkedin_synced': outcome.linkedin_synced,
                    'failed_skills': outcome.failed_skills,
                }
            )

        if outcome.changes_found:
            event = profile_updated_event(
                user_id,
                skills_added=len(outcome.skills_added),
                skills_strengthened=len(outcome.skills_strengthened),
                job_id=job_id
            )
            try:
                self.emitter.emit(event)
            except Exception:
                logger.exception(f"Failed to emit profile update notification for {user_id}")

        if kind in ('linkedin', 'full') and outcome.linkedin_synced and self.schedule_recheck is not None:
            self.schedule_recheck(user_id, 'linkedin')

        return outcome.changes_found

    def _run_github(self, user_id: str, outcome: RunOutcome, required: bool) -> None:
        with self.store.unit_of_work() as repo:
            user = repo.users.get_by_user_id(user_id)
            username = user.github_username if user else None
        if not username:
            if required:
                raise ValidationError(f"User {user_id} has no GitHub username linked", field="githubUsername")
            return

        repos = self._fetch(f"GitHub fetch for {username}", self.github.fetch_repositories, username)
        now = utc_now()
        with self.store.unit_of_work() as repo:
            for facts in repos:
                repo.evidence.upsert_repo_snapshot(user_id, facts.owner, facts.name, facts.to_snapshot_values())
            user = repo.users.get_by_user_id(user_id)
            if user is not None:
                repo.users.mark_github_synced(user, now)
        outcome.repos_scraped = len(repos)
        logger.info(f"Stored {len(repos)} repository snapshots for {user_id}")

        outcome.merge(self.skill_engine.recompute(user_id, now=now))

    def _run_linkedin(self, user_id: str, outcome: RunOutcome, required: bool) -> None:
        with self.store.unit_of_work() as repo:
            user = repo.users.get_by_user_id(user_id)
            linkedin_url = user.linkedin_url if user else None
        if not linkedin_url:
            if required:
                raise ValidationError(f"User {user_id} has no LinkedIn URL", field="linkedinUrl")
            return
        if self.linkedin is None:
            raise UpstreamError("LinkedIn provider is not configured")

        facts = self._fetch("LinkedIn fetch", self.linkedin.fetch_profile, linkedin_url)
        now = utc_now()
        with self.store.unit_of_work() as repo:
            repo.evidence.upsert_linkedin_profile(user_id, linkedin_url, facts.to_profile_values())
            user = repo.users.get_by_user_id(user_id)
            if user is not None:
                repo.users.mark_linkedin_synced(user, now)
        outcome.linkedin_synced = True

        outcome.merge(self.skill_engine.recompute(user_id, now=now))
