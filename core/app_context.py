import logging
from dataclasses import dataclass
from typing import Optional

from core.ats import AtsScoringEngine, MatchScoreService
from core.config_loader import AppConfig
from core.locks import KeyedLock
from core.skills import SkillConfidenceEngine
from core.sources.github_client import GitHubClient
from core.sources.interfaces import GitHubEvidenceSource, LinkedInEvidenceSource
from core.sources.linkedin_client import ProxycurlLinkedInClient
from core.webhooks import MeaningfulChangeFilter
from database.uow import EvidenceStore
from notification.emitter import NotificationEmitter, build_emitter
from pipeline import JobRunner, ScrapeOrchestrator, ScrapeScheduler, WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Single source of truth for service instantiation. Store access goes
    through store.unit_of_work() inside each operation.
    """
    config: AppConfig
    store: EvidenceStore
    user_locks: KeyedLock
    github: GitHubEvidenceSource
    linkedin: Optional[LinkedInEvidenceSource]
    emitter: NotificationEmitter
    skill_engine: SkillConfidenceEngine
    ats_engine: AtsScoringEngine
    match_service: MatchScoreService
    change_filter: MeaningfulChangeFilter
    orchestrator: ScrapeOrchestrator
    runner: JobRunner
    pool: WorkerPool
    scheduler: ScrapeScheduler

    @classmethod
    def build(
        cls,
        config: AppConfig,
        store: Optional[EvidenceStore] = None,
        github: Optional[GitHubEvidenceSource] = None,
        linkedin: Optional[LinkedInEvidenceSource] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            store: Pre-built store (tests); built from config.database otherwise
            github: GitHub source override
            linkedin: LinkedIn source override

        Returns:
            Fully wired AppContext. Workers and scheduler are not started.
        """
        store = store or EvidenceStore.from_url(
            config.database.url,
            pool_pre_ping=config.database.pool_pre_ping,
            echo=config.database.echo
        )
        user_locks = KeyedLock()

        github = github or cls._build_github_client(config)
        if linkedin is None:
            linkedin = cls._build_linkedin_client(config)

        emitter = build_emitter(store, config.notifications)

        skill_engine = SkillConfidenceEngine(
            store,
            config.skills,
            user_locks,
            strengthened_delta=config.orchestrator.strengthened_delta
        )
        ats_engine = AtsScoringEngine(config.ats.weights, config.ats.experience_bands)
        match_service = MatchScoreService(store, ats_engine)

        change_filter = MeaningfulChangeFilter(
            config.webhooks.meaningful_events,
            config.webhooks.meaningful_repository_actions
        )

        orchestrator = ScrapeOrchestrator(store, config.orchestrator)
        runner = JobRunner(
            store,
            github,
            linkedin,
            skill_engine,
            emitter,
            fetch_timeout_seconds=config.orchestrator.fetch_timeout_seconds,
            schedule_recheck=lambda user_id, kind: orchestrator.schedule_recheck(user_id, kind)
        )
        pool = WorkerPool(
            store,
            runner,
            user_locks,
            worker_count=config.orchestrator.worker_count,
            queue_size=config.orchestrator.queue_size
        )
        orchestrator.set_dispatcher(pool.submit)
        scheduler = ScrapeScheduler(store, orchestrator, pool, config.orchestrator)

        return cls(
            config=config,
            store=store,
            user_locks=user_locks,
            github=github,
            linkedin=linkedin,
            emitter=emitter,
            skill_engine=skill_engine,
            ats_engine=ats_engine,
            match_service=match_service,
            change_filter=change_filter,
            orchestrator=orchestrator,
            runner=runner,
            pool=pool,
            scheduler=scheduler
        )

    @staticmethod
    def _build_github_client(config: AppConfig) -> GitHubClient:
        gh = config.github
        return GitHubClient(
            api_url=gh.api_url,
            token=gh.token,
            request_timeout_seconds=gh.request_timeout_seconds,
            max_repos=gh.max_repos,
            readme_max_chars=gh.readme_max_chars,
            webhook_callback_url=config.webhooks.callback_url
        )

    @staticmethod
    def _build_linkedin_client(config: AppConfig) -> Optional[ProxycurlLinkedInClient]:
        if not config.linkedin.api_key:
            logger.warning("LinkedIn API key not configured; LinkedIn jobs will fail")
            return None
        return ProxycurlLinkedInClient(
            api_url=config.linkedin.api_url,
            api_key=config.linkedin.api_key,
            request_timeout_seconds=config.linkedin.request_timeout_seconds
        )

    def start_background(self) -> None:
        self.pool.start()
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.pool.stop()
        self.runner.shutdown()
        self.store.dispose()
