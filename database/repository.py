from sqlalchemy.orm import Session

from database.repositories import (
    UserRepository,
    ResumeRepository,
    EvidenceRepository,
    JobRepository,
    MatchRepository,
    ScrapeJobRepository,
    WebhookRepository,
    HistoryRepository,
    NotificationRepository,
)


class StoreRepository:
    """
    All repositories bound to one Session.

    Handed out by EvidenceStore.unit_of_work(); callers never commit
    themselves.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.resumes = ResumeRepository(db)
        self.evidence = EvidenceRepository(db)
        self.jobs = JobRepository(db)
        self.matches = MatchRepository(db)
        self.scrape_jobs = ScrapeJobRepository(db)
        self.webhooks = WebhookRepository(db)
        self.history = HistoryRepository(db)
        self.notifications = NotificationRepository(db)
