from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.resume import ResumeRepository
from database.repositories.evidence import EvidenceRepository
from database.repositories.job import JobRepository
from database.repositories.match import MatchRepository
from database.repositories.scrape_job import ScrapeJobRepository
from database.repositories.webhook import WebhookRepository
from database.repositories.history import HistoryRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'ResumeRepository',
    'EvidenceRepository',
    'JobRepository',
    'MatchRepository',
    'ScrapeJobRepository',
    'WebhookRepository',
    'HistoryRepository',
    'NotificationRepository',
]
