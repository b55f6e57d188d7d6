from .base import Base, JSONType, new_id
from .user import User
from .resume import ResumeEvidence
from .evidence import GitRepoSnapshot, LinkedInProfile, SkillEvidence
from .job import JobPosting, JobApplication
from .match import MatchScore
from .scrape import (
    ScrapeJob, WebhookRegistration, ProfileUpdateHistory,
    JOB_KINDS, JOB_STATUSES, TERMINAL_STATUSES, TRIGGERS
)
from .notification import Notification

__all__ = [
    'Base',
    'JSONType',
    'new_id',
    'User',
    'ResumeEvidence',
    'GitRepoSnapshot',
    'LinkedInProfile',
    'SkillEvidence',
    'JobPosting',
    'JobApplication',
    'MatchScore',
    'ScrapeJob',
    'WebhookRegistration',
    'ProfileUpdateHistory',
    'Notification',
    'JOB_KINDS',
    'JOB_STATUSES',
    'TERMINAL_STATUSES',
    'TRIGGERS',
]
