from .orchestrator import ScrapeOrchestrator, TriggerResult
from .runner import JobRunner, RunOutcome
from .scheduler import ScrapeScheduler, TickResult
from .state import ALLOWED_TRANSITIONS, can_transition, transition
from .worker_pool import WorkerPool

__all__ = [
    'ScrapeOrchestrator',
    'TriggerResult',
    'JobRunner',
    'RunOutcome',
    'ScrapeScheduler',
    'TickResult',
    'ALLOWED_TRANSITIONS',
    'can_transition',
    'transition',
    'WorkerPool',
]
