"""
ScrapeJob state machine.

    pending -> running -> completed
                       -> failed

Terminal states are final; only retention cleanup removes them.
"""

from datetime import datetime, timedelta
from typing import Optional

from core.errors import InvalidTransitionError

ALLOWED_TRANSITIONS = {
    'pending': frozenset({'running'}),
    'running': frozenset({'completed', 'failed'}),
    'completed': frozenset(),
    'failed': frozenset(),
}

# Max stored error message length
MAX_ERROR_LENGTH = 2000


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(
    job,
    new_status: str,
    now: datetime,
    error_message: Optional[str] = None,
    changes_found: Optional[bool] = None
) -> None:
    """Move a ScrapeJob to new_status, stamping the matching timestamp."""
    if not can_transition(job.status, new_status):
        raise InvalidTransitionError(f"ScrapeJob {job.id}: {job.status} -> {new_status} is not allowed")

    job.status = new_status
    if new_status == 'running':
        job.started_at = now
    else:
        job.completed_at = now
        if new_status == 'failed':
            job.error_message = (error_message or "Unknown error")[:MAX_ERROR_LENGTH]
            job.changes_found = False
        else:
            job.changes_found = bool(changes_found)


def stagger_offset(user_id: str, stagger_hours: int) -> timedelta:
    """
    Deterministic per-user offset so weekly re-checks do not all fire at once.
    """
    if stagger_hours <= 0:
        return timedelta(0)
    return timedelta(hours=sum(ord(c) for c in user_id) % stagger_hours)
