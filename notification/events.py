from dataclasses import dataclass, field, asdict
from typing import Any, Dict


NOTIFICATION_TYPES = ('profile_update', 'skill_verified', 'job_match', 'info', 'warning')


@dataclass
class NotificationEvent:
    """Something a user should be told about. Serialisable for the RQ queue."""
    user_id: str
    message: str
    notification_type: str = 'info'
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.notification_type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {self.notification_type}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationEvent":
        return cls(
            user_id=data['user_id'],
            message=data['message'],
            notification_type=data.get('notification_type', 'info'),
            metadata=data.get('metadata') or {},
        )


def profile_updated_event(user_id: str, skills_added: int, skills_strengthened: int, job_id: str) -> NotificationEvent:
    parts = []
    if skills_added:
        parts.append(f"{skills_added} new skill{'s' if skills_added != 1 else ''} verified")
    if skills_strengthened:
        parts.append(f"{skills_strengthened} skill{'s' if skills_strengthened != 1 else ''} strengthened")
    return NotificationEvent(
        user_id=user_id,
        message=f"Your profile was updated: {', '.join(parts)}",
        notification_type='profile_update',
        metadata={'scrape_job_id': job_id, 'skills_added': skills_added, 'skills_strengthened': skills_strengthened},
    )
