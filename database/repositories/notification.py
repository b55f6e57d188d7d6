from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func

from database.models import Notification
from database.repositories.base import BaseRepository


class NotificationRepository(BaseRepository):
    def add(
        self,
        user_id: str,
        message: str,
        notification_type: str = 'info',
        event_data: Optional[Dict[str, Any]] = None
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            message=message,
            type=notification_type,
            event_data=event_data or {}
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.read.is_(False))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def unread_count(self, user_id: str) -> int:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.read.is_(False)
        )
        return int(self.db.execute(stmt).scalar() or 0)

    def mark_read(self, user_id: str, ids: Optional[List[str]] = None) -> int:
        """Mark the given notifications (or all when ids is None) as read."""
        stmt = update(Notification).where(
            Notification.user_id == user_id,
            Notification.read.is_(False)
        )
        if ids is not None:
            stmt = stmt.where(Notification.id.in_(ids))
        result = self.db.execute(stmt.values(read=True))
        return result.rowcount or 0
