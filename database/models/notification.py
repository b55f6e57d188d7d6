from sqlalchemy import Column, String, Text, TIMESTAMP, Boolean, Index

from core.utils import utc_now
from .base import Base, JSONType, new_id


class Notification(Base):
    """In-app notification shown to the user on their next visit."""
    __tablename__ = 'notification'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default='info')
    read = Column(Boolean, nullable=False, default=False)
    event_data = Column(JSONType, default=dict)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index('idx_notification_user_read', 'user_id', 'read', 'created_at'),
    )
