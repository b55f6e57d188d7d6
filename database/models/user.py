from sqlalchemy import Column, String, Text, TIMESTAMP, Index

from core.utils import utc_now
from .base import Base, new_id


class User(Base):
    """
    Platform user as known to this service.

    user_id is the identity provider's subject id; the gateway passes it in
    the identity header on every request.
    """
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), nullable=False, unique=True)
    user_type = Column(String(16), nullable=False, default='student')  # student | recruiter
    first_name = Column(Text)
    last_name = Column(Text)

    github_username = Column(String(64), nullable=True)
    linkedin_url = Column(Text, nullable=True)

    last_github_synced_at = Column(TIMESTAMP(timezone=True))
    last_linkedin_synced_at = Column(TIMESTAMP(timezone=True))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index('idx_users_github_username', 'github_username'),
    )

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or self.user_id
