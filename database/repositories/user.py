import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from database.models import User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get_by_user_id(self, user_id: str) -> Optional[User]:
        stmt = select(User).where(User.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_github_username(self, github_username: str) -> Optional[User]:
        # GitHub logins are case-insensitive
        stmt = select(User).where(User.github_username.ilike(github_username))
        return self.db.execute(stmt).scalars().first()

    def list_with_github(self) -> List[User]:
        stmt = select(User).where(User.github_username.is_not(None)).order_by(User.user_id)
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        user_id: str,
        user_type: str = 'student',
        github_username: Optional[str] = None,
        linkedin_url: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None
    ) -> User:
        user = User(
            user_id=user_id,
            user_type=user_type,
            github_username=github_username,
            linkedin_url=linkedin_url,
            first_name=first_name,
            last_name=last_name
        )
        self.db.add(user)
        self.db.flush()
        return user

    def mark_github_synced(self, user: User, when: datetime) -> None:
        user.last_github_synced_at = when

    def mark_linkedin_synced(self, user: User, when: datetime) -> None:
        user.last_linkedin_synced_at = when
