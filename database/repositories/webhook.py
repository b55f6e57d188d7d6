import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import undefer

from database.models import WebhookRegistration
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class WebhookRepository(BaseRepository):
    def get_by_repo(self, repo_owner: str, repo_name: str) -> Optional[WebhookRegistration]:
        stmt = select(WebhookRegistration).where(
            WebhookRegistration.repo_owner == repo_owner,
            WebhookRegistration.repo_name == repo_name
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_active_by_hook_id(self, github_hook_id: str) -> Optional[WebhookRegistration]:
        return self.find_for_delivery(github_hook_id=github_hook_id)

    def find_for_delivery(
        self,
        github_hook_id: Optional[str] = None,
        repo_key: Optional[Tuple[str, str]] = None,
        with_secret: bool = False
    ) -> Optional[WebhookRegistration]:
        """
        Active registration a delivery belongs to: by GitHub hook id first,
        then by the (owner, name) key carried in the callback URL.
        """
        stmt = select(WebhookRegistration).where(WebhookRegistration.active.is_(True))
        if with_secret:
            stmt = stmt.options(undefer(WebhookRegistration.secret))

        if github_hook_id:
            by_hook = stmt.where(WebhookRegistration.github_hook_id == str(github_hook_id))
            registration = self.db.execute(by_hook).scalars().first()
            if registration is not None:
                return registration
        if repo_key:
            owner, name = repo_key
            by_repo = stmt.where(
                WebhookRegistration.repo_owner == owner,
                WebhookRegistration.repo_name == name
            )
            return self.db.execute(by_repo).scalars().first()
        return None

    def get_secret_for_delivery(
        self,
        github_hook_id: Optional[str] = None,
        repo_key: Optional[Tuple[str, str]] = None
    ) -> Optional[str]:
        """The only read path that loads the shared secret."""
        registration = self.find_for_delivery(github_hook_id, repo_key, with_secret=True)
        return registration.secret if registration else None

    def get_secret_for_hook(self, github_hook_id: str) -> Optional[str]:
        return self.get_secret_for_delivery(github_hook_id=github_hook_id)

    def list_for_user(self, user_id: str) -> List[WebhookRegistration]:
        stmt = (
            select(WebhookRegistration)
            .where(WebhookRegistration.user_id == user_id)
            .order_by(WebhookRegistration.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create(
        self,
        user_id: str,
        repo_owner: str,
        repo_name: str,
        secret: str,
        events: List[str],
        github_hook_id: Optional[str] = None
    ) -> WebhookRegistration:
        registration = WebhookRegistration(
            user_id=user_id,
            repo_owner=repo_owner,
            repo_name=repo_name,
            secret=secret,
            events=list(events),
            github_hook_id=str(github_hook_id) if github_hook_id is not None else None,
            active=True
        )
        self.db.add(registration)
        self.db.flush()
        return registration

    def touch(
        self,
        github_hook_id: Optional[str],
        when: datetime,
        repo_key: Optional[Tuple[str, str]] = None
    ) -> Optional[WebhookRegistration]:
        registration = self.find_for_delivery(github_hook_id, repo_key)
        if registration is not None:
            registration.last_triggered_at = when
        return registration
