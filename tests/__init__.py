#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests run against SQLite, so no external services are needed:

    python -m pytest tests/ -v

    # Using unittest
    python -m unittest discover tests -v

Helpers here build an in-memory store and small config objects so each
TestCase can set up its own isolated world in setUp().
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import Optional, Tuple

from core.config_loader import AppConfig
from database.uow import EvidenceStore

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_store(url: str = "sqlite://") -> EvidenceStore:
    """EvidenceStore with the schema created. Defaults to in-memory SQLite."""
    store = EvidenceStore.from_url(url)
    store.create_schema()
    return store


def make_file_store() -> Tuple[EvidenceStore, str]:
    """File-backed store for tests that touch the store from several threads."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    return make_store(f"sqlite:///{path}"), path


def make_config(**sections) -> AppConfig:
    """AppConfig with notifications kept in-process and any section overridden."""
    data = {
        "notifications": {"enabled": True, "use_async_queue": False},
        "auth": {"admin_secret": "admin-secret"},
        "webhooks": {"global_secret": "global-secret"},
    }
    data.update(sections)
    return AppConfig(**data)


def add_user(
    store: EvidenceStore,
    user_id: str,
    github_username: Optional[str] = None,
    user_type: str = "student",
    linkedin_url: Optional[str] = None
):
    with store.unit_of_work() as repo:
        return repo.users.create(
            user_id,
            user_type=user_type,
            github_username=github_username,
            linkedin_url=linkedin_url,
            first_name="Test",
            last_name=user_id
        )
