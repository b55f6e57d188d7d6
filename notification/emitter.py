#!/usr/bin/env python3
"""
Notification Emitter

emit(event) is the only contract the pipeline relies on. Two sinks:
- InAppNotificationEmitter writes a Notification row directly
- QueuedNotificationEmitter hands the event to an RQ worker and falls back
  to the in-app sink when Redis is unavailable

Usage:
    emitter = build_emitter(store, config.notifications)
    emitter.emit(NotificationEvent(user_id="u1", message="Hello"))
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry

from core.config_loader import NotificationConfig, load_config
from database.uow import EvidenceStore
from notification.events import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationEmitter(ABC):
    @abstractmethod
    def emit(self, event: NotificationEvent) -> None:
        pass


class NullNotificationEmitter(NotificationEmitter):
    """Used when notifications are disabled in config."""

    def emit(self, event: NotificationEvent) -> None:
        logger.debug(f"Notifications disabled; dropping event for {event.user_id}")


class InAppNotificationEmitter(NotificationEmitter):
    def __init__(self, store: EvidenceStore):
        self.store = store

    def emit(self, event: NotificationEvent) -> None:
        with self.store.unit_of_work() as repo:
            repo.notifications.add(
                user_id=event.user_id,
                message=event.message,
                notification_type=event.notification_type,
                event_data=event.metadata
            )
        logger.info(f"Stored {event.notification_type} notification for {event.user_id}")


class QueuedNotificationEmitter(NotificationEmitter):
    """
    Enqueues events on RQ; writes inline when Redis cannot be reached.
    """

    def __init__(self, fallback: NotificationEmitter, redis_url: str, queue_name: str = 'notifications'):
        self.fallback = fallback
        self.redis_url = redis_url
        try:
            self.redis_conn = Redis.from_url(redis_url)
            # Validate connection with ping before using
            self.redis_conn.ping()
            self.queue: Optional[Queue] = Queue(queue_name, connection=self.redis_conn)
            self.async_mode = True
            logger.info("Notification emitter connected to Redis")
        except RedisError as e:
            logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False

    def emit(self, event: NotificationEvent) -> None:
        if self.async_mode and self.queue is not None:
            try:
                job = self.queue.enqueue(
                    process_notification_task,
                    event.to_dict(),
                    job_timeout='5m',
                    result_ttl=86400,
                    retry=Retry(max=3, interval=[30, 60, 120])
                )
                logger.info(f"Queued notification as job {job.id}")
                return
            except RedisError as e:
                logger.error(f"Enqueue failed: {e}. Writing notification inline.")
        self.fallback.emit(event)


def build_emitter(store: EvidenceStore, config: Optional[NotificationConfig]) -> NotificationEmitter:
    if config is None or not config.enabled:
        return NullNotificationEmitter()
    in_app = InAppNotificationEmitter(store)
    if not config.use_async_queue:
        logger.info("Async queue disabled via config. Using sync mode.")
        return in_app
    return QueuedNotificationEmitter(
        in_app,
        redis_url=config.redis_url or 'redis://localhost:6379/0',
        queue_name=config.queue_name
    )


_worker_store: Optional[EvidenceStore] = None


def set_worker_store(store: Optional[EvidenceStore]) -> None:
    """Store used by process_notification_task; loaded from config.yaml when unset."""
    global _worker_store
    _worker_store = store


def _store_for_worker() -> EvidenceStore:
    global _worker_store
    if _worker_store is None:
        config = load_config()
        _worker_store = EvidenceStore.from_url(config.database.url)
    return _worker_store


def process_notification_task(event_data: Dict[str, Any]) -> str:
    """
    Process a queued notification (called by RQ worker).
    """
    event = NotificationEvent.from_dict(event_data)
    InAppNotificationEmitter(_store_for_worker()).emit(event)
    return event.user_id
