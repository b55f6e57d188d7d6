"""
Notification Module

Usage:
    from notification import build_emitter, NotificationEvent

    emitter = build_emitter(store, config.notifications)
    emitter.emit(NotificationEvent(user_id='user123', message='Profile updated'))
"""

from notification.events import NotificationEvent, profile_updated_event, NOTIFICATION_TYPES
from notification.emitter import (
    NotificationEmitter,
    NullNotificationEmitter,
    InAppNotificationEmitter,
    QueuedNotificationEmitter,
    build_emitter,
    process_notification_task,
    set_worker_store,
)

__all__ = [
    'NotificationEvent',
    'profile_updated_event',
    'NOTIFICATION_TYPES',
    'NotificationEmitter',
    'NullNotificationEmitter',
    'InAppNotificationEmitter',
    'QueuedNotificationEmitter',
    'build_emitter',
    'process_notification_task',
    'set_worker_store',
]
