#!/usr/bin/env python3
"""
Tests for the RQ notification worker and its task function.
"""

import unittest
from unittest.mock import MagicMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError

from notification import NotificationEvent, process_notification_task, set_worker_store
from notification.worker import build_worker
from tests import make_config, make_store


class TestProcessNotificationTask(unittest.TestCase):
    def setUp(self):
        self.store = make_store()
        set_worker_store(self.store)
        self.addCleanup(set_worker_store, None)
        self.addCleanup(self.store.dispose)

    def test_task_writes_notification(self):
        event = NotificationEvent(user_id="u1", message="Skills refreshed", notification_type="profile_update")

        result = process_notification_task(event.to_dict())

        self.assertEqual(result, "u1")
        with self.store.unit_of_work() as repo:
            rows = repo.notifications.list_for_user("u1")
            self.assertEqual([r.message for r in rows], ["Skills refreshed"])
            self.assertEqual(rows[0].type, "profile_update")

    def test_task_rejects_unknown_type(self):
        with self.assertRaises(ValueError):
            process_notification_task({"user_id": "u1", "message": "x", "notification_type": "sms"})


class TestBuildWorker(unittest.TestCase):
    def tearDown(self):
        set_worker_store(None)

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_uses_configured_queue_and_redis(self, mock_redis, mock_worker):
        config = make_config(
            database={"url": "sqlite:///:memory:"},
            notifications={"use_async_queue": True, "redis_url": "redis://cache:6379/2", "queue_name": "inbox"},
        )

        build_worker(config)

        mock_redis.from_url.assert_called_once_with("redis://cache:6379/2")
        connection = mock_redis.from_url.return_value
        connection.ping.assert_called_once()
        mock_worker.assert_called_once_with(["inbox"], connection=connection)

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_explicit_queues_override_config(self, mock_redis, mock_worker):
        build_worker(make_config(database={"url": "sqlite:///:memory:"}), ["a", "b"])
        self.assertEqual(mock_worker.call_args[0][0], ["a", "b"])

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_unreachable_redis_raises(self, mock_redis, mock_worker):
        mock_redis.from_url.return_value = MagicMock(ping=MagicMock(side_effect=RedisConnectionError("down")))

        with self.assertRaises(RedisConnectionError):
            build_worker(make_config())
        mock_worker.assert_not_called()


if __name__ == '__main__':
    unittest.main()
