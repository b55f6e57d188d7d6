#!/usr/bin/env python3
"""
RQ worker that writes queued SkillScout notifications to the evidence store.

The API process enqueues process_notification_task when
notifications.use_async_queue is set; this worker drains that queue using
the database and Redis settings from the same config file.

Usage:
    python -m notification.worker [--config config.yaml] [--burst] [--verbose]
"""

import argparse
import logging
from typing import List, Optional

from redis import Redis
from redis.exceptions import RedisError
from rq import Worker

from core.config_loader import AppConfig, load_config
from database.uow import EvidenceStore
from notification.emitter import set_worker_store

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


def build_worker(config: AppConfig, queues: Optional[List[str]] = None) -> Worker:
    """Connect to Redis, bind the worker store and return an RQ worker for the queues."""
    redis_url = config.notifications.redis_url or DEFAULT_REDIS_URL
    queue_names = queues or [config.notifications.queue_name]

    redis_conn = Redis.from_url(redis_url)
    redis_conn.ping()
    logger.info(f"Connected to Redis at {redis_url}; queues: {', '.join(queue_names)}")

    set_worker_store(EvidenceStore.from_url(config.database.url))
    return Worker(queue_names, connection=redis_conn)


def main() -> int:
    parser = argparse.ArgumentParser(description='SkillScout notification worker')
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--queues', nargs='+', default=None, help='Queue names (default: notifications.queue_name)')
    parser.add_argument('--burst', action='store_true', help='Drain the queues and exit')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = load_config(args.config)
    if not config.notifications.use_async_queue:
        logger.warning("notifications.use_async_queue is off; the API writes notifications inline")

    try:
        worker = build_worker(config, args.queues)
    except RedisError as e:
        logger.error(f"Cannot start notification worker: {e}")
        return 1

    try:
        worker.work(burst=args.burst)
    except KeyboardInterrupt:
        logger.info("Notification worker stopped")
    finally:
        set_worker_store(None)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
