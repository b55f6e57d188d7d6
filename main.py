#!/usr/bin/env python3
"""
SkillScout service entry point.

Loads configuration, wires the AppContext, ensures the schema, starts the
scrape workers and scheduler, then serves the API with uvicorn until
interrupted.

Usage:
    python main.py [--config config.yaml] [--host 0.0.0.0] [--port 8080] [--no-background]
"""

import argparse
import logging

import uvicorn
from sqlalchemy.exc import OperationalError
from tenacity import retry, stop_after_attempt, wait_fixed, retry_if_exception_type, before_sleep_log

from core.app_context import AppContext
from core.config_loader import load_config
from web.backend.app import create_app

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(5),
    wait=wait_fixed(3),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True
)
def ensure_schema(ctx: AppContext) -> None:
    """Create tables, waiting for the database to come up."""
    ctx.store.create_schema()


def main():
    parser = argparse.ArgumentParser(description="SkillScout API server")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--host', type=str, default=None, help='Bind host (overrides config)')
    parser.add_argument('--port', type=int, default=None, help='Bind port (overrides config)')
    parser.add_argument('--no-background', action='store_true',
                        help='Serve the API without starting scrape workers and scheduler')
    args = parser.parse_args()

    config = load_config(args.config)
    host = args.host or config.web.host
    port = args.port or config.web.port

    ctx = AppContext.build(config)
    ensure_schema(ctx)

    if not args.no_background:
        ctx.start_background()

    app = create_app(ctx)
    logger.info(f"Starting SkillScout API on {host}:{port}")
    logger.info(f"API Docs: http://{host}:{port}/docs")
    try:
        uvicorn.run(app, host=host, port=port, reload=False, log_level="info")
    finally:
        logger.info("Shutting down")
        ctx.shutdown()


if __name__ == "__main__":
    main()
