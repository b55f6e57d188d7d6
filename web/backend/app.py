#!/usr/bin/env python3
"""
SkillScout API - FastAPI Application

Usage:
    python main.py

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.app_context import AppContext
from core.errors import EvidenceServiceError
from .exceptions import (
    service_exception_handler,
    request_validation_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import (
    webhooks_router,
    profile_router,
    ats_router,
    recruiter_router,
    github_router,
    admin_router
)
from .routers.webhooks import add_rate_limit_handlers

logger = logging.getLogger(__name__)


def create_app(ctx: AppContext) -> FastAPI:
    """
    Build the FastAPI app around a wired AppContext.

    The context is stored on app.state; background workers are started
    by the caller, not here.
    """
    app = FastAPI(
        title="SkillScout API",
        description="Candidate evidence verification and resume/job matching",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.ctx = ctx

    # Configure rate limiting
    add_rate_limit_handlers(app, ctx.config.web.webhook_rate_limit)

    # Register exception handlers
    app.add_exception_handler(EvidenceServiceError, service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(webhooks_router)
    app.include_router(profile_router)
    app.include_router(ats_router)
    app.include_router(recruiter_router)
    app.include_router(github_router)
    app.include_router(admin_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        database = "ok"
        try:
            with ctx.store.unit_of_work() as repo:
                repo.db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Health check database query failed")
            database = "unavailable"
        return {"status": "healthy" if database == "ok" else "degraded", "service": "skillscout-api", "database": database}

    return app
