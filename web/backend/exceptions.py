#!/usr/bin/env python3
"""
Error handlers for the web application.

Maps the core.errors taxonomy onto HTTP status codes with a consistent
{success, error, type} body.
"""

import logging
from typing import Any, Dict

from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import (
    AuthError,
    ComputationError,
    EvidenceServiceError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    ValidationError,
)
from core.utils import utc_now

logger = logging.getLogger(__name__)


STATUS_CODES = (
    (AuthError, 401),
    (ForbiddenError, 403),
    (ValidationError, 400),
    (NotFoundError, 404),
    (RateLimitError, 429),
    (UpstreamError, 502),
    (InvalidTransitionError, 409),
    (ComputationError, 500),
)


def status_code_for(exc: EvidenceServiceError) -> int:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def _error_body(error: str, error_type: str) -> Dict[str, Any]:
    return {"success": False, "error": error, "type": error_type}


async def service_exception_handler(
    request: Request,
    exc: EvidenceServiceError
) -> JSONResponse:
    """
    Handle service layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The service exception.

    Returns:
        JSONResponse with error details, plus `field` for validation errors
        and `nextAllowedAt` for rate limits.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    content = _error_body(str(exc), exc.__class__.__name__)
    headers = None
    if isinstance(exc, ValidationError) and exc.field:
        content["field"] = exc.field
    if isinstance(exc, RateLimitError):
        content["nextAllowedAt"] = exc.next_allowed_at.isoformat()
        retry_after = max(0, int((exc.next_allowed_at - utc_now()).total_seconds()))
        headers = {"Retry-After": str(retry_after)}

    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report body validation failures as 400 with the first offending field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    content = _error_body(first.get("msg", "Invalid request"), "ValidationError")
    if loc:
        content["field"] = ".".join(loc)
    return JSONResponse(status_code=400, content=content)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, "HTTPException")
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "InternalError")
    )
