#!/usr/bin/env python3
"""
GitHub webhook receiver.

The signature is verified against the raw request body before anything
is parsed. Deliveries that pass verification and describe a meaningful
change request a github re-scrape for the registered user, or else the
user matching the sender (falling back to the repository owner).
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.app_context import AppContext
from core.errors import AuthError, ValidationError
from core.utils import utc_now
from core.webhooks import parse_repository_key, verify_signature
from ..dependencies import get_ctx
from ..models.responses import WebhookAckResponse

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

_limits = {"webhook": "60/minute"}

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def webhook_rate_limit() -> str:
    return _limits["webhook"]


def add_rate_limit_handlers(app, webhook_limit: Optional[str] = None):
    """Add rate limit exception handlers to the FastAPI app."""
    if webhook_limit:
        _limits["webhook"] = webhook_limit
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"success": False, "error": f"Rate limit exceeded: {exc.detail}", "type": "RateLimitExceeded"}
    )


def _resolve_secret(ctx: AppContext, hook_id: Optional[str], repo_key: Optional[Tuple[str, str]]) -> Optional[str]:
    if hook_id or repo_key:
        with ctx.store.unit_of_work() as repo:
            secret = repo.webhooks.get_secret_for_delivery(hook_id, repo_key)
        if secret:
            return secret
    return ctx.config.webhooks.global_secret


def _touch_registration(ctx: AppContext, hook_id: Optional[str], repo_key: Optional[Tuple[str, str]]) -> Optional[str]:
    """Stamp the matching registration; returns the user it belongs to."""
    if not hook_id and not repo_key:
        return None
    with ctx.store.unit_of_work() as repo:
        registration = repo.webhooks.touch(hook_id, utc_now(), repo_key=repo_key)
        return registration.user_id if registration is not None else None


def _candidate_logins(payload: Dict[str, Any]) -> List[str]:
    """GitHub logins to match against users: the sender, then the repository owner."""
    logins = []
    sender = (payload.get("sender") or {}).get("login")
    if sender:
        logins.append(sender)
    repository = payload.get("repository") or {}
    owner = repository.get("owner") or {}
    owner_login = owner.get("login") or owner.get("name")
    if not owner_login and "/" in (repository.get("full_name") or ""):
        owner_login = repository["full_name"].split("/", 1)[0]
    if owner_login and owner_login not in logins:
        logins.append(owner_login)
    return logins


def _handle_delivery(
    ctx: AppContext,
    event: str,
    hook_id: Optional[str],
    repo_key: Optional[Tuple[str, str]],
    payload: Dict[str, Any]
) -> Dict[str, Any]:
    if not ctx.change_filter(event, payload):
        logger.info(f"Ignoring non-meaningful '{event}' delivery")
        return {"ok": True, "message": f"Event '{event}' skipped: no meaningful change"}

    user_id = _touch_registration(ctx, hook_id, repo_key)
    if user_id is None:
        with ctx.store.unit_of_work() as repo:
            for login in _candidate_logins(payload):
                user = repo.users.get_by_github_username(login)
                if user is not None:
                    user_id = user.user_id
                    break

    if user_id is None:
        logger.info(f"No user linked to '{event}' delivery sender")
        return {"ok": True, "message": "No matching user for this repository"}

    result = ctx.orchestrator.request_refresh(user_id, 'github', trigger='webhook')
    message = "Re-scrape already in progress" if result.coalesced else "Re-scrape queued"
    return {"ok": True, "message": message, "jobId": result.job_id, "coalesced": result.coalesced}


@router.post("/github", response_model=WebhookAckResponse, response_model_exclude_none=True)
@limiter.limit(webhook_rate_limit)
async def github_webhook(request: Request, ctx: AppContext = Depends(get_ctx)):
    """
    Receive a GitHub delivery.

    401 on missing or invalid signature, 400 when no secret is configured
    or the payload is not JSON. Everything else is acknowledged with 200.
    """
    event = request.headers.get("x-github-event", "")
    signature = request.headers.get("x-hub-signature-256")
    hook_id = request.headers.get("x-github-hook-id")
    repo_key = parse_repository_key(request.query_params.get("repo"))

    if not signature:
        raise AuthError("Missing webhook signature")

    raw_body = await request.body()

    secret = await run_in_threadpool(_resolve_secret, ctx, hook_id, repo_key)
    if not secret:
        raise ValidationError("Webhook not configured", field="x-github-hook-id")

    if not verify_signature(raw_body, signature, secret):
        logger.warning(f"Invalid webhook signature (hook_id={hook_id}, event={event})")
        raise AuthError("Invalid webhook signature")

    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        raise ValidationError("Malformed JSON payload", field="body") from e
    if not isinstance(payload, dict):
        raise ValidationError("Malformed JSON payload", field="body")

    if event == "ping":
        await run_in_threadpool(_touch_registration, ctx, hook_id, repo_key)
        return {"ok": True, "message": "pong"}

    return await run_in_threadpool(_handle_delivery, ctx, event, hook_id, repo_key, payload)
