#!/usr/bin/env python3
"""
Repository webhook registration endpoints.
"""

import logging
import secrets

from fastapi import APIRouter, Depends

from core.app_context import AppContext
from core.errors import ForbiddenError, NotFoundError
from core.webhooks import repository_callback_url
from ..dependencies import get_ctx, get_current_user_id
from ..models.requests import WebhookRegistrationRequest
from ..models.responses import WebhookDeactivatedResponse, WebhookRegistrationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/github", tags=["github"])


@router.post("/webhooks", response_model=WebhookRegistrationResponse, response_model_exclude_none=True)
def register_webhook(
    body: WebhookRegistrationRequest,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Register a repository for push webhooks.

    Deliveries are matched to the registration by GitHub hook id, or by the
    repository key in callbackUrl for hooks created by hand. The shared
    secret is generated here and returned only by the call that creates the
    registration. Registering an existing repository again reactivates it
    without revealing the secret.
    """
    owner, repo_name = body.owner.strip(), body.repoName.strip()
    events = ctx.config.webhooks.registration_events
    base_url = ctx.config.webhooks.callback_url
    callback_url = repository_callback_url(base_url, owner, repo_name) if base_url else None

    with ctx.store.unit_of_work() as repo:
        existing = repo.webhooks.get_by_repo(owner, repo_name)
        if existing is not None:
            if existing.user_id != user_id:
                raise ForbiddenError("Repository is registered to another user")
            existing.active = True
            if body.githubHookId:
                existing.github_hook_id = str(body.githubHookId)
            logger.info(f"Reactivated webhook registration for {owner}/{repo_name}")
            return {
                "id": existing.id,
                "owner": owner,
                "repoName": repo_name,
                "githubHookId": existing.github_hook_id,
                "callbackUrl": callback_url,
                "active": True,
                "created": False,
            }

    secret = secrets.token_hex(32)
    hook_id = body.githubHookId
    if body.createOnGithub:
        hook_id = ctx.github.register_repo_webhook(owner, repo_name, secret, events)

    with ctx.store.unit_of_work() as repo:
        registration = repo.webhooks.create(
            user_id,
            owner,
            repo_name,
            secret=secret,
            events=events,
            github_hook_id=hook_id
        )
        registration_id = registration.id
    logger.info(f"Registered webhook for {owner}/{repo_name} (hook_id={hook_id})")

    return {
        "id": registration_id,
        "owner": owner,
        "repoName": repo_name,
        "githubHookId": str(hook_id) if hook_id is not None else None,
        "callbackUrl": callback_url,
        "active": True,
        "created": True,
        "secret": secret,
    }


@router.delete("/webhooks/{owner}/{repo_name}", response_model=WebhookDeactivatedResponse)
def deactivate_webhook(
    owner: str,
    repo_name: str,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    with ctx.store.unit_of_work() as repo:
        registration = repo.webhooks.get_by_repo(owner, repo_name)
        if registration is None or registration.user_id != user_id:
            raise NotFoundError("Webhook registration not found")
        registration.active = False
    logger.info(f"Deactivated webhook registration for {owner}/{repo_name}")
    return WebhookDeactivatedResponse(owner=owner, repoName=repo_name, active=False)
