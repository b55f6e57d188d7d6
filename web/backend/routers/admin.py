#!/usr/bin/env python3
"""
Admin endpoints - protected by the admin secret.
"""

import logging

from fastapi import APIRouter, Depends, Query

from core.app_context import AppContext
from core.errors import NotFoundError
from ..dependencies import get_ctx, require_admin
from ..models.responses import TriggerResponse
from ..utils import safe_datetime_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/trigger-rescrape/{user_id}", response_model=TriggerResponse)
def trigger_rescrape(
    user_id: str,
    kind: str = Query(default="github", pattern="^(github|linkedin|full)$"),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Queue an immediate re-scrape for any user. Not rate limited.
    """
    with ctx.store.unit_of_work() as repo:
        user = repo.users.get_by_user_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        display_name = user.display_name

    result = ctx.orchestrator.request_refresh(user_id, kind, trigger='admin')
    logger.info(f"Admin re-scrape ({kind}) requested for {user_id}: job {result.job_id}")
    return TriggerResponse(
        message=f"Rescrape queued for user {user_id} ({display_name})",
        jobId=result.job_id,
        coalesced=result.coalesced,
        scheduledAt=safe_datetime_iso(result.scheduled_at)
    )
