#!/usr/bin/env python3
"""
Candidate profile endpoints - refresh, LinkedIn link, skills, history, notifications.
"""

import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Query

from core.app_context import AppContext
from core.errors import ValidationError
from ..dependencies import get_ctx, get_current_user_id
from ..models.requests import LinkedInUrlUpdate, NotificationsMarkRead
from ..models.responses import (
    CandidateSkillsResponse,
    MarkReadResponse,
    NotificationsResponse,
    TriggerResponse,
    UpdateHistoryResponse,
)
from ..utils import partition_skills, safe_datetime_iso, scrape_job_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])

LINKEDIN_HOSTS = ("linkedin.com", "www.linkedin.com")


def validate_linkedin_url(value: str) -> str:
    """
    Accept https://(www.)linkedin.com/in/<slug>[/] and return it without
    query string or fragment.
    """
    url = (value or "").strip()
    parsed = urlparse(url)
    if parsed.scheme != "https":
        raise ValidationError("LinkedIn URL must use https", field="linkedinUrl")
    host = (parsed.hostname or "").lower()
    if host not in LINKEDIN_HOSTS and not host.endswith(".linkedin.com"):
        raise ValidationError("URL must be a LinkedIn profile URL (linkedin.com/in/...)", field="linkedinUrl")
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) != 2 or parts[0] != "in" or not parts[1]:
        raise ValidationError("URL must be a LinkedIn profile URL (linkedin.com/in/...)", field="linkedinUrl")
    return f"https://{host}/in/{parts[1]}"


@router.post("/refresh", response_model=TriggerResponse)
def refresh_profile(
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Manually trigger a GitHub re-scrape. Limited to one per user per window.
    """
    ctx.orchestrator.check_user_rate_limit(user_id, 'github')

    with ctx.store.unit_of_work() as repo:
        user = repo.users.get_by_user_id(user_id)
        github_username = user.github_username if user else None
    if not github_username:
        raise ValidationError("No GitHub username linked. Add it in Settings first.", field="githubUsername")

    result = ctx.orchestrator.request_refresh(user_id, 'github', trigger='user')
    message = (
        "A refresh is already in progress" if result.coalesced
        else "Profile refresh started. Check back in a few seconds."
    )
    return TriggerResponse(
        message=message,
        jobId=result.job_id,
        coalesced=result.coalesced,
        scheduledAt=safe_datetime_iso(result.scheduled_at)
    )


@router.put("/linkedin", response_model=TriggerResponse)
def update_linkedin(
    body: LinkedInUrlUpdate,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Link a LinkedIn profile and start a background sync.
    """
    linkedin_url = validate_linkedin_url(body.linkedinUrl)
    ctx.orchestrator.check_user_rate_limit(user_id, 'linkedin')

    with ctx.store.unit_of_work() as repo:
        user = repo.users.get_by_user_id(user_id)
        if user is None:
            user = repo.users.create(user_id)
        user.linkedin_url = linkedin_url
    logger.info(f"Linked LinkedIn profile for {user_id}")

    result = ctx.orchestrator.request_refresh(user_id, 'linkedin', trigger='user')
    return TriggerResponse(
        message="LinkedIn sync started in background",
        jobId=result.job_id,
        coalesced=result.coalesced,
        scheduledAt=safe_datetime_iso(result.scheduled_at)
    )


@router.get("/skills", response_model=CandidateSkillsResponse)
def get_my_skills(
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    The caller's skills with full evidence and improvement tips.
    """
    with ctx.store.unit_of_work() as repo:
        skills = repo.evidence.list_skills(user_id)
        partitions = partition_skills(skills, include_tips=True)
    return {"total": len(skills), **partitions}


@router.get("/update-history", response_model=UpdateHistoryResponse)
def get_update_history(
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Last 50 profile updates and the last 20 scrape jobs.
    """
    with ctx.store.unit_of_work() as repo:
        history = [
            {
                "id": entry.id,
                "updateType": entry.update_type,
                "trigger": entry.trigger,
                "scrapeJobId": entry.scrape_job_id,
                "skillsAdded": list(entry.skills_added or []),
                "skillsStrengthened": list(entry.skills_strengthened or []),
                "reposScraped": entry.repos_scraped or 0,
                "changesDetected": dict(entry.changes_detected or {}),
                "createdAt": safe_datetime_iso(entry.created_at),
            }
            for entry in repo.history.list_for_user(user_id, limit=50)
        ]
        jobs = [scrape_job_view(job) for job in repo.scrape_jobs.list_for_user(user_id, limit=20)]
    return {"history": history, "recentJobs": jobs}


@router.get("/notifications", response_model=NotificationsResponse)
def get_notifications(
    unread: bool = Query(default=True, description="Only unread notifications"),
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    with ctx.store.unit_of_work() as repo:
        notifications = [
            {
                "id": n.id,
                "message": n.message,
                "type": n.type,
                "read": bool(n.read),
                "metadata": dict(n.event_data or {}),
                "createdAt": safe_datetime_iso(n.created_at),
            }
            for n in repo.notifications.list_for_user(user_id, unread_only=unread, limit=30)
        ]
        unread_count = repo.notifications.unread_count(user_id)
    return {"notifications": notifications, "unreadCount": unread_count}


@router.post("/notifications", response_model=MarkReadResponse)
def mark_notifications_read(
    body: NotificationsMarkRead,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    if not body.markAll and not body.ids:
        raise ValidationError("Provide ids or markAll", field="ids")
    with ctx.store.unit_of_work() as repo:
        updated = repo.notifications.mark_read(user_id, None if body.markAll else body.ids)
    return MarkReadResponse(updated=updated)
