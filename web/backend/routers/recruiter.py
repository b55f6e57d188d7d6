#!/usr/bin/env python3
"""
Recruiter endpoints - read-only view of a candidate's skills.
"""

from fastapi import APIRouter, Depends

from core.app_context import AppContext
from core.errors import NotFoundError
from database.models import User
from ..dependencies import get_ctx, require_recruiter
from ..models.responses import RecruiterSkillsResponse
from ..utils import partition_skills

router = APIRouter(prefix="/api/recruiter", tags=["recruiter"])


@router.get("/candidates/{candidate_id}/skills", response_model=RecruiterSkillsResponse)
def get_candidate_skills(
    candidate_id: str,
    recruiter: User = Depends(require_recruiter),
    ctx: AppContext = Depends(get_ctx)
):
    """
    A candidate's skills partitioned like the candidate's own view, with
    the evidence summary only and no improvement tips.
    """
    with ctx.store.unit_of_work() as repo:
        candidate = repo.users.get_by_user_id(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidate not found")
        skills = repo.evidence.list_skills(candidate_id)
        partitions = partition_skills(skills, include_tips=False)
        display_name = candidate.display_name
        github_username = candidate.github_username

    return {
        "candidateId": candidate_id,
        "displayName": display_name,
        "githubUsername": github_username,
        "total": len(skills),
        **partitions,
    }
