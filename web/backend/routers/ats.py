#!/usr/bin/env python3
"""
ATS endpoints - resume ingestion and resume/job scoring.
"""

import logging

from fastapi import APIRouter, Depends

from core.app_context import AppContext
from ..dependencies import get_ctx, get_current_user_id
from ..models.requests import ResumeUpload, ScoreRequest
from ..models.responses import ResumeCreatedResponse, ResumesResponse, ScoreResponse
from ..utils import percent, safe_datetime_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ats", tags=["ats"])


@router.post("/resumes", response_model=ResumeCreatedResponse)
def create_resume(
    body: ResumeUpload,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Store an already extracted and parsed resume. Uploads are immutable;
    every call creates a new resume.
    """
    with ctx.store.unit_of_work() as repo:
        resume = repo.resumes.create(user_id, {
            'file_name': body.fileName,
            'raw_text': body.rawText,
            'parsed': body.parsed,
            'name': body.name,
            'email': body.email,
            'phone': body.phone,
            'skills': [s.strip() for s in body.skills if s and s.strip()],
            'work_history': body.workHistory,
            'education': body.education,
            'total_years_experience': body.totalYearsExperience,
        })
        resume_id, fingerprint = resume.id, resume.content_fingerprint
    return ResumeCreatedResponse(resumeId=resume_id, fingerprint=fingerprint)


@router.get("/resumes", response_model=ResumesResponse)
def list_resumes(
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """The caller's resumes, newest first."""
    with ctx.store.unit_of_work() as repo:
        resumes = [
            {
                "resumeId": r.id,
                "fileName": r.file_name,
                "fingerprint": r.content_fingerprint,
                "parsed": bool(r.parsed),
                "skills": list(r.skills or []),
                "totalYearsExperience": r.total_years_experience,
                "uploadedAt": safe_datetime_iso(r.uploaded_at),
            }
            for r in repo.resumes.list_for_user(user_id)
        ]
    return {"count": len(resumes), "resumes": resumes}


@router.post("/score", response_model=ScoreResponse)
def score_resume(
    body: ScoreRequest,
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
):
    """
    Score one of the caller's resumes against a job and store the result.

    Re-scoring the same pair updates the existing record. When the caller
    has applied to the job the score is copied onto the application.
    """
    scored = ctx.match_service.score_pair(user_id, body.resumeId, body.jobId)
    result = scored.result
    application_updated = ctx.match_service.apply_application_score(body.jobId, user_id, result.score)

    return {
        "score": result.score,
        "breakdown": {
            "skillMatch": percent(result.skill_match),
            "experienceMatch": percent(result.experience_match),
            "educationMatch": percent(result.education_match),
            "keywordDensity": percent(result.keyword_density),
            "semanticSimilarity": percent(result.semantic_similarity),
            "commonSkills": result.common_skills,
            "missingSkills": result.missing_skills,
            "degraded": result.details.get("degraded", []),
        },
        "scoreRecordId": scored.record_id,
        "applicationUpdated": application_updated,
    }
