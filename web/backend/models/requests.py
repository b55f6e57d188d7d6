#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkedInUrlUpdate(BaseModel):
    """Request to link a LinkedIn profile."""
    linkedinUrl: str = Field(..., min_length=1, description="Public LinkedIn profile URL (https://www.linkedin.com/in/<slug>)")


class ResumeUpload(BaseModel):
    """An already extracted and parsed resume."""
    model_config = ConfigDict(populate_by_name=True)

    fileName: Optional[str] = None
    rawText: Optional[str] = Field(None, description="Extracted plain text")
    parsed: bool = Field(default=True, description="Whether the structured fields below were extracted")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    workHistory: List[Dict[str, Any]] = Field(default_factory=list)
    education: List[Dict[str, Any]] = Field(default_factory=list)
    totalYearsExperience: Optional[float] = Field(None, ge=0)


class ScoreRequest(BaseModel):
    """Request to score a resume against a job."""
    resumeId: str = Field(..., min_length=1)
    jobId: str = Field(..., min_length=1)


class WebhookRegistrationRequest(BaseModel):
    """Register a repository for push webhooks."""
    owner: str = Field(..., min_length=1)
    repoName: str = Field(..., min_length=1)
    githubHookId: Optional[str] = Field(None, description="Hook id when the hook was created outside this service")
    createOnGithub: bool = Field(default=False, description="Create the hook on GitHub with the server-side secret")


class NotificationsMarkRead(BaseModel):
    """Mark notifications as read."""
    ids: Optional[List[str]] = None
    markAll: bool = False
