#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str
    service: str
    database: str


class TriggerResponse(BaseModel):
    """Response after requesting a scrape job."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "ok": True,
                "message": "Profile refresh queued",
                "jobId": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "coalesced": False
            }
        }
    )

    ok: bool = True
    message: str
    jobId: str
    coalesced: bool = False
    scheduledAt: Optional[str] = None


class WebhookAckResponse(BaseModel):
    """Acknowledgement of a GitHub delivery. jobId is set only when a job was requested."""
    ok: bool = True
    message: str
    jobId: Optional[str] = None
    coalesced: Optional[bool] = None


class ResumeCreatedResponse(BaseModel):
    success: bool = True
    resumeId: str
    fingerprint: Optional[str] = None


class ResumeSummary(BaseModel):
    resumeId: str
    fileName: Optional[str] = None
    fingerprint: Optional[str] = None
    parsed: bool
    skills: List[str] = Field(default_factory=list)
    totalYearsExperience: Optional[float] = None
    uploadedAt: Optional[str] = None


class ResumesResponse(BaseModel):
    success: bool = True
    count: int
    resumes: List[ResumeSummary]


class ScoreBreakdown(BaseModel):
    """Sub-scores as rounded percentages (0-100)."""
    skillMatch: int = Field(ge=0, le=100)
    experienceMatch: int = Field(ge=0, le=100)
    educationMatch: int = Field(ge=0, le=100)
    keywordDensity: int = Field(ge=0, le=100)
    semanticSimilarity: int = Field(ge=0, le=100)
    commonSkills: List[str] = Field(default_factory=list)
    missingSkills: List[str] = Field(default_factory=list)
    degraded: List[str] = Field(default_factory=list)


class ScoreResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "score": 72,
                "breakdown": {
                    "skillMatch": 50,
                    "experienceMatch": 100,
                    "educationMatch": 100,
                    "keywordDensity": 60,
                    "semanticSimilarity": 45,
                    "commonSkills": ["react"],
                    "missingSkills": ["Node.js"],
                    "degraded": []
                },
                "scoreRecordId": "550e8400-e29b-41d4-a716-446655440000"
            }
        }
    )

    score: int = Field(ge=0, le=100)
    breakdown: ScoreBreakdown
    scoreRecordId: str
    applicationUpdated: bool = False


class EvidenceSummary(BaseModel):
    repoCount: int
    totalCommits: int
    starsOnSkillRepos: int
    hasProductionProject: bool
    lastUsed: Optional[str] = None


class EvidenceDetail(EvidenceSummary):
    languagesPercentage: float
    strongestRepo: Optional[Dict[str, Any]] = None


class RecruiterSkillView(BaseModel):
    skillName: str
    verified: bool
    confidenceScore: int = Field(ge=0, le=100)
    displayLabel: str
    source: str
    verifiedAt: Optional[str] = None
    lastUpdated: Optional[str] = None
    evidence: EvidenceSummary


class CandidateSkillView(RecruiterSkillView):
    evidence: EvidenceDetail
    improvementTips: List[str] = Field(default_factory=list)


class CandidateSkillsResponse(BaseModel):
    total: int
    verified: List[CandidateSkillView]
    selfReported: List[CandidateSkillView]
    unverifiedGithub: List[CandidateSkillView]


class RecruiterSkillsResponse(BaseModel):
    candidateId: str
    displayName: Optional[str] = None
    githubUsername: Optional[str] = None
    total: int
    verified: List[RecruiterSkillView]
    selfReported: List[RecruiterSkillView]
    unverifiedGithub: List[RecruiterSkillView]


class UpdateHistoryEntry(BaseModel):
    id: str
    updateType: str
    trigger: str
    scrapeJobId: Optional[str] = None
    skillsAdded: List[str] = Field(default_factory=list)
    skillsStrengthened: List[Dict[str, Any]] = Field(default_factory=list)
    reposScraped: int = 0
    changesDetected: Dict[str, Any] = Field(default_factory=dict)
    createdAt: Optional[str] = None


class ScrapeJobSummary(BaseModel):
    id: str
    kind: str
    status: str
    trigger: str
    scheduledAt: Optional[str] = None
    startedAt: Optional[str] = None
    completedAt: Optional[str] = None
    changesFound: Optional[bool] = None
    errorMessage: Optional[str] = None


class UpdateHistoryResponse(BaseModel):
    history: List[UpdateHistoryEntry]
    recentJobs: List[ScrapeJobSummary]


class WebhookRegistrationResponse(BaseModel):
    """The secret is only present in the response that created the registration."""
    success: bool = True
    id: str
    owner: str
    repoName: str
    githubHookId: Optional[str] = None
    callbackUrl: Optional[str] = None
    active: bool
    created: bool
    secret: Optional[str] = None


class WebhookDeactivatedResponse(BaseModel):
    success: bool = True
    owner: str
    repoName: str
    active: bool


class NotificationView(BaseModel):
    id: str
    message: str
    type: str
    read: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)
    createdAt: Optional[str] = None


class NotificationsResponse(BaseModel):
    notifications: List[NotificationView]
    unreadCount: int


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int
