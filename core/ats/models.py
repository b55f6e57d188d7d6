#!/usr/bin/env python3
"""
ATS Models - boundary records for the ATS scoring engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.errors import ValidationError

logger = logging.getLogger(__name__)


EXPERIENCE_LEVELS = ("entry", "mid", "senior")

# Ordered lowest to highest
DEGREE_RANKS = {
    "none": 0,
    "high school": 1,
    "diploma": 2,
    "associate": 2,
    "bachelor": 3,
    "master": 4,
    "mba": 4,
    "phd": 5,
    "doctorate": 5,
}

_DEGREE_ALIASES = (
    ("ph.d", "phd"),
    ("phd", "phd"),
    ("doctor", "doctorate"),
    ("master", "master"),
    ("m.sc", "master"),
    ("msc", "master"),
    ("m.tech", "master"),
    ("mtech", "master"),
    ("m.s.", "master"),
    ("mba", "mba"),
    ("bachelor", "bachelor"),
    ("b.sc", "bachelor"),
    ("bsc", "bachelor"),
    ("b.tech", "bachelor"),
    ("btech", "bachelor"),
    ("b.e.", "bachelor"),
    ("b.s.", "bachelor"),
    ("b.a.", "bachelor"),
    ("undergraduate", "bachelor"),
    ("associate", "associate"),
    ("diploma", "diploma"),
    ("high school", "high school"),
    ("secondary", "high school"),
)


def degree_rank(degree: Optional[str]) -> Optional[int]:
    """Rank a free-text degree; None when it cannot be recognised."""
    if not degree:
        return None
    text = degree.strip().lower()
    if text in DEGREE_RANKS:
        return DEGREE_RANKS[text]
    for needle, canonical in _DEGREE_ALIASES:
        if needle in text:
            return DEGREE_RANKS[canonical]
    return None


@dataclass
class WorkHistoryEntry:
    company: str
    role: str
    duration: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkHistoryEntry":
        return cls(
            company=data.get("company") or "",
            role=data.get("role") or data.get("title") or "",
            duration=data.get("duration"),
        )


@dataclass
class EducationEntry:
    degree: Optional[str] = None
    institution: Optional[str] = None
    field: Optional[str] = None
    year: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return bool(self.degree or self.institution)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EducationEntry":
        year = data.get("year")
        return cls(
            degree=data.get("degree"),
            institution=data.get("institution") or data.get("school"),
            field=data.get("field"),
            year=str(year) if year is not None else None,
        )


@dataclass
class StructuredResume:
    """Parsed resume fields. skills keep the candidate's spelling."""
    skills: List[str] = field(default_factory=list)
    total_years_experience: Optional[float] = None
    education: List[EducationEntry] = field(default_factory=list)
    work_history: List[WorkHistoryEntry] = field(default_factory=list)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self):
        if self.skills is None:
            raise ValidationError("Resume skills must be a list", field="skills")
        if self.total_years_experience is not None and self.total_years_experience < 0:
            raise ValidationError("Years of experience cannot be negative", field="total_years_experience")

    @classmethod
    def from_record(cls, record: Any) -> "StructuredResume":
        return cls(
            skills=[s for s in (record.skills or []) if isinstance(s, str) and s.strip()],
            total_years_experience=record.total_years_experience,
            education=[EducationEntry.from_dict(e) for e in (record.education or []) if isinstance(e, dict)],
            work_history=[WorkHistoryEntry.from_dict(w) for w in (record.work_history or []) if isinstance(w, dict)],
            name=record.name,
            email=record.email,
            phone=record.phone,
        )


@dataclass
class JobRequirements:
    """What the ATS engine reads from a job posting."""
    title: str
    required_skills: List[str] = field(default_factory=list)
    nice_to_have_skills: List[str] = field(default_factory=list)
    experience_level: Optional[str] = None
    min_education: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not self.title:
            raise ValidationError("Job title is required", field="title")
        if self.experience_level is not None:
            level = self.experience_level.strip().lower()
            if level not in EXPERIENCE_LEVELS:
                raise ValidationError(
                    f"Unknown experience level '{self.experience_level}'", field="experience_level"
                )
            self.experience_level = level

    @classmethod
    def from_record(cls, record: Any) -> "JobRequirements":
        level = (record.experience_level or "").strip().lower() or None
        if level is not None and level not in EXPERIENCE_LEVELS:
            # Stored postings are scored with experience degraded, not rejected
            logger.warning(f"Job {record.id} has unknown experience level '{record.experience_level}'")
            level = None
        return cls(
            title=record.title,
            required_skills=[s for s in (record.required_skills or []) if isinstance(s, str) and s.strip()],
            nice_to_have_skills=[s for s in (record.nice_to_have_skills or []) if isinstance(s, str) and s.strip()],
            experience_level=level,
            min_education=record.min_education,
            description=record.description,
        )


@dataclass
class AtsResult:
    """Integer score plus the sub-scores and lists behind it."""
    score: int
    skill_match: float
    experience_match: float
    education_match: float
    keyword_density: float
    semantic_similarity: float
    common_skills: List[str] = field(default_factory=list)
    missing_skills: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def sub_scores(self) -> Dict[str, float]:
        return {
            "skill_match": self.skill_match,
            "experience_match": self.experience_match,
            "education_match": self.education_match,
            "keyword_density": self.keyword_density,
            "semantic_similarity": self.semantic_similarity,
        }
