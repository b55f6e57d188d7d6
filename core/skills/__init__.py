"""Skill confidence engine: fuses GitHub and LinkedIn evidence into SkillEvidence rows."""

from .models import RepoEvidence, LinkedInEvidence, SkillMetrics, SkillAssessment, RecomputeResult
from .engine import SkillConfidenceEngine

__all__ = [
    'RepoEvidence',
    'LinkedInEvidence',
    'SkillMetrics',
    'SkillAssessment',
    'RecomputeResult',
    'SkillConfidenceEngine',
]
