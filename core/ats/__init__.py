"""ATS scoring: one structured resume against one job posting."""

from .models import StructuredResume, JobRequirements, EducationEntry, WorkHistoryEntry, AtsResult
from .engine import AtsScoringEngine
from .service import MatchScoreService

__all__ = [
    'StructuredResume',
    'JobRequirements',
    'EducationEntry',
    'WorkHistoryEntry',
    'AtsResult',
    'AtsScoringEngine',
    'MatchScoreService',
]
