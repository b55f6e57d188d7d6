#!/usr/bin/env python3
"""
ATS Scoring Engine.

Pure scoring: no store access. Weights come from configuration and are
validated to sum to 1.0 when the config is loaded.
"""

import logging
from typing import Optional

from core.config_loader import AtsWeights, ExperienceBands
from core.utils import clamp, round_half_up
from . import subscores
from .models import AtsResult, JobRequirements, StructuredResume

logger = logging.getLogger(__name__)


class AtsScoringEngine:
    def __init__(self, weights: Optional[AtsWeights] = None, bands: Optional[ExperienceBands] = None):
        self.weights = weights or AtsWeights()
        self.bands = bands or ExperienceBands()

    def score(self, resume: StructuredResume, resume_raw_text: Optional[str], job: JobRequirements) -> AtsResult:
        degraded = []

        skill, common, missing = subscores.skill_match(resume, job)

        experience, required_years, exp_degraded = subscores.experience_match(resume, job, self.bands)
        if exp_degraded:
            degraded.append("experience_match")

        education, edu_degraded = subscores.education_match(resume, job)
        if edu_degraded:
            degraded.append("education_match")

        keywords, matched_keywords, kw_degraded = subscores.keyword_density(resume_raw_text, job.description)
        if kw_degraded:
            degraded.append("keyword_density")

        semantic, sem_degraded = subscores.semantic_similarity(resume_raw_text, job.description)
        if sem_degraded:
            degraded.append("semantic_similarity")

        w = self.weights
        weighted = (
            skill * w.skill_match
            + experience * w.experience_match
            + education * w.education_match
            + keywords * w.keyword_density
            + semantic * w.semantic_similarity
        )
        final = int(clamp(round_half_up(weighted * 100), 0, 100))

        if degraded:
            logger.info(f"Scored '{job.title}' with degraded sub-scores: {', '.join(degraded)}")

        return AtsResult(
            score=final,
            skill_match=skill,
            experience_match=experience,
            education_match=education,
            keyword_density=keywords,
            semantic_similarity=semantic,
            common_skills=common,
            missing_skills=missing,
            details={
                "required_years": required_years,
                "candidate_years": resume.total_years_experience,
                "matched_keywords": matched_keywords,
                "degraded": degraded,
            },
        )
