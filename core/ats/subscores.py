"""
The five ATS sub-scores. Each returns a value in [0, 1].

A sub-score whose inputs are missing returns 0 and is reported as
degraded by the engine; it never raises.
"""

import logging
from functools import lru_cache
from typing import Callable, List, Optional, Tuple

import numpy as np
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from core.config_loader import ExperienceBands
from core.utils import clamp, normalize_skill, unique_preserving_order
from .models import JobRequirements, StructuredResume, degree_rank

logger = logging.getLogger(__name__)

# Words every posting uses that say nothing about the role
JOB_AD_STOP_WORDS = frozenset({
    "role", "team", "work", "working", "looking", "strong", "experience", "years", "year",
    "ability", "skills", "required", "preferred", "plus", "join",
})

# Starts with a letter; keeps '+', '#' and inner dots so c++, c# and node.js survive
KEYWORD_TOKEN_PATTERN = r"\b[a-z][a-z0-9+#]*(?:\.[a-z0-9+#]+)*"


def build_vectorizer() -> CountVectorizer:
    return CountVectorizer(
        lowercase=True,
        token_pattern=KEYWORD_TOKEN_PATTERN,
        stop_words=sorted(ENGLISH_STOP_WORDS | JOB_AD_STOP_WORDS),
    )


@lru_cache(maxsize=1)
def keyword_analyzer() -> Callable[[str], List[str]]:
    """Lower-cased keyword tokens, stop words removed, in document order."""
    return build_vectorizer().build_analyzer()


def skill_match(resume: StructuredResume, job: JobRequirements) -> Tuple[float, List[str], List[str]]:
    """
    |resume skills ∩ (required ∪ nice-to-have)| / |required|, clamped to 1.

    Returns (score, common_skills, missing_skills). common_skills keep the
    candidate's spelling; missing_skills are the unmatched required skills
    in the job's spelling.
    """
    candidate = {}
    for skill in resume.skills:
        candidate.setdefault(normalize_skill(skill), skill.strip())

    required_keys = unique_preserving_order(normalize_skill(s) for s in job.required_skills)
    wanted = set(required_keys) | {normalize_skill(s) for s in job.nice_to_have_skills}

    common = [spelling for key, spelling in candidate.items() if key in wanted]

    missing = []
    seen = set()
    for skill in job.required_skills:
        key = normalize_skill(skill)
        if key not in candidate and key not in seen:
            missing.append(skill.strip())
        seen.add(key)

    if not required_keys:
        return 1.0, common, missing
    return clamp(len(common) / len(required_keys), 0.0, 1.0), common, missing


def experience_match(
    resume: StructuredResume,
    job: JobRequirements,
    bands: ExperienceBands
) -> Tuple[float, Optional[float], bool]:
    """
    min(candidate_years / band_minimum, 1); 1.0 when the band minimum is 0.

    Returns (score, required_years, degraded).
    """
    if not job.experience_level:
        return 0.0, None, True
    required = bands.minimum_for(job.experience_level)
    if required is None:
        return 0.0, None, True
    if required <= 0:
        return 1.0, required, False
    if resume.total_years_experience is None:
        return 0.0, required, True
    return clamp(resume.total_years_experience / required, 0.0, 1.0), required, False


def education_match(resume: StructuredResume, job: JobRequirements) -> Tuple[float, bool]:
    """
    Binary: 1 if any education entry meets the job's minimum, else 0.

    With no stated minimum any entry (degree or institution) qualifies.
    An unrecognised minimum, or no recognisable candidate degree, degrades.
    Returns (score, degraded).
    """
    entries = [e for e in resume.education if e.is_present]
    if not entries:
        return 0.0, True

    if not job.min_education:
        return 1.0, False

    minimum = degree_rank(job.min_education)
    if minimum is None:
        logger.warning(f"Unrecognised minimum education '{job.min_education}'")
        return 0.0, True

    ranks = [r for r in (degree_rank(e.degree) for e in entries) if r is not None]
    if not ranks:
        return 0.0, True
    return (1.0 if max(ranks) >= minimum else 0.0), False


def keyword_density(resume_text: Optional[str], description: Optional[str]) -> Tuple[float, List[str], bool]:
    """
    Fraction of unique job-description keywords found as tokens in the resume text.

    Returns (score, matched_keywords, degraded).
    """
    analyze = keyword_analyzer()
    keywords = unique_preserving_order(analyze(description or ""))
    if not keywords or not resume_text:
        return 0.0, [], True
    resume_tokens = set(analyze(resume_text))
    matched = [k for k in keywords if k in resume_tokens]
    return clamp(len(matched) / len(keywords), 0.0, 1.0), matched, False


def semantic_similarity(resume_text: Optional[str], description: Optional[str]) -> Tuple[float, bool]:
    """
    Bag-of-words cosine between resume text and job description.

    This is a lexical approximation. It only sees shared words, not meaning.
    Returns (score, degraded).
    """
    analyze = keyword_analyzer()
    if not analyze(resume_text or "") or not analyze(description or ""):
        return 0.0, True

    counts = build_vectorizer().fit_transform([resume_text, description])
    score = cosine_similarity(counts[0:1], counts[1:2])[0][0]
    return float(np.clip(score, 0.0, 1.0)), False
