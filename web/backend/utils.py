#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from core.utils import as_utc, round_half_up


def safe_int(value: Optional[Any], default: int = 0) -> int:
    """
    Safely convert value to int.

    Args:
        value: Value to convert.
        default: Default value if conversion fails or value is None.

    Returns:
        Integer value.
    """
    if value is None:
        return default

    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to a UTC ISO format string.

    Args:
        dt: Datetime object (naive values are treated as UTC).

    Returns:
        ISO format string or None.
    """
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def percent(value: Optional[float]) -> int:
    """A [0, 1] sub-score as a rounded 0-100 percentage."""
    if value is None:
        return 0
    return max(0, min(100, round_half_up(value * 100)))


def _evidence(skill, detailed: bool) -> Dict[str, Any]:
    evidence = {
        "repoCount": safe_int(skill.repo_count),
        "totalCommits": safe_int(skill.total_commits),
        "starsOnSkillRepos": safe_int(skill.stars_on_skill_repos),
        "hasProductionProject": bool(skill.has_production_project),
        "lastUsed": skill.last_used_period,
    }
    if detailed:
        evidence["languagesPercentage"] = float(skill.language_percentage or 0.0)
        evidence["strongestRepo"] = skill.strongest_repo
    return evidence


def skill_view(skill, include_tips: bool) -> Dict[str, Any]:
    """
    Serialise a SkillEvidence row.

    Candidates (include_tips=True) get the full evidence and their
    improvement tips; recruiters get the evidence summary only.
    """
    view = {
        "skillName": skill.skill_name,
        "verified": bool(skill.verified),
        "confidenceScore": safe_int(skill.confidence_score),
        "displayLabel": skill.display_label or "",
        "source": skill.source,
        "verifiedAt": safe_datetime_iso(skill.verified_at),
        "lastUpdated": safe_datetime_iso(skill.updated_at),
        "evidence": _evidence(skill, detailed=include_tips),
    }
    if include_tips:
        view["improvementTips"] = list(skill.improvement_tips or [])
    return view


def partition_skills(skills: Iterable[Any], include_tips: bool) -> Dict[str, List[Dict[str, Any]]]:
    """
    Split skills into verified, selfReported (LinkedIn only) and
    unverifiedGithub, each ordered by confidence score, highest first.
    """
    ordered = sorted(skills, key=lambda s: (-(s.confidence_score or 0), s.skill_name.lower()))
    partitions: Dict[str, List[Dict[str, Any]]] = {"verified": [], "selfReported": [], "unverifiedGithub": []}
    for skill in ordered:
        view = skill_view(skill, include_tips)
        if skill.verified and skill.source != 'linkedin':
            partitions["verified"].append(view)
        elif skill.source == 'linkedin':
            partitions["selfReported"].append(view)
        else:
            partitions["unverifiedGithub"].append(view)
    return partitions


def scrape_job_view(job) -> Dict[str, Any]:
    return {
        "id": job.id,
        "kind": job.kind,
        "status": job.status,
        "trigger": job.trigger,
        "scheduledAt": safe_datetime_iso(job.scheduled_at),
        "startedAt": safe_datetime_iso(job.started_at),
        "completedAt": safe_datetime_iso(job.completed_at),
        "changesFound": job.changes_found,
        "errorMessage": job.error_message,
    }
