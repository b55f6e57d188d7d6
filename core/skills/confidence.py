#!/usr/bin/env python3
"""
Skill confidence rubric.

Pure functions, no I/O. Points (before floor/cap):
    10  skill appears in at least one repo
     8  each additional repo (max 40)
     5  every 50 user-authored commits (max 25)
  5/10/15  stars on skill repos >= 10 / 50 / 200
    10  production project (configurable)
     3  a README mentions the skill
     5  a supporting repo has tests
   5/2  last push within 3 / 12 months

More than one starred supporting repo raises the score to at least the
configured floor. Result is clamped to [0, 100].
"""

from datetime import datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from core.config_loader import SkillConfig
from core.utils import clamp
from .models import SkillMetrics


def months_since(last_used: Optional[datetime], now: datetime) -> Optional[int]:
    if last_used is None:
        return None
    delta = relativedelta(now, last_used)
    return delta.years * 12 + delta.months


def github_confidence(metrics: SkillMetrics, config: SkillConfig, now: datetime) -> int:
    """Confidence for a skill with at least one supporting repository."""
    score = 0

    if metrics.repo_count >= 1:
        score += 10
    score += min(max(0, metrics.repo_count - 1) * 8, 40)

    score += min((metrics.total_commits // 50) * 5, 25)

    if metrics.stars_on_skill_repos >= 200:
        score += 15
    elif metrics.stars_on_skill_repos >= 50:
        score += 10
    elif metrics.stars_on_skill_repos >= 10:
        score += 5

    if metrics.has_production_project:
        score += config.production_bonus
    if metrics.readme_mentions:
        score += 3
    if metrics.has_tests:
        score += 5

    months = months_since(metrics.last_used, now)
    if months is not None:
        if months <= 3:
            score += 5
        elif months <= 12:
            score += 2

    if metrics.starred_repo_count > 1:
        score = max(score, config.multi_starred_floor)

    return int(clamp(score, 0, 100))


def linkedin_only_confidence(config: SkillConfig) -> int:
    return int(clamp(min(config.self_reported_confidence, config.self_reported_cap), 0, 100))


def corroborated_confidence(github_score: int, config: SkillConfig) -> int:
    return int(clamp(github_score + config.corroboration_bonus, 0, 100))


def round_commits(commits: int) -> str:
    """1234 -> '1200+', 234 -> '230+', 42 -> '42'."""
    if commits >= 1000:
        return f"{(commits // 100) * 100}+"
    if commits >= 100:
        return f"{(commits // 10) * 10}+"
    return str(commits)


def display_label(skill_name: str, source: str, metrics: SkillMetrics, score: int) -> str:
    """
    Recruiter-readable label, e.g.
    "React verified via 4 repos, 200+ commits, production project with 80 stars, last used 2024-11 (72/100)"
    """
    if source == "linkedin":
        return f"{skill_name} self-reported on LinkedIn ({score}/100)"

    parts = []
    if metrics.repo_count > 0:
        parts.append(f"{metrics.repo_count} repo{'s' if metrics.repo_count != 1 else ''}")
    if metrics.total_commits > 0:
        parts.append(f"{round_commits(metrics.total_commits)} commits")
    if metrics.has_production_project:
        stars = f" with {metrics.stars_on_skill_repos} stars" if metrics.stars_on_skill_repos > 0 else ""
        parts.append(f"production project{stars}")
    if metrics.last_used_period:
        parts.append(f"last used {metrics.last_used_period}")
    if source == "both":
        parts.append("also listed on LinkedIn")

    detail = f" verified via {', '.join(parts)}" if parts else ""
    return f"{skill_name}{detail} ({score}/100)"


def improvement_tips(skill_name: str, source: str, metrics: SkillMetrics, score: int, config: SkillConfig) -> List[str]:
    """Candidate-facing suggestions. Empty once the score reaches config.tips_below."""
    if score >= config.tips_below:
        return []

    if source == "linkedin":
        return [f"Push a project that uses {skill_name} to GitHub to turn this self-reported skill into a verified one"]

    tips = []
    if not metrics.has_production_project:
        tips.append(
            f"Add a live demo URL to your strongest {skill_name} repo to gain +{config.production_bonus} points"
        )
    if metrics.total_commits < 50:
        tips.append(f"Increase your commit count in {skill_name} projects; more commits show sustained usage")
    if metrics.stars_on_skill_repos < 10 and metrics.repo_count < 3:
        tips.append(f"Add more projects that use {skill_name} to strengthen evidence")
    if metrics.strongest_repo is None or not metrics.strongest_repo.has_readme:
        tips.append(f"Add a detailed README to your {skill_name} projects to demonstrate project quality")
    return tips
