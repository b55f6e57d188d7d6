#!/usr/bin/env python3
"""
Skill Confidence Engine.

recompute(user_id) reads the user's repo snapshots and LinkedIn profile,
assesses every evidenced skill and upserts one SkillEvidence row per skill.
Each skill is written in its own unit of work, so a failure on one skill
leaves the others intact.
"""

import logging
import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from core.config_loader import SkillConfig
from core.errors import ComputationError, ValidationError
from core.locks import KeyedLock
from core.utils import as_utc, normalize_skill, utc_now
from database.uow import EvidenceStore
from .confidence import (
    corroborated_confidence,
    display_label,
    github_confidence,
    improvement_tips,
    linkedin_only_confidence,
)
from .models import (
    LinkedInEvidence,
    RecomputeResult,
    RepoEvidence,
    SkillAssessment,
    SkillMetrics,
    StrongestRepo,
)

logger = logging.getLogger(__name__)


@dataclass
class _SkillGroup:
    key: str
    display_name: str
    repos: List[RepoEvidence] = field(default_factory=list)
    on_linkedin: bool = False
    is_language: bool = False


def _mentions(text: Optional[str], skill_name: str) -> bool:
    if not text:
        return False
    pattern = r'(?<![a-z0-9])' + re.escape(skill_name.lower()) + r'(?![a-z0-9])'
    return re.search(pattern, text.lower()) is not None


def _attributed_commits(repos: List[RepoEvidence]) -> Dict[str, float]:
    """User commits per language, split by each repo's byte share."""
    totals: Dict[str, float] = {}
    for repo in repos:
        total_bytes = repo.language_total_bytes
        if total_bytes <= 0 or repo.user_commit_count <= 0:
            continue
        for language, size in repo.languages.items():
            share = max(0, size) / total_bytes
            key = normalize_skill(language)
            totals[key] = totals.get(key, 0.0) + repo.user_commit_count * share
    return totals


class SkillConfidenceEngine:
    def __init__(
        self,
        store: EvidenceStore,
        config: SkillConfig,
        user_locks: KeyedLock,
        strengthened_delta: int = 3
    ):
        self.store = store
        self.config = config
        self.user_locks = user_locks
        self.strengthened_delta = strengthened_delta

    # ------------------------------------------------------------------
    # Grouping / assessment (pure)
    # ------------------------------------------------------------------

    def group_skills(
        self,
        repos: List[RepoEvidence],
        linkedin: Optional[LinkedInEvidence]
    ) -> "OrderedDict[str, _SkillGroup]":
        groups: "OrderedDict[str, _SkillGroup]" = OrderedDict()

        def _add(name: str) -> Optional[_SkillGroup]:
            if not name or not name.strip():
                return None
            key = normalize_skill(name)
            group = groups.get(key)
            if group is None:
                group = _SkillGroup(key=key, display_name=name.strip())
                groups[key] = group
            elif group.display_name.islower() and not name.strip().islower():
                # Prefer "TypeScript" over a "typescript" topic
                group.display_name = name.strip()
            return group

        for repo in repos:
            for language in repo.languages:
                group = _add(language)
                if group is not None:
                    group.is_language = True
                    if repo not in group.repos:
                        group.repos.append(repo)
            for name in list(repo.frameworks) + list(repo.topics):
                group = _add(name)
                if group is not None and repo not in group.repos:
                    group.repos.append(repo)

        if linkedin is not None:
            for name in linkedin.skills_listed:
                group = _add(name)
                if group is not None:
                    group.on_linkedin = True

        return groups

    def build_metrics(
        self,
        group: _SkillGroup,
        all_repos: List[RepoEvidence],
        now: datetime
    ) -> SkillMetrics:
        repos = group.repos
        metrics = SkillMetrics()
        if not repos:
            return metrics

        recent_cutoff = now - timedelta(days=self.config.recent_activity_days)

        metrics.repo_count = len(repos)
        metrics.total_commits = sum(r.user_commit_count for r in repos)
        metrics.stars_on_skill_repos = sum(r.stars for r in repos)
        metrics.starred_repo_count = sum(1 for r in repos if r.stars >= 1)
        metrics.has_production_project = any(
            bool(r.live_url) or r.has_deployment
            or (not r.is_fork and r.pushed_at is not None and r.pushed_at >= recent_cutoff)
            for r in repos
        )
        metrics.readme_mentions = any(_mentions(r.readme_text, group.display_name) for r in repos)
        metrics.has_tests = any(r.has_tests for r in repos)

        pushed = [r.pushed_at for r in repos if r.pushed_at is not None]
        metrics.last_used = max(pushed) if pushed else None

        strongest = max(repos, key=lambda r: r.stars + r.user_commit_count)
        metrics.strongest_repo = StrongestRepo(
            name=strongest.name,
            stars=strongest.stars,
            commits=strongest.user_commit_count,
            has_readme=strongest.has_readme,
            has_live_demo=bool(strongest.live_url),
            description=strongest.description,
        )

        metrics.language_percentage = self._language_percentage(group, all_repos)
        return metrics

    @staticmethod
    def _language_percentage(group: _SkillGroup, all_repos: List[RepoEvidence]) -> float:
        user_total = sum(r.user_commit_count for r in all_repos)
        if user_total <= 0:
            return 0.0
        attributed = _attributed_commits(all_repos)
        if group.is_language:
            primary = group.key
        else:
            local = _attributed_commits(group.repos)
            if not local:
                return 0.0
            primary = max(local.items(), key=lambda kv: kv[1])[0]
        share = attributed.get(primary, 0.0) / user_total * 100
        return round(min(100.0, share), 1)

    def assess(
        self,
        group: _SkillGroup,
        all_repos: List[RepoEvidence],
        now: datetime
    ) -> SkillAssessment:
        """Assess one skill. Raises ComputationError on unusable evidence."""
        try:
            metrics = self.build_metrics(group, all_repos, now)
        except (TypeError, ValueError, ZeroDivisionError) as e:
            raise ComputationError(f"Unusable evidence for {group.display_name}: {e}") from e

        if metrics.repo_count == 0:
            if not group.on_linkedin:
                raise ComputationError(f"No evidence for {group.display_name}")
            source = "linkedin"
            score = linkedin_only_confidence(self.config)
            verified = False
        else:
            score = github_confidence(metrics, self.config, now)
            source = "github"
            if group.on_linkedin:
                source = "both"
                score = corroborated_confidence(score, self.config)
            verified = score >= self.config.verification_threshold

        return SkillAssessment(
            skill_key=group.key,
            skill_name=group.display_name,
            source=source,
            metrics=metrics,
            confidence_score=score,
            verified=verified,
            display_label=display_label(group.display_name, source, metrics, score),
            improvement_tips=improvement_tips(group.display_name, source, metrics, score, self.config),
        )

    # ------------------------------------------------------------------
    # Recompute (I/O)
    # ------------------------------------------------------------------

    def _load_evidence(self, user_id: str) -> Tuple[List[RepoEvidence], Optional[LinkedInEvidence], Dict[str, Tuple[int, bool, Optional[datetime]]]]:
        repos: List[RepoEvidence] = []
        linkedin = None
        with self.store.unit_of_work() as repo:
            for snapshot in repo.evidence.list_repo_snapshots(user_id):
                try:
                    repos.append(RepoEvidence.from_snapshot(snapshot))
                except ValidationError as e:
                    logger.warning(f"Skipping repo snapshot {snapshot.id} for {user_id}: {e}")
            profile = repo.evidence.get_linkedin_profile(user_id)
            if profile is not None:
                try:
                    linkedin = LinkedInEvidence.from_profile(profile)
                except ValidationError as e:
                    logger.warning(f"Skipping LinkedIn profile for {user_id}: {e}")
            previous = {
                s.skill_key: (s.confidence_score, s.verified, s.verified_at)
                for s in repo.evidence.list_skills(user_id)
            }
        return repos, linkedin, previous

    def recompute(self, user_id: str, now: Optional[datetime] = None) -> RecomputeResult:
        """
        Recompute and upsert every evidenced skill of one user.

        Holds the user's lock for the whole cycle. Skills that are no longer
        evidenced keep their existing rows.
        """
        now = as_utc(now) or utc_now()
        result = RecomputeResult(user_id=user_id)

        with self.user_locks.hold(user_id):
            repos, linkedin, previous = self._load_evidence(user_id)
            if not repos:
                logger.info(f"No GitHub evidence for {user_id}; using LinkedIn skills only")

            groups = self.group_skills(repos, linkedin)
            for key, group in groups.items():
                try:
                    assessment = self.assess(group, repos, now)
                except ComputationError as e:
                    logger.warning(f"Skill {group.display_name} skipped for {user_id}: {e}")
                    result.failed_skills.append(group.display_name)
                    continue
                except Exception:
                    logger.exception(f"Unexpected error assessing {group.display_name} for {user_id}")
                    result.failed_skills.append(group.display_name)
                    continue

                prev_score, prev_verified, prev_verified_at = previous.get(key, (None, False, None))
                values = assessment.to_values()
                if assessment.verified:
                    values['verified_at'] = prev_verified_at if prev_verified else now
                else:
                    values['verified_at'] = None

                try:
                    with self.store.unit_of_work() as repo:
                        repo.evidence.upsert_skill(user_id, key, values)
                except SQLAlchemyError:
                    logger.exception(f"Failed to store skill {group.display_name} for {user_id}")
                    result.failed_skills.append(group.display_name)
                    continue

                result.assessments.append(assessment)
                if prev_score is None:
                    result.skills_added.append(assessment.skill_name)
                elif assessment.confidence_score - prev_score > self.strengthened_delta:
                    result.skills_strengthened.append({
                        'skill_name': assessment.skill_name,
                        'previous_score': prev_score,
                        'new_score': assessment.confidence_score,
                    })

        logger.info(
            f"Recomputed {len(result.assessments)} skills for {user_id} "
            f"({len(result.skills_added)} added, {len(result.skills_strengthened)} strengthened, "
            f"{len(result.failed_skills)} failed)"
        )
        return result
