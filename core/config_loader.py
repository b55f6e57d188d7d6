import yaml
import os
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, model_validator


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///skillscout.db"
    pool_pre_ping: bool = True
    echo: bool = False


class WebConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    webhook_rate_limit: str = "60/minute"


class AuthConfig(BaseModel):
    """Identity is asserted by the gateway in front of this service."""
    user_header: str = "X-User-Id"
    admin_secret: Optional[str] = None


class AtsWeights(BaseModel):
    """Weights of the five ATS sub-scores. Must sum to 1.0."""
    skill_match: float = Field(default=0.5, ge=0, le=1)
    experience_match: float = Field(default=0.2, ge=0, le=1)
    education_match: float = Field(default=0.1, ge=0, le=1)
    keyword_density: float = Field(default=0.1, ge=0, le=1)
    semantic_similarity: float = Field(default=0.1, ge=0, le=1)

    @model_validator(mode="after")
    def _check_sum(self) -> "AtsWeights":
        total = (
            self.skill_match + self.experience_match + self.education_match
            + self.keyword_density + self.semantic_similarity
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"ATS weights must sum to 1.0, got {total:.4f}")
        return self


class ExperienceBands(BaseModel):
    """Minimum years of experience per job level."""
    entry: float = 0
    mid: float = 3
    senior: float = 5

    def minimum_for(self, level: str) -> Optional[float]:
        return getattr(self, level, None) if level in ("entry", "mid", "senior") else None


class AtsConfig(BaseModel):
    weights: AtsWeights = Field(default_factory=AtsWeights)
    experience_bands: ExperienceBands = Field(default_factory=ExperienceBands)


class SkillConfig(BaseModel):
    """
    Policy constants for the skill confidence engine.
    """
    verification_threshold: int = 30
    production_bonus: int = 10
    multi_starred_floor: int = 40
    self_reported_confidence: int = 20
    self_reported_cap: int = 25
    corroboration_bonus: int = 5
    recent_activity_days: int = 90
    tips_below: int = 80


class OrchestratorConfig(BaseModel):
    """Scrape job orchestration: windows, worker pool and scheduler."""
    user_refresh_window_minutes: int = 10
    linkedin_recheck_days: int = 7
    github_recheck_days: int = 7
    stagger_hours: int = 24
    job_retention_days: int = 30
    worker_count: int = 4
    queue_size: int = 100
    fetch_timeout_seconds: int = 30
    stale_job_minutes: int = 30
    poll_interval_seconds: int = 60
    strengthened_delta: int = 3


class WebhookConfig(BaseModel):
    global_secret: Optional[str] = None
    meaningful_events: List[str] = Field(default_factory=lambda: ["push", "public", "repository"])
    meaningful_repository_actions: List[str] = Field(
        default_factory=lambda: ["created", "publicized", "privatized"]
    )
    registration_events: List[str] = Field(
        default_factory=lambda: ["push", "create", "public", "repository"]
    )
    callback_url: Optional[str] = None


class GitHubConfig(BaseModel):
    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    request_timeout_seconds: int = 20
    max_repos: int = 30
    readme_max_chars: int = 4000


class LinkedInConfig(BaseModel):
    api_url: str = "https://nubela.co/proxycurl/api/v2/linkedin"
    api_key: Optional[str] = None
    request_timeout_seconds: int = 20


class NotificationConfig(BaseModel):
    """
    Configuration for in-app notifications.

    When use_async_queue is set, notifications are written by an RQ worker;
    otherwise (or when Redis is unreachable) they are written inline.
    """
    enabled: bool = True
    use_async_queue: bool = False
    redis_url: Optional[str] = None
    queue_name: str = "notifications"


class AppConfig(BaseModel):
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    ats: AtsConfig = Field(default_factory=AtsConfig)
    skills: SkillConfig = Field(default_factory=SkillConfig)
    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    webhooks: WebhookConfig = Field(default_factory=WebhookConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    linkedin: LinkedInConfig = Field(default_factory=LinkedInConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


# (env var, section, key)
_ENV_OVERRIDES = [
    ("DATABASE_URL", "database", "url"),
    ("REDIS_URL", "notifications", "redis_url"),
    ("GITHUB_TOKEN", "github", "token"),
    ("GITHUB_WEBHOOK_SECRET", "webhooks", "global_secret"),
    ("ADMIN_SECRET", "auth", "admin_secret"),
    ("PROXYCURL_API_KEY", "linkedin", "api_key"),
    ("WEB_HOST", "web", "host"),
    ("WEB_PORT", "web", "port"),
]


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, section, key in _ENV_OVERRIDES:
        value = os.environ.get(env_name)
        if value:
            if section not in data or data[section] is None:
                data[section] = {}
            data[section][key] = value
    return data


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from another dir), try project root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    data: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    return AppConfig(**_apply_env_overrides(data))
