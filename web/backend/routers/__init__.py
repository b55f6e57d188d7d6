"""API route handlers."""

from .webhooks import router as webhooks_router
from .profile import router as profile_router
from .ats import router as ats_router
from .recruiter import router as recruiter_router
from .github import router as github_router
from .admin import router as admin_router
