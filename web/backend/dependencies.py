#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.

The AppContext is attached to app.state by create_app(); identity comes
from the header injected by the identity provider's gateway.
"""

import hmac
from typing import Optional

from fastapi import Depends, Request

from core.app_context import AppContext
from core.errors import AuthError, ForbiddenError
from database.models import User


def get_ctx(request: Request) -> AppContext:
    """
    FastAPI dependency that returns the wired application context.

    Usage:
        @router.get("/endpoint")
        def my_endpoint(ctx: AppContext = Depends(get_ctx)):
            ...
    """
    return request.app.state.ctx


def get_current_user_id(request: Request, ctx: AppContext = Depends(get_ctx)) -> str:
    user_id = request.headers.get(ctx.config.auth.user_header, "").strip()
    if not user_id:
        raise AuthError("Unauthorized")
    return user_id


def require_recruiter(
    user_id: str = Depends(get_current_user_id),
    ctx: AppContext = Depends(get_ctx)
) -> User:
    with ctx.store.unit_of_work() as repo:
        user = repo.users.get_by_user_id(user_id)
    if user is None or user.user_type != 'recruiter':
        raise ForbiddenError("Recruiter access required")
    return user


def _presented_admin_secret(request: Request) -> Optional[str]:
    secret = request.headers.get("X-Admin-Secret")
    if secret:
        return secret
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip()
    return None


def require_admin(request: Request, ctx: AppContext = Depends(get_ctx)) -> None:
    expected = ctx.config.auth.admin_secret
    presented = _presented_admin_secret(request)
    if not expected or not presented:
        raise ForbiddenError("Forbidden")
    if not hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8")):
        raise ForbiddenError("Forbidden")
