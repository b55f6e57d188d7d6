#!/usr/bin/env python3
"""
GitHub webhook verification.

verify_signature() works on the raw request bytes and must run before the
body is parsed; re-serialising a parsed payload changes the bytes and
breaks the HMAC.
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Iterable, Optional, Tuple
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="

DEFAULT_MEANINGFUL_EVENTS = ("push", "public", "repository")
DEFAULT_REPOSITORY_ACTIONS = ("created", "publicized", "privatized")


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Value GitHub sends in X-Hub-Signature-256 for this body and secret."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(raw_body: bytes, signature_header: Optional[str], secret: Optional[str]) -> bool:
    """
    True when signature_header is the sha256 HMAC of raw_body under secret.

    Uses a constant-time comparison. A missing header, a missing secret or a
    header without the sha256= prefix never verifies.
    """
    if not signature_header or not secret:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False
    if not isinstance(raw_body, (bytes, bytearray)):
        raise TypeError("verify_signature requires the raw request bytes")

    expected = compute_signature(bytes(raw_body), secret)
    return hmac.compare_digest(expected.encode("ascii"), signature_header.strip().encode("ascii", "replace"))


class MeaningfulChangeFilter:
    """
    Decides whether a webhook event should trigger a re-scrape.

    - push: only to the repository's default branch, and not a branch deletion
    - repository: only the configured actions (created / publicized / privatized)
    - public: always
    - anything else (star, watch, fork, create, ping, ...) is noise
    """

    def __init__(
        self,
        meaningful_events: Iterable[str] = DEFAULT_MEANINGFUL_EVENTS,
        repository_actions: Iterable[str] = DEFAULT_REPOSITORY_ACTIONS
    ):
        self.meaningful_events = frozenset(meaningful_events)
        self.repository_actions = frozenset(repository_actions)

    def __call__(self, event_type: Optional[str], payload: Dict[str, Any]) -> bool:
        if not event_type or event_type not in self.meaningful_events:
            return False
        payload = payload or {}

        if event_type == "push":
            return self._is_default_branch_push(payload)
        if event_type == "repository":
            return payload.get("action") in self.repository_actions
        return True

    @staticmethod
    def _is_default_branch_push(payload: Dict[str, Any]) -> bool:
        if payload.get("deleted"):
            return False
        repository = payload.get("repository") or {}
        default_branch = repository.get("default_branch") or repository.get("master_branch")
        ref = payload.get("ref")
        if not default_branch or not ref:
            return False
        return ref == f"refs/heads/{default_branch}"


_default_filter = MeaningfulChangeFilter()


def is_meaningful_change(event_type: Optional[str], payload: Dict[str, Any]) -> bool:
    return _default_filter(event_type, payload)


def repository_callback_url(base_url: str, owner: str, repo: str) -> str:
    """Callback URL carrying the repository key used to pick the registration secret."""
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({'repo': f'{owner}/{repo}'}, safe='/')}"


def parse_repository_key(value: Optional[str]) -> Optional[Tuple[str, str]]:
    """'owner/name' from the callback query string; None when absent or malformed."""
    if not value or value.count("/") != 1:
        return None
    owner, name = (part.strip() for part in value.split("/"))
    if not owner or not name:
        return None
    return owner, name
