"""LinkedIn profile client backed by the Proxycurl person-profile API."""

import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception,
    before_sleep_log
)

from core.errors import UpstreamError
from .interfaces import LinkedInEvidenceSource, LinkedInFacts
from .retry import is_retryable_error

logger = logging.getLogger(__name__)


def _experience(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = []
    for item in items or []:
        out.append({
            'company': item.get('company'),
            'role': item.get('title'),
            'starts_at': item.get('starts_at'),
            'ends_at': item.get('ends_at'),
            'description': item.get('description'),
        })
    return out


def _education(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = []
    for item in items or []:
        ends_at = item.get('ends_at') or {}
        out.append({
            'degree': item.get('degree_name'),
            'institution': item.get('school'),
            'field': item.get('field_of_study'),
            'year': ends_at.get('year') if isinstance(ends_at, dict) else None,
        })
    return out


class ProxycurlLinkedInClient(LinkedInEvidenceSource):
    def __init__(
        self,
        api_url: str = "https://nubela.co/proxycurl/api/v2/linkedin",
        api_key: Optional[str] = None,
        request_timeout_seconds: int = 20
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.request_timeout_seconds = request_timeout_seconds
        self.session = requests.Session()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception(is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def _fetch(self, linkedin_url: str) -> Dict[str, Any]:
        response = self.session.get(
            self.api_url,
            params={'url': linkedin_url, 'skills': 'include'},
            headers={'Authorization': f"Bearer {self.api_key}"},
            timeout=self.request_timeout_seconds
        )
        response.raise_for_status()
        return response.json()

    def fetch_profile(self, linkedin_url: str) -> LinkedInFacts:
        if not self.api_key:
            raise UpstreamError("LinkedIn provider API key is not configured")
        try:
            data = self._fetch(linkedin_url)
        except requests.RequestException as e:
            raise UpstreamError(f"LinkedIn profile fetch failed: {e}") from e

        experiences = data.get('experiences') or []
        current = next((e for e in experiences if not e.get('ends_at')), None)

        facts = LinkedInFacts(
            linkedin_url=linkedin_url,
            headline=data.get('headline'),
            current_company=current.get('company') if current else None,
            current_role=current.get('title') if current else None,
            skills_listed=[s for s in (data.get('skills') or []) if isinstance(s, str) and s.strip()],
            experience=_experience(experiences),
            education=_education(data.get('education')),
        )
        logger.info(f"Fetched LinkedIn profile with {len(facts.skills_listed)} listed skills")
        return facts
