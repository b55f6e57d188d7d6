"""GitHub REST client with connection reuse and retry logic."""

import base64
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from dateutil import parser as date_parser
from tenacity import (
    retry,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception,
    before_sleep_log
)

from core.errors import UpstreamError, ValidationError
from core.webhooks import repository_callback_url
from .detection import (
    detect_live_url,
    frameworks_from_package_json,
    frameworks_from_requirements,
    has_deployment_config,
    has_test_files,
)
from .interfaces import GitHubEvidenceSource, RepoFacts
from .retry import is_retryable_error

logger = logging.getLogger(__name__)

_LAST_PAGE_RE = re.compile(r'[?&]page=(\d+)>;\s*rel="last"')


class GitHubClient(GitHubEvidenceSource):
    """
    Client for the GitHub REST API.

    Responsibilities:
    - Own a requests.Session for connection reuse
    - Analyse each repository (languages, manifests, tree, README, commit counts)
    - Register repository webhooks
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: Optional[str] = None,
        request_timeout_seconds: int = 20,
        max_repos: int = 30,
        readme_max_chars: int = 4000,
        webhook_callback_url: Optional[str] = None
    ):
        self.api_url = api_url.rstrip("/")
        self.request_timeout_seconds = request_timeout_seconds
        self.max_repos = max_repos
        self.readme_max_chars = readme_max_chars
        self.webhook_callback_url = webhook_callback_url

        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "skillscout",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

        logger.info(
            f"GitHubClient initialized: api_url={self.api_url}, "
            f"authenticated={bool(token)}, max_repos={max_repos}"
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(2),
        retry=retry_if_exception(is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False) -> Optional[requests.Response]:
        response = self.session.get(
            f"{self.api_url}{path}",
            params=params,
            timeout=self.request_timeout_seconds
        )
        if allow_missing and response.status_code in (404, 409):
            # 409: empty repository
            return None
        if response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            raise UpstreamError("GitHub API rate limit exceeded")
        response.raise_for_status()
        return response

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None, default: Any = None) -> Any:
        response = self._get(path, params=params, allow_missing=True)
        if response is None:
            return default
        return response.json()

    def _file_content(self, owner: str, repo: str, path: str) -> Optional[str]:
        data = self._get_json(f"/repos/{owner}/{repo}/contents/{quote(path)}")
        if not data or not isinstance(data, dict) or not data.get("content"):
            return None
        try:
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        except ValueError:
            logger.warning(f"Could not decode {path} in {owner}/{repo}")
            return None

    def commit_count(self, owner: str, repo: str, author: Optional[str] = None) -> int:
        """
        Number of commits, optionally only those by `author`.

        Requests one commit per page and reads the last page number from the
        Link header; without a Link header everything fit on one page.
        """
        params = {"per_page": 1}
        if author:
            params["author"] = author
        response = self._get(f"/repos/{owner}/{repo}/commits", params=params, allow_missing=True)
        if response is None:
            return 0
        match = _LAST_PAGE_RE.search(response.headers.get("Link", ""))
        if match:
            return int(match.group(1))
        data = response.json()
        return len(data) if isinstance(data, list) else 0

    def _tree_paths(self, owner: str, repo: str, branch: str) -> List[str]:
        data = self._get_json(
            f"/repos/{owner}/{repo}/git/trees/{quote(branch)}",
            params={"recursive": 1},
            default={}
        )
        if data.get("truncated"):
            logger.warning(f"Tree truncated for {owner}/{repo}")
        return [item["path"] for item in data.get("tree", []) if item.get("type") == "blob"]

    def analyze_repo(self, repo_data: Dict[str, Any], github_username: str) -> RepoFacts:
        owner = repo_data["owner"]["login"]
        name = repo_data["name"]
        branch = repo_data.get("default_branch") or "main"

        languages = self._get_json(f"/repos/{owner}/{name}/languages", default={}) or {}
        paths = self._tree_paths(owner, name, branch)

        frameworks: List[str] = []
        if "package.json" in paths:
            frameworks += frameworks_from_package_json(self._file_content(owner, name, "package.json"))
        if "requirements.txt" in paths:
            frameworks += frameworks_from_requirements(self._file_content(owner, name, "requirements.txt"))

        readme_text = None
        readme = self._get_json(f"/repos/{owner}/{name}/readme")
        if readme and readme.get("content"):
            try:
                readme_text = base64.b64decode(readme["content"]).decode("utf-8", errors="replace")
            except ValueError:
                logger.warning(f"Could not decode README of {owner}/{name}")

        live_url = detect_live_url(readme_text) or (repo_data.get("homepage") or None)

        pushed_at = repo_data.get("pushed_at")
        return RepoFacts(
            owner=owner,
            name=name,
            description=repo_data.get("description"),
            html_url=repo_data.get("html_url"),
            stars=repo_data.get("stargazers_count") or 0,
            is_fork=bool(repo_data.get("fork")),
            default_branch=branch,
            pushed_at=date_parser.isoparse(pushed_at) if pushed_at else None,
            has_readme=readme is not None,
            readme_text=readme_text[:self.readme_max_chars] if readme_text else None,
            live_url=live_url,
            has_tests=has_test_files(paths),
            has_deployment=has_deployment_config(paths) or live_url is not None,
            languages={k: int(v) for k, v in languages.items()},
            topics=list(repo_data.get("topics") or []),
            frameworks=list(dict.fromkeys(frameworks)),
            total_commit_count=self.commit_count(owner, name),
            user_commit_count=self.commit_count(owner, name, author=github_username),
        )

    def fetch_repositories(self, github_username: str) -> List[RepoFacts]:
        try:
            listing = self._get_json(
                f"/users/{quote(github_username)}/repos",
                params={"per_page": self.max_repos, "sort": "pushed", "type": "owner"},
                default=None
            )
        except requests.RequestException as e:
            raise UpstreamError(f"GitHub repository listing failed for {github_username}: {e}") from e
        if listing is None:
            raise UpstreamError(f"GitHub user {github_username} not found")

        facts: List[RepoFacts] = []
        for repo_data in listing[:self.max_repos]:
            try:
                facts.append(self.analyze_repo(repo_data, github_username))
            except UpstreamError:
                raise
            except (requests.RequestException, KeyError, ValueError) as e:
                logger.warning(f"Skipping repo {repo_data.get('full_name')}: {e}")

        logger.info(f"Fetched {len(facts)} repositories for {github_username}")
        return facts

    def register_repo_webhook(self, owner: str, repo: str, secret: str, events: List[str]) -> Optional[str]:
        if not self.webhook_callback_url:
            raise ValidationError("Webhook callback URL is not configured", field="callback_url")
        payload = {
            "name": "web",
            "active": True,
            "events": list(events),
            "config": {
                "url": repository_callback_url(self.webhook_callback_url, owner, repo),
                "content_type": "json",
                "secret": secret,
                "insecure_ssl": "0",
            },
        }
        try:
            response = self.session.post(
                f"{self.api_url}/repos/{owner}/{repo}/hooks",
                json=payload,
                timeout=self.request_timeout_seconds
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise UpstreamError(f"Could not create webhook on {owner}/{repo}: {e}") from e
        hook_id = response.json().get("id")
        logger.info(f"Registered webhook {hook_id} on {owner}/{repo}")
        return str(hook_id) if hook_id is not None else None
