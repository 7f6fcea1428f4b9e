"""GitHub README source.

Two paths to the same README: the raw content host (no API quota, tries a list
of conventional filenames) and the REST ``/readme`` endpoint (quota-limited,
finds any README name, base64-encoded). Both share one cache key per repo.
"""

from __future__ import annotations

import base64
import time
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
import structlog

from podreadme.cache import github_readme_key
from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.fetcher import network_error, status_error, with_retry

if TYPE_CHECKING:
    from podreadme.cache import MemoryCache
    from podreadme.config import Settings

log = structlog.get_logger()

_SERVICE = "GitHub API"


class GitHubClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        cache: MemoryCache,
    ) -> None:
        self._client = client
        self._settings = settings.github
        self._fetcher_settings = settings.fetcher
        self._cache = cache
        if not self._settings.token:
            log.warning(
                "github_token_missing",
                message="No GitHub token configured; unauthenticated rate limits apply.",
            )

    def _headers(self, *, api: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        if api:
            headers["Accept"] = "application/vnd.github.v3+json"
        if self._settings.token:
            headers["Authorization"] = f"token {self._settings.token}"
        return headers

    def _cached(self, owner: str, repo: str) -> str | None:
        return self._cache.get(github_readme_key(owner, repo))

    async def get_readme_raw(self, owner: str, repo: str) -> str | None:
        """Try each configured README filename on the raw host.

        Returns the first successful body, or None when no candidate exists.
        Transport errors on a candidate are logged and the next one is tried.
        """
        cached = self._cached(owner, repo)
        if cached is not None:
            return cached

        base = f"{self._settings.raw_url}/{_repo_path(owner, repo)}/HEAD"
        for filename in self._settings.readme_filenames:
            url = f"{base}/{filename}"
            try:
                response = await self._client.get(url, headers=self._headers(api=False))
            except httpx.HTTPError:
                log.debug("github_raw_fetch_error", url=url, exc_info=True)
                continue
            if not response.is_success:
                continue

            content = response.text
            self._cache.set(github_readme_key(owner, repo), content)
            log.info(
                "readme_fetch_complete",
                owner=owner,
                repo=repo,
                source="raw",
                filename=filename,
                content_length=len(content),
            )
            return content

        log.info("readme_not_found", owner=owner, repo=repo, source="raw")
        return None

    async def get_readme(self, owner: str, repo: str) -> str | None:
        """Fetch the README through the REST API. None when the repo has none."""
        cached = self._cached(owner, repo)
        if cached is not None:
            return cached

        url = f"{self._settings.api_url}/repos/{_repo_path(owner, repo)}/readme"

        async def _fetch() -> str | None:
            try:
                response = await self._client.get(url, headers=self._headers(api=True))
            except httpx.HTTPError as exc:
                raise network_error(_SERVICE, url, exc) from exc

            if response.status_code == 404:
                log.info("readme_not_found", owner=owner, repo=repo, source="api")
                return None
            if response.status_code == 403:
                raise _rate_limit_error(response)
            if not response.is_success:
                raise status_error(_SERVICE, response)

            content = _decode_readme_payload(response, url)
            self._cache.set(github_readme_key(owner, repo), content)
            log.info(
                "readme_fetch_complete",
                owner=owner,
                repo=repo,
                source="api",
                content_length=len(content),
            )
            return content

        return await with_retry(
            _fetch, self._fetcher_settings, description=f"readme:{owner}/{repo}"
        )


def _rate_limit_error(response: httpx.Response) -> PodReadmeError:
    """GitHub answers 403 both for exhausted quota and for abuse limits."""
    suggestion = "Set GITHUB_TOKEN to raise the GitHub API rate limit, or retry later."
    reset = response.headers.get("x-ratelimit-reset")
    if response.headers.get("x-ratelimit-remaining") == "0" and reset and reset.isdigit():
        retry_after = max(0, int(reset) - int(time.time()))
        suggestion = f"GitHub API quota resets in {retry_after} seconds. {suggestion}"
    return PodReadmeError(
        code=ErrorCode.RATE_LIMITED,
        message=f"{_SERVICE} rate limit exceeded",
        suggestion=suggestion,
        recoverable=True,
    )


def _decode_readme_payload(response: httpx.Response, url: str) -> str:
    try:
        payload = response.json()
        return base64.b64decode(payload["content"]).decode("utf-8")
    except (ValueError, KeyError, TypeError) as exc:
        raise PodReadmeError(
            code=ErrorCode.INVALID_UPSTREAM_RESPONSE,
            message=f"Unreadable README payload from {url}: {exc}",
            suggestion="The repository README may use an unsupported encoding.",
            recoverable=False,
        ) from exc


def _repo_path(owner: str, repo: str) -> str:
    return f"{quote(owner, safe='')}/{quote(repo, safe='')}"
