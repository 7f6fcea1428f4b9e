"""Unit tests for podreadme.github."""

from __future__ import annotations

import base64
import time

import httpx
import pytest
import respx

from podreadme.cache import MemoryCache, github_readme_key
from podreadme.config import GitHubSettings, Settings
from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.github import GitHubClient

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"

README = "# Alamofire\n\n## Usage\n"
API_URL = f"{GITHUB_API}/repos/Alamofire/Alamofire/readme"
RAW_BASE = f"{GITHUB_RAW}/Alamofire/Alamofire/HEAD"


def _api_payload(text: str) -> dict:
    encoded = base64.b64encode(text.encode()).decode()
    # The API wraps base64 at 60 columns.
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"name": "README.md", "encoding": "base64", "content": wrapped}


# ---------------------------------------------------------------------------
# get_readme_raw
# ---------------------------------------------------------------------------


class TestGetReadmeRaw:
    async def test_first_filename_hit(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            route = respx.get(f"{RAW_BASE}/README.md").mock(
                return_value=httpx.Response(200, text=README)
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme_raw("Alamofire", "Alamofire") == README
            assert route.call_count == 1
        assert cache.get(github_readme_key("Alamofire", "Alamofire")) == README

    async def test_falls_through_filenames(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            respx.get(f"{RAW_BASE}/README.md").mock(return_value=httpx.Response(404))
            respx.get(f"{RAW_BASE}/readme.md").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            respx.get(f"{RAW_BASE}/README.rst").mock(
                return_value=httpx.Response(200, text="Alamofire\n=========")
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                result = await github.get_readme_raw("Alamofire", "Alamofire")
        assert result == "Alamofire\n========="

    async def test_none_when_no_candidate_exists(
        self, settings: Settings, cache: MemoryCache
    ) -> None:
        with respx.mock:
            respx.get(url__startswith=RAW_BASE).mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme_raw("Alamofire", "Alamofire") is None
        assert cache.size() == 0

    async def test_cache_hit_skips_network(self, settings: Settings, cache: MemoryCache) -> None:
        cache.set(github_readme_key("Alamofire", "Alamofire"), "cached")
        with respx.mock:
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme_raw("Alamofire", "Alamofire") == "cached"

    async def test_token_sent_when_configured(self, cache: MemoryCache) -> None:
        settings = Settings(github=GitHubSettings(token="ghp_test"))
        with respx.mock:
            route = respx.get(f"{RAW_BASE}/README.md").mock(
                return_value=httpx.Response(200, text=README)
            )
            async with httpx.AsyncClient() as client:
                await GitHubClient(client, settings, cache).get_readme_raw("Alamofire", "Alamofire")
        assert route.calls.last.request.headers["Authorization"] == "token ghp_test"


# ---------------------------------------------------------------------------
# get_readme (REST API)
# ---------------------------------------------------------------------------


class TestGetReadme:
    async def test_decodes_base64_content(self, settings: Settings, cache: MemoryCache) -> None:
        text = "# Kingfisher\n\nÜnïcode ✓\n" * 20
        with respx.mock:
            route = respx.get(API_URL).mock(
                return_value=httpx.Response(200, json=_api_payload(text))
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme("Alamofire", "Alamofire") == text
        assert route.calls.last.request.headers["Accept"] == "application/vnd.github.v3+json"
        assert "Authorization" not in route.calls.last.request.headers
        assert cache.get(github_readme_key("Alamofire", "Alamofire")) == text

    async def test_404_returns_none(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            respx.get(API_URL).mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme("Alamofire", "Alamofire") is None

    async def test_exhausted_quota_is_rate_limited(
        self, settings: Settings, cache: MemoryCache
    ) -> None:
        reset = str(int(time.time()) + 120)
        with respx.mock:
            route = respx.get(API_URL).mock(
                return_value=httpx.Response(
                    403,
                    headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": reset},
                )
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                with pytest.raises(PodReadmeError) as exc_info:
                    await github.get_readme("Alamofire", "Alamofire")
            assert route.call_count == 1  # Not retried
        assert exc_info.value.code == ErrorCode.RATE_LIMITED
        assert exc_info.value.recoverable is True
        assert "resets in" in exc_info.value.suggestion

    async def test_other_403_is_rate_limited(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            respx.get(API_URL).mock(return_value=httpx.Response(403))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                with pytest.raises(PodReadmeError) as exc_info:
                    await github.get_readme("Alamofire", "Alamofire")
        assert exc_info.value.code == ErrorCode.RATE_LIMITED

    async def test_server_error_retried_then_raised(
        self, settings: Settings, cache: MemoryCache
    ) -> None:
        with respx.mock:
            route = respx.get(API_URL).mock(return_value=httpx.Response(502))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                with pytest.raises(PodReadmeError) as exc_info:
                    await github.get_readme("Alamofire", "Alamofire")
            assert route.call_count == settings.fetcher.max_retries + 1
        assert exc_info.value.code == ErrorCode.NETWORK_ERROR

    async def test_transient_failure_recovers(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            respx.get(API_URL).mock(
                side_effect=[
                    httpx.ConnectTimeout("timed out"),
                    httpx.Response(200, json=_api_payload(README)),
                ]
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                assert await github.get_readme("Alamofire", "Alamofire") == README

    async def test_malformed_payload(self, settings: Settings, cache: MemoryCache) -> None:
        with respx.mock:
            respx.get(API_URL).mock(return_value=httpx.Response(200, json={"name": "README"}))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings, cache)
                with pytest.raises(PodReadmeError) as exc_info:
                    await github.get_readme("Alamofire", "Alamofire")
        assert exc_info.value.code == ErrorCode.INVALID_UPSTREAM_RESPONSE
