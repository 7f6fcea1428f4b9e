"""Integration test fixtures.

Provides a fully wired AppState (real CocoaPods and GitHub clients sharing one
httpx client and MemoryCache) for handler tests driven through respx, and a
baseline environment for subprocess-based MCP tests.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest

from podreadme.cocoapods import CocoaPodsClient
from podreadme.github import GitHubClient
from podreadme.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from podreadme.cache import MemoryCache
    from podreadme.config import Settings


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points every upstream at a closed local port and disables retries, so no
    test can reach the real trunk or GitHub. Runs from an empty tmp directory
    so a developer's podreadme.yaml is not picked up.
    """
    env = os.environ.copy()
    env.pop("GITHUB_TOKEN", None)
    env["PODREADME__COCOAPODS__TRUNK_URL"] = "http://127.0.0.1:1/api/v1"
    env["PODREADME__GITHUB__API_URL"] = "http://127.0.0.1:1"
    env["PODREADME__GITHUB__RAW_URL"] = "http://127.0.0.1:1"
    env["PODREADME__FETCHER__MAX_RETRIES"] = "0"
    env["PODREADME__LOGGING__LEVEL"] = "WARNING"
    env["XDG_CONFIG_HOME"] = str(tmp_path)
    return env


@pytest.fixture()
async def app_state(settings: Settings, cache: MemoryCache) -> AsyncGenerator[AppState, None]:
    """Full AppState wired for handler integration tests."""
    async with httpx.AsyncClient() as client:
        yield AppState(
            settings=settings,
            cache=cache,
            cocoapods=CocoaPodsClient(client, settings, cache),
            github=GitHubClient(client, settings, cache),
            http_client=client,
        )
