"""Shared test fixtures for the podreadme test suite."""

from __future__ import annotations

import pytest

from podreadme.cache import MemoryCache
from podreadme.config import FetcherSettings, GitHubSettings, Settings
from podreadme.models.pod import PodInfo, PodSource


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(ttl_seconds=3600, max_size=100, clock=clock)


@pytest.fixture()
def settings() -> Settings:
    """Defaults, minus retry sleeps and any GITHUB_TOKEN from the environment."""
    return Settings(
        github=GitHubSettings(token=None),
        fetcher=FetcherSettings(max_retries=2, retry_base_delay_seconds=0.0),
    )


@pytest.fixture()
def sample_podspec() -> dict:
    """Trimmed /specs/latest payload as served by the CocoaPods trunk."""
    return {
        "name": "Alamofire",
        "version": "5.9.1",
        "license": {"type": "MIT", "file": "LICENSE"},
        "summary": "Elegant HTTP Networking in Swift",
        "homepage": "https://github.com/Alamofire/Alamofire",
        "authors": {"Alamofire Software Foundation": "info@alamofire.org"},
        "source": {"git": "https://github.com/Alamofire/Alamofire.git", "tag": "5.9.1"},
        "platforms": {"ios": "10.0", "osx": "10.12", "tvos": "10.0", "watchos": "3.0"},
        "swift_versions": ["5"],
        "dependencies": {"AlamofireCore": ["~> 1.0"], "Other": []},
        "testspecs": [
            {"name": "Tests", "dependencies": {"Quick": ["~> 7.0"], "Nimble": "~> 12.0"}}
        ],
        "frameworks": ["CFNetwork"],
    }


@pytest.fixture()
def sample_pod_info(sample_podspec: dict) -> PodInfo:
    return PodInfo.model_validate(sample_podspec)


@pytest.fixture()
def unhosted_pod_info() -> PodInfo:
    """A pod whose source is not on GitHub."""
    return PodInfo(
        name="Internal",
        version="1.0.0",
        summary="Internal tooling",
        source=PodSource(git="https://gitlab.com/acme/internal.git"),
    )
