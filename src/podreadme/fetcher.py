"""Shared HTTP client and retry policy for upstream calls.

All network I/O goes through a single httpx.AsyncClient created in the server
lifespan and injected into the GitHub and CocoaPods clients. Each client turns
transport failures and unexpected statuses into PodReadmeError; ``with_retry``
re-runs an operation only while it keeps failing with NETWORK_ERROR.
"""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, TypeVar

import httpx
import structlog

from podreadme import DISTRIBUTION_NAME, __version__
from podreadme.errors import ErrorCode, PodReadmeError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from podreadme.config import FetcherSettings

log = structlog.get_logger()

T = TypeVar("T")


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        # raw.githubusercontent.com and the trunk both redirect renamed repos/pods
        follow_redirects=True,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": f"{DISTRIBUTION_NAME}/{__version__}"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def network_error(service: str, url: str, exc: httpx.HTTPError) -> PodReadmeError:
    return PodReadmeError(
        code=ErrorCode.NETWORK_ERROR,
        message=f"Network error calling {service} ({url}): {exc}",
        suggestion=f"{service} may be temporarily unreachable. Retry shortly.",
        recoverable=True,
    )


def status_error(service: str, response: httpx.Response) -> PodReadmeError:
    """Translate a non-2xx response that has no more specific meaning."""
    if response.status_code == 429:
        return PodReadmeError(
            code=ErrorCode.RATE_LIMITED,
            message=f"{service} rate limit exceeded",
            suggestion="Wait a minute before retrying.",
            recoverable=True,
        )
    return PodReadmeError(
        code=ErrorCode.NETWORK_ERROR,
        message=f"HTTP {response.status_code} from {service} ({response.request.url})",
        suggestion=f"{service} may be temporarily unavailable.",
        recoverable=True,
    )


def _retry_delay(attempt: int, settings: FetcherSettings) -> float:
    exponential = settings.retry_base_delay_seconds * 2 ** (attempt - 1)
    jittered = exponential * random.uniform(0.8, 1.2)
    return min(jittered, settings.retry_max_delay_seconds)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    settings: FetcherSettings,
    *,
    description: str,
) -> T:
    """Await ``operation()``, retrying NETWORK_ERROR failures with backoff.

    Makes at most ``settings.max_retries + 1`` attempts. Any other error code
    (not found, rate limited, malformed response) is raised immediately.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except PodReadmeError as exc:
            if exc.code != ErrorCode.NETWORK_ERROR or attempt >= settings.max_retries:
                raise
            attempt += 1
            delay = _retry_delay(attempt, settings)
            log.warning(
                "upstream_retry_scheduled",
                operation=description,
                attempt=attempt,
                max_retries=settings.max_retries,
                delay_seconds=round(delay, 2),
                error=exc.message,
            )
            await asyncio.sleep(delay)
