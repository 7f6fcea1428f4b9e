"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the stdio transport
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import podreadme.tools.get_package_info as t_info
import podreadme.tools.get_package_readme as t_readme
import podreadme.tools.search_packages as t_search
from podreadme import DISTRIBUTION_NAME, __version__
from podreadme.cache import MemoryCache
from podreadme.cocoapods import CocoaPodsClient
from podreadme.config import Settings
from podreadme.errors import PodReadmeError
from podreadme.fetcher import build_http_client
from podreadme.github import GitHubClient
from podreadme.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__)

    http_client = build_http_client(settings.fetcher)
    cache = MemoryCache(
        ttl_seconds=settings.cache.ttl_seconds,
        max_size=settings.cache.max_size,
        sweep_interval_seconds=settings.cache.sweep_interval_seconds,
    )
    sweep_task = cache.start_sweeper()

    state = AppState(
        settings=settings,
        cache=cache,
        cocoapods=CocoaPodsClient(http_client, settings, cache),
        github=GitHubClient(http_client, settings, cache),
        http_client=http_client,
    )

    log.info(
        "server_started",
        version=__version__,
        cache_ttl_seconds=settings.cache.ttl_seconds,
        cache_max_size=settings.cache.max_size,
        github_token_configured=settings.github.token is not None,
    )

    try:
        yield state
    finally:
        cache.destroy()
        with suppress(asyncio.CancelledError):
            await sweep_task
        await http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP(DISTRIBUTION_NAME, lifespan=lifespan)
# FastMCP doesn't expose a version kwarg, so set it on the underlying Server
# and the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: PodReadmeError) -> CallToolResult:
    """Convert a PodReadmeError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _log_tool_error(tool: str, exc: PodReadmeError) -> None:
    log.warning(
        "tool_error",
        tool=tool,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )


@mcp.tool()
async def get_readme_from_cocoapods(
    package_name: str,
    ctx: Context,
    version: str = "latest",
    include_examples: bool = True,
) -> object:
    """Get a CocoaPods package's README, usage examples and installation snippets.

    version is "latest" or an exact published version such as "5.8.0".
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_readme.handle(package_name, version, include_examples, state)
    except PodReadmeError as exc:
        _log_tool_error("get_readme_from_cocoapods", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_readme_from_cocoapods", exc_info=True)
        raise


@mcp.tool()
async def get_package_info_from_cocoapods(
    package_name: str,
    ctx: Context,
    include_dependencies: bool = True,
    include_dev_dependencies: bool = False,
) -> object:
    """Get CocoaPods package metadata: version, authors, license, platforms, dependencies."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_info.handle(
            package_name, include_dependencies, include_dev_dependencies, state
        )
    except PodReadmeError as exc:
        _log_tool_error("get_package_info_from_cocoapods", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_package_info_from_cocoapods", exc_info=True)
        raise


@mcp.tool()
async def search_packages_from_cocoapods(
    query: str,
    ctx: Context,
    limit: int | None = None,
) -> object:
    """Search CocoaPods packages by name or keywords. Results are sorted by relevance."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_search.handle(query, limit, state)
    except PodReadmeError as exc:
        _log_tool_error("search_packages_from_cocoapods", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="search_packages_from_cocoapods", exc_info=True)
        raise


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
