"""Tool handler for search_packages_from_cocoapods.

Receives AppState, delegates to the CocoaPods client, and returns a structured
dict. No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.formatters import UNKNOWN
from podreadme.models.pod import RepositoryInfo
from podreadme.models.tools import (
    PackageSearchResult,
    SearchPackagesInput,
    SearchPackagesOutput,
)

if TYPE_CHECKING:
    from podreadme.models.pod import PodSearchHit
    from podreadme.state import AppState


async def handle(query: str, limit: int | None, state: AppState) -> dict:
    """Handle a search_packages_from_cocoapods tool call."""
    log = structlog.get_logger().bind(tool="search_packages_from_cocoapods", query=query)
    log.info("handler_called", limit=limit)

    try:
        validated = SearchPackagesInput(
            query=query,
            limit=state.settings.search.default_limit if limit is None else limit,
        )
    except ValueError as exc:
        raise PodReadmeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty search query (max 500 chars) and a limit of 1-250.",
            recoverable=False,
        ) from exc

    hits = await state.cocoapods.search_pods(validated.query, validated.limit)
    log.info("search_complete", match_count=len(hits))

    output = SearchPackagesOutput(
        query=validated.query,
        total=len(hits),
        packages=[_result_from_hit(hit) for hit in hits],
    )
    return output.model_dump(mode="json")


def _result_from_hit(hit: PodSearchHit) -> PackageSearchResult:
    return PackageSearchResult(
        name=hit.name,
        version=hit.version,
        description=hit.description or hit.summary,
        summary=hit.summary,
        homepage=hit.homepage,
        authors=hit.authors or UNKNOWN,
        source=RepositoryInfo(type="git", url=hit.git_url) if hit.git_url else None,
        platforms=hit.platforms,
        license=hit.license or UNKNOWN,
        swift_versions=hit.swift_versions,
        matched_via=hit.matched_via,
        relevance=hit.relevance,
    )
