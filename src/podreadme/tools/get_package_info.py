"""Tool handler for get_package_info_from_cocoapods.

Receives AppState, reads the podspec and download stats, and returns a
structured dict. No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.formatters import (
    UNKNOWN,
    build_repository_info,
    format_authors,
    format_dependencies,
    format_license,
    format_test_dependencies,
    normalize_platforms,
    normalize_swift_versions,
)
from podreadme.models.pod import DownloadStats
from podreadme.models.tools import GetPackageInfoInput, GetPackageInfoOutput

if TYPE_CHECKING:
    from podreadme.state import AppState


async def handle(
    package_name: str,
    include_dependencies: bool,
    include_dev_dependencies: bool,
    state: AppState,
) -> dict:
    """Handle a get_package_info_from_cocoapods tool call."""
    log = structlog.get_logger().bind(
        tool="get_package_info_from_cocoapods", package_name=package_name
    )
    log.info("handler_called")

    try:
        validated = GetPackageInfoInput(
            package_name=package_name,
            include_dependencies=include_dependencies,
            include_dev_dependencies=include_dev_dependencies,
        )
    except ValueError as exc:
        raise PodReadmeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a valid pod name (letters, numbers, underscores, hyphens).",
            recoverable=False,
        ) from exc

    try:
        pod_info = await state.cocoapods.get_pod_info(validated.package_name)
    except PodReadmeError as exc:
        if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
            raise
        log.info("package_not_found")
        output = GetPackageInfoOutput(
            package_name=validated.package_name,
            latest_version="unknown",
            description="Package not found",
            authors=UNKNOWN,
            license=UNKNOWN,
            platforms={},
            download_stats=DownloadStats(),
            exists=False,
        )
        return output.model_dump(mode="json")

    download_stats = await state.cocoapods.get_download_stats(validated.package_name)

    output = GetPackageInfoOutput(
        package_name=validated.package_name,
        latest_version=pod_info.version,
        description=pod_info.description or pod_info.summary,
        authors=format_authors(pod_info.authors),
        license=format_license(pod_info.license),
        platforms=normalize_platforms(pod_info.platforms),
        swift_versions=normalize_swift_versions(pod_info.swift_versions),
        dependencies=(
            format_dependencies(pod_info.dependencies) if validated.include_dependencies else None
        ),
        dev_dependencies=(
            format_test_dependencies(pod_info.testspecs)
            if validated.include_dev_dependencies
            else None
        ),
        download_stats=download_stats,
        repository=build_repository_info(pod_info.source),
        exists=True,
    )
    log.info("package_info_complete", version=pod_info.version)
    return output.model_dump(mode="json")
