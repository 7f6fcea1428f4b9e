"""Tool handler for get_readme_from_cocoapods.

Receives AppState, resolves the podspec, fetches the README from GitHub and
extracts usage examples and installation snippets from it. No MCP or FastMCP
imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.formatters import (
    UNKNOWN,
    build_repository_info,
    extract_repository_info,
    format_authors,
    format_license,
    github_repository_url,
    normalize_platforms,
    normalize_swift_versions,
)
from podreadme.models.pod import PackageBasicInfo
from podreadme.models.readme import InstallationInfo
from podreadme.models.tools import GetPackageReadmeInput, GetPackageReadmeOutput
from podreadme.readme_parser import (
    clean_content,
    extract_installation_instructions,
    parse_usage_examples,
)

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from podreadme.models.pod import PodInfo
    from podreadme.models.readme import UsageExample
    from podreadme.state import AppState


async def handle(
    package_name: str,
    version: str,
    include_examples: bool,
    state: AppState,
) -> dict:
    """Handle a get_readme_from_cocoapods tool call."""
    log = structlog.get_logger().bind(tool="get_readme_from_cocoapods", package_name=package_name)
    log.info("handler_called", version=version, include_examples=include_examples)

    try:
        validated = GetPackageReadmeInput(
            package_name=package_name,
            version=version,
            include_examples=include_examples,
        )
    except ValueError as exc:
        raise PodReadmeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion='Provide a valid pod name and a version such as "1.2.3" or "latest".',
            recoverable=False,
        ) from exc

    try:
        pod_info = await state.cocoapods.get_pod_info(validated.package_name)
    except PodReadmeError as exc:
        if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
            raise
        log.info("package_not_found")
        return _not_found(validated.package_name, validated.version).model_dump(mode="json")

    if validated.version != "latest":
        versions = await state.cocoapods.get_pod_versions(validated.package_name)
        if validated.version not in versions:
            log.info("version_not_found", available_versions=len(versions))
            return _not_found(validated.package_name, validated.version).model_dump(mode="json")
        if pod_info.version != validated.version:
            # README comes from the default branch; only the version check is exact.
            log.warning(
                "readme_version_mismatch",
                requested=validated.version,
                served=pod_info.version,
            )

    repo = extract_repository_info(pod_info.source.git)
    readme_content, usage_examples = await _fetch_readme(
        pod_info, repo, validated.include_examples, state, log
    )

    output = GetPackageReadmeOutput(
        package_name=validated.package_name,
        version=pod_info.version,
        description=pod_info.description or pod_info.summary,
        readme_content=readme_content,
        usage_examples=usage_examples,
        installation=_installation_info(validated.package_name, repo, readme_content),
        basic_info=_basic_info(pod_info),
        repository=build_repository_info(pod_info.source),
        exists=True,
    )
    log.info(
        "readme_complete",
        content_length=len(readme_content),
        example_count=len(usage_examples),
    )
    return output.model_dump(mode="json")


async def _fetch_readme(
    pod_info: PodInfo,
    repo: tuple[str, str] | None,
    include_examples: bool,
    state: AppState,
    log: FilteringBoundLogger,
) -> tuple[str, list[UsageExample]]:
    """Return (cleaned README, examples), or the pod description when unavailable."""
    fallback = pod_info.description or pod_info.summary or "No README available"
    if repo is None:
        log.warning("repository_unknown", git_url=pod_info.source.git)
        return fallback, []

    owner, name = repo
    try:
        readme = await state.github.get_readme_raw(owner, name)
        if readme is None:
            readme = await state.github.get_readme(owner, name)
    except PodReadmeError as exc:
        log.warning("readme_fetch_failed", owner=owner, repo=name, code=exc.code)
        return fallback, []

    if readme is None:
        log.warning("readme_unavailable", owner=owner, repo=name)
        return fallback, []

    examples = parse_usage_examples(readme) if include_examples else []
    return clean_content(readme), examples


def _installation_info(
    package_name: str,
    repo: tuple[str, str] | None,
    readme_content: str,
) -> InstallationInfo:
    """Defaults derived from the pod, overridden by snippets found in the README."""
    carthage = spm = None
    if repo is not None:
        owner, name = repo
        carthage = f'github "{owner}/{name}"'
        spm = f"{github_repository_url(owner, name)}.git"

    extracted = extract_installation_instructions(readme_content)
    return InstallationInfo(
        podfile=extracted.podfile or f"pod '{package_name}'",
        carthage=extracted.carthage or carthage,
        spm=extracted.spm or spm,
    )


def _basic_info(pod_info: PodInfo) -> PackageBasicInfo:
    return PackageBasicInfo(
        name=pod_info.name,
        version=pod_info.version,
        description=pod_info.description or pod_info.summary,
        summary=pod_info.summary or None,
        homepage=pod_info.homepage,
        source=build_repository_info(pod_info.source),
        license=format_license(pod_info.license),
        authors=format_authors(pod_info.authors),
        platforms=normalize_platforms(pod_info.platforms),
        swift_versions=normalize_swift_versions(pod_info.swift_versions),
    )


def _not_found(package_name: str, version: str) -> GetPackageReadmeOutput:
    return GetPackageReadmeOutput(
        package_name=package_name,
        version=version,
        description="Package or README not found",
        readme_content="",
        usage_examples=[],
        installation=InstallationInfo(podfile=f"pod '{package_name}'"),
        basic_info=PackageBasicInfo(
            name=package_name,
            version=version,
            description="Package not found",
            license=UNKNOWN,
            authors=UNKNOWN,
        ),
        exists=False,
    )
