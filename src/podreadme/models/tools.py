from __future__ import annotations

import re

from pydantic import BaseModel, field_validator

from podreadme.models.pod import DownloadStats, PackageBasicInfo, RepositoryInfo
from podreadme.models.readme import InstallationInfo, UsageExample

POD_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:[-+][a-zA-Z0-9.-]+)?$")
_UNSAFE_QUERY_CHARS_RE = re.compile(r"[<>\"'&]")

MAX_POD_NAME_LENGTH = 214
MAX_QUERY_LENGTH = 500
MAX_SEARCH_LIMIT = 250


def _validate_pod_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("package_name must not be empty")
    if len(value) > MAX_POD_NAME_LENGTH:
        raise ValueError(f"package_name must be {MAX_POD_NAME_LENGTH} characters or less")
    if not POD_NAME_RE.match(value):
        raise ValueError(
            "Invalid pod name format. Pod names must start with a letter and contain "
            "only letters, numbers, underscores, and hyphens"
        )
    return value


def sanitize_search_query(query: str) -> str:
    """Drop HTML/XML-significant characters and collapse whitespace."""
    return re.sub(r"\s+", " ", _UNSAFE_QUERY_CHARS_RE.sub("", query)).strip()


# ---------------------------------------------------------------------------
# get_readme_from_cocoapods
# ---------------------------------------------------------------------------


class GetPackageReadmeInput(BaseModel):
    package_name: str
    version: str = "latest"
    include_examples: bool = True

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        return _validate_pod_name(v)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        v = v.strip()
        if v == "latest":
            return v
        if not _VERSION_RE.match(v):
            raise ValueError(
                'Invalid version format. Expected semantic version (e.g., "1.0.0") or "latest"'
            )
        return v


class GetPackageReadmeOutput(BaseModel):
    package_name: str
    version: str
    description: str
    readme_content: str
    usage_examples: list[UsageExample]
    installation: InstallationInfo
    basic_info: PackageBasicInfo
    repository: RepositoryInfo | None = None
    exists: bool


# ---------------------------------------------------------------------------
# get_package_info_from_cocoapods
# ---------------------------------------------------------------------------


class GetPackageInfoInput(BaseModel):
    package_name: str
    include_dependencies: bool = True
    include_dev_dependencies: bool = False

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        return _validate_pod_name(v)


class GetPackageInfoOutput(BaseModel):
    package_name: str
    latest_version: str
    description: str
    authors: str
    license: str
    platforms: dict[str, str]
    swift_versions: list[str] | None = None
    dependencies: dict[str, str] | None = None
    dev_dependencies: dict[str, str] | None = None
    download_stats: DownloadStats
    repository: RepositoryInfo | None = None
    exists: bool


# ---------------------------------------------------------------------------
# search_packages_from_cocoapods
# ---------------------------------------------------------------------------


class SearchPackagesInput(BaseModel):
    query: str
    limit: int = 20

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("query must not be empty")
        if len(v) > MAX_QUERY_LENGTH:
            raise ValueError(f"query must be {MAX_QUERY_LENGTH} characters or less")
        sanitized = sanitize_search_query(v)
        if not sanitized:
            raise ValueError("query must contain searchable characters")
        return sanitized

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int) -> int:
        if v < 1 or v > MAX_SEARCH_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_SEARCH_LIMIT}")
        return v


class PackageSearchResult(BaseModel):
    name: str
    version: str
    description: str
    summary: str
    homepage: str | None = None
    authors: str
    source: RepositoryInfo | None = None
    platforms: dict[str, str]
    license: str
    swift_versions: list[str] | None = None
    matched_via: str
    relevance: float


class SearchPackagesOutput(BaseModel):
    query: str
    total: int
    packages: list[PackageSearchResult]
