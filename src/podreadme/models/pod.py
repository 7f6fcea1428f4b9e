from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PodSource(BaseModel):
    """``source`` attribute of a podspec."""

    model_config = ConfigDict(extra="ignore")

    git: str | None = None
    tag: str | None = None
    commit: str | None = None
    branch: str | None = None
    http: str | None = None


class PodTestSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    dependencies: dict[str, list[str] | str | None] | None = None


class PodInfo(BaseModel):
    """Subset of a CocoaPods podspec (JSON form) used by the tools."""

    model_config = ConfigDict(extra="ignore")

    name: str
    version: str
    summary: str = ""
    description: str | None = None
    homepage: str | None = None
    documentation_url: str | None = None
    source: PodSource = PodSource()
    authors: str | dict[str, str | None] | list[str] | None = None
    license: str | dict[str, str | None] | None = None
    platforms: dict[str, str | None] = {}
    # Older podspecs use the singular key.
    swift_versions: str | list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("swift_versions", "swift_version"),
    )
    dependencies: dict[str, list[str] | str | None] | None = None
    testspecs: list[PodTestSpec] | None = None


class RepositoryInfo(BaseModel):
    type: str
    url: str
    directory: str | None = None


class DownloadStats(BaseModel):
    last_day: int = 0
    last_week: int = 0
    last_month: int = 0


class PackageBasicInfo(BaseModel):
    name: str
    version: str
    description: str
    summary: str | None = None
    homepage: str | None = None
    source: RepositoryInfo | None = None
    license: str
    authors: str
    platforms: dict[str, str] = {}
    swift_versions: list[str] | None = None


class PodSearchHit(BaseModel):
    """Single search result, before conversion to the tool output shape."""

    name: str
    version: str
    summary: str = ""
    description: str | None = None
    homepage: str | None = None
    authors: str = ""
    license: str = ""
    git_url: str | None = None
    platforms: dict[str, str] = {}
    swift_versions: list[str] | None = None
    matched_via: str  # "exact" | "known_pod"
    relevance: float  # 0.0 to 1.0


class KnownPod(BaseModel):
    """Curated metadata for a widely used pod."""

    name: str
    git_url: str
    summary: str
    description: str
    license: str = "Unknown"
    homepage: str | None = None
