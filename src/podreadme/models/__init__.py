from __future__ import annotations

from podreadme.models.pod import (
    DownloadStats,
    KnownPod,
    PackageBasicInfo,
    PodInfo,
    PodSearchHit,
    PodSource,
    PodTestSpec,
    RepositoryInfo,
)
from podreadme.models.readme import InstallationInfo, InstallationInstructions, UsageExample
from podreadme.models.tools import (
    GetPackageInfoInput,
    GetPackageInfoOutput,
    GetPackageReadmeInput,
    GetPackageReadmeOutput,
    PackageSearchResult,
    SearchPackagesInput,
    SearchPackagesOutput,
)

__all__ = [
    # readme
    "UsageExample",
    "InstallationInstructions",
    "InstallationInfo",
    # pod
    "PodSource",
    "PodTestSpec",
    "PodInfo",
    "PodSearchHit",
    "RepositoryInfo",
    "DownloadStats",
    "PackageBasicInfo",
    "KnownPod",
    # tools
    "GetPackageReadmeInput",
    "GetPackageReadmeOutput",
    "GetPackageInfoInput",
    "GetPackageInfoOutput",
    "SearchPackagesInput",
    "SearchPackagesOutput",
    "PackageSearchResult",
]
