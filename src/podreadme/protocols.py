"""Protocol interfaces for the upstream clients.

Tool handlers and AppState reference these protocols, not the concrete
httpx-backed clients, so the handlers stay independent of the HTTP layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from podreadme.models.pod import DownloadStats, PodInfo, PodSearchHit


class PodRegistryProtocol(Protocol):
    """Interface for the CocoaPods metadata source."""

    async def get_pod_info(self, pod_name: str) -> PodInfo: ...

    async def get_pod_versions(self, pod_name: str) -> list[str]: ...

    async def search_pods(self, query: str, limit: int) -> list[PodSearchHit]: ...

    async def get_download_stats(self, pod_name: str) -> DownloadStats: ...


class ReadmeSourceProtocol(Protocol):
    """Interface for the repository README source."""

    async def get_readme_raw(self, owner: str, repo: str) -> str | None: ...

    async def get_readme(self, owner: str, repo: str) -> str | None: ...
