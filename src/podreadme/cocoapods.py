"""CocoaPods trunk client.

Reads podspecs and version lists from the trunk API. The trunk has no search
endpoint, so search combines an exact pod lookup with fuzzy matching over the
known-pods table. Every result goes through the injected MemoryCache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from podreadme.cache import (
    download_stats_key,
    pod_info_key,
    pod_versions_key,
    search_key,
)
from podreadme.errors import ErrorCode, PodReadmeError
from podreadme.fetcher import network_error, status_error, with_retry
from podreadme.formatters import (
    UNKNOWN,
    format_authors,
    format_license,
    normalize_platforms,
    normalize_swift_versions,
)
from podreadme.known_pods import get_known_pod, known_pod_info, search_known_pods
from podreadme.models.pod import DownloadStats, PodInfo, PodSearchHit
from podreadme.models.tools import MAX_POD_NAME_LENGTH, POD_NAME_RE

if TYPE_CHECKING:
    from podreadme.cache import MemoryCache
    from podreadme.config import Settings
    from podreadme.models.pod import KnownPod

log = structlog.get_logger()

_SERVICE = "CocoaPods trunk"

# CocoaPods publishes no download statistics; the zeroed placeholder is cached
# briefly so a real source can replace it without a restart.
DOWNLOAD_STATS_TTL_SECONDS = 300.0


class CocoaPodsClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        cache: MemoryCache,
    ) -> None:
        self._client = client
        self._trunk_url = settings.cocoapods.trunk_url.rstrip("/")
        self._fetcher_settings = settings.fetcher
        self._search_settings = settings.search
        self._cache = cache

    async def _get_json(self, url: str, pod_name: str) -> Any:
        try:
            response = await self._client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise network_error(_SERVICE, url, exc) from exc

        if response.status_code == 404:
            raise PodReadmeError(
                code=ErrorCode.PACKAGE_NOT_FOUND,
                message=f"Pod '{pod_name}' not found on the CocoaPods trunk",
                suggestion=(
                    "Check the pod name spelling (names are case-sensitive) or use "
                    "search_packages_from_cocoapods to find it."
                ),
                recoverable=False,
            )
        if not response.is_success:
            raise status_error(_SERVICE, response)

        try:
            return response.json()
        except ValueError as exc:
            raise _invalid_response(url, exc) from exc

    async def get_pod_info(self, pod_name: str) -> PodInfo:
        """Return the latest podspec for ``pod_name``.

        Raises PACKAGE_NOT_FOUND for unknown pods. When the trunk stays
        unreachable after retries, a known pod is served from the curated
        table instead (uncached, so the trunk is retried on the next call).
        """
        key = pod_info_key(pod_name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        url = f"{self._trunk_url}/pods/{quote(pod_name, safe='')}/specs/latest"
        try:
            data = await with_retry(
                lambda: self._get_json(url, pod_name),
                self._fetcher_settings,
                description=f"pod_info:{pod_name}",
            )
        except PodReadmeError as exc:
            known = get_known_pod(pod_name)
            if exc.code != ErrorCode.NETWORK_ERROR or known is None:
                raise
            log.warning(
                "trunk_unavailable_using_known_pod",
                pod_name=pod_name,
                error=exc.message,
            )
            return known_pod_info(known)

        try:
            info = PodInfo.model_validate(data)
        except ValidationError as exc:
            raise _invalid_response(url, exc) from exc

        self._cache.set(key, info)
        log.info("pod_info_fetch_complete", pod_name=pod_name, version=info.version)
        return info

    async def get_pod_versions(self, pod_name: str) -> list[str]:
        """Return every published version name, in trunk order."""
        key = pod_versions_key(pod_name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        url = f"{self._trunk_url}/pods/{quote(pod_name, safe='')}"
        data = await with_retry(
            lambda: self._get_json(url, pod_name),
            self._fetcher_settings,
            description=f"pod_versions:{pod_name}",
        )
        try:
            versions = [str(v["name"]) for v in data["versions"]]
        except (KeyError, TypeError) as exc:
            raise _invalid_response(url, exc) from exc

        self._cache.set(key, versions)
        log.info("pod_versions_fetch_complete", pod_name=pod_name, count=len(versions))
        return versions

    async def search_pods(self, query: str, limit: int) -> list[PodSearchHit]:
        """Exact trunk hit first (relevance 1.0), then fuzzy known-pod matches."""
        key = search_key(query, limit)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        hits: list[PodSearchHit] = []
        if len(query) <= MAX_POD_NAME_LENGTH and POD_NAME_RE.match(query):
            try:
                info = await self.get_pod_info(query)
            except PodReadmeError as exc:
                if exc.code != ErrorCode.PACKAGE_NOT_FOUND:
                    log.warning("search_exact_lookup_failed", query=query, code=exc.code)
            else:
                hits.append(_hit_from_info(info))

        exact_names = {hit.name.lower() for hit in hits}
        for known, relevance in search_known_pods(
            query,
            limit=limit,
            score_cutoff=self._search_settings.fuzzy_score_cutoff,
        ):
            if known.name.lower() not in exact_names:
                hits.append(_hit_from_known(known, relevance))

        hits.sort(key=lambda h: h.relevance, reverse=True)
        hits = hits[:limit]
        self._cache.set(key, hits)
        log.info("search_complete", query=query, total=len(hits))
        return hits

    async def get_download_stats(self, pod_name: str) -> DownloadStats:
        key = download_stats_key(pod_name)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        stats = DownloadStats()
        self._cache.set(key, stats, ttl=DOWNLOAD_STATS_TTL_SECONDS)
        return stats


def _invalid_response(url: str, exc: Exception) -> PodReadmeError:
    return PodReadmeError(
        code=ErrorCode.INVALID_UPSTREAM_RESPONSE,
        message=f"Unexpected response body from {_SERVICE} ({url}): {exc}",
        suggestion="The trunk API may have changed. Try again later.",
        recoverable=False,
    )


def _hit_from_info(info: PodInfo) -> PodSearchHit:
    return PodSearchHit(
        name=info.name,
        version=info.version,
        summary=info.summary,
        description=info.description,
        homepage=info.homepage,
        authors=format_authors(info.authors),
        license=format_license(info.license),
        git_url=info.source.git,
        platforms=normalize_platforms(info.platforms),
        swift_versions=normalize_swift_versions(info.swift_versions),
        matched_via="exact",
        relevance=1.0,
    )


def _hit_from_known(pod: KnownPod, relevance: float) -> PodSearchHit:
    return PodSearchHit(
        name=pod.name,
        version="latest",
        summary=pod.summary,
        description=pod.description,
        homepage=pod.homepage,
        authors=UNKNOWN,
        license=pod.license,
        git_url=pod.git_url,
        matched_via="known_pod",
        relevance=relevance,
    )
