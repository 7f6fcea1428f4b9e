"""Curated table of widely used pods.

Used as a fuzzy search corpus and as a last-resort source of metadata when
the CocoaPods trunk cannot be reached.
"""

from __future__ import annotations

from rapidfuzz import fuzz, process, utils

from podreadme.models.pod import KnownPod, PodInfo, PodSource

KNOWN_PODS: dict[str, KnownPod] = {
    pod.name: pod
    for pod in (
        KnownPod(
            name="Alamofire",
            git_url="https://github.com/Alamofire/Alamofire.git",
            summary="Elegant HTTP Networking in Swift",
            description="Alamofire is an HTTP networking library written in Swift.",
            license="MIT",
            homepage="https://alamofire.org",
        ),
        KnownPod(
            name="AFNetworking",
            git_url="https://github.com/AFNetworking/AFNetworking.git",
            summary="A delightful networking framework for iOS, macOS, watchOS, and tvOS",
            description="AFNetworking is a delightful networking library for iOS and Mac OS X.",
            license="MIT",
        ),
        KnownPod(
            name="SDWebImage",
            git_url="https://github.com/SDWebImage/SDWebImage.git",
            summary="Asynchronous image downloader with cache support",
            description="SDWebImage provides async image downloading with cache support.",
            license="MIT",
        ),
        KnownPod(
            name="Kingfisher",
            git_url="https://github.com/onevcat/Kingfisher.git",
            summary=(
                "A lightweight, pure-Swift library for downloading and caching images "
                "from the web"
            ),
            description=(
                "Kingfisher is a powerful, pure-Swift library for downloading and caching images."
            ),
            license="MIT",
        ),
        KnownPod(
            name="SnapKit",
            git_url="https://github.com/SnapKit/SnapKit.git",
            summary="A Swift Autolayout DSL for iOS & OS X",
            description="SnapKit is a DSL to make Auto Layout easy on both iOS and OS X.",
            license="MIT",
        ),
        KnownPod(
            name="RxSwift",
            git_url="https://github.com/ReactiveX/RxSwift.git",
            summary="Reactive Programming in Swift",
            description="RxSwift is the reactive programming library for Swift.",
            license="MIT",
        ),
        KnownPod(
            name="Realm",
            git_url="https://github.com/realm/realm-swift.git",
            summary="A mobile database that runs directly inside phones, tablets or wearables",
            description="Realm is a mobile database: a replacement for SQLite & Core Data.",
            license="Apache-2.0",
        ),
    )
}

# (term, pod name) pairs: each pod is reachable by its name and its summary.
_FUZZY_CORPUS: list[tuple[str, str]] = [
    term_and_name
    for pod in KNOWN_PODS.values()
    for term_and_name in ((pod.name, pod.name), (pod.summary, pod.name))
]


def get_known_pod(pod_name: str) -> KnownPod | None:
    """Exact lookup, falling back to a case-insensitive match."""
    pod = KNOWN_PODS.get(pod_name)
    if pod is not None:
        return pod
    lowered = pod_name.lower()
    return next((p for p in KNOWN_PODS.values() if p.name.lower() == lowered), None)


def known_pod_info(pod: KnownPod) -> PodInfo:
    """Synthesise a minimal podspec for a known pod. The version is unknown."""
    return PodInfo(
        name=pod.name,
        version="latest",
        summary=pod.summary,
        description=pod.description,
        homepage=pod.homepage,
        source=PodSource(git=pod.git_url),
        license=pod.license,
    )


def search_known_pods(
    query: str,
    *,
    limit: int = 20,
    score_cutoff: int = 60,
) -> list[tuple[KnownPod, float]]:
    """Fuzzy-match ``query`` against known pod names and summaries.

    Returns ``(pod, relevance)`` pairs, one per pod, relevance in 0.0 to 1.0,
    sorted by relevance descending.
    """
    if not query.strip():
        return []

    results = process.extract(
        query,
        [term for term, _ in _FUZZY_CORPUS],
        scorer=fuzz.WRatio,
        processor=utils.default_process,
        limit=len(_FUZZY_CORPUS),
        score_cutoff=score_cutoff,
    )

    # process.extract returns best scores first, so the first hit per pod wins.
    seen: set[str] = set()
    matches: list[tuple[KnownPod, float]] = []
    for _term, score, idx in results:
        _, name = _FUZZY_CORPUS[idx]
        if name in seen:
            continue
        seen.add(name)
        matches.append((KNOWN_PODS[name], round(score / 100, 2)))

    return sorted(matches, key=lambda m: m[1], reverse=True)[:limit]
