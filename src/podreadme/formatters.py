"""Normalise loosely typed podspec fields into the flat shapes the tools return."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from podreadme.models.pod import RepositoryInfo

if TYPE_CHECKING:
    from podreadme.models.pod import PodSource, PodTestSpec

UNKNOWN = "Unknown"

# git@github.com:owner/repo.git
_SCP_LIKE_RE = re.compile(r"^[\w.-]+@(?P<host>[^:/]+):(?P<path>.+)$")


def format_authors(authors: Any) -> str:
    """``"A"``, ``["A", "B"]`` or ``{"A": "a@x.io"}`` → ``"A"`` / ``"A, B"``."""
    if not authors:
        return UNKNOWN
    if isinstance(authors, str):
        return authors
    if isinstance(authors, list):
        return ", ".join(str(a) for a in authors)
    if isinstance(authors, dict):
        # Podspec author hashes map name -> email.
        return ", ".join(authors)
    return UNKNOWN


def format_license(license: Any) -> str:
    if not license:
        return UNKNOWN
    if isinstance(license, str):
        return license
    if isinstance(license, dict):
        return license.get("name") or license.get("type") or UNKNOWN
    return UNKNOWN


def _first_requirement(requirements: Any) -> str:
    if isinstance(requirements, list) and requirements:
        return str(requirements[0])
    if isinstance(requirements, str) and requirements:
        return requirements
    return "*"


def format_dependencies(dependencies: Any) -> dict[str, str] | None:
    """Map each dependency to its first version requirement (``"*"`` if none)."""
    if not dependencies or not isinstance(dependencies, dict):
        return None
    formatted = {name: _first_requirement(reqs) for name, reqs in dependencies.items()}
    return formatted or None


def format_test_dependencies(testspecs: list[PodTestSpec] | None) -> dict[str, str] | None:
    """Merge the dependencies of every test spec. Later specs win on conflicts."""
    if not testspecs:
        return None
    merged: dict[str, str] = {}
    for spec in testspecs:
        merged.update(format_dependencies(spec.dependencies) or {})
    return merged or None


def normalize_swift_versions(value: Any) -> list[str] | None:
    if not value:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    return None


def normalize_platforms(platforms: dict[str, str | None] | None) -> dict[str, str]:
    """Drop the ``None`` deployment targets podspecs use for "any version"."""
    if not platforms:
        return {}
    return {name: target or "" for name, target in platforms.items()}


def extract_repository_info(git_url: str | None) -> tuple[str, str] | None:
    """Return ``(owner, repo)`` for a GitHub clone URL, else None.

    Accepts ``https://github.com/o/r(.git)`` and ``git@github.com:o/r.git``.
    """
    if not git_url:
        return None

    scp = _SCP_LIKE_RE.match(git_url)
    if scp:
        host, path = scp.group("host"), scp.group("path")
    else:
        parsed = urlparse(git_url)
        host, path = parsed.hostname or "", parsed.path

    if host.lower() not in ("github.com", "www.github.com"):
        return None

    parts = path.strip("/").removesuffix(".git").split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def github_repository_url(owner: str, repo: str) -> str:
    return f"https://github.com/{owner}/{repo}"


def build_repository_info(source: PodSource | None) -> RepositoryInfo | None:
    if source is None or not source.git:
        return None
    return RepositoryInfo(type="git", url=source.git)
