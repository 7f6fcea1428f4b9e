"""podreadme: MCP server for CocoaPods package READMEs and usage examples."""

from __future__ import annotations

import warnings
from importlib import metadata

DISTRIBUTION_NAME = "podreadme"
FALLBACK_VERSION = "0.0.0+unknown"


def _resolve_version() -> str:
    """Installed distribution version, or FALLBACK_VERSION from a bare source tree."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        warnings.warn(
            f"No installed metadata for {DISTRIBUTION_NAME!r}; "
            f"reporting version {FALLBACK_VERSION!r}.",
            RuntimeWarning,
            stacklevel=2,
        )
        return FALLBACK_VERSION


__version__ = _resolve_version()
