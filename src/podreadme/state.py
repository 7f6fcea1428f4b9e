"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from podreadme.cache import MemoryCache
    from podreadme.config import Settings
    from podreadme.protocols import PodRegistryProtocol, ReadmeSourceProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    cache: MemoryCache
    cocoapods: PodRegistryProtocol
    github: ReadmeSourceProtocol
    http_client: httpx.AsyncClient | None = None
