from __future__ import annotations

from pydantic import BaseModel


class UsageExample(BaseModel):
    """A titled, language-tagged code snippet extracted from a README."""

    title: str
    description: str | None = None
    code: str  # Trimmed fenced-block body
    language: str  # Declared fence tag, or detected ("text" as last resort)


class InstallationInstructions(BaseModel):
    """Installation snippets found verbatim in a README. ``None`` means not found."""

    podfile: str | None = None
    carthage: str | None = None
    spm: str | None = None


class InstallationInfo(BaseModel):
    """Installation snippets returned to the agent, defaults filled in."""

    podfile: str
    carthage: str | None = None
    spm: str | None = None
