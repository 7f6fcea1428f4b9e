"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (PODREADME__CACHE__TTL_SECONDS=600)
  2. podreadme.yaml         (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_README_FILENAMES = ["README.md", "readme.md", "README.rst", "README.txt", "README"]


def _find_config_file() -> str | None:
    """Return the path of the first podreadme.yaml found, or None."""
    candidates = [
        Path("podreadme.yaml"),
        Path(platformdirs.user_config_dir("podreadme")) / "podreadme.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class CacheSettings(BaseModel):
    ttl_seconds: float = Field(default=3600.0, gt=0)
    max_size: int = Field(default=1000, gt=0)
    sweep_interval_seconds: float = Field(default=300.0, gt=0)


class GitHubSettings(BaseModel):
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    readme_filenames: list[str] = Field(default_factory=lambda: list(_DEFAULT_README_FILENAMES))
    # Falls back to the conventional GITHUB_TOKEN variable used by gh and CI.
    token: str | None = Field(default_factory=lambda: os.environ.get("GITHUB_TOKEN") or None)


class CocoaPodsSettings(BaseModel):
    trunk_url: str = "https://trunk.cocoapods.org/api/v1"


class FetcherSettings(BaseModel):
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay_seconds: float = Field(default=1.0, ge=0)
    retry_max_delay_seconds: float = Field(default=10.0, ge=0)


class SearchSettings(BaseModel):
    default_limit: int = Field(default=20, ge=1, le=250)
    fuzzy_score_cutoff: int = Field(default=60, ge=0, le=100)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PODREADME__CACHE__MAX_SIZE=500
        env_prefix="PODREADME__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    cache: CacheSettings = CacheSettings()
    github: GitHubSettings = Field(default_factory=GitHubSettings)
    cocoapods: CocoaPodsSettings = CocoaPodsSettings()
    fetcher: FetcherSettings = FetcherSettings()
    search: SearchSettings = SearchSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
