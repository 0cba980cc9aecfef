"""Configuration management for project_researcher.

Two layers:
- ``Settings``: process-wide settings from the environment / .env file
- ``ResearchConfig``: per-project research preferences stored as JSON
  inside the project (``.opencode/dpr.jsonc`` by default)
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from project_researcher.errors import ConfigError, Result

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = ".opencode/dpr.jsonc"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROJECT_RESEARCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    debug: bool = False
    json_logs: bool = False

    # Storage, relative to the project root
    references_path: str = ".opencode/references.json"
    config_path: str = DEFAULT_CONFIG_PATH

    # GitHub search provider
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    http_timeout: float = 30.0  # seconds

    # Reference maintenance
    default_max_age_days: int = 90
    suggestion_min_relevance: float = 60.0

    @field_validator("github_api_url")
    @classmethod
    def validate_github_api_url(cls, v: str) -> str:
        """Validate API URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("GitHub API URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("references_path", "config_path")
    @classmethod
    def validate_project_relative(cls, v: str) -> str:
        """Storage paths live inside the project directory."""
        if not v or Path(v).is_absolute():
            raise ValueError("Storage paths must be relative to the project root")
        return v

    @field_validator("http_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeout must be positive")
        return v


settings = Settings()


# =============================================================================
# Per-project research config
# =============================================================================


class _CamelConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CodeAnalysisConfig(_CamelConfig):
    enabled: bool = True
    cache_size: int = Field(default=20, ge=0)


class ResearchConfig(_CamelConfig):
    """Research preferences for one project."""

    enabled: bool = True
    auto_research: bool = True
    research_depth: Literal["light", "medium", "heavy"] = "light"
    max_references: int = Field(default=10, ge=1)
    platforms: list[str] = Field(default_factory=lambda: ["github", "gitlab", "codeberg", "any"])
    min_stars: int = Field(default=10, ge=0)
    search_engines: list[str] = Field(default_factory=lambda: ["web"])
    context_aware_suggestions: bool = True
    code_analysis: CodeAnalysisConfig = Field(default_factory=CodeAnalysisConfig)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_research_options(self) -> "ResearchOptions":
        """Options consumed by the research engine."""
        from project_researcher.research.options import ResearchOptions

        return ResearchOptions(
            max_results=self.max_references,
            min_stars=self.min_stars,
            platforms=tuple(self.platforms),
        )


DEFAULT_RESEARCH_CONFIG = ResearchConfig()


def _deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _field_names(model: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    """Rename camelCase keys to field names, recursing into nested models."""
    by_alias = {info.alias: name for name, info in model.model_fields.items() if info.alias}
    renamed = {}
    for key, value in data.items():
        name = by_alias.get(key, key)
        info = model.model_fields.get(name)
        nested = info.annotation if info else None
        if isinstance(value, dict) and isinstance(nested, type) and issubclass(nested, BaseModel):
            value = _field_names(nested, value)
        renamed[name] = value
    return renamed


def merge_config(defaults: ResearchConfig, overrides: dict[str, Any] | None) -> ResearchConfig:
    """Return a new config with ``overrides`` applied on top of ``defaults``.

    Override keys may be camelCase (as stored) or snake_case. ``defaults``
    is never modified.

    Raises:
        ValidationError: if the merged values are invalid
    """
    if not overrides:
        return defaults.model_copy(deep=True)
    merged = _deep_merge(defaults.model_dump(), _field_names(ResearchConfig, overrides))
    return ResearchConfig.model_validate(merged)


def _write_config(path: Path, config: ResearchConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)


def _load_config_sync(path: Path) -> ResearchConfig:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("config root must be an object")
        return merge_config(DEFAULT_RESEARCH_CONFIG, data)
    except FileNotFoundError:
        pass
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
        # ValidationError is a ValueError
        logger.warning(f"Invalid research config at {path}, using defaults: {e}")

    config = DEFAULT_RESEARCH_CONFIG.model_copy(deep=True)
    _write_config(path, config)
    return config


async def load_research_config(
    project_path: str | Path,
    config_path: str | Path = DEFAULT_CONFIG_PATH,
) -> Result[ResearchConfig]:
    """Load a project's research config, writing defaults when absent or invalid."""
    path = Path(project_path) / config_path
    try:
        return Result.ok(await asyncio.to_thread(_load_config_sync, path))
    except OSError as e:
        return Result.fail(ConfigError(f"Could not load research config {path}: {e}", cause=e))


async def save_research_config(
    project_path: str | Path,
    config: ResearchConfig,
    config_path: str | Path = DEFAULT_CONFIG_PATH,
) -> Result[ResearchConfig]:
    """Persist a project's research config."""
    path = Path(project_path) / config_path
    try:
        await asyncio.to_thread(_write_config, path, config)
    except OSError as e:
        return Result.fail(ConfigError(f"Could not save research config {path}: {e}", cause=e))
    return Result.ok(config)

