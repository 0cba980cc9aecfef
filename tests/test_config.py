"""Tests for settings validation and the per-project research config."""

import json

import pytest
from pydantic import ValidationError

from project_researcher.config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_RESEARCH_CONFIG,
    ResearchConfig,
    Settings,
    load_research_config,
    merge_config,
    save_research_config,
)
from project_researcher.errors import ConfigError


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_github_url_trailing_slash_removed(self):
        """Test trailing slash is removed from the API URL."""
        s = Settings(github_api_url="https://github.example.com/api/v3/")
        assert s.github_api_url == "https://github.example.com/api/v3"

    def test_github_url_invalid_rejected(self):
        """Test URL without scheme is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            Settings(github_api_url="api.github.com")
        assert "http" in str(exc_info.value).lower()

    def test_absolute_storage_path_rejected(self):
        with pytest.raises(ValidationError):
            Settings(references_path="/var/refs.json")

    def test_non_positive_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(http_timeout=0)

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("PROJECT_RESEARCHER_DEFAULT_MAX_AGE_DAYS", "30")
        monkeypatch.setenv("PROJECT_RESEARCHER_GITHUB_TOKEN", "abc")

        s = Settings()

        assert s.default_max_age_days == 30
        assert s.github_token == "abc"


class TestMergeConfig:
    """Tests for merging stored overrides onto defaults."""

    def test_no_overrides_returns_copy(self):
        merged = merge_config(DEFAULT_RESEARCH_CONFIG, None)

        assert merged == DEFAULT_RESEARCH_CONFIG
        assert merged is not DEFAULT_RESEARCH_CONFIG

    def test_camel_case_overrides(self):
        merged = merge_config(DEFAULT_RESEARCH_CONFIG, {
            "maxReferences": 3,
            "platforms": ["gitlab"],
            "codeAnalysis": {"cacheSize": 5},
        })

        assert merged.max_references == 3
        assert merged.platforms == ["gitlab"]
        assert merged.code_analysis.cache_size == 5
        # Untouched nested values keep their defaults
        assert merged.code_analysis.enabled is True

    def test_snake_case_overrides(self):
        merged = merge_config(DEFAULT_RESEARCH_CONFIG, {"min_stars": 500, "auto_research": False})

        assert merged.min_stars == 500
        assert merged.auto_research is False

    def test_defaults_not_mutated(self):
        merge_config(DEFAULT_RESEARCH_CONFIG, {"platforms": ["codeberg"], "codeAnalysis": {"enabled": False}})

        assert DEFAULT_RESEARCH_CONFIG.platforms == ["github", "gitlab", "codeberg", "any"]
        assert DEFAULT_RESEARCH_CONFIG.code_analysis.enabled is True

    def test_invalid_override_rejected(self):
        with pytest.raises(ValidationError):
            merge_config(DEFAULT_RESEARCH_CONFIG, {"researchDepth": "extreme"})

    def test_unknown_keys_ignored(self):
        merged = merge_config(DEFAULT_RESEARCH_CONFIG, {"somethingElse": 1})
        assert merged == DEFAULT_RESEARCH_CONFIG

    def test_to_research_options(self):
        config = merge_config(DEFAULT_RESEARCH_CONFIG, {"maxReferences": 4, "minStars": 50, "platforms": ["github"]})

        options = config.to_research_options()

        assert options.max_results == 4
        assert options.min_stars == 50
        assert options.platforms == ("github",)


class TestResearchConfigFile:
    """Tests for loading and saving the per-project config file."""

    @pytest.mark.asyncio
    async def test_missing_file_writes_defaults(self, tmp_path):
        result = await load_research_config(tmp_path)

        assert result.success
        assert result.data == DEFAULT_RESEARCH_CONFIG
        on_disk = json.loads((tmp_path / DEFAULT_CONFIG_PATH).read_text())
        assert on_disk["maxReferences"] == 10
        assert on_disk["codeAnalysis"] == {"enabled": True, "cacheSize": 20}

    @pytest.mark.asyncio
    async def test_partial_file_merged_with_defaults(self, tmp_path):
        path = tmp_path / DEFAULT_CONFIG_PATH
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"enabled": False, "minStars": 100}))

        result = await load_research_config(tmp_path)

        assert result.data.enabled is False
        assert result.data.min_stars == 100
        assert result.data.max_references == 10

    @pytest.mark.asyncio
    async def test_invalid_file_replaced_with_defaults(self, tmp_path):
        path = tmp_path / DEFAULT_CONFIG_PATH
        path.parent.mkdir(parents=True)
        path.write_text("not json at all")

        result = await load_research_config(tmp_path)

        assert result.success
        assert result.data == DEFAULT_RESEARCH_CONFIG
        assert json.loads(path.read_text())["enabled"] is True

    @pytest.mark.asyncio
    async def test_invalid_values_fall_back_to_defaults(self, tmp_path):
        path = tmp_path / DEFAULT_CONFIG_PATH
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"maxReferences": 0}))

        result = await load_research_config(tmp_path)

        assert result.data.max_references == 10

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path):
        config = ResearchConfig(research_depth="heavy", search_engines=["web", "github"])

        saved = await save_research_config(tmp_path, config)
        loaded = await load_research_config(tmp_path)

        assert saved.success
        assert loaded.data.research_depth == "heavy"
        assert loaded.data.search_engines == ["web", "github"]

    @pytest.mark.asyncio
    async def test_unwritable_location_fails(self, tmp_path):
        blocker = tmp_path / ".opencode"
        blocker.write_text("a file, not a directory")

        result = await save_research_config(tmp_path, ResearchConfig())

        assert not result.success
        assert isinstance(result.error, ConfigError)
