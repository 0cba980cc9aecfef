"""Project analysis: manifests, features, domain and profiles."""

from project_researcher.projects.domain import GENERAL_DOMAIN, extract_domain
from project_researcher.projects.features import FEATURE_PATHS, analyze_features
from project_researcher.projects.manifest import (
    SUPPORTED_LANGUAGES,
    UNKNOWN_LANGUAGE,
    TechStackAnalysis,
    detect_language,
    detect_manifest,
    get_tech_stack_analysis,
    parse_cargo_toml,
    parse_go_mod,
    parse_package_json,
    parse_pyproject_toml,
    parse_requirements_txt,
)
from project_researcher.projects.profile import ProjectProfile, analyze_project

__all__ = [
    # Manifest
    "SUPPORTED_LANGUAGES",
    "UNKNOWN_LANGUAGE",
    "TechStackAnalysis",
    "detect_language",
    "detect_manifest",
    "get_tech_stack_analysis",
    "parse_cargo_toml",
    "parse_go_mod",
    "parse_package_json",
    "parse_pyproject_toml",
    "parse_requirements_txt",
    # Features
    "FEATURE_PATHS",
    "analyze_features",
    # Domain
    "GENERAL_DOMAIN",
    "extract_domain",
    # Profile
    "ProjectProfile",
    "analyze_project",
]
