"""Structural feature detection from marker paths."""

import logging
from pathlib import Path

from project_researcher.errors import ProjectAnalysisError

logger = logging.getLogger(__name__)

# Relative path -> feature, checked in order
FEATURE_PATHS: tuple[tuple[str, str], ...] = (
    ("auth", "authentication"),
    ("src/auth", "authentication"),
    ("api", "api"),
    ("src/api", "api"),
    ("routes", "routing"),
    ("src/routes", "routing"),
    ("components", "component-based"),
    ("src/components", "component-based"),
    ("pages", "pages/routing"),
    ("src/pages", "pages/routing"),
    ("tests", "testing"),
    ("test", "testing"),
    ("src/test", "testing"),
    ("__tests__", "testing"),
    ("public", "static-assets"),
    ("assets", "static-assets"),
    ("src/assets", "static-assets"),
    ("docs", "documentation"),
    ("README.md", "documentation"),
    ("Dockerfile", "dockerization"),
    ("docker-compose.yml", "dockerization"),
    ("docker-compose.yaml", "dockerization"),
    (".github/workflows", "ci-cd"),
    ("scripts", "build-tools"),
    ("config", "configuration"),
    ("src/config", "configuration"),
)


def analyze_features(project_path: str | Path) -> list[str]:
    """Return the structural features present in a project.

    Features are reported once each, in the order of ``FEATURE_PATHS``.

    Raises:
        ProjectAnalysisError: if the project root cannot be listed
    """
    root = Path(project_path)
    try:
        # Fails early on a missing or unreadable root
        next(root.iterdir(), None)
    except OSError as e:
        raise ProjectAnalysisError(f"Failed to analyze features: {e}", cause=e) from e

    features: list[str] = []
    for rel_path, feature in FEATURE_PATHS:
        if feature in features:
            continue
        if (root / rel_path).exists():
            features.append(feature)

    return features
