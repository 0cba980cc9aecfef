"""Search query construction from a project profile."""

from collections.abc import Sequence

from project_researcher.projects.domain import GENERAL_DOMAIN

MAX_QUERY_TECH = 3
MAX_QUERY_FEATURES = 2
PLATFORM_TOKEN = "github"


def construct_search_query(tech_stack: Sequence[str], features: Sequence[str], domain: str) -> str:
    """Build a bounded query: domain, top tech, top features, platform."""
    parts = []

    if domain and domain != GENERAL_DOMAIN:
        parts.append(domain)

    key_tech = list(tech_stack[:MAX_QUERY_TECH])
    if key_tech:
        parts.append(" ".join(key_tech))

    key_features = list(features[:MAX_QUERY_FEATURES])
    if key_features:
        parts.append(" ".join(key_features))

    parts.append(PLATFORM_TOKEN)
    return " ".join(parts)
