"""Reference research: query construction, providers, scoring and ranking."""

from project_researcher.research.engine import reference_from_candidate, search_similar_projects
from project_researcher.research.options import ResearchOptions
from project_researcher.research.providers import (
    FIXTURE_PROJECTS,
    FixtureSearchProvider,
    GitHubSearchProvider,
    SearchProvider,
)
from project_researcher.research.query import construct_search_query
from project_researcher.research.scoring import calculate_relevance_score

__all__ = [
    "ResearchOptions",
    "construct_search_query",
    "calculate_relevance_score",
    "SearchProvider",
    "FixtureSearchProvider",
    "GitHubSearchProvider",
    "FIXTURE_PROJECTS",
    "reference_from_candidate",
    "search_similar_projects",
]
