"""Search providers that return raw candidate records.

A provider only finds candidates; converting, filtering and scoring
them is the research engine's job. Raw records use the stored
reference shape (camelCase keys).
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from project_researcher.errors import ResearchError
from project_researcher.research.query import PLATFORM_TOKEN

logger = logging.getLogger(__name__)


class SearchProvider(ABC):
    """Capability interface for candidate search."""

    id: str = "provider"

    @abstractmethod
    async def search(self, query: str, min_stars: int) -> list[dict[str, Any]]:
        """Return raw candidate records for ``query``."""
        pass


FIXTURE_PROJECTS: tuple[dict[str, Any], ...] = (
    {
        "url": "https://github.com/vercel/next.js",
        "platform": "github",
        "name": "next.js",
        "description": "React framework with file-based routing",
        "techStack": ["react", "typescript", "tailwind"],
        "features": ["routing", "api", "ssr"],
        "domain": "framework",
        "relevanceScore": 0,
        "stars": 115000,
        "lastUpdated": "2024-12-15T00:00:00Z",
    },
    {
        "url": "https://github.com/remix-run/remix",
        "platform": "github",
        "name": "remix",
        "description": "React framework with nested routing",
        "techStack": ["react", "typescript"],
        "features": ["routing", "api", "ssr"],
        "domain": "framework",
        "relevanceScore": 0,
        "stars": 28000,
        "lastUpdated": "2024-12-10T00:00:00Z",
    },
    {
        "url": "https://github.com/facebook/create-react-app",
        "platform": "github",
        "name": "create-react-app",
        "description": "React project bootstrapper",
        "techStack": ["react", "webpack", "babel"],
        "features": ["component-based"],
        "domain": "tool",
        "relevanceScore": 0,
        "stars": 99000,
        "lastUpdated": "2024-11-20T00:00:00Z",
    },
    {
        "url": "https://github.com/expo/expo",
        "platform": "github",
        "name": "expo",
        "description": "React Native development platform",
        "techStack": ["react-native", "typescript"],
        "features": ["mobile", "components"],
        "domain": "mobile",
        "relevanceScore": 0,
        "stars": 23000,
        "lastUpdated": "2024-12-08T00:00:00Z",
    },
    {
        "url": "https://github.com/storybookjs/storybook",
        "platform": "github",
        "name": "storybook",
        "description": "Component development environment",
        "techStack": ["react", "vue", "angular", "svelte"],
        "features": ["component-based", "documentation"],
        "domain": "tool",
        "relevanceScore": 0,
        "stars": 81000,
        "lastUpdated": "2024-12-12T00:00:00Z",
    },
)


def _query_terms(query: str) -> list[str]:
    return [term for term in query.lower().split() if term != PLATFORM_TOKEN]


class FixtureSearchProvider(SearchProvider):
    """Deterministic in-memory provider for offline use and tests.

    A project matches when its name appears in the query, or when any
    query term is contained in one of its tech entries, features or its
    domain.
    """

    id = "fixture"

    def __init__(self, projects: list[dict[str, Any]] | tuple[dict[str, Any], ...] | None = None) -> None:
        self.projects = list(projects if projects is not None else FIXTURE_PROJECTS)

    async def search(self, query: str, min_stars: int) -> list[dict[str, Any]]:
        query_lower = query.lower()
        terms = _query_terms(query)

        matches = []
        for project in self.projects:
            values = [v.lower() for v in project.get("techStack", []) + project.get("features", [])]
            domain = project.get("domain", "").lower()
            if (
                project.get("name", "").lower() in query_lower
                or any(term in value for term in terms for value in values)
                or any(term in domain for term in terms)
            ):
                matches.append(dict(project))

        logger.debug(f"Fixture search matched {len(matches)} projects", extra={"query": query, "provider": self.id})
        return matches


class GitHubSearchProvider(SearchProvider):
    """Repository search against the GitHub REST API.

    GitHub ANDs every keyword, so only the leading ``max_terms`` query
    terms are sent (the domain, when present, then the first tech
    entries). Ranking against the full profile happens afterwards.
    """

    id = "github"

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str | None = None,
        timeout: float = 30.0,
        per_page: int = 30,
        max_terms: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.per_page = per_page
        self.max_terms = max_terms
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "GitHubSearchProvider":
        from project_researcher.config import settings

        return cls(
            api_url=settings.github_api_url,
            token=settings.github_token,
            timeout=settings.http_timeout,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _to_candidate(item: dict[str, Any]) -> dict[str, Any]:
        topics = list(item.get("topics") or [])
        language = item.get("language")
        tech = ([language.lower()] if language else []) + topics
        return {
            "url": item.get("html_url", ""),
            "platform": "github",
            "name": item.get("name", ""),
            "description": item.get("description") or "",
            "techStack": tech,
            "features": topics,
            "domain": "",
            "stars": item.get("stargazers_count"),
            "lastUpdated": item.get("pushed_at") or item.get("updated_at") or "",
        }

    async def search(self, query: str, min_stars: int) -> list[dict[str, Any]]:
        terms = " ".join(_query_terms(query)[:self.max_terms])
        params = {
            "q": f"{terms} stars:>={min_stars}".strip(),
            "sort": "stars",
            "order": "desc",
            "per_page": self.per_page,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.api_url}/search/repositories",
                    params=params,
                    headers=self._headers(),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise ResearchError(f"GitHub search failed with HTTP {e.response.status_code}", cause=e) from e
        except httpx.HTTPError as e:
            raise ResearchError(f"GitHub search request failed: {e}", cause=e) from e
        except ValueError as e:
            raise ResearchError(f"GitHub search returned invalid JSON: {e}", cause=e) from e

        items = data.get("items", []) if isinstance(data, dict) else []
        logger.info(f"GitHub search returned {len(items)} repositories", extra={"query": params["q"], "provider": self.id})
        return [self._to_candidate(item) for item in items if isinstance(item, dict)]
