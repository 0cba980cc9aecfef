"""Research engine: find, score and rank similar projects."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from project_researcher.errors import ResearchError, ResearcherError, Result
from project_researcher.references.models import Reference
from project_researcher.research.options import ResearchOptions
from project_researcher.research.providers import FixtureSearchProvider, SearchProvider
from project_researcher.research.query import construct_search_query
from project_researcher.research.scoring import calculate_relevance_score

logger = logging.getLogger(__name__)


def reference_from_candidate(raw: dict[str, Any]) -> Reference:
    """Build a reference from a raw provider record.

    The provider's relevance score is discarded.

    Raises:
        ValidationError: if the record is not a valid reference
    """
    record = {k: v for k, v in raw.items() if k not in ("relevanceScore", "relevance_score")}
    return Reference.model_validate(record)


def _passes_star_filter(ref: Reference, min_stars: int) -> bool:
    # Candidates without a star count are kept
    return not ref.stars or ref.stars >= min_stars


async def search_similar_projects(
    tech_stack: Sequence[str],
    features: Sequence[str],
    domain: str,
    options: ResearchOptions | None = None,
    provider: SearchProvider | None = None,
    now: datetime | None = None,
) -> Result[list[Reference]]:
    """Search a provider for similar projects and rank them.

    Args:
        tech_stack: Target tech stack
        features: Target features
        domain: Target domain
        options: Result limits; defaults to ``ResearchOptions()``
        provider: Candidate source; defaults to the fixture provider
        now: Reference time for the recency bonus

    Returns:
        Result with references sorted by relevance, highest first
    """
    options = options or ResearchOptions()
    provider = provider or FixtureSearchProvider()

    try:
        query = construct_search_query(tech_stack, features, domain)
        raw_candidates = await provider.search(query, options.min_stars)

        candidates = []
        for raw in raw_candidates:
            try:
                candidates.append(reference_from_candidate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid candidate {raw.get('url', '?')}: {e.error_count()} errors")

        kept = [
            ref for ref in candidates
            if _passes_star_filter(ref, options.min_stars) and options.allows_platform(ref.platform)
        ]

        scored = [
            ref.model_copy(update={
                "relevance_score": calculate_relevance_score(ref, tech_stack, features, domain, now=now),
            })
            for ref in kept
        ]
        scored.sort(key=lambda ref: ref.relevance_score, reverse=True)
        results = scored[:options.max_results]
    except ResearcherError as e:
        logger.warning(f"Research failed: {e}")
        return Result.fail(e)
    except Exception as e:
        logger.exception("Research pipeline error")
        return Result.fail(ResearchError(f"Research failed: {e}", cause=e))

    logger.info(
        f"Ranked {len(results)} of {len(raw_candidates)} candidates",
        extra={"query": query, "provider": provider.id, "reference_count": len(results)},
    )
    return Result.ok(results)
