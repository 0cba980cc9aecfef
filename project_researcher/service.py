"""End-to-end research runs for a project directory.

analyze -> search -> store, plus comparison of a stored reference with
the current project.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from project_researcher.config import ResearchConfig, load_research_config, settings
from project_researcher.errors import ReferenceManagerError, ResearchError, Result
from project_researcher.projects.profile import ProjectProfile, analyze_project
from project_researcher.references.models import Reference
from project_researcher.references.store import ReferenceStore
from project_researcher.research.engine import search_similar_projects
from project_researcher.research.providers import SearchProvider
from project_researcher.research.query import construct_search_query
from project_researcher.research.scoring import count_overlap

logger = logging.getLogger(__name__)


@dataclass
class ResearchReport:
    """Outcome of a research run."""

    profile: ProjectProfile
    query: str
    references: list[Reference] = field(default_factory=list)
    stored_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "query": self.query,
            "references": [ref.to_dict() for ref in self.references],
            "stored_count": self.stored_count,
        }


async def research_project(
    project_path: str | Path,
    provider: SearchProvider | None = None,
    config: ResearchConfig | None = None,
    tech_stack: list[str] | None = None,
    features: list[str] | None = None,
    domain: str | None = None,
    store: ReferenceStore | None = None,
    now: datetime | None = None,
) -> Result[ResearchReport]:
    """Analyze a project, find similar projects and store them.

    ``tech_stack``, ``features`` and ``domain`` override the values
    derived from the project when given.
    """
    project_path = Path(project_path)

    if config is None:
        loaded = await load_research_config(project_path, settings.config_path)
        if not loaded.success:
            return Result.fail(loaded.error)
        config = loaded.data

    if not config.enabled:
        return Result.fail(ResearchError(f"Research is disabled for {project_path}"))

    analysis = await analyze_project(project_path)
    if not analysis.success:
        return Result.fail(analysis.error)
    profile = analysis.data

    target_tech = tech_stack or list(profile.tech_stack)
    target_features = features or list(profile.features)
    target_domain = domain or profile.domain

    found = await search_similar_projects(
        target_tech,
        target_features,
        target_domain,
        options=config.to_research_options(),
        provider=provider,
        now=now,
    )
    if not found.success:
        return Result.fail(found.error)

    store = store or ReferenceStore(project_path, settings.references_path)
    added = await store.add_references(found.data)
    if not added.success:
        return Result.fail(added.error)

    updated = await store.update_tech_stack(list(profile.tech_stack))
    if not updated.success:
        return Result.fail(updated.error)

    logger.info(
        f"Research for {profile.name} found {len(found.data)} projects",
        extra={"project_path": str(project_path), "reference_count": len(updated.data.references)},
    )
    return Result.ok(ResearchReport(
        profile=profile,
        query=construct_search_query(target_tech, target_features, target_domain),
        references=found.data,
        stored_count=len(updated.data.references),
    ))


def describe_comparison(profile: ProjectProfile, reference: Reference) -> str:
    """Summarize how a reference relates to the current project."""
    shared_tech = [t for t in reference.tech_stack if count_overlap([t], profile.tech_stack)]
    shared_features = [f for f in reference.features if count_overlap([f], profile.features)]

    lines = [
        f"Reference: {reference.name} ({reference.url})",
        f"Current Project Tech Stack: {', '.join(profile.tech_stack) or 'none detected'}",
        f"Current Project Features: {', '.join(profile.features) or 'none detected'}",
        "",
        "Comparison:",
        f"- Shared tech: {', '.join(shared_tech) or 'none'}",
        f"- Shared features: {', '.join(shared_features) or 'none'}",
    ]
    if reference.domain:
        relation = "same as" if reference.domain == profile.domain else "differs from"
        lines.append(f"- Domain: {reference.domain} ({relation} {profile.domain})")
    lines.append(f"- Consider adapting patterns for your {profile.language} stack")
    return "\n".join(lines)


async def compare_reference(
    project_path: str | Path,
    reference_url: str,
    store: ReferenceStore | None = None,
) -> Result[str]:
    """Compare a stored reference with the current project."""
    store = store or ReferenceStore(project_path, settings.references_path)
    loaded = await store.load()
    if not loaded.success:
        return Result.fail(loaded.error)

    reference = next((ref for ref in loaded.data.references if ref.url == reference_url), None)
    if reference is None:
        return Result.fail(ReferenceManagerError(f"No stored reference with url {reference_url}"))

    analysis = await analyze_project(project_path)
    if not analysis.success:
        return Result.fail(analysis.error)

    return Result.ok(describe_comparison(analysis.data, reference))
