"""Project profile builder.

Combines manifest parsing, feature detection and domain classification
into a single immutable profile used to drive reference research.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from project_researcher.errors import ProjectAnalysisError, Result
from project_researcher.projects.domain import extract_domain
from project_researcher.projects.features import analyze_features
from project_researcher.projects.manifest import get_tech_stack_analysis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectProfile:
    """Derived description of a project."""

    name: str
    tech_stack: tuple[str, ...]
    features: tuple[str, ...]
    domain: str
    language: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tech_stack": list(self.tech_stack),
            "features": list(self.features),
            "domain": self.domain,
            "language": self.language,
        }


async def analyze_project(project_path: str | Path) -> Result[ProjectProfile]:
    """Analyze a project directory into a profile.

    The manifest and feature probes are independent and run concurrently;
    the domain probe needs the detected features. Either every stage
    succeeds or the whole build fails.
    """
    root = Path(project_path).expanduser().resolve()

    try:
        if not root.is_dir():
            raise ProjectAnalysisError(f"Project path is not a directory: {project_path}")

        tech, features = await asyncio.gather(
            asyncio.to_thread(get_tech_stack_analysis, root),
            asyncio.to_thread(analyze_features, root),
        )
        domain = await asyncio.to_thread(extract_domain, root, features)
    except ProjectAnalysisError as e:
        logger.warning(f"Project analysis failed for {root}: {e}", extra={"project_path": str(root)})
        return Result.fail(e)
    except OSError as e:
        logger.warning(f"Project analysis failed for {root}: {e}", extra={"project_path": str(root)})
        return Result.fail(ProjectAnalysisError(f"Failed to analyze project: {e}", cause=e))

    profile = ProjectProfile(
        name=root.name,
        tech_stack=tuple(tech.dependencies + tech.frameworks),
        features=tuple(features),
        domain=domain,
        language=tech.language,
    )
    logger.info(
        f"Analyzed {profile.name}: language={profile.language}, domain={profile.domain}, "
        f"{len(profile.tech_stack)} tech entries, {len(profile.features)} features",
        extra={"project_path": str(root)},
    )
    return Result.ok(profile)
