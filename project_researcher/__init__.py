"""Project profiling and reference research.

Derives a tech/feature/domain profile from a project directory, ranks
similar projects against it and keeps them in a per-project store.
"""

from project_researcher.errors import (
    ConfigError,
    ErrorKind,
    ProjectAnalysisError,
    ReferenceManagerError,
    ResearchError,
    ResearcherError,
    Result,
)
from project_researcher.projects import ProjectProfile, analyze_project
from project_researcher.references import Reference, ReferencesData, ReferenceStore
from project_researcher.research import (
    ResearchOptions,
    calculate_relevance_score,
    construct_search_query,
    search_similar_projects,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ConfigError",
    "ErrorKind",
    "ProjectAnalysisError",
    "ReferenceManagerError",
    "ResearchError",
    "ResearcherError",
    "Result",
    # Profile
    "ProjectProfile",
    "analyze_project",
    # References
    "Reference",
    "ReferencesData",
    "ReferenceStore",
    # Research
    "ResearchOptions",
    "calculate_relevance_score",
    "construct_search_query",
    "search_similar_projects",
]
