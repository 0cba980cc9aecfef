"""Per-project reference storage."""

from project_researcher.references.models import (
    Reference,
    ReferencesData,
    parse_timestamp,
    utc_now_iso,
)
from project_researcher.references.store import (
    DEFAULT_MAX_AGE_DAYS,
    DEFAULT_REFERENCES_PATH,
    ReferenceStore,
)

__all__ = [
    "Reference",
    "ReferencesData",
    "parse_timestamp",
    "utc_now_iso",
    "DEFAULT_MAX_AGE_DAYS",
    "DEFAULT_REFERENCES_PATH",
    "ReferenceStore",
]
