"""Reference models persisted in a project's reference store.

Stored documents use camelCase keys (``techStack``, ``relevanceScore``,
``lastUpdated``...); the Python attributes are snake_case.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it is not one.

    Naive timestamps are taken as UTC.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Reference(_CamelModel):
    """A candidate similar project with its computed relevance."""

    url: str = Field(min_length=1, description="Unique key within a project's store")
    platform: str = Field(default="github")
    name: str = ""
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    domain: str = ""
    relevance_score: float = Field(default=0, ge=0, le=100)
    stars: int | None = Field(default=None, ge=0)
    # Kept verbatim so unparseable values survive a round trip
    last_updated: str = Field(default_factory=utc_now_iso)
    notes: str | None = None
    tags: list[str] | None = None


class ReferencesData(_CamelModel):
    """All references stored for one project."""

    project_path: str
    current_tech_stack: list[str] = Field(default_factory=list)
    references: list[Reference] = Field(default_factory=list)
    last_research_date: str = Field(default_factory=utc_now_iso)

    def urls(self) -> set[str]:
        return {ref.url for ref in self.references}
