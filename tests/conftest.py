"""Pytest fixtures for project_researcher tests."""

from datetime import datetime, timezone

import pytest

from project_researcher.references.models import Reference


def pytest_configure(config):
    """Register the asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def fixed_now() -> datetime:
    """A fixed reference time for recency and pruning."""
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_reference():
    """Factory for references with sensible defaults."""

    def _make(url: str, **overrides) -> Reference:
        data = {
            "url": url,
            "platform": "github",
            "name": url.rstrip("/").rsplit("/", 1)[-1],
            "description": "",
            "tech_stack": [],
            "features": [],
            "domain": "",
            "relevance_score": 0,
            "last_updated": "2025-05-25T00:00:00Z",
        }
        data.update(overrides)
        return Reference(**data)

    return _make
