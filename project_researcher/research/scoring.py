"""Relevance scoring of candidate references against a target profile.

Score components (max 100):
- Tech stack overlap: 10 per overlapping entry, up to 40
- Feature overlap: 10 per overlapping entry, up to 30
- Domain match: 20
- Recency: 10 if updated within 30 days, 5 within 90 days
"""

from collections.abc import Sequence
from datetime import datetime

from project_researcher.references.models import Reference, parse_timestamp, utc_now

TECH_POINTS = 10
TECH_MAX = 40
FEATURE_POINTS = 10
FEATURE_MAX = 30
DOMAIN_POINTS = 20
RECENT_DAYS = 30
RECENT_POINTS = 10
STALE_DAYS = 90
STALE_POINTS = 5
MAX_SCORE = 100


def count_overlap(candidates: Sequence[str], targets: Sequence[str]) -> int:
    """Count candidates contained (case-insensitively) in any target entry."""
    lowered_targets = [t.lower() for t in targets]
    return sum(
        1 for item in candidates
        if any(item.lower() in target for target in lowered_targets)
    )


def recency_points(last_updated: str, now: datetime | None = None) -> int:
    """Bonus for recently updated references; 0 when unparseable."""
    updated = parse_timestamp(last_updated)
    if updated is None:
        return 0

    days = ((now or utc_now()) - updated).total_seconds() / 86400
    if days < RECENT_DAYS:
        return RECENT_POINTS
    if days < STALE_DAYS:
        return STALE_POINTS
    return 0


def calculate_relevance_score(
    reference: Reference,
    target_tech_stack: Sequence[str],
    target_features: Sequence[str],
    target_domain: str,
    now: datetime | None = None,
) -> float:
    """Score a reference from 0 to 100 against the target profile.

    ``now`` defaults to the current UTC time and only affects the
    recency component.
    """
    score = 0
    score += min(count_overlap(reference.tech_stack, target_tech_stack) * TECH_POINTS, TECH_MAX)
    score += min(count_overlap(reference.features, target_features) * FEATURE_POINTS, FEATURE_MAX)

    if reference.domain and target_domain and reference.domain == target_domain:
        score += DOMAIN_POINTS

    score += recency_points(reference.last_updated, now)

    return float(min(score, MAX_SCORE))
