"""Options controlling a reference research run."""

from dataclasses import dataclass

ANY_PLATFORM = "any"


@dataclass(frozen=True)
class ResearchOptions:
    """Limits applied to provider results before they are stored."""

    max_results: int = 10
    min_stars: int = 10
    platforms: tuple[str, ...] = (ANY_PLATFORM,)

    def allows_platform(self, platform: str) -> bool:
        return ANY_PLATFORM in self.platforms or platform in self.platforms
