"""Domain classification by ordered keyword precedence."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

GENERAL_DOMAIN = "general"

# Keyword -> domain, first substring match wins
NAME_DOMAIN_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("shop", "e-commerce"),
    ("store", "e-commerce"),
    ("cart", "e-commerce"),
    ("payment", "fintech"),
    ("bank", "fintech"),
    ("wallet", "fintech"),
    ("blog", "content-management"),
    ("cms", "content-management"),
    ("admin", "admin-dashboard"),
    ("dashboard", "admin-dashboard"),
    ("social", "social-media"),
    ("chat", "messaging"),
    ("video", "media"),
    ("music", "media"),
    ("game", "gaming"),
    ("api", "backend-api"),
    ("micro", "microservices"),
    ("server", "backend-api"),
    ("cli", "command-line"),
    ("tool", "command-line"),
    ("library", "package-library"),
)

# Domain -> feature names that imply it
FEATURE_DOMAIN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("e-commerce", ("cart", "checkout", "payment")),
    ("admin-dashboard", ("admin", "dashboard")),
    ("social-media", ("social", "profile", "feed")),
    ("messaging", ("chat", "message")),
    ("content-management", ("blog", "cms", "content")),
    ("backend-api", ("api", "server")),
)

README_FILES = ("README.md", "README.rst", "README.txt", "README")


def match_keyword_domain(text: str) -> str | None:
    """Return the domain of the first keyword contained in ``text``."""
    lowered = text.lower()
    for keyword, domain in NAME_DOMAIN_KEYWORDS:
        if keyword in lowered:
            return domain
    return None


def match_feature_domain(features: list[str] | tuple[str, ...]) -> str | None:
    """Return the first domain whose keywords appear among the features."""
    for domain, keywords in FEATURE_DOMAIN_KEYWORDS:
        if any(keyword in features for keyword in keywords):
            return domain
    return None


def _read_readme(root: Path) -> str | None:
    for readme in README_FILES:
        try:
            return (root / readme).read_text(encoding="utf-8", errors="replace")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            continue
        except OSError as e:
            logger.debug(f"Could not read {readme} in {root}: {e}")
            continue
    return None


def extract_domain(project_path: str | Path, features: list[str] | tuple[str, ...]) -> str:
    """Classify a project into exactly one domain label.

    Checks, in order: the directory name, the detected features, then the
    README text. Falls back to ``"general"``.
    """
    root = Path(project_path)

    domain = match_keyword_domain(root.name)
    if domain:
        return domain

    domain = match_feature_domain(features)
    if domain:
        return domain

    readme = _read_readme(root)
    if readme:
        domain = match_keyword_domain(readme)
        if domain:
            logger.debug(f"Domain for {root.name} taken from README: {domain}")
            return domain

    return GENERAL_DOMAIN
