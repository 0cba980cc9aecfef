"""Context-aware reference suggestions for a conversation message."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from project_researcher.config import ResearchConfig, settings
from project_researcher.projects.domain import GENERAL_DOMAIN
from project_researcher.references.store import ReferenceStore

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3

TECH_KEYWORDS = (
    "react", "vue", "angular", "svelte", "next", "remix", "express", "koa", "hapi",
    "python", "django", "flask", "fastapi", "pytest", "numpy", "pandas",
    "typescript", "javascript", "node", "npm", "webpack", "vite", "babel",
    "go", "rust", "cargo", "java", "maven", "gradle", "spring",
    "docker", "kubernetes", "aws", "azure", "gcp", "firebase", "supabase",
    "mongodb", "postgresql", "mysql", "redis", "graphql", "rest", "api",
    "tailwind", "bootstrap", "css", "html", "scss", "sass",
)

FEATURE_KEYWORDS = (
    "auth", "authentication", "login", "register", "user", "profile",
    "routing", "router", "pages", "navigation", "menu", "sidebar",
    "api", "backend", "server", "endpoint", "rest", "graphql",
    "component", "ui", "frontend", "client", "interface", "design",
    "test", "testing", "unit", "integration", "e2e", "cypress",
    "database", "db", "sql", "nosql", "migration", "seed",
    "deployment", "deploy", "cicd", "github", "actions", "pipeline",
    "admin", "dashboard", "management", "cms", "blog", "content",
)

DOMAIN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("e-commerce", ("shop", "store", "cart", "checkout", "payment", "product")),
    ("fintech", ("bank", "payment", "wallet", "transfer", "finance")),
    ("admin-dashboard", ("admin", "dashboard", "management", "panel")),
    ("social-media", ("social", "profile", "feed", "post", "message")),
    ("messaging", ("chat", "message", "notification", "real-time")),
    ("content-management", ("blog", "cms", "content", "article", "post")),
    ("backend-api", ("api", "server", "backend", "endpoint", "service")),
    ("mobile", ("mobile", "app", "ios", "android", "react-native")),
)


@dataclass
class ConversationRelevance:
    """Signals extracted from a message."""

    tech_stack: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    domain: str = GENERAL_DOMAIN

    def has_signal(self) -> bool:
        return bool(self.tech_stack or self.features or self.domain != GENERAL_DOMAIN)


def analyze_conversation_for_relevance(message: str) -> ConversationRelevance:
    """Extract tech, feature and domain keywords from a message."""
    text = message.lower()

    tech = list(dict.fromkeys(kw for kw in TECH_KEYWORDS if kw in text))
    features = list(dict.fromkeys(kw for kw in FEATURE_KEYWORDS if kw in text))

    domain = GENERAL_DOMAIN
    for candidate, keywords in DOMAIN_KEYWORDS:
        if any(kw in text for kw in keywords):
            domain = candidate
            break

    return ConversationRelevance(tech_stack=tech, features=features, domain=domain)


async def generate_contextual_suggestion(
    project_path: str | Path,
    message: str,
    config: ResearchConfig,
    store: ReferenceStore | None = None,
) -> str | None:
    """Suggest stored references relevant to a message.

    Returns None when suggestions are disabled, the message carries no
    signal, or nothing relevant is stored.
    """
    if not (config.enabled and config.context_aware_suggestions):
        return None

    relevance = analyze_conversation_for_relevance(message)
    if not relevance.has_signal():
        return None

    store = store or ReferenceStore(project_path, settings.references_path)
    result = await store.search(
        tech_stack=relevance.tech_stack,
        features=relevance.features,
        domain=relevance.domain if relevance.domain != GENERAL_DOMAIN else None,
        min_relevance_score=settings.suggestion_min_relevance,
    )
    if not result.success:
        logger.warning(f"Could not search references for suggestion: {result.error}")
        return None
    if not result.data:
        return None

    lines = [
        f"- [{ref.name}]({ref.url}) - {ref.description or ref.domain} project"
        for ref in result.data[:MAX_SUGGESTIONS]
    ]
    header = (
        f'[REFERENCE] Found similar projects for your "{relevance.domain}" work '
        f"with {', '.join(relevance.tech_stack)}:"
    )
    return "\n".join([header, *lines])
