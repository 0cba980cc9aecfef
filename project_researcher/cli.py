#!/usr/bin/env python3
"""Command line interface for project research.

Commands:
    analyze [PATH]                  Show the derived project profile
    research [PATH]                 Find similar projects and store them
    find QUERY [PATH]               Search stored references
    cleanup [PATH] --days N         Drop references older than N days
    update-stack [PATH] TECH...     Replace the stored tech stack
    compare URL [PATH]              Compare a stored reference with the project

Usage:
    project-researcher research . --provider github
    project-researcher find react --min-score 70
"""

import argparse
import asyncio
import json
import logging
import sys

from project_researcher.config import settings
from project_researcher.errors import ResearcherError
from project_researcher.logging_config import setup_logging
from project_researcher.projects.profile import analyze_project
from project_researcher.references.store import ReferenceStore
from project_researcher.research.providers import FixtureSearchProvider, GitHubSearchProvider, SearchProvider
from project_researcher.service import compare_reference, research_project

logger = logging.getLogger(__name__)


def _provider(name: str) -> SearchProvider:
    if name == "github":
        return GitHubSearchProvider.from_settings()
    return FixtureSearchProvider()


def _store(path: str) -> ReferenceStore:
    return ReferenceStore(path, settings.references_path)


async def cmd_analyze(args: argparse.Namespace) -> int:
    """Print the project profile."""
    result = await analyze_project(args.path)
    if not result.success:
        logger.error(f"Analysis failed: {result.error}")
        return 1

    print(json.dumps(result.data.to_dict(), indent=2))
    return 0


async def cmd_research(args: argparse.Namespace) -> int:
    """Run a research pass and store the results."""
    result = await research_project(
        args.path,
        provider=_provider(args.provider),
        tech_stack=args.tech or None,
        features=args.feature or None,
        domain=args.domain,
    )
    if not result.success:
        logger.error(f"Research failed: {result.error}")
        return 1

    report = result.data
    print(f"Query: {report.query}")
    print("-" * 60)
    for ref in report.references:
        print(f"  {ref.relevance_score:5.0f}  {ref.name:30} {ref.url}")
    print("-" * 60)
    print(f"  {len(report.references)} found, {report.stored_count} stored")
    return 0


async def cmd_find(args: argparse.Namespace) -> int:
    """Search stored references."""
    result = await _store(args.path).search(
        query=args.query,
        tech_stack=args.tech or None,
        features=args.feature or None,
        domain=args.domain,
        min_relevance_score=args.min_score,
    )
    if not result.success:
        logger.error(f"Search failed: {result.error}")
        return 1

    if args.json:
        print(json.dumps([ref.to_dict() for ref in result.data], indent=2))
    else:
        for ref in result.data:
            print(f"  {ref.relevance_score:5.0f}  {ref.name:30} {ref.url}")
        print(f"{len(result.data)} references")
    return 0


async def cmd_cleanup(args: argparse.Namespace) -> int:
    """Prune old references."""
    result = await _store(args.path).cleanup_references(max_age_days=args.days)
    if not result.success:
        logger.error(f"Cleanup failed: {result.error}")
        return 1

    print(f"Removed {result.data} references older than {args.days} days")
    return 0


async def cmd_update_stack(args: argparse.Namespace) -> int:
    """Replace the stored tech stack."""
    result = await _store(args.path).update_tech_stack(args.tech)
    if not result.success:
        logger.error(f"Update failed: {result.error}")
        return 1

    print(f"Tech stack set to: {', '.join(result.data.current_tech_stack)}")
    return 0


async def cmd_compare(args: argparse.Namespace) -> int:
    """Compare a stored reference with the current project."""
    try:
        comparison = (await compare_reference(args.path, args.url, store=_store(args.path))).unwrap()
    except ResearcherError as e:
        logger.error(f"Comparison failed: {e}")
        return 1

    print(comparison)
    return 0


COMMANDS = {
    "analyze": cmd_analyze,
    "research": cmd_research,
    "find": cmd_find,
    "cleanup": cmd_cleanup,
    "update-stack": cmd_update_stack,
    "compare": cmd_compare,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="project-researcher",
        description="Find and manage reference projects similar to yours",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Show the derived project profile")
    analyze_parser.add_argument("path", nargs="?", default=".")

    research_parser = subparsers.add_parser("research", help="Find similar projects and store them")
    research_parser.add_argument("path", nargs="?", default=".")
    research_parser.add_argument(
        "--provider",
        choices=["fixture", "github"],
        default="fixture",
        help="Candidate source (default: fixture)",
    )
    research_parser.add_argument("--tech", action="append", help="Override tech stack (repeatable)")
    research_parser.add_argument("--feature", action="append", help="Override features (repeatable)")
    research_parser.add_argument("--domain", help="Override domain")

    find_parser = subparsers.add_parser("find", help="Search stored references")
    find_parser.add_argument("query", help="Free-text query")
    find_parser.add_argument("path", nargs="?", default=".")
    find_parser.add_argument("--tech", action="append", help="Filter by tech (repeatable)")
    find_parser.add_argument("--feature", action="append", help="Filter by feature (repeatable)")
    find_parser.add_argument("--domain", help="Filter by domain")
    find_parser.add_argument("--min-score", type=float, help="Minimum relevance score")
    find_parser.add_argument("--json", action="store_true", help="Print references as JSON")

    cleanup_parser = subparsers.add_parser("cleanup", help="Drop references older than N days")
    cleanup_parser.add_argument("path", nargs="?", default=".")
    cleanup_parser.add_argument(
        "--days",
        type=int,
        default=settings.default_max_age_days,
        help="Maximum reference age in days",
    )

    stack_parser = subparsers.add_parser("update-stack", help="Replace the stored tech stack")
    stack_parser.add_argument("path")
    stack_parser.add_argument("tech", nargs="+")

    compare_parser = subparsers.add_parser("compare", help="Compare a stored reference with the project")
    compare_parser.add_argument("url", help="Url of a stored reference")
    compare_parser.add_argument("path", nargs="?", default=".")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(debug=args.debug or settings.debug, json_logs=args.json_logs or settings.json_logs)
    return asyncio.run(COMMANDS[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
