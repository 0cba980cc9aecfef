"""Manifest parsing for dependency extraction.

Detects the project's ecosystem from a fixed, ordered list of marker files
and extracts dependency names from the matching manifest:

- package.json (direct, dev and peer dependencies)
- requirements.txt (line-oriented requirement list)
- pyproject.toml ([project] and Poetry dependency tables)
- go.mod (require directives)
- Cargo.toml ([dependencies] section)
"""

import json
import logging
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from project_researcher.errors import ProjectAnalysisError

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE = "Unknown"

# First match wins
LANGUAGE_MARKERS: tuple[tuple[str, str], ...] = (
    ("package.json", "JavaScript/TypeScript"),
    ("requirements.txt", "Python"),
    ("pyproject.toml", "Python"),
    ("go.mod", "Go"),
    ("Cargo.toml", "Rust"),
    ("pom.xml", "Java"),
    ("build.gradle", "Java"),
    ("Gemfile", "Ruby"),
    ("composer.json", "PHP"),
    ("Cargo.lock", "Rust"),
    ("go.sum", "Go"),
)

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(lang for _, lang in LANGUAGE_MARKERS)

JS_FRAMEWORK_KEYWORDS = ("react", "vue", "angular", "svelte", "next", "express", "koa", "hapi")
PYTHON_FRAMEWORK_KEYWORDS = ("django", "flask", "fastapi", "pytest")

# Splits a requirement on the first version-constraint operator
_VERSION_OPERATOR = re.compile(r"[=<>!~]")
_CARGO_KEY = re.compile(r"^([\w-]+)\s*=")


@dataclass
class TechStackAnalysis:
    """Dependencies extracted from a project's manifest."""

    language: str
    dependencies: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    libraries: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "dependencies": self.dependencies,
            "frameworks": self.frameworks,
            "libraries": self.libraries,
        }


def detect_manifest(project_path: str | Path) -> tuple[str, str | None]:
    """Return ``(language, marker_file)`` for the first marker present."""
    root = Path(project_path)
    for marker, language in LANGUAGE_MARKERS:
        if (root / marker).exists():
            return language, marker
    return UNKNOWN_LANGUAGE, None


def detect_language(project_path: str | Path) -> str:
    """Detect the programming language from project marker files."""
    return detect_manifest(project_path)[0]


def _read_manifest(project_path: Path, filename: str) -> str:
    manifest = project_path / filename
    try:
        return manifest.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ProjectAnalysisError(f"Failed to read {filename}: {e}", cause=e) from e


def _classify(deps: list[str], keywords: tuple[str, ...]) -> list[str]:
    return [dep for dep in deps if any(kw in dep for kw in keywords)]


def _requirement_name(entry: str) -> str:
    name = _VERSION_OPERATOR.split(entry, maxsplit=1)[0]
    # Drop extras and environment markers: "uvicorn[standard] ; python_version"
    return name.split(";")[0].split("[")[0].strip()


def parse_package_json(project_path: str | Path) -> TechStackAnalysis:
    """Parse package.json for Node.js/TypeScript dependencies."""
    content = _read_manifest(Path(project_path), "package.json")
    try:
        package = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProjectAnalysisError(f"Failed to parse package.json: {e}", cause=e) from e

    if not isinstance(package, dict):
        raise ProjectAnalysisError("Failed to parse package.json: top level is not an object")

    merged: dict[str, Any] = {}
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        block = package.get(section) or {}
        if not isinstance(block, dict):
            raise ProjectAnalysisError(f"Failed to parse package.json: '{section}' is not an object")
        for name, version in block.items():
            merged.setdefault(name, version)

    deps = list(merged)
    frameworks = _classify(deps, JS_FRAMEWORK_KEYWORDS)
    libraries = [dep for dep in deps if dep not in frameworks and not dep.startswith("@types/")]

    return TechStackAnalysis(
        language="JavaScript/TypeScript",
        dependencies=deps,
        frameworks=frameworks,
        libraries=libraries,
    )


def parse_requirements_txt(project_path: str | Path) -> TechStackAnalysis:
    """Parse requirements.txt for Python dependencies."""
    content = _read_manifest(Path(project_path), "requirements.txt")

    deps = []
    for line in content.splitlines():
        entry = line.strip()
        if not entry or entry.startswith("#") or entry.startswith("-"):
            continue
        name = _requirement_name(entry)
        if name:
            deps.append(name)

    frameworks = _classify(deps, PYTHON_FRAMEWORK_KEYWORDS)
    return TechStackAnalysis(
        language="Python",
        dependencies=deps,
        frameworks=frameworks,
        libraries=[dep for dep in deps if dep not in frameworks],
    )


def parse_pyproject_toml(project_path: str | Path) -> TechStackAnalysis:
    """Parse pyproject.toml for PEP 621 and Poetry dependencies."""
    content = _read_manifest(Path(project_path), "pyproject.toml")
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ProjectAnalysisError(f"Failed to parse pyproject.toml: {e}", cause=e) from e

    deps: list[str] = []
    for entry in data.get("project", {}).get("dependencies", []):
        name = _requirement_name(str(entry))
        if name:
            deps.append(name)

    poetry_deps = data.get("tool", {}).get("poetry", {}).get("dependencies", {})
    for name in poetry_deps:
        if name.lower() != "python" and name not in deps:
            deps.append(name)

    frameworks = _classify(deps, PYTHON_FRAMEWORK_KEYWORDS)
    return TechStackAnalysis(
        language="Python",
        dependencies=deps,
        frameworks=frameworks,
        libraries=[dep for dep in deps if dep not in frameworks],
    )


def parse_go_mod(project_path: str | Path) -> TechStackAnalysis:
    """Parse go.mod require directives.

    Go modules have no framework/library distinction, so every
    dependency is reported as a library.
    """
    content = _read_manifest(Path(project_path), "go.mod")

    deps = []
    in_block = False
    for line in content.splitlines():
        stripped = line.split("//")[0].strip()
        if not stripped:
            continue
        if in_block:
            if stripped.startswith(")"):
                in_block = False
                continue
            deps.append(stripped.split()[0])
        elif stripped.startswith("require ("):
            in_block = True
        elif stripped.startswith("require "):
            parts = stripped.split()
            if len(parts) >= 2:
                deps.append(parts[1])

    return TechStackAnalysis(language="Go", dependencies=deps, frameworks=[], libraries=list(deps))


def parse_cargo_toml(project_path: str | Path) -> TechStackAnalysis:
    """Parse the [dependencies] section of Cargo.toml."""
    content = _read_manifest(Path(project_path), "Cargo.toml")

    deps = []
    in_deps = False
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("["):
            in_deps = stripped.startswith("[dependencies]")
            continue
        if in_deps and stripped and not stripped.startswith("#"):
            match = _CARGO_KEY.match(stripped)
            if match:
                deps.append(match.group(1))

    return TechStackAnalysis(language="Rust", dependencies=deps, frameworks=[], libraries=list(deps))


MANIFEST_PARSERS: dict[str, Callable[[str | Path], TechStackAnalysis]] = {
    "package.json": parse_package_json,
    "requirements.txt": parse_requirements_txt,
    "pyproject.toml": parse_pyproject_toml,
    "go.mod": parse_go_mod,
    "Cargo.toml": parse_cargo_toml,
}


def get_tech_stack_analysis(project_path: str | Path) -> TechStackAnalysis:
    """Detect the ecosystem once and run its manifest parser.

    Raises:
        ProjectAnalysisError: if the detected manifest cannot be read or parsed
    """
    language, marker = detect_manifest(project_path)
    parser = MANIFEST_PARSERS.get(marker) if marker else None
    if parser is None:
        logger.debug(f"No manifest parser for {marker or 'project'} ({language})")
        return TechStackAnalysis(language=language)

    analysis = parser(project_path)
    logger.debug(f"Parsed {marker}: {len(analysis.dependencies)} dependencies")
    return analysis
