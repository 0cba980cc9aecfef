"""Project-scoped reference store backed by a JSON document.

One document per project holds the project's references, its last known
tech stack and the time of the last write. Every mutation rewrites the
whole document.

The load-then-save sequence used by add, update and cleanup is not
isolated across processes: two writers racing on the same document lose
one of the updates (last writer wins).
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from project_researcher.errors import ReferenceManagerError, Result
from project_researcher.references.models import (
    Reference,
    ReferencesData,
    parse_timestamp,
    utc_now,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

DEFAULT_REFERENCES_PATH = ".opencode/references.json"
DEFAULT_MAX_AGE_DAYS = 90


def _contains(value: str, needle: str) -> bool:
    return needle in value.lower()


def _matches_query(ref: Reference, query: str) -> bool:
    return (
        _contains(ref.name, query)
        or _contains(ref.description, query)
        or any(_contains(tech, query) for tech in ref.tech_stack)
        or any(_contains(feature, query) for feature in ref.features)
        or _contains(ref.domain, query)
    )


def _matches_any(values: list[str], targets: list[str]) -> bool:
    lowered = [t.lower() for t in targets]
    return any(any(target in value.lower() for value in values) for target in lowered)


def _cutoff(now: datetime, max_age_days: int) -> datetime:
    """``now - max_age_days``, clamped to the representable range."""
    try:
        return now - timedelta(days=max_age_days)
    except OverflowError:
        bound = datetime.min if max_age_days > 0 else datetime.max
        return bound.replace(tzinfo=timezone.utc)


class ReferenceStore:
    """Reference storage for a single project directory."""

    def __init__(self, project_path: str | Path, references_path: str | Path = DEFAULT_REFERENCES_PATH) -> None:
        self.project_path = Path(project_path)
        self.references_path = Path(references_path)

    @property
    def file_path(self) -> Path:
        """Absolute location of the backing document."""
        return self.project_path / self.references_path

    # -------------------------------------------------------------------------
    # File access
    # -------------------------------------------------------------------------

    def _read(self) -> ReferencesData | None:
        """Read the document; None when it is missing or not a JSON object.

        Individual references that fail validation are skipped; the rest
        of the document is kept.
        """
        try:
            raw = self.file_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.warning(f"Reference store {self.file_path} is not valid UTF-8, starting fresh: {e}")
            return None

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Reference store {self.file_path} is malformed, starting fresh: {e}")
            return None
        if not isinstance(document, dict):
            logger.warning(f"Reference store {self.file_path} is not a JSON object, starting fresh")
            return None

        entries = document.get("references")
        if not isinstance(entries, list):
            entries = []
        references = []
        for index, entry in enumerate(entries):
            try:
                references.append(Reference.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping invalid reference #{index} in {self.file_path}: {e.error_count()} errors")

        header = {key: document[key] for key in ("projectPath", "currentTechStack", "lastResearchDate") if key in document}
        header.setdefault("projectPath", str(self.project_path))
        try:
            data = ReferencesData.model_validate(header)
        except ValidationError as e:
            logger.warning(f"Reference store {self.file_path} has invalid metadata, using defaults: {e.error_count()} errors")
            data = ReferencesData(project_path=str(self.project_path))

        return data.model_copy(update={"references": references})

    def _write(self, data: ReferencesData) -> None:
        """Replace the document with ``data`` in one rename."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.file_path.parent,
            prefix=f".{self.file_path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data.to_dict(), f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _load_sync(self) -> ReferencesData:
        data = self._read()
        if data is not None:
            return data

        data = ReferencesData(project_path=str(self.project_path), last_research_date=utc_now_iso())
        self._write(data)
        logger.info(f"Created empty reference store at {self.file_path}", extra={"project_path": str(self.project_path)})
        return data

    def _save_sync(self, data: ReferencesData) -> ReferencesData:
        stamped = data.model_copy(update={"last_research_date": utc_now_iso()})
        self._write(stamped)
        return stamped

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def load(self) -> Result[ReferencesData]:
        """Load the stored references, creating an empty store if needed."""
        try:
            return Result.ok(await asyncio.to_thread(self._load_sync))
        except OSError as e:
            return Result.fail(ReferenceManagerError(f"Failed to load references from {self.file_path}: {e}", cause=e))

    async def save(self, data: ReferencesData) -> Result[ReferencesData]:
        """Stamp ``last_research_date`` and rewrite the whole document."""
        try:
            saved = await asyncio.to_thread(self._save_sync, data)
        except OSError as e:
            return Result.fail(ReferenceManagerError(f"Failed to save references to {self.file_path}: {e}", cause=e))

        logger.debug(
            f"Saved {len(saved.references)} references to {self.file_path}",
            extra={"project_path": str(self.project_path), "reference_count": len(saved.references)},
        )
        return Result.ok(saved)

    async def add_references(self, new_references: list[Reference]) -> Result[ReferencesData]:
        """Merge new references, skipping any whose url is already stored.

        Existing references keep their position; new ones are appended in
        input order. Stored entries are never modified.
        """
        loaded = await self.load()
        if not loaded.success:
            return loaded

        current = loaded.data
        seen = current.urls()
        unique_new = []
        for ref in new_references:
            if ref.url in seen:
                continue
            seen.add(ref.url)
            unique_new.append(ref)

        merged = current.model_copy(update={"references": [*current.references, *unique_new]})
        saved = await self.save(merged)
        if saved.success:
            logger.info(
                f"Added {len(unique_new)} of {len(new_references)} references "
                f"({len(new_references) - len(unique_new)} duplicates skipped)",
                extra={"project_path": str(self.project_path), "reference_count": len(saved.data.references)},
            )
        return saved

    async def search(
        self,
        query: str | None = None,
        tech_stack: list[str] | None = None,
        features: list[str] | None = None,
        domain: str | None = None,
        min_relevance_score: float | None = None,
    ) -> Result[list[Reference]]:
        """Filter stored references; every given criterion must hold.

        Results are sorted by relevance score, highest first, keeping the
        stored order for ties.
        """
        loaded = await self.load()
        if not loaded.success:
            return Result.fail(loaded.error)

        refs = list(loaded.data.references)

        if query:
            query_lower = query.lower()
            refs = [ref for ref in refs if _matches_query(ref, query_lower)]

        if tech_stack:
            refs = [ref for ref in refs if _matches_any(ref.tech_stack, tech_stack)]

        if features:
            refs = [ref for ref in refs if _matches_any(ref.features, features)]

        if domain:
            domain_lower = domain.lower()
            refs = [ref for ref in refs if _contains(ref.domain, domain_lower)]

        if min_relevance_score is not None:
            refs = [ref for ref in refs if ref.relevance_score >= min_relevance_score]

        refs.sort(key=lambda ref: ref.relevance_score, reverse=True)
        return Result.ok(refs)

    async def update_tech_stack(self, tech_stack: list[str]) -> Result[ReferencesData]:
        """Replace the stored current tech stack."""
        loaded = await self.load()
        if not loaded.success:
            return loaded

        return await self.save(loaded.data.model_copy(update={"current_tech_stack": list(tech_stack)}))

    async def cleanup_references(
        self,
        max_age_days: int = DEFAULT_MAX_AGE_DAYS,
        now: datetime | None = None,
    ) -> Result[int]:
        """Drop references last updated before ``now - max_age_days``.

        References whose timestamp cannot be parsed are always kept.
        Returns the number of references removed.
        """
        loaded = await self.load()
        if not loaded.success:
            return Result.fail(loaded.error)

        cutoff = _cutoff(now or utc_now(), max_age_days)
        kept = []
        for ref in loaded.data.references:
            updated = parse_timestamp(ref.last_updated)
            if updated is None or updated >= cutoff:
                kept.append(ref)

        removed = len(loaded.data.references) - len(kept)
        saved = await self.save(loaded.data.model_copy(update={"references": kept}))
        if not saved.success:
            return Result.fail(saved.error)

        logger.info(
            f"Removed {removed} references older than {max_age_days} days",
            extra={"project_path": str(self.project_path), "reference_count": len(kept)},
        )
        return Result.ok(removed)
