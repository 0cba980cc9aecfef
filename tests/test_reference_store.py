"""Tests for the project reference store.

Tests:
- Load creates and persists an empty store
- Malformed documents fall back to an empty store; invalid records are skipped
- Add de-duplicates by url and keeps order
- Search filters are conjunctive and sorted by score
- Tech stack updates and age-based cleanup
"""

import json
from datetime import timedelta

import pytest
import pytest_asyncio

from project_researcher.errors import ReferenceManagerError
from project_researcher.references.models import parse_timestamp
from project_researcher.references.store import DEFAULT_REFERENCES_PATH, ReferenceStore


@pytest.fixture
def store(tmp_path) -> ReferenceStore:
    return ReferenceStore(tmp_path)


class TestLoadAndSave:
    """Tests for loading and saving the backing document."""

    @pytest.mark.asyncio
    async def test_load_creates_empty_store(self, tmp_path, store):
        result = await store.load()

        assert result.success
        assert result.data.references == []
        assert result.data.current_tech_stack == []
        assert result.data.project_path == str(tmp_path)
        assert parse_timestamp(result.data.last_research_date) is not None

        backing = tmp_path / DEFAULT_REFERENCES_PATH
        assert backing.exists()
        on_disk = json.loads(backing.read_text())
        assert on_disk["references"] == []
        assert on_disk["projectPath"] == str(tmp_path)

    @pytest.mark.asyncio
    async def test_malformed_document_treated_as_absent(self, tmp_path, store):
        backing = tmp_path / DEFAULT_REFERENCES_PATH
        backing.parent.mkdir(parents=True)
        backing.write_text("{ not json")

        result = await store.load()

        assert result.success
        assert result.data.references == []
        # Replaced with a valid empty document
        assert json.loads(backing.read_text())["references"] == []

    @pytest.mark.asyncio
    async def test_invalid_records_skipped_valid_ones_kept(self, tmp_path, store):
        backing = tmp_path / DEFAULT_REFERENCES_PATH
        backing.parent.mkdir(parents=True)
        valid = [{"url": f"https://github.com/org/p{i}", "relevanceScore": 10 * i} for i in range(5)]
        backing.write_text(json.dumps({
            "projectPath": str(tmp_path),
            "currentTechStack": ["react"],
            "references": [
                *valid[:2],
                {"url": "https://github.com/org/too-high", "relevanceScore": 120},
                {"url": "https://github.com/org/negative", "stars": -1},
                "not-an-object",
                *valid[2:],
            ],
            "lastResearchDate": "2025-01-01T00:00:00Z",
        }))

        result = await store.load()

        assert result.success
        assert [r.url for r in result.data.references] == [v["url"] for v in valid]
        assert result.data.current_tech_stack == ["react"]
        assert result.data.last_research_date == "2025-01-01T00:00:00Z"
        # Loading does not rewrite the document
        assert len(json.loads(backing.read_text())["references"]) == 8

    @pytest.mark.asyncio
    async def test_invalid_metadata_keeps_references(self, tmp_path, store):
        backing = tmp_path / DEFAULT_REFERENCES_PATH
        backing.parent.mkdir(parents=True)
        backing.write_text(json.dumps({
            "currentTechStack": "react",
            "references": [{"url": "https://github.com/a/a"}],
        }))

        result = await store.load()

        assert result.success
        assert result.data.project_path == str(tmp_path)
        assert result.data.current_tech_stack == []
        assert [r.url for r in result.data.references] == ["https://github.com/a/a"]

    @pytest.mark.asyncio
    async def test_non_object_document_treated_as_absent(self, tmp_path, store):
        backing = tmp_path / DEFAULT_REFERENCES_PATH
        backing.parent.mkdir(parents=True)
        backing.write_text("[1, 2, 3]")

        result = await store.load()

        assert result.success
        assert result.data.references == []
        assert json.loads(backing.read_text())["references"] == []

    @pytest.mark.asyncio
    async def test_unreadable_document_fails(self, tmp_path, store):
        (tmp_path / DEFAULT_REFERENCES_PATH).mkdir(parents=True)

        result = await store.load()

        assert not result.success
        assert isinstance(result.error, ReferenceManagerError)
        assert isinstance(result.error.cause, OSError)

    @pytest.mark.asyncio
    async def test_save_stamps_timestamp_and_uses_camel_case(self, tmp_path, store, make_reference):
        loaded = (await store.load()).data
        stale = loaded.model_copy(update={
            "last_research_date": "2000-01-01T00:00:00Z",
            "references": [make_reference("https://github.com/a/a", tech_stack=["react"], stars=5)],
        })

        result = await store.save(stale)

        assert result.success
        assert result.data.last_research_date != "2000-01-01T00:00:00Z"
        on_disk = json.loads((tmp_path / DEFAULT_REFERENCES_PATH).read_text())
        ref = on_disk["references"][0]
        assert ref["techStack"] == ["react"]
        assert ref["relevanceScore"] == 0
        assert ref["lastUpdated"] == "2025-05-25T00:00:00Z"
        assert "notes" not in ref
        assert on_disk["lastResearchDate"] == result.data.last_research_date

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_files(self, tmp_path, store):
        await store.load()
        await store.update_tech_stack(["go"])

        files = sorted(p.name for p in (tmp_path / ".opencode").iterdir())
        assert files == ["references.json"]

    @pytest.mark.asyncio
    async def test_custom_references_path(self, tmp_path):
        store = ReferenceStore(tmp_path, "data/refs.json")

        await store.load()

        assert (tmp_path / "data" / "refs.json").exists()


class TestAddReferences:
    """Tests for merge-add with url de-duplication."""

    @pytest.mark.asyncio
    async def test_skips_existing_urls(self, store, make_reference):
        await store.add_references([make_reference("https://github.com/a/a", description="original")])

        result = await store.add_references([
            make_reference("https://github.com/a/a", description="replacement"),
            make_reference("https://github.com/b/b"),
        ])

        assert result.success
        refs = result.data.references
        assert [r.url for r in refs] == ["https://github.com/a/a", "https://github.com/b/b"]
        # Existing entry is not overwritten
        assert refs[0].description == "original"

    @pytest.mark.asyncio
    async def test_adding_twice_is_idempotent(self, store, make_reference):
        batch = [make_reference(f"https://github.com/org/{name}") for name in ("x", "y", "z")]

        first = await store.add_references(batch)
        second = await store.add_references(batch)

        assert len(first.data.references) == 3
        assert len(second.data.references) == 3

    @pytest.mark.asyncio
    async def test_duplicates_within_batch(self, store, make_reference):
        result = await store.add_references([
            make_reference("https://github.com/a/a"),
            make_reference("https://github.com/a/a"),
        ])

        assert len(result.data.references) == 1

    @pytest.mark.asyncio
    async def test_persisted_across_instances(self, tmp_path, store, make_reference):
        await store.add_references([make_reference("https://github.com/a/a")])

        reloaded = await ReferenceStore(tmp_path).load()

        assert [r.url for r in reloaded.data.references] == ["https://github.com/a/a"]


class TestSearch:
    """Tests for conjunctive search filters."""

    @pytest_asyncio.fixture
    async def populated(self, store, make_reference):
        await store.add_references([
            make_reference(
                "https://github.com/vercel/next.js",
                name="next.js",
                description="React framework",
                tech_stack=["react", "typescript"],
                features=["routing", "ssr"],
                domain="framework",
                relevance_score=80,
            ),
            make_reference(
                "https://github.com/facebook/create-react-app",
                name="create-react-app",
                description="Project bootstrapper",
                tech_stack=["webpack"],
                features=["component-based"],
                domain="tool",
                relevance_score=40,
            ),
            make_reference(
                "https://github.com/pallets/flask",
                name="flask",
                description="Python microframework",
                tech_stack=["python"],
                features=["routing"],
                domain="framework",
                relevance_score=90,
            ),
            make_reference(
                "https://github.com/remix-run/remix",
                name="remix",
                description="Web framework",
                tech_stack=["React"],
                features=["routing"],
                domain="framework",
                relevance_score=80,
            ),
        ])
        return store

    @pytest.mark.asyncio
    async def test_no_criteria_sorted_by_score(self, populated):
        result = await populated.search()

        assert [r.name for r in result.data] == ["flask", "next.js", "remix", "create-react-app"]

    @pytest.mark.asyncio
    async def test_query_and_min_score_are_conjunctive(self, populated):
        result = await populated.search(query="react", min_relevance_score=70)

        names = [r.name for r in result.data]
        assert names == ["next.js", "remix"]
        for ref in result.data:
            assert ref.relevance_score >= 70

    @pytest.mark.asyncio
    async def test_query_matches_any_field(self, populated):
        assert [r.name for r in (await populated.search(query="BOOTSTRAP")).data] == ["create-react-app"]
        assert [r.name for r in (await populated.search(query="ssr")).data] == ["next.js"]
        assert [r.name for r in (await populated.search(query="tool")).data] == ["create-react-app"]

    @pytest.mark.asyncio
    async def test_tech_stack_filter(self, populated):
        result = await populated.search(tech_stack=["REACT", "rust"])
        assert [r.name for r in result.data] == ["next.js", "remix"]

    @pytest.mark.asyncio
    async def test_feature_and_domain_filters(self, populated):
        result = await populated.search(features=["rout"], domain="frame")
        assert [r.name for r in result.data] == ["flask", "next.js", "remix"]

    @pytest.mark.asyncio
    async def test_ties_keep_stored_order(self, populated):
        result = await populated.search(min_relevance_score=80)
        assert [r.name for r in result.data] == ["flask", "next.js", "remix"]

    @pytest.mark.asyncio
    async def test_no_matches(self, populated):
        result = await populated.search(query="haskell")
        assert result.success
        assert result.data == []


class TestMaintenance:
    """Tests for tech stack updates and cleanup."""

    @pytest.mark.asyncio
    async def test_update_tech_stack_replaces(self, store):
        await store.update_tech_stack(["react", "vite"])
        result = await store.update_tech_stack(["django"])

        assert result.success
        assert result.data.current_tech_stack == ["django"]
        assert (await store.load()).data.current_tech_stack == ["django"]

    @pytest.mark.asyncio
    async def test_cleanup_removes_old_keeps_recent_and_unparseable(self, store, make_reference, fixed_now):
        await store.add_references([
            make_reference("https://github.com/a/recent", last_updated=(fixed_now - timedelta(days=5)).isoformat()),
            make_reference("https://github.com/a/old", last_updated=(fixed_now - timedelta(days=200)).isoformat()),
            make_reference("https://github.com/a/odd", last_updated="not-a-date"),
        ])

        result = await store.cleanup_references(max_age_days=90, now=fixed_now)

        assert result.success
        assert result.data == 1
        urls = [r.url for r in (await store.load()).data.references]
        assert urls == ["https://github.com/a/recent", "https://github.com/a/odd"]

    @pytest.mark.asyncio
    async def test_unparseable_survives_short_max_age(self, store, make_reference):
        await store.add_references([make_reference("https://github.com/a/odd", last_updated="not-a-date")])

        result = await store.cleanup_references(max_age_days=1)

        assert result.success
        assert [r.url for r in (await store.load()).data.references] == ["https://github.com/a/odd"]

    @pytest.mark.asyncio
    async def test_cleanup_with_huge_age_keeps_everything(self, store, make_reference, fixed_now):
        await store.add_references([
            make_reference("https://github.com/a/ancient", last_updated="1990-01-01T00:00:00Z"),
            make_reference("https://github.com/a/recent", last_updated=fixed_now.isoformat()),
        ])

        result = await store.cleanup_references(max_age_days=10**6, now=fixed_now)

        assert result.success
        assert result.data == 0
        assert len((await store.load()).data.references) == 2

    @pytest.mark.asyncio
    async def test_cleanup_with_huge_negative_age_removes_dated(self, store, make_reference, fixed_now):
        await store.add_references([
            make_reference("https://github.com/a/recent", last_updated=fixed_now.isoformat()),
            make_reference("https://github.com/a/odd", last_updated="not-a-date"),
        ])

        result = await store.cleanup_references(max_age_days=-(10**7), now=fixed_now)

        assert result.success
        assert result.data == 1
        assert [r.url for r in (await store.load()).data.references] == ["https://github.com/a/odd"]

    @pytest.mark.asyncio
    async def test_cleanup_refreshes_research_date(self, tmp_path, store):
        backing = tmp_path / DEFAULT_REFERENCES_PATH
        backing.parent.mkdir(parents=True)
        backing.write_text(json.dumps({
            "projectPath": str(tmp_path),
            "currentTechStack": [],
            "references": [],
            "lastResearchDate": "2000-01-01T00:00:00Z",
        }))

        await store.cleanup_references()

        assert (await store.load()).data.last_research_date != "2000-01-01T00:00:00Z"
