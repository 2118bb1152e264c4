"""
SalesTrack Backend — File Document Store Tests
================================================

What we test:
    ✅ Missing file → DocumentNotFoundError
    ✅ Create with expected_version=None, then update with the returned token
    ✅ Stale token or create-over-existing → VersionConflictError
    ✅ Paths cannot escape the store root
"""

import pytest

from salestrack.exceptions import DocumentNotFoundError, TransportError, VersionConflictError
from salestrack.services.file_store import FileDocumentStore


@pytest.fixture
def file_store(tmp_path):
    return FileDocumentStore(root=str(tmp_path))


class TestFileDocumentStore:

    @pytest.mark.asyncio
    async def test_fetch_missing_file(self, file_store):
        with pytest.raises(DocumentNotFoundError):
            await file_store.fetch("database.json")

    @pytest.mark.asyncio
    async def test_create_then_fetch(self, file_store, sample_document, tmp_path):
        version = await file_store.store("database.json", sample_document, None)

        stored = await file_store.fetch("database.json")
        assert stored.content == sample_document
        assert stored.version == version
        # Human-readable on disk
        assert "Lucía Pérez" in (tmp_path / "database.json").read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_update_with_current_version(self, file_store, sample_document):
        first = await file_store.store("database.json", sample_document, None)
        changed = {**sample_document, "sales": [{"id": "s_1"}]}

        second = await file_store.store("database.json", changed, first)

        assert second != first
        assert (await file_store.fetch("database.json")).content == changed

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, file_store, sample_document):
        first = await file_store.store("database.json", sample_document, None)
        await file_store.store("database.json", {**sample_document, "sales": [{"id": "s_1"}]}, first)

        with pytest.raises(VersionConflictError):
            await file_store.store("database.json", sample_document, first)

    @pytest.mark.asyncio
    async def test_create_over_existing_conflicts(self, file_store, sample_document):
        await file_store.store("database.json", sample_document, None)

        with pytest.raises(VersionConflictError):
            await file_store.store("database.json", sample_document, None)

    @pytest.mark.asyncio
    async def test_nested_path_is_created(self, file_store, sample_document):
        await file_store.store("data/shop/database.json", sample_document, None)
        assert (await file_store.fetch("data/shop/database.json")).content == sample_document

    @pytest.mark.asyncio
    async def test_path_escaping_root_is_rejected(self, file_store):
        with pytest.raises(TransportError):
            await file_store.fetch("../outside.json")

    @pytest.mark.asyncio
    async def test_sibling_directory_with_common_prefix_is_rejected(self, tmp_path, sample_document):
        store = FileDocumentStore(root=str(tmp_path / "data"))
        (tmp_path / "data2").mkdir()

        with pytest.raises(TransportError):
            await store.store("../data2/database.json", sample_document, None)
        assert not (tmp_path / "data2" / "database.json").exists()

    @pytest.mark.asyncio
    async def test_undecodable_file_is_transport_error(self, file_store, tmp_path):
        (tmp_path / "database.json").write_text("not json", encoding="utf-8")

        with pytest.raises(TransportError):
            await file_store.fetch("database.json")

    @pytest.mark.asyncio
    async def test_health_check(self, file_store):
        assert await file_store.health_check() is True
