"""Unit tests for the path-addressed document store."""

from pathlib import Path

import pytest
import pytest_check as check

from src.store import DocumentNotFoundError, DocumentStore, collection_path, document_path


class TestPaths:
    """Tests for path validation helpers."""

    def test_document_path_requires_even_segments(self) -> None:
        """Document paths alternate collection and id segments."""
        assert document_path("users", "u1") == "users/u1"
        assert document_path("users", "u1", "sessions", "s1") == "users/u1/sessions/s1"

        with pytest.raises(ValueError):
            document_path("users")

    def test_collection_path_requires_odd_segments(self) -> None:
        assert collection_path("users", "u1", "sessions") == "users/u1/sessions"

        with pytest.raises(ValueError):
            collection_path("users", "u1")

    def test_empty_segment_rejected(self) -> None:
        """A path with an empty segment is invalid."""
        with pytest.raises(ValueError):
            document_path("users", "")


class TestDocumentStore:
    """Tests for DocumentStore reads and writes."""

    @pytest.fixture
    async def store(self, tmp_path: Path) -> DocumentStore:
        store = DocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'docs.db'}")
        await store.init_schema()
        yield store
        await store.close()

    async def test_get_missing_returns_none(self, store: DocumentStore) -> None:
        assert await store.get("users/nobody") is None

    async def test_set_then_get(self, store: DocumentStore) -> None:
        """A stored document is returned with its id and timestamps."""
        await store.set("users/u1", {"email": "a@b.c", "role": "student"})

        doc = await store.get("users/u1")

        assert doc is not None
        check.equal(doc.id, "u1")
        check.equal(doc["email"], "a@b.c")
        check.is_not_none(doc.created_at)
        check.is_not_none(doc.updated_at)

    async def test_set_replaces_and_merge_merges(self, store: DocumentStore) -> None:
        await store.set("users/u1", {"a": 1, "b": 2})
        await store.set("users/u1", {"a": 10})
        assert dict(await store.get("users/u1")) == {"a": 10}

        await store.set("users/u1", {"b": 3}, merge=True)
        assert dict(await store.get("users/u1")) == {"a": 10, "b": 3}

    async def test_overwrite_keeps_created_at(self, store: DocumentStore) -> None:
        first = await store.set("users/u1", {"v": 1})
        second = await store.set("users/u1", {"v": 2})

        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at

    async def test_update_merges_fields(self, store: DocumentStore) -> None:
        await store.set("users/u1", {"email": "a@b.c", "role": "student"})

        doc = await store.update("users/u1", {"role": "instructor"})

        assert dict(doc) == {"email": "a@b.c", "role": "instructor"}

    async def test_update_missing_raises(self, store: DocumentStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.update("users/ghost", {"role": "admin"})

    async def test_add_generates_id(self, store: DocumentStore) -> None:
        doc_id = await store.add("courses", {"title": "Algebra"})

        assert len(doc_id) == 20
        doc = await store.get(f"courses/{doc_id}")
        assert doc["title"] == "Algebra"

    async def test_delete(self, store: DocumentStore) -> None:
        await store.set("users/u1", {"v": 1})

        assert await store.delete("users/u1") is True
        assert await store.get("users/u1") is None
        assert await store.delete("users/u1") is False

    async def test_list_orders_by_creation(self, store: DocumentStore) -> None:
        """Listing returns direct children only, newest first by default."""
        await store.set("users/u1/sessions/a", {"n": 1})
        await store.set("users/u1/sessions/b", {"n": 2})
        await store.set("users/u1/sessions/c", {"n": 3})
        await store.set("users/u2/sessions/x", {"n": 9})
        # rewriting an old document does not move it
        await store.set("users/u1/sessions/a", {"n": 4})

        newest = await store.list("users/u1/sessions")
        oldest = await store.list("users/u1/sessions", newest_first=False)

        check.equal([d.id for d in newest], ["c", "b", "a"])
        check.equal([d.id for d in oldest], ["a", "b", "c"])

    async def test_list_rejects_document_path(self, store: DocumentStore) -> None:
        with pytest.raises(ValueError):
            await store.list("users/u1")

    async def test_json_round_trip_preserves_list_order(self, store: DocumentStore) -> None:
        messages = [{"role": "user", "text": str(i)} for i in range(25)]
        await store.set("users/u1/sessions/s1", {"messages": messages})

        doc = await store.get("users/u1/sessions/s1")

        assert doc["messages"] == messages
