"""Tests for InMemoryArtifactStore."""

import pytest

from changeguard.domain.exceptions import ArtifactExistsError


class TestInMemoryArtifactStore:
    """Tests for in-memory artifact storage."""

    def test_store_and_retrieve(self, memory_store):
        """Store and retrieve a document."""
        key = memory_store.store_document("req-1/analysis.json", {"complexity": "simple"})

        assert key == "req-1/analysis.json"
        assert memory_store.get_document(key) == {"complexity": "simple"}

    def test_stored_documents_are_copies(self, memory_store):
        """Mutating the caller's dict does not change the stored document."""
        document = {"files": ["a"]}
        memory_store.store_document("req-1/a.json", document)

        document["files"].append("b")

        assert memory_store.get_document("req-1/a.json") == {"files": ["a"]}

    def test_get_nonexistent(self, memory_store):
        """Getting an unknown key raises KeyError."""
        with pytest.raises(KeyError, match="not found"):
            memory_store.get_document("missing")

    def test_text_and_document_share_one_key_space(self, memory_store):
        """A key used for text cannot be reused for a document."""
        memory_store.store_text("req-1/doc", "# Doc")

        with pytest.raises(ArtifactExistsError):
            memory_store.store_document("req-1/doc", {})

    def test_keys_preserve_write_order(self, memory_store):
        """keys() lists keys in write order, filtered by prefix."""
        memory_store.store_text("b", "")
        memory_store.store_text("a", "")
        memory_store.store_text("c/x", "")

        assert memory_store.keys() == ["b", "a", "c/x"]
        assert memory_store.keys("c/") == ["c/x"]
