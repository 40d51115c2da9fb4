"""Unit tests for the document collection."""

import pytest

from models.diff import Granularity
from models.document import Document
from services.document_store import DocumentCollection, DocumentNotFoundError


@pytest.fixture
def store():
    return DocumentCollection()


class TestDocumentCollection:
    """Tests for collection bookkeeping."""

    def test_seeded_documents(self, store):
        assert [doc.id for doc in store.docs] == ["1", "2"]
        assert store.base_doc_id == "1"
        assert store.base_doc().name == "Document A (Base)"

    def test_add_doc_defaults(self, store):
        doc = store.add_doc()
        assert doc.name == "Document 3"
        assert doc.content == ""
        assert store.docs[-1] == doc

    def test_add_doc_with_content(self, store):
        doc = store.add_doc("hello", "Greeting")
        assert store.get_doc(doc.id).content == "hello"
        assert doc.name == "Greeting"

    def test_import_strips_markdown_suffix(self, store):
        assert store.import_file("notes.md", "x").name == "notes"
        assert store.import_file("notes.txt", "x").name == "notes.txt"

    def test_remove_base_promotes_first_document(self, store):
        store.remove_doc("1")
        assert store.base_doc_id == "2"

    def test_remove_last_document_clears_base(self, store):
        store.remove_doc("1")
        store.remove_doc("2")
        assert store.docs == []
        assert store.base_doc_id is None
        assert store.base_doc() is None

    def test_remove_other_document_keeps_base(self, store):
        store.remove_doc("2")
        assert store.base_doc_id == "1"

    def test_unknown_document(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.remove_doc("missing")
        with pytest.raises(DocumentNotFoundError):
            store.update_doc("missing", "text")
        with pytest.raises(DocumentNotFoundError):
            store.set_base_doc("missing")

    def test_update_content_and_name(self, store):
        store.update_doc("2", "new content")
        store.update_name("2", "Renamed")
        doc = store.get_doc("2")
        assert (doc.name, doc.content) == ("Renamed", "new content")

    def test_set_base(self, store):
        store.set_base_doc("2")
        assert store.base_doc().id == "2"


class TestComparisons:
    """Tests for diffs against the base."""

    def test_compare_against_base(self, store):
        result = store.compare("2")
        assert result.name == "Document B"
        assert result.unified_diff.startswith("--- Base\tBase Version\n+++ Document B\tCurrent Version\n")
        assert result.stats.additions == 3
        assert result.stats.deletions == 1

    def test_compare_base_with_itself(self, store):
        result = store.compare("1")
        assert result.unified_diff == ""
        assert result.script.is_identical

    def test_comparisons_skip_base(self, store):
        store.add_doc("extra")
        comparisons = store.comparisons()
        assert [c.doc_id for c in comparisons][0] == "2"
        assert len(comparisons) == 2
        assert all(c.base_doc_id == "1" for c in comparisons)

    def test_comparisons_follow_base_change(self, store):
        store.set_base_doc("2")
        assert [c.doc_id for c in store.comparisons()] == ["1"]

    def test_comparisons_word_granularity(self, store):
        comparisons = store.comparisons(Granularity.WORD)
        assert comparisons[0].diff.script.granularity == Granularity.WORD

    def test_no_base_means_no_comparisons(self):
        store = DocumentCollection(docs=[Document(id="a", name="A", content="x")], base_doc_id=None)
        assert store.comparisons() == []

    def test_compare_without_base_diffs_against_empty(self):
        store = DocumentCollection(docs=[Document(id="a", name="A", content="x\n")], base_doc_id=None)
        result = store.compare("a")
        assert result.stats.additions == 1
        assert "@@ -0,0 +1,1 @@" in result.unified_diff


class TestSubscriptions:
    """Tests for change notification."""

    def test_listener_called_on_every_mutation(self, store):
        calls = []
        store.subscribe(lambda collection: calls.append(collection.base_doc_id))
        doc = store.add_doc()
        store.update_doc(doc.id, "text")
        store.update_name(doc.id, "name")
        store.set_base_doc(doc.id)
        store.remove_doc("1")
        assert calls == ["1", "1", "1", doc.id, doc.id]

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda collection: calls.append(1))
        store.add_doc()
        unsubscribe()
        store.add_doc()
        assert calls == [1]

    def test_failing_listener_does_not_block_others(self, store):
        calls = []

        def broken(collection):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(lambda collection: calls.append(1))
        store.add_doc()
        assert calls == [1]
