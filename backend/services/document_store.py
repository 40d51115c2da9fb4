"""
Document Store - The set of documents being compared against a base
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Callable

from models.diff import DiffResult, Granularity
from models.document import Comparison, Document
from services.diff_generator import DiffGenerator

logger = logging.getLogger(__name__)

Listener = Callable[["DocumentCollection"], None]

_MARKDOWN_SUFFIX_RE = re.compile(r"\.md$")


class DocumentNotFoundError(KeyError):
    """Raised for an unknown document id"""

    def __init__(self, doc_id: str):
        super().__init__(doc_id)
        self.doc_id = doc_id

    def __str__(self) -> str:
        return f"Document not found: {self.doc_id}"


def default_documents() -> list[Document]:
    return [
        Document(id="1", name="Document A (Base)", content="# Hello World\n\nThis is the base document."),
        Document(
            id="2",
            name="Document B",
            content="# Hello World\n\nThis is the comparison document.\n\nIt has some changes.",
        ),
    ]


class DocumentCollection:
    """Documents plus the id of the base every other document is diffed against.

    Listeners registered with ``subscribe`` are called after each mutation so
    derived views can be recomputed.
    """

    def __init__(
        self,
        docs: list[Document] | None = None,
        base_doc_id: str | None = None,
        diff_generator: DiffGenerator | None = None,
    ):
        if docs is None:
            docs = default_documents()
            if base_doc_id is None:
                base_doc_id = docs[0].id
        self.docs: list[Document] = list(docs)
        self.base_doc_id = base_doc_id
        self.diff_generator = diff_generator or DiffGenerator()
        self._listeners: list[Listener] = []

    # ========== Observers ==========

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.warning("[DocumentStore] Listener failed: %s", e)

    # ========== Queries ==========

    def get_doc(self, doc_id: str) -> Document:
        for doc in self.docs:
            if doc.id == doc_id:
                return doc
        raise DocumentNotFoundError(doc_id)

    def base_doc(self) -> Document | None:
        if self.base_doc_id is None:
            return None
        for doc in self.docs:
            if doc.id == self.base_doc_id:
                return doc
        return None

    # ========== Mutations ==========

    def add_doc(self, content: str = "", name: str | None = None) -> Document:
        doc = Document(
            id=str(uuid.uuid4()),
            name=name or f"Document {len(self.docs) + 1}",
            content=content,
        )
        self.docs.append(doc)
        logger.info("[DocumentStore] Added document %s", doc.id)
        self._notify()
        return doc

    def import_file(self, filename: str, content: str) -> Document:
        """Add a document named after an imported file"""
        return self.add_doc(content, _MARKDOWN_SUFFIX_RE.sub("", filename))

    def remove_doc(self, doc_id: str) -> None:
        doc = self.get_doc(doc_id)
        self.docs = [d for d in self.docs if d.id != doc.id]

        # Removing the base promotes the first remaining document
        if self.base_doc_id == doc_id:
            self.base_doc_id = self.docs[0].id if self.docs else None
        logger.info("[DocumentStore] Removed document %s", doc_id)
        self._notify()

    def update_doc(self, doc_id: str, content: str) -> Document:
        doc = self._replace(doc_id, content=content)
        self._notify()
        return doc

    def update_name(self, doc_id: str, name: str) -> Document:
        doc = self._replace(doc_id, name=name)
        self._notify()
        return doc

    def set_base_doc(self, doc_id: str) -> None:
        self.get_doc(doc_id)
        self.base_doc_id = doc_id
        logger.info("[DocumentStore] Base document set to %s", doc_id)
        self._notify()

    def _replace(self, doc_id: str, **changes) -> Document:
        for index, doc in enumerate(self.docs):
            if doc.id == doc_id:
                updated = doc.model_copy(update=changes)
                self.docs[index] = updated
                return updated
        raise DocumentNotFoundError(doc_id)

    # ========== Comparisons ==========

    def compare(
        self,
        doc_id: str,
        granularity: Granularity = Granularity.LINE,
        context_lines: int | None = None,
    ) -> DiffResult:
        """Diff the base document against one document"""
        doc = self.get_doc(doc_id)
        base = self.base_doc()
        base_content = base.content if base else ""
        return self.diff_generator.generate_diff(
            base_content,
            doc.content,
            name=doc.name,
            granularity=granularity,
            context_lines=context_lines,
        )

    def comparisons(
        self,
        granularity: Granularity = Granularity.LINE,
        context_lines: int | None = None,
    ) -> list[Comparison]:
        """Diff the base against every other document"""
        base = self.base_doc()
        if base is None:
            return []
        return [
            Comparison(
                doc_id=doc.id,
                base_doc_id=base.id,
                diff=self.compare(doc.id, granularity, context_lines),
            )
            for doc in self.docs
            if doc.id != base.id
        ]
