"""Document and asset data models"""

from __future__ import annotations

from pydantic import BaseModel

from .diff import DiffResult


class Document(BaseModel):
    """A document held in the comparison workspace"""

    id: str
    name: str
    content: str = ""


class DocumentCreateRequest(BaseModel):
    """Request to add a document"""

    content: str = ""
    name: str | None = None


class DocumentImportRequest(BaseModel):
    """Request to import a file's text as a document"""

    filename: str
    content: str


class DocumentUpdateRequest(BaseModel):
    """Request to update a document; only provided fields change"""

    content: str | None = None
    name: str | None = None


class DocumentListResponse(BaseModel):
    """Documents plus the current base"""

    docs: list[Document]
    baseDocId: str | None = None


class Comparison(BaseModel):
    """Diff of the base against one other document"""

    doc_id: str
    base_doc_id: str
    diff: DiffResult


class Asset(BaseModel):
    """A saved asset in the library"""

    id: str
    name: str
    content: str
    createdAt: int | None = None  # epoch milliseconds


class ComparisonsEvent(BaseModel):
    """Server-sent event payload with fresh comparisons"""

    baseDocId: str | None = None
    comparisons: list[Comparison] = []
