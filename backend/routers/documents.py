"""Document workspace API endpoints"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from models.diff import DiffResult, Granularity, RenderedLine, SplitView
from models.document import (
    Comparison,
    ComparisonsEvent,
    Document,
    DocumentCreateRequest,
    DocumentImportRequest,
    DocumentListResponse,
    DocumentUpdateRequest,
)
from routers.diff import diff_failed, resolve_diff_settings
from services.diff_engine import DiffComputationError
from services.diff_renderer import render_split, render_unified
from services.document_store import DocumentCollection, DocumentNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory document workspace (one per process)
collection = DocumentCollection()

EVENT_POLL_SECONDS = 15


def not_found(e: DocumentNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def list_response() -> DocumentListResponse:
    return DocumentListResponse(docs=collection.docs, baseDocId=collection.base_doc_id)


def build_event(store: DocumentCollection) -> ComparisonsEvent:
    granularity, context_lines = resolve_diff_settings(None, None)
    return ComparisonsEvent(
        baseDocId=store.base_doc_id,
        comparisons=store.comparisons(granularity, context_lines),
    )


@router.get("", response_model=DocumentListResponse)
async def list_documents() -> DocumentListResponse:
    """All documents and the current base"""
    return list_response()


@router.post("", response_model=Document)
async def add_document(request: DocumentCreateRequest) -> Document:
    """Add a document (empty unless content is given)"""
    return collection.add_doc(request.content, request.name)


@router.post("/import", response_model=Document)
async def import_document(request: DocumentImportRequest) -> Document:
    """Add a document from an imported file"""
    return collection.import_file(request.filename, request.content)


@router.get("/comparisons", response_model=list[Comparison])
async def list_comparisons(
    granularity: Granularity | None = None,
    context_lines: int | None = None,
) -> list[Comparison]:
    """Diff the base against every other document"""
    granularity, context_lines = resolve_diff_settings(granularity, context_lines)
    try:
        return collection.comparisons(granularity, context_lines)
    except DiffComputationError as e:
        raise diff_failed(e)


@router.get("/events")
async def document_events(request: Request):
    """Stream fresh comparisons whenever the workspace changes (SSE)"""
    store = collection
    changes: asyncio.Queue[int] = asyncio.Queue()
    unsubscribe = store.subscribe(lambda _: changes.put_nowait(1))

    async def event_generator():
        try:
            yield {"event": "comparisons", "data": build_event(store).model_dump_json()}
            while True:
                if await request.is_disconnected():
                    break
                try:
                    await asyncio.wait_for(changes.get(), timeout=EVENT_POLL_SECONDS)
                except asyncio.TimeoutError:
                    continue

                # Several quick edits collapse into one recomputation
                while not changes.empty():
                    changes.get_nowait()

                try:
                    event = build_event(store)
                except DiffComputationError as e:
                    logger.error("[Documents] Comparison failed: %s", e)
                    yield {"event": "error", "data": str(e)}
                    continue
                yield {"event": "comparisons", "data": event.model_dump_json()}
        finally:
            unsubscribe()

    return EventSourceResponse(event_generator())


@router.get("/{doc_id}", response_model=Document)
async def get_document(doc_id: str) -> Document:
    try:
        return collection.get_doc(doc_id)
    except DocumentNotFoundError as e:
        raise not_found(e)


@router.put("/{doc_id}", response_model=Document)
async def update_document(doc_id: str, request: DocumentUpdateRequest) -> Document:
    """Update content and/or name"""
    try:
        doc = collection.get_doc(doc_id)
        if request.content is not None:
            doc = collection.update_doc(doc_id, request.content)
        if request.name is not None:
            doc = collection.update_name(doc_id, request.name)
        return doc
    except DocumentNotFoundError as e:
        raise not_found(e)


@router.delete("/{doc_id}", response_model=DocumentListResponse)
async def remove_document(doc_id: str) -> DocumentListResponse:
    try:
        collection.remove_doc(doc_id)
    except DocumentNotFoundError as e:
        raise not_found(e)
    return list_response()


@router.post("/{doc_id}/base", response_model=DocumentListResponse)
async def set_base_document(doc_id: str) -> DocumentListResponse:
    """Designate a document as the base"""
    try:
        collection.set_base_doc(doc_id)
    except DocumentNotFoundError as e:
        raise not_found(e)
    return list_response()


@router.get("/{doc_id}/diff", response_model=DiffResult)
async def get_document_diff(
    doc_id: str,
    granularity: Granularity | None = None,
    context_lines: int | None = None,
) -> DiffResult:
    """Structured diff of the base against one document"""
    granularity, context_lines = resolve_diff_settings(granularity, context_lines)
    try:
        return collection.compare(doc_id, granularity, context_lines)
    except DocumentNotFoundError as e:
        raise not_found(e)
    except DiffComputationError as e:
        raise diff_failed(e)


@router.get("/{doc_id}/diff/unified", response_model=list[RenderedLine])
async def get_document_unified_view(
    doc_id: str,
    context_lines: int | None = None,
    highlight_words: bool = False,
) -> list[RenderedLine]:
    _, context_lines = resolve_diff_settings(None, context_lines)
    try:
        result = collection.compare(doc_id, Granularity.LINE, context_lines)
    except DocumentNotFoundError as e:
        raise not_found(e)
    except DiffComputationError as e:
        raise diff_failed(e)
    return render_unified(result.unified_diff, highlight_words=highlight_words)


@router.get("/{doc_id}/diff/split", response_model=SplitView)
async def get_document_split_view(
    doc_id: str,
    granularity: Granularity | None = None,
    highlight_words: bool = False,
) -> SplitView:
    granularity, _ = resolve_diff_settings(granularity, None)
    try:
        result = collection.compare(doc_id, granularity)
        return render_split(result.script, highlight_words=highlight_words)
    except DocumentNotFoundError as e:
        raise not_found(e)
    except DiffComputationError as e:
        raise diff_failed(e)
