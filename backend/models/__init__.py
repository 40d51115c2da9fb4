"""Models module - Pydantic data models"""

from .diff import (
    DiffRequest,
    DiffResult,
    DiffStats,
    EditOperation,
    EditScript,
    Granularity,
    Hunk,
    LineKind,
    OperationKind,
    RenderedLine,
    Segment,
    SplitView,
)
from .document import (
    Asset,
    Comparison,
    ComparisonsEvent,
    Document,
    DocumentCreateRequest,
    DocumentImportRequest,
    DocumentListResponse,
    DocumentUpdateRequest,
)

__all__ = [
    # Diff models
    "DiffRequest",
    "DiffResult",
    "DiffStats",
    "EditOperation",
    "EditScript",
    "Granularity",
    "Hunk",
    "LineKind",
    "OperationKind",
    "RenderedLine",
    "Segment",
    "SplitView",
    # Document models
    "Asset",
    "Comparison",
    "ComparisonsEvent",
    "Document",
    "DocumentCreateRequest",
    "DocumentImportRequest",
    "DocumentListResponse",
    "DocumentUpdateRequest",
]
