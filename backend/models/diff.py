"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Granularity(str, Enum):
    """Token unit compared by the diff engine"""

    LINE = "line"
    WORD = "word"


class OperationKind(str, Enum):
    """Edit script operation tags"""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


class LineKind(str, Enum):
    """Classification of a rendered line"""

    EQUAL = "equal"
    ADDED = "added"
    REMOVED = "removed"
    HEADER = "header"
    EMPTY = "empty"  # split view placeholder


class EditOperation(BaseModel):
    """A single run of equal, inserted or deleted tokens"""

    kind: OperationKind
    old_start: int  # 0-indexed, half-open
    old_end: int
    new_start: int
    new_end: int
    old_tokens: list[str] = []
    new_tokens: list[str] = []

    @property
    def old_text(self) -> str:
        return "".join(self.old_tokens)

    @property
    def new_text(self) -> str:
        return "".join(self.new_tokens)


class EditScript(BaseModel):
    """Ordered operations transforming base into candidate"""

    granularity: Granularity = Granularity.LINE
    operations: list[EditOperation] = []

    def old_text(self) -> str:
        """Replay the old side of every operation"""
        return "".join(op.old_text for op in self.operations)

    def new_text(self) -> str:
        """Replay the new side of every operation"""
        return "".join(op.new_text for op in self.operations)

    @property
    def additions(self) -> int:
        return sum(len(op.new_tokens) for op in self.operations if op.kind == OperationKind.INSERT)

    @property
    def deletions(self) -> int:
        return sum(len(op.old_tokens) for op in self.operations if op.kind == OperationKind.DELETE)

    @property
    def unchanged(self) -> int:
        return sum(len(op.old_tokens) for op in self.operations if op.kind == OperationKind.EQUAL)

    @property
    def is_identical(self) -> bool:
        return all(op.kind == OperationKind.EQUAL for op in self.operations)


class Hunk(BaseModel):
    """A unified diff hunk"""

    old_start: int  # 1-indexed, 0 for an empty range at file start
    old_count: int
    new_start: int
    new_count: int
    lines: list[str] = []  # prefixed body lines, without terminators

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"


class Segment(BaseModel):
    """Word-level annotation inside a changed line"""

    kind: LineKind  # equal, added or removed
    text: str


class RenderedLine(BaseModel):
    """Display record shared by unified and split views"""

    line_number_old: int | None = None
    line_number_new: int | None = None
    kind: LineKind
    text: str = ""
    segments: list[Segment] | None = None


class SplitView(BaseModel):
    """Row-aligned old/new columns"""

    old: list[RenderedLine] = []
    new: list[RenderedLine] = []


class DiffStats(BaseModel):
    """Changed token counts"""

    additions: int = 0
    deletions: int = 0
    unchanged: int = 0


class DiffResult(BaseModel):
    """Complete diff result for one base/candidate pair"""

    name: str
    granularity: Granularity
    script: EditScript
    hunks: list[Hunk]
    unified_diff: str  # Standard unified diff format
    stats: DiffStats


class DiffRequest(BaseModel):
    """Request body for the diff endpoints"""

    base: str = ""
    candidate: str = ""
    name: str | None = None
    granularity: Granularity | None = None
    context_lines: int | None = None
    highlight_words: bool = False
