"""
Diff Renderer - Turn patches and edit scripts into display-ready lines

Unified mode classifies the physical lines of a unified diff; split mode
aligns an edit script into two equal-length columns. Word highlighting is an
extra annotation layer and never changes a line's kind.
"""

from __future__ import annotations

import re

from models.diff import (
    EditScript,
    Granularity,
    LineKind,
    OperationKind,
    RenderedLine,
    Segment,
    SplitView,
)
from services.diff_engine import compute_diff

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def _strip_terminator(token: str) -> str:
    return token[:-1] if token.endswith("\n") else token


def word_segments(old_line: str, new_line: str) -> tuple[list[Segment], list[Segment]]:
    """Word-level segments for a removed/added line pair.

    The old side gets equal/removed segments, the new side equal/added ones.
    """
    script = compute_diff(old_line, new_line, Granularity.WORD)
    old_segments: list[Segment] = []
    new_segments: list[Segment] = []

    for op in script.operations:
        if op.kind == OperationKind.EQUAL:
            old_segments.append(Segment(kind=LineKind.EQUAL, text=op.old_text))
            new_segments.append(Segment(kind=LineKind.EQUAL, text=op.new_text))
        elif op.kind == OperationKind.DELETE:
            old_segments.append(Segment(kind=LineKind.REMOVED, text=op.old_text))
        else:
            new_segments.append(Segment(kind=LineKind.ADDED, text=op.new_text))

    return old_segments, new_segments


def _annotate_pair(removed: RenderedLine, added: RenderedLine) -> None:
    removed.segments, added.segments = word_segments(removed.text, added.text)


def _annotate_unified_runs(lines: list[RenderedLine]) -> None:
    """Pair each run of removed lines with the added run right after it"""
    i = 0
    while i < len(lines):
        if lines[i].kind != LineKind.REMOVED:
            i += 1
            continue
        removed_start = i
        while i < len(lines) and lines[i].kind == LineKind.REMOVED:
            i += 1
        added_start = i
        while i < len(lines) and lines[i].kind == LineKind.ADDED:
            i += 1
        removed = lines[removed_start:added_start]
        added = lines[added_start:i]
        for old_line, new_line in zip(removed, added):
            _annotate_pair(old_line, new_line)


def render_unified(patch_text: str, highlight_words: bool = False) -> list[RenderedLine]:
    """Classify each physical line of a unified diff.

    Classification depends only on a line's position in the patch: header
    lines are recognised before the first hunk and between hunks, while
    hunk body lines are consumed according to the counts in their hunk
    header, so document text starting with "+++", "---" or "@@" is never
    mistaken for a header.
    """
    physical = patch_text.split("\n")
    if physical and physical[-1] == "":
        physical.pop()

    rendered: list[RenderedLine] = []
    old_left = new_left = 0
    old_no = new_no = 0

    for line in physical:
        if old_left > 0 or new_left > 0:
            prefix, body = line[:1], line[1:]
            if prefix == " " or line == "":
                rendered.append(
                    RenderedLine(line_number_old=old_no, line_number_new=new_no, kind=LineKind.EQUAL, text=body)
                )
                old_no += 1
                new_no += 1
                old_left -= 1
                new_left -= 1
                continue
            if prefix == "-":
                rendered.append(RenderedLine(line_number_old=old_no, kind=LineKind.REMOVED, text=body))
                old_no += 1
                old_left -= 1
                continue
            if prefix == "+":
                rendered.append(RenderedLine(line_number_new=new_no, kind=LineKind.ADDED, text=body))
                new_no += 1
                new_left -= 1
                continue
            if prefix == "\\":
                rendered.append(RenderedLine(kind=LineKind.HEADER, text=line))
                continue
            # Truncated hunk; fall back to header-level parsing
            old_left = new_left = 0

        match = _HUNK_HEADER_RE.match(line)
        if match:
            old_start, old_count, new_start, new_count = match.groups()
            old_left = int(old_count) if old_count is not None else 1
            new_left = int(new_count) if new_count is not None else 1
            old_no = int(old_start) if old_left else int(old_start) + 1
            new_no = int(new_start) if new_left else int(new_start) + 1
            rendered.append(RenderedLine(kind=LineKind.HEADER, text=line))
        elif line.startswith(("---", "+++", "@@", "\\")):
            rendered.append(RenderedLine(kind=LineKind.HEADER, text=line))
        elif line.startswith("+"):
            rendered.append(RenderedLine(kind=LineKind.ADDED, text=line[1:]))
        elif line.startswith("-"):
            rendered.append(RenderedLine(kind=LineKind.REMOVED, text=line[1:]))
        else:
            rendered.append(RenderedLine(kind=LineKind.EQUAL, text=line))

    if highlight_words:
        _annotate_unified_runs(rendered)
    return rendered


def _placeholder() -> RenderedLine:
    return RenderedLine(kind=LineKind.EMPTY)


def render_split(script: EditScript, highlight_words: bool = False) -> SplitView:
    """Align an edit script into old/new columns of equal length.

    Word-granularity scripts are re-aligned by lines and rendered with word
    highlighting, so paired rows carry the changed words as segments.
    """
    if script.granularity == Granularity.WORD:
        script = compute_diff(script.old_text(), script.new_text(), Granularity.LINE)
        highlight_words = True

    view = SplitView()
    operations = script.operations
    i = 0

    while i < len(operations):
        op = operations[i]

        if op.kind == OperationKind.EQUAL:
            for offset, token in enumerate(op.old_tokens):
                old_no = op.old_start + offset + 1
                new_no = op.new_start + offset + 1
                text = _strip_terminator(token)
                view.old.append(
                    RenderedLine(line_number_old=old_no, line_number_new=new_no, kind=LineKind.EQUAL, text=text)
                )
                view.new.append(
                    RenderedLine(line_number_old=old_no, line_number_new=new_no, kind=LineKind.EQUAL, text=text)
                )
            i += 1
            continue

        removed: list[RenderedLine] = []
        added: list[RenderedLine] = []
        if op.kind == OperationKind.DELETE:
            removed = [
                RenderedLine(line_number_old=op.old_start + n + 1, kind=LineKind.REMOVED, text=_strip_terminator(t))
                for n, t in enumerate(op.old_tokens)
            ]
            i += 1
            # A deletion followed by an insertion is a replacement
            if highlight_words and i < len(operations) and operations[i].kind == OperationKind.INSERT:
                op = operations[i]
                i += 1
            else:
                op = None
        else:
            i += 1

        if op is not None and op.kind == OperationKind.INSERT:
            added = [
                RenderedLine(line_number_new=op.new_start + n + 1, kind=LineKind.ADDED, text=_strip_terminator(t))
                for n, t in enumerate(op.new_tokens)
            ]

        if highlight_words:
            for old_line, new_line in zip(removed, added):
                _annotate_pair(old_line, new_line)

        if removed and added:
            rows = max(len(removed), len(added))
            view.old.extend(removed + [_placeholder() for _ in range(rows - len(removed))])
            view.new.extend(added + [_placeholder() for _ in range(rows - len(added))])
        else:
            view.old.extend(removed)
            view.new.extend(_placeholder() for _ in removed)
            view.old.extend(_placeholder() for _ in added)
            view.new.extend(added)

    return view
