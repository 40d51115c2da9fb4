"""
Diff Generator Service - Generate unified diffs between a base and a candidate
"""

from __future__ import annotations

from typing import NamedTuple

from models.diff import DiffResult, DiffStats, EditScript, Granularity, Hunk, OperationKind
from services.diff_engine import compute_diff

DEFAULT_CONTEXT_LINES = 3
NO_NEWLINE_MARKER = "\\ No newline at end of file"

BASE_LABEL = "Base"
BASE_HEADER = "Base Version"
CURRENT_LABEL = "Current"
CURRENT_HEADER = "Current Version"


class _PatchLine(NamedTuple):
    prefix: str
    token: str
    old_pos: int  # old lines preceding this one
    new_pos: int


def _flatten(script: EditScript) -> list[_PatchLine]:
    entries = []
    old_pos = new_pos = 0
    for op in script.operations:
        if op.kind == OperationKind.EQUAL:
            for token in op.old_tokens:
                entries.append(_PatchLine(" ", token, old_pos, new_pos))
                old_pos += 1
                new_pos += 1
        elif op.kind == OperationKind.DELETE:
            for token in op.old_tokens:
                entries.append(_PatchLine("-", token, old_pos, new_pos))
                old_pos += 1
        else:
            for token in op.new_tokens:
                entries.append(_PatchLine("+", token, old_pos, new_pos))
                new_pos += 1
    return entries


def _range_start(position: int, count: int) -> int:
    """1-indexed start; an empty range names the line it follows"""
    return position + 1 if count else position


def build_hunks(script: EditScript, context_lines: int = DEFAULT_CONTEXT_LINES) -> list[Hunk]:
    """Group a line-level edit script into unified diff hunks"""
    if context_lines < 0:
        raise ValueError("context_lines must be >= 0")
    if script.granularity != Granularity.LINE:
        raise ValueError("Hunks require a line-granularity edit script")

    entries = _flatten(script)
    changes = [i for i, entry in enumerate(entries) if entry.prefix != " "]
    if not changes:
        return []

    # Change regions separated by at most 2 * context equal lines share a hunk
    groups: list[list[int]] = [[changes[0], changes[0]]]
    for index in changes[1:]:
        if index - groups[-1][1] - 1 <= 2 * context_lines:
            groups[-1][1] = index
        else:
            groups.append([index, index])

    hunks = []
    for first, last in groups:
        start = max(0, first - context_lines)
        end = min(len(entries), last + context_lines + 1)
        window = entries[start:end]

        old_count = sum(1 for entry in window if entry.prefix != "+")
        new_count = sum(1 for entry in window if entry.prefix != "-")

        lines = []
        for entry in window:
            lines.append(entry.prefix + entry.token.rstrip("\n"))
            if not entry.token.endswith("\n"):
                lines.append(NO_NEWLINE_MARKER)

        hunks.append(
            Hunk(
                old_start=_range_start(window[0].old_pos, old_count),
                old_count=old_count,
                new_start=_range_start(window[0].new_pos, new_count),
                new_count=new_count,
                lines=lines,
            )
        )

    return hunks


def _file_header(marker: str, label: str, header: str | None) -> str:
    if header:
        return f"{marker} {label}\t{header}"
    return f"{marker} {label}"


def _format_patch(
    hunks: list[Hunk],
    old_label: str,
    new_label: str,
    old_header: str | None,
    new_header: str | None,
) -> str:
    if not hunks:
        return ""

    lines = [
        _file_header("---", old_label, old_header),
        _file_header("+++", new_label, new_header),
    ]
    for hunk in hunks:
        lines.append(hunk.header)
        lines.extend(hunk.lines)
    return "\n".join(lines) + "\n"


def format_unified_patch(
    base: str,
    candidate: str,
    old_label: str = BASE_LABEL,
    new_label: str = CURRENT_LABEL,
    old_header: str | None = None,
    new_header: str | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> str:
    """Format a unified diff of base against candidate.

    Returns an empty string when there is nothing to report, including when
    both texts are empty.
    """
    if base == candidate:
        return ""

    script = compute_diff(base, candidate, Granularity.LINE)
    return _format_patch(build_hunks(script, context_lines), old_label, new_label, old_header, new_header)


class DiffGenerator:
    """Generate structured diffs for a base/candidate pair"""

    def __init__(self, context_lines: int = DEFAULT_CONTEXT_LINES):
        self.context_lines = context_lines

    def generate_diff(
        self,
        base_content: str,
        candidate_content: str,
        name: str | None = None,
        granularity: Granularity = Granularity.LINE,
        context_lines: int | None = None,
    ) -> DiffResult:
        """Generate structured diff from base and candidate content"""
        granularity = Granularity(granularity)
        if context_lines is None:
            context_lines = self.context_lines

        line_script = compute_diff(base_content, candidate_content, Granularity.LINE)
        if granularity == Granularity.LINE:
            script = line_script
        else:
            script = compute_diff(base_content, candidate_content, granularity)

        hunks = build_hunks(line_script, context_lines)
        unified = _format_patch(
            hunks,
            BASE_LABEL,
            name or CURRENT_LABEL,
            BASE_HEADER,
            CURRENT_HEADER,
        )

        return DiffResult(
            name=name or CURRENT_LABEL,
            granularity=granularity,
            script=script,
            hunks=hunks,
            unified_diff=unified,
            stats=DiffStats(
                additions=script.additions,
                deletions=script.deletions,
                unchanged=script.unchanged,
            ),
        )
