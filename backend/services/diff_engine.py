"""
Diff Engine - Compute minimal edit scripts between two texts

Alignment uses Myers' greedy O(ND) shortest-edit-script algorithm, which
yields a longest common subsequence of the two token lists with the fewest
inserted plus deleted tokens.
"""

from __future__ import annotations

import logging
import re

from models.diff import EditOperation, EditScript, Granularity, OperationKind

logger = logging.getLogger(__name__)

# Lines keep their "\n" terminator; a trailing unterminated line is still a line
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")
# Words, single punctuation characters and whitespace runs
_WORD_RE = re.compile(r"\w+|[^\w\s]|\s+")


class DiffComputationError(Exception):
    """Raised when an edit script fails its round-trip check"""


def split_lines(text: str) -> list[str]:
    """Split text into line tokens, terminators included"""
    return _LINE_RE.findall(text)


def split_words(text: str) -> list[str]:
    """Split text into word, punctuation and whitespace tokens"""
    return _WORD_RE.findall(text)


def tokenize(text: str, granularity: Granularity) -> list[str]:
    if granularity == Granularity.WORD:
        return split_words(text)
    return split_lines(text)


def compute_diff(
    base: str,
    candidate: str,
    granularity: Granularity = Granularity.LINE,
) -> EditScript:
    """Compute the edit script turning base into candidate"""
    if not isinstance(base, str) or not isinstance(candidate, str):
        raise TypeError("compute_diff expects two strings")
    granularity = Granularity(granularity)

    old_tokens = tokenize(base, granularity)
    new_tokens = tokenize(candidate, granularity)

    if base == candidate:
        operations = []
        if old_tokens:
            operations.append(
                EditOperation(
                    kind=OperationKind.EQUAL,
                    old_start=0,
                    old_end=len(old_tokens),
                    new_start=0,
                    new_end=len(new_tokens),
                    old_tokens=old_tokens,
                    new_tokens=new_tokens,
                )
            )
        script = EditScript(granularity=granularity, operations=operations)
    else:
        script = EditScript(
            granularity=granularity,
            operations=_build_operations(_edit_steps(old_tokens, new_tokens), old_tokens, new_tokens),
        )

    _verify_round_trip(script, base, candidate)
    return script


def _edit_steps(a: list[str], b: list[str]) -> list[tuple[OperationKind, int, int]]:
    """Shortest edit path over the whole token lists.

    The common prefix and suffix are matched directly, and a middle section
    with one empty side is a plain run of insertions or deletions; only what
    remains goes through the Myers search.
    """
    n, m = len(a), len(b)
    prefix = 0
    while prefix < n and prefix < m and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while suffix < n - prefix and suffix < m - prefix and a[n - 1 - suffix] == b[m - 1 - suffix]:
        suffix += 1

    steps = [(OperationKind.EQUAL, i, i) for i in range(prefix)]
    old_middle = a[prefix : n - suffix]
    new_middle = b[prefix : m - suffix]

    if not old_middle:
        steps.extend((OperationKind.INSERT, prefix, prefix + j) for j in range(len(new_middle)))
    elif not new_middle:
        steps.extend((OperationKind.DELETE, prefix + i, prefix) for i in range(len(old_middle)))
    else:
        steps.extend(
            (kind, prefix + i, prefix + j) for kind, i, j in _shortest_edit(old_middle, new_middle)
        )

    steps.extend((OperationKind.EQUAL, n - suffix + t, m - suffix + t) for t in range(suffix))
    return steps


def _shortest_edit(a: list[str], b: list[str]) -> list[tuple[OperationKind, int, int]]:
    """Return (kind, old_index, new_index) steps of a shortest edit path"""
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    # trace[d] holds diagonals -d-1..d+1 as they were before round d
    trace: list[list[int]] = []

    for d in range(max_d + 1):
        trace.append(v[offset - d - 1 : offset + d + 2])
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            # Follow the diagonal as far as possible before branching
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)

    raise DiffComputationError("Edit path search did not terminate")


def _backtrack(trace: list[list[int]], n: int, m: int) -> list[tuple[OperationKind, int, int]]:
    x, y = n, m
    steps: list[tuple[OperationKind, int, int]] = []

    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        shift = d + 1
        k = x - y
        if k == -d or (k != d and v[k - 1 + shift] < v[k + 1 + shift]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[prev_k + shift]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            x -= 1
            y -= 1
            steps.append((OperationKind.EQUAL, x, y))

        if d > 0:
            if x == prev_x:
                steps.append((OperationKind.INSERT, prev_x, prev_y))
            else:
                steps.append((OperationKind.DELETE, prev_x, prev_y))
        x, y = prev_x, prev_y

    steps.reverse()
    return steps


def _build_operations(
    steps: list[tuple[OperationKind, int, int]],
    old_tokens: list[str],
    new_tokens: list[str],
) -> list[EditOperation]:
    """Coalesce single-token steps into runs, deletions before insertions"""
    operations: list[EditOperation] = []
    deleted: list[int] = []
    inserted: list[int] = []
    equal: list[tuple[int, int]] = []

    def flush_changes():
        if deleted:
            operations.append(
                EditOperation(
                    kind=OperationKind.DELETE,
                    old_start=deleted[0],
                    old_end=deleted[-1] + 1,
                    new_start=inserted[0] if inserted else _new_position(),
                    new_end=inserted[0] if inserted else _new_position(),
                    old_tokens=[old_tokens[i] for i in deleted],
                )
            )
        if inserted:
            old_position = deleted[-1] + 1 if deleted else _old_position()
            operations.append(
                EditOperation(
                    kind=OperationKind.INSERT,
                    old_start=old_position,
                    old_end=old_position,
                    new_start=inserted[0],
                    new_end=inserted[-1] + 1,
                    new_tokens=[new_tokens[j] for j in inserted],
                )
            )
        deleted.clear()
        inserted.clear()

    def flush_equal():
        if equal:
            operations.append(
                EditOperation(
                    kind=OperationKind.EQUAL,
                    old_start=equal[0][0],
                    old_end=equal[-1][0] + 1,
                    new_start=equal[0][1],
                    new_end=equal[-1][1] + 1,
                    old_tokens=[old_tokens[i] for i, _ in equal],
                    new_tokens=[new_tokens[j] for _, j in equal],
                )
            )
            equal.clear()

    def _old_position() -> int:
        return operations[-1].old_end if operations else 0

    def _new_position() -> int:
        return operations[-1].new_end if operations else 0

    for kind, i, j in steps:
        if kind == OperationKind.EQUAL:
            flush_changes()
            equal.append((i, j))
        else:
            flush_equal()
            if kind == OperationKind.DELETE:
                deleted.append(i)
            else:
                inserted.append(j)

    flush_changes()
    flush_equal()
    return operations


def _verify_round_trip(script: EditScript, base: str, candidate: str) -> None:
    if script.old_text() != base or script.new_text() != candidate:
        logger.error("[DiffEngine] Edit script failed round-trip check (%s)", script.granularity.value)
        raise DiffComputationError("Edit script does not reconstruct its inputs")
