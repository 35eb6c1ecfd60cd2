"""Reposition model-reported thread locations onto exact diff coordinates.

Models report visually approximate line numbers, while PR comment APIs need an
exact line and character offset. When a thread carries a code snippet on its
start position, the snippet is searched for in the parsed diff and the closest
matching line (relative to the model's line) becomes the thread's location.
Threads without a snippet, or whose snippet is not found, are left as-is.
"""

from __future__ import annotations

import logging
import re

from prsieve_core.diff import DiffLine, LineType, parse_diff_lines
from prsieve_core.models import Position, ReviewThread, ThreadContext

logger = logging.getLogger(__name__)

_SNIPPET_LINE_SPLIT_RE = re.compile(r"[\r\n]+")


def fix_thread_positions(threads: list[ReviewThread], diff_text: str) -> list[ReviewThread]:
    """Correct every thread's left and right positions in place and return the same list."""
    if not threads:
        return threads
    diff_lines = parse_diff_lines(diff_text)
    for thread in threads:
        if thread.thread_context is None:
            continue
        _fix_side(thread.thread_context, diff_lines, right_side=True)
        _fix_side(thread.thread_context, diff_lines, right_side=False)
    return threads


def _fix_side(ctx: ThreadContext, diff_lines: list[DiffLine], right_side: bool) -> None:
    start_attr, end_attr = ("right_file_start", "right_file_end") if right_side else ("left_file_start", "left_file_end")
    start: Position | None = getattr(ctx, start_attr)
    if start is None or not isinstance(start.snippet, str):
        return

    end: Position | None = getattr(ctx, end_attr)
    original_end_line = end.line if end is not None else start.line

    # Blank segments (e.g. from a trailing newline) would match every diff line.
    snippet_lines = [part for part in _SNIPPET_LINE_SPLIT_RE.split(start.snippet) if part.strip()]
    if not snippet_lines:
        return
    first = snippet_lines[0]
    found = find_line_and_offset(diff_lines, first, start.line, right_side)
    if found is None:
        logger.debug("No diff line matches snippet %r in %s; keeping model position", first, ctx.file_path)
        return

    line, offset = found
    start.line = line
    start.offset = offset
    if end is None:
        end = Position(line=line, offset=offset)
        setattr(ctx, end_attr, end)
    end.line = line
    end.offset = offset + len(first)

    if len(snippet_lines) > 1:
        last = snippet_lines[-1]
        found_last = find_line_and_offset(diff_lines, last, original_end_line, right_side)
        if found_last is None:
            return
        end.line = found_last[0]
        end.offset = found_last[1] + len(last)


def find_line_and_offset(
    diff_lines: list[DiffLine],
    search_text: str,
    approximate_line: int,
    right_side: bool = True,
) -> tuple[int, int] | None:
    """Return ``(line, 1-based offset)`` of the closest diff line containing *search_text*.

    Candidates are unchanged lines plus the side's changed lines (added for the
    right side, deleted for the left). Ties in distance keep the earliest
    candidate in diff order.
    """
    changed_type = LineType.ADDED if right_side else LineType.DELETED
    best: DiffLine | None = None
    best_distance = 0
    for diff_line in diff_lines:
        if diff_line.line_type not in (LineType.UNCHANGED, changed_type):
            continue
        if search_text not in diff_line.content:
            continue
        distance = abs(diff_line.line_for_side(right_side) - approximate_line)
        if best is None or distance < best_distance:
            best, best_distance = diff_line, distance

    if best is None:
        return None
    return best.line_for_side(right_side), best.content.index(search_text) + 1
