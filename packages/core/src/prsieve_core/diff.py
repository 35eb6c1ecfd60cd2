"""Unified diff parsing into line-level records."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

# @@ -old_start[,old_count] +new_start[,new_count] @@
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class LineType(str, Enum):
    ADDED = "added"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffLine:
    line_type: LineType
    content: str
    line_before: int | None  # old-side line number; None for added lines
    line_after: int | None  # new-side line number; None for deleted lines

    def line_for_side(self, right_side: bool) -> int | None:
        return self.line_after if right_side else self.line_before


def parse_diff_lines(diff_text: str) -> list[DiffLine]:
    """Parse the first file of a unified diff into ADDED/DELETED/UNCHANGED records.

    File headers (``diff --git``, ``---``, ``+++``, ``index``) before the first
    hunk are skipped. Hunk extents are taken from the ``@@`` header counts, so a
    blank line inside a hunk is read as an empty context line and trailing
    noise after the last hunk is ignored. Parsing stops at the next
    ``diff --git`` header.
    """
    records: list[DiffLine] = []
    old_line = new_line = 0
    old_remaining = new_remaining = 0
    seen_hunk = False

    for raw in diff_text.splitlines():
        if raw.startswith("diff --git") and seen_hunk:
            break

        match = _HUNK_HEADER_RE.match(raw)
        if match:
            seen_hunk = True
            old_line = int(match.group(1))
            old_remaining = int(match.group(2)) if match.group(2) is not None else 1
            new_line = int(match.group(3))
            new_remaining = int(match.group(4)) if match.group(4) is not None else 1
            continue

        if old_remaining <= 0 and new_remaining <= 0:
            continue  # outside a hunk

        prefix, content = (raw[0], raw[1:]) if raw else (" ", "")
        if prefix == "+":
            records.append(DiffLine(LineType.ADDED, content, None, new_line))
            new_line += 1
            new_remaining -= 1
        elif prefix == "-":
            records.append(DiffLine(LineType.DELETED, content, old_line, None))
            old_line += 1
            old_remaining -= 1
        elif prefix == " ":
            records.append(DiffLine(LineType.UNCHANGED, content, old_line, new_line))
            old_line += 1
            new_line += 1
            old_remaining -= 1
            new_remaining -= 1
        # "\ No newline at end of file" and anything else carries no line

    return records
