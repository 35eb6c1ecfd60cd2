"""Narrow a changed-file list to the files worth sending for review.

Binary files are always dropped. Inclusion keeps a file when its extension is
listed or any include glob matches; exclusion then drops a file when its
extension is listed or any exclude glob matches. Globs are case-insensitive,
``*`` and ``?`` stay within one path segment and ``**`` spans directories.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import Iterable

from prsieve_core.utils.code import get_file_extension, is_binary_file


@dataclass(frozen=True)
class FileFilterOptions:
    """Each field accepts a comma-separated string or a list of entries."""

    extensions: str | list[str] | None = None
    extension_excludes: str | list[str] | None = None
    include: str | list[str] | None = None
    exclude: str | list[str] | None = None


def parse_input_to_array(value: str | Iterable[str] | None) -> list[str]:
    """Split "a, b ,c" (or pass through a list) into trimmed, non-empty entries."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    return [item.strip() for item in items if item and item.strip()]


def _normalize_extensions(values: list[str]) -> set[str]:
    return {(v if v.startswith(".") else f".{v}").lower() for v in values}


def _match_parts(pattern_parts: list[str], path_parts: list[str]) -> bool:
    if not pattern_parts:
        return not path_parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_parts(rest, path_parts[i:]) for i in range(len(path_parts) + 1))
    if not path_parts:
        return False
    return fnmatch.fnmatchcase(path_parts[0], head) and _match_parts(rest, path_parts[1:])


def glob_match(path: str, pattern: str) -> bool:
    """Return True if *path* matches *pattern* segment by segment, ignoring case."""
    path_parts = path.lower().strip("/").split("/")
    pattern = pattern.lower().strip()
    if pattern.startswith("./"):
        pattern = pattern[2:]
    pattern_parts = pattern.strip("/").split("/")
    return _match_parts(pattern_parts, path_parts)


def _matches_any(path: str, patterns: list[str]) -> bool:
    return any(glob_match(path, pattern) for pattern in patterns)


def filter_files_for_review(files: list[str], options: FileFilterOptions | None = None) -> list[str]:
    """Return the subset of *files* to review, preserving input order."""
    options = options or FileFilterOptions()
    selected = [f for f in files if not is_binary_file(f)]

    include_ext = _normalize_extensions(parse_input_to_array(options.extensions))
    include_globs = parse_input_to_array(options.include)
    if include_ext or include_globs:
        selected = [
            f for f in selected if get_file_extension(f).lower() in include_ext or _matches_any(f, include_globs)
        ]

    exclude_ext = _normalize_extensions(parse_input_to_array(options.extension_excludes))
    exclude_globs = parse_input_to_array(options.exclude)
    if exclude_ext or exclude_globs:
        selected = [
            f
            for f in selected
            if get_file_extension(f).lower() not in exclude_ext and not _matches_any(f, exclude_globs)
        ]

    return selected
