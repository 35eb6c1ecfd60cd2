"""Collect per-file unified diffs from a local git checkout.

One ``git diff`` per file is slower than a single combined diff, but each
FileDiff then holds exactly one file's hunks, which is what position fixing
expects.
"""

from __future__ import annotations

import logging
import subprocess

from prsieve_core.config import build_filter_options
from prsieve_core.file_filter import filter_files_for_review
from prsieve_core.models import FileDiff

logger = logging.getLogger(__name__)


def _git(args: list[str], cwd: str | None = None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def changed_paths(base: str, head: str, cwd: str | None = None) -> list[str]:
    output = _git(["diff", "--name-only", f"{base}..{head}"], cwd=cwd)
    return [line.strip() for line in output.splitlines() if line.strip()]


def collect_diffs(base: str, head: str, cwd: str | None = None) -> list[FileDiff]:
    """Return one FileDiff per file changed between *base* and *head*, in git's order."""
    diffs = []
    for path in changed_paths(base, head, cwd=cwd):
        diff = _git(["diff", f"{base}..{head}", "--", path], cwd=cwd)
        diffs.append(FileDiff(path=path, diff=diff, change_type="edit"))
    logger.debug("Collected %d diff(s) for %s..%s", len(diffs), base, head)
    return diffs


def clamp_diffs(diffs: list[FileDiff], max_chars: int) -> list[FileDiff]:
    """Truncate diffs longer than *max_chars* so one huge file can't blow up the prompt."""
    clamped = []
    for d in diffs:
        if len(d.diff) <= max_chars:
            clamped.append(d)
            continue
        logger.info("Truncating diff for %s (%d chars > %d)", d.path, len(d.diff), max_chars)
        truncated = d.diff[:max_chars] + f"\n... [diff truncated to {max_chars} chars]\n"
        clamped.append(FileDiff(path=d.path, diff=truncated, change_type=d.change_type))
    return clamped


def prepare_diffs(diffs: list[FileDiff], config: dict) -> list[FileDiff]:
    """Apply the configured file filter, then the per-file size guardrail."""
    allowed = set(filter_files_for_review([d.path for d in diffs], build_filter_options(config)))
    return clamp_diffs([d for d in diffs if d.path in allowed], config["max_diff_chars"])
