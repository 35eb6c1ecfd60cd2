"""Confidence filtering and de-duplication of review comments and findings.

Two independent concerns live here:

* the exclusion list sent to the model for each file, which grows to include
  every comment generated so far in the run once the cross-file dedup latch
  has tripped;
* the final dedup of findings by content signature, against previously
  posted comments and against findings already kept earlier in the run.

All mutable run state is held in a ``DedupeState`` owned by one invocation.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

from prsieve_core.models import Finding, PreviousComment, ReviewComment, ReviewPolicy, normalize_path

logger = logging.getLogger(__name__)


@dataclass
class DedupeState:
    """Per-run dedup state. ``criteria_met`` only ever goes from False to True."""

    criteria_met: bool = False
    run_comments: list[ReviewComment] = field(default_factory=list)
    seen_signatures: set[str] = field(default_factory=set)


def filter_comments_by_confidence(
    comments: list[ReviewComment], minimum: float
) -> tuple[list[ReviewComment], list[ReviewComment]]:
    """Split comments into ``(remaining, filtered_out)``; comments without a score are kept."""
    remaining: list[ReviewComment] = []
    filtered_out: list[ReviewComment] = []
    for comment in comments:
        if comment.confidence_score is not None and comment.confidence_score < minimum:
            filtered_out.append(comment)
        else:
            remaining.append(comment)
    return remaining, filtered_out


def filter_comments_by_policy(
    comments: list[ReviewComment], policy: ReviewPolicy
) -> tuple[list[ReviewComment], list[ReviewComment]]:
    if not policy.confidence.enabled:
        return list(comments), []
    return filter_comments_by_confidence(comments, policy.confidence.minimum)


def compute_exclusion_content(
    file_comments: list[ReviewComment],
    state: DedupeState,
    policy: ReviewPolicy,
) -> list[str]:
    """Return the comment texts the model should avoid repeating for the next file.

    May set ``state.criteria_met``; never clears it.
    """
    excluded = list(file_comments)
    if policy.dedupe_across_files.enabled:
        if not state.criteria_met:
            passing, _ = filter_comments_by_policy(state.run_comments, policy)
            if len(passing) > policy.dedupe_across_files.threshold:
                state.criteria_met = True
                logger.info(
                    "Cross-file dedup enabled for the rest of the run (%d comments > threshold %s)",
                    len(passing),
                    policy.dedupe_across_files.threshold,
                )
        if state.criteria_met:
            excluded.extend(state.run_comments)
    return [comment.content for comment in excluded]


def build_finding_signature(file_path: str | None, content: str) -> str:
    """Deterministic sha256 of ``file_path|trimmed content``."""
    normalized = f"{file_path or ''}|{content.strip()}"
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def apply_confidence_filter(findings: list[Finding], policy: ReviewPolicy) -> tuple[list[Finding], list[Finding]]:
    """Split findings into ``(remaining, filtered_out)`` according to the confidence policy."""
    if not policy.confidence.enabled:
        return list(findings), []
    remaining: list[Finding] = []
    filtered_out: list[Finding] = []
    for finding in findings:
        if finding.confidence is not None and finding.confidence < policy.confidence.minimum:
            filtered_out.append(finding)
        else:
            remaining.append(finding)
    return remaining, filtered_out


def previous_signatures(previous_comments: list[PreviousComment] | None) -> set[str]:
    signatures = set()
    for comment in previous_comments or []:
        path = normalize_path(comment.file_path) if comment.file_path else None
        signatures.add(build_finding_signature(path, comment.content))
    return signatures


def dedupe_against_previous(
    findings: list[Finding],
    previous_comments: list[PreviousComment] | None,
    seen_signatures: set[str],
) -> tuple[list[Finding], list[Finding]]:
    """Split findings into ``(kept, removed)``.

    A finding is removed when its signature belongs to a previous comment or
    was already kept earlier in the run. Kept findings get their signature as
    ``id`` and it is recorded in *seen_signatures*.
    """
    known = previous_signatures(previous_comments)
    kept: list[Finding] = []
    removed: list[Finding] = []
    for finding in findings:
        signature = finding.id or build_finding_signature(finding.file_path, finding.content)
        if signature in seen_signatures or signature in known:
            removed.append(finding)
            continue
        seen_signatures.add(signature)
        finding.id = signature
        kept.append(finding)
    return kept, removed
