"""Core review orchestration."""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from prsieve_core.dedupe import (
    DedupeState,
    apply_confidence_filter,
    compute_exclusion_content,
    dedupe_against_previous,
)
from prsieve_core.gateway import LlmGateway
from prsieve_core.models import (
    FileDiff,
    Finding,
    PreviousComment,
    ReviewComment,
    ReviewPolicy,
    ReviewReport,
    ReviewThread,
    ThreadContext,
    normalize_path,
    severity_for,
)
from prsieve_core.positions import fix_thread_positions
from prsieve_core.providers.anthropic import AnthropicReviewer
from prsieve_core.providers.openai import AzureOpenAIReviewer, OpenAIReviewer

logger = logging.getLogger(__name__)

NO_FILES_SUMMARY = "No files to review."


@dataclass
class ReviewInput:
    """Provider-agnostic input for one review run."""

    files: list[FileDiff]
    policy: ReviewPolicy
    previous_comments: list[PreviousComment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewInput:
        return cls(
            files=[FileDiff.from_dict(f) for f in data.get("files") or []],
            policy=ReviewPolicy.from_dict(data["policy"]),
            previous_comments=[PreviousComment.from_dict(c) for c in data.get("previousComments") or []],
        )


def load_review_input(path: str) -> ReviewInput:
    """Load a replayable ``ReviewInput`` JSON payload (camelCase keys)."""
    with open(Path(path), encoding="utf-8") as f:
        return ReviewInput.from_dict(json.load(f))


def get_reviewer(config: dict):
    """Instantiate the review capability named by ``config["provider"]``."""
    provider = config["provider"]
    model = config.get("model")
    max_input_tokens = config.get("max_input_tokens")
    if provider == "openai":
        if not config.get("openai_api_key"):
            raise ValueError("OPENAI_API_KEY is required for the openai provider.")
        return OpenAIReviewer(api_key=config["openai_api_key"], model=model, max_input_tokens=max_input_tokens)
    if provider == "azure-openai":
        if not config.get("azure_openai_endpoint") or not config.get("azure_openai_deployment"):
            raise ValueError("AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_DEPLOYMENT are required for azure-openai.")
        return AzureOpenAIReviewer(
            api_key=config.get("azure_openai_key") or config.get("openai_api_key"),
            endpoint=config["azure_openai_endpoint"],
            deployment=config["azure_openai_deployment"],
            api_version=config.get("azure_openai_api_version"),
            max_input_tokens=max_input_tokens,
        )
    if provider == "anthropic":
        if not config.get("anthropic_api_key"):
            raise ValueError("ANTHROPIC_API_KEY is required for the anthropic provider.")
        return AnthropicReviewer(api_key=config["anthropic_api_key"], model=model, max_input_tokens=max_input_tokens)
    raise ValueError(f"Unknown provider: {provider!r}. Choose 'openai', 'azure-openai' or 'anthropic'.")


def derive_line_range(ctx: ThreadContext | None) -> tuple[int | None, int | None]:
    """Line range for adapters that only support lines; the right (new) side wins."""
    if ctx is None:
        return None, None
    start = ctx.right_file_start or ctx.left_file_start
    end = ctx.right_file_end or ctx.left_file_end
    return (start.line if start else None), (end.line if end else None)


def thread_to_findings(thread: ReviewThread, file_path: str) -> list[Finding]:
    line_start, line_end = derive_line_range(thread.thread_context)
    return [
        Finding(
            id="",
            file_path=file_path,
            line_start=line_start,
            line_end=line_end,
            severity=severity_for(comment.issue_type),
            category=comment.issue_type,
            title=comment.issue_type or "Code review",
            content=comment.content,
            confidence=comment.confidence_score,
            suggestion=comment.fix_suggestion,
            thread_context=thread.thread_context,
            source_thread=thread,
        )
        for comment in thread.comments
    ]


def summarize(findings: list[Finding], filtered_out: list[Finding]) -> str:
    total = len(findings) + len(filtered_out)
    return f"Findings: {len(findings)} ({len(filtered_out)} filtered out, total generated {total})."


def _strip_source_threads(findings: list[Finding]) -> list[Finding]:
    return [dataclasses.replace(f, source_thread=None) for f in findings]


async def review_code(review_input: ReviewInput, reviewer) -> ReviewReport:
    """Review every file in order and return the de-duplicated report.

    Files are processed strictly one after another: the cross-file dedup latch
    and the run comment list depend on file order. Exceptions from *reviewer*
    propagate and abort the run.
    """
    if not review_input.files:
        return ReviewReport(summary_markdown=NO_FILES_SUMMARY, findings=[], filtered_out=[])

    policy = review_input.policy
    previous = review_input.previous_comments or []
    gateway = LlmGateway(reviewer)
    state = DedupeState()
    findings: list[Finding] = []
    filtered_out: list[Finding] = []
    total = len(review_input.files)

    for i, file in enumerate(review_input.files, 1):
        file_path = normalize_path(file.path)
        logger.info("[%d/%d] Reviewing %s", i, total, file_path)

        file_comments = [
            ReviewComment(content=c.content, comment_type=0)
            for c in previous
            if normalize_path(c.file_path or "") == file_path
        ]
        exclusion_content = compute_exclusion_content(file_comments, state, policy)

        threads = await gateway.review(file.path, file.diff, exclusion_content, policy)
        threads = fix_thread_positions(threads, file.diff)

        file_findings = [f for thread in threads for f in thread_to_findings(thread, file_path)]
        remaining, low_confidence = apply_confidence_filter(file_findings, policy)
        kept, duplicates = dedupe_against_previous(remaining, previous, state.seen_signatures)

        findings.extend(kept)
        filtered_out.extend(low_confidence)
        filtered_out.extend(duplicates)
        state.run_comments.extend(comment for thread in threads for comment in thread.comments)

        logger.info(
            "  %d finding(s) kept, %d below confidence, %d duplicate(s)",
            len(kept),
            len(low_confidence),
            len(duplicates),
        )

    return ReviewReport(
        summary_markdown=summarize(findings, filtered_out),
        findings=_strip_source_threads(findings),
        filtered_out=_strip_source_threads(filtered_out),
    )
