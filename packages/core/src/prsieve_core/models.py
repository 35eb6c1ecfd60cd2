"""Provider-neutral data model shared by every stage of the review pipeline.

The model output and replayed input payloads use camelCase JSON keys
(``threadContext``, ``rightFileStart``...). ``from_dict``/``to_dict`` translate
between that wire form and the snake_case dataclasses used in Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class IssueType(str, Enum):
    """Closed set of issue categories the model is asked to emit."""

    SECURITY = "SECURITY"
    BUG = "BUG"
    PERFORMANCE = "PERFORMANCE"
    BEST_PRACTICE = "BEST_PRACTICE"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> IssueType:
        """Map a free-form issue type string onto the enum; unknown or missing → OTHER."""
        try:
            return cls(value.strip().upper() if isinstance(value, str) else "")
        except ValueError:
            return cls.OTHER


# Must cover every IssueType member.
_SEVERITY_BY_ISSUE_TYPE: dict[IssueType, Severity] = {
    IssueType.SECURITY: Severity.CRITICAL,
    IssueType.BUG: Severity.HIGH,
    IssueType.PERFORMANCE: Severity.HIGH,
    IssueType.BEST_PRACTICE: Severity.MEDIUM,
    IssueType.OTHER: Severity.MEDIUM,
}


def severity_for(issue_type: str | None) -> Severity:
    return _SEVERITY_BY_ISSUE_TYPE[IssueType.parse(issue_type)]


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def normalize_path(path: str) -> str:
    """Ensure a file path starts with a leading slash so paths compare consistently."""
    return path if path.startswith("/") else f"/{path}"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileDiff:
    path: str
    diff: str
    change_type: str | None = None  # "add" | "edit" | "delete" | "rename" | "unknown"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileDiff:
        return cls(path=data["path"], diff=data.get("diff") or "", change_type=data.get("changeType"))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"path": self.path, "diff": self.diff}
        if self.change_type is not None:
            result["changeType"] = self.change_type
        return result


@dataclass(frozen=True)
class ChecksPolicy:
    bugs: bool = True
    performance: bool = True
    best_practices: bool = True


@dataclass(frozen=True)
class ConfidencePolicy:
    enabled: bool = False
    minimum: float = 0.0


@dataclass(frozen=True)
class DedupePolicy:
    enabled: bool = False
    threshold: float = 0


@dataclass(frozen=True)
class PromptsPolicy:
    additional: tuple[str, ...] = ()
    system_prompt: str | None = None


@dataclass(frozen=True)
class ReviewPolicy:
    """Feature flags and thresholds that drive one review run."""

    checks: ChecksPolicy = field(default_factory=ChecksPolicy)
    modified_lines_only: bool = True
    confidence: ConfidencePolicy = field(default_factory=ConfidencePolicy)
    dedupe_across_files: DedupePolicy = field(default_factory=DedupePolicy)
    prompts: PromptsPolicy = field(default_factory=PromptsPolicy)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewPolicy:
        checks = data["checks"]
        confidence = data["confidence"]
        dedupe = data["dedupeAcrossFiles"]
        prompts = data.get("prompts") or {}
        return cls(
            checks=ChecksPolicy(
                bugs=bool(checks["bugs"]),
                performance=bool(checks["performance"]),
                best_practices=bool(checks["bestPractices"]),
            ),
            modified_lines_only=bool(data["modifiedLinesOnly"]),
            confidence=ConfidencePolicy(enabled=bool(confidence["enabled"]), minimum=float(confidence["minimum"])),
            dedupe_across_files=DedupePolicy(enabled=bool(dedupe["enabled"]), threshold=dedupe["threshold"]),
            prompts=PromptsPolicy(
                additional=tuple(prompts.get("additional") or ()),
                system_prompt=prompts.get("systemPrompt"),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        prompts: dict[str, Any] = {"additional": list(self.prompts.additional)}
        if self.prompts.system_prompt is not None:
            prompts["systemPrompt"] = self.prompts.system_prompt
        return {
            "checks": {
                "bugs": self.checks.bugs,
                "performance": self.checks.performance,
                "bestPractices": self.checks.best_practices,
            },
            "modifiedLinesOnly": self.modified_lines_only,
            "confidence": {"enabled": self.confidence.enabled, "minimum": self.confidence.minimum},
            "dedupeAcrossFiles": {
                "enabled": self.dedupe_across_files.enabled,
                "threshold": self.dedupe_across_files.threshold,
            },
            "prompts": prompts,
        }


@dataclass(frozen=True)
class PreviousComment:
    """Minimal view of a comment already posted on the PR, used for dedup across reruns."""

    content: str
    id: str | None = None
    file_path: str | None = None
    line: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreviousComment:
        return cls(
            content=data["content"],
            id=data.get("id"),
            file_path=data.get("filePath"),
            line=data.get("line"),
        )


# ---------------------------------------------------------------------------
# Locations and threads
# ---------------------------------------------------------------------------


@dataclass
class Position:
    line: int
    offset: int
    snippet: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Position | None:
        if not isinstance(data, dict):
            return None
        return cls(
            line=int(data.get("line") or 1),
            offset=int(data.get("offset") or 1),
            snippet=_str_or_none(data.get("snippet")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"line": self.line, "offset": self.offset}
        if self.snippet is not None:
            result["snippet"] = self.snippet
        return result


_POSITION_KEYS = (
    ("left_file_start", "leftFileStart"),
    ("left_file_end", "leftFileEnd"),
    ("right_file_start", "rightFileStart"),
    ("right_file_end", "rightFileEnd"),
)


@dataclass
class ThreadContext:
    """Thread location across the left (old) and right (new) sides of a diff."""

    file_path: str
    left_file_start: Position | None = None
    left_file_end: Position | None = None
    right_file_start: Position | None = None
    right_file_end: Position | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThreadContext:
        return cls(
            file_path=data["filePath"],
            **{attr: Position.from_dict(data.get(key)) for attr, key in _POSITION_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"filePath": self.file_path}
        for attr, key in _POSITION_KEYS:
            position = getattr(self, attr)
            if position is not None:
                result[key] = position.to_dict()
        return result


@dataclass
class ReviewComment:
    content: str
    comment_type: int = 0
    confidence_score: float | None = None
    confidence_score_justification: str | None = None
    fix_suggestion: str | None = None
    issue_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewComment:
        return cls(
            content=data["content"],
            comment_type=data.get("commentType", 0),
            confidence_score=data.get("confidenceScore"),
            confidence_score_justification=data.get("confidenceScoreJustification"),
            fix_suggestion=data.get("fixSuggestion"),
            issue_type=_str_or_none(data.get("issueType")),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": self.content, "commentType": self.comment_type}
        optional = {
            "confidenceScore": self.confidence_score,
            "confidenceScoreJustification": self.confidence_score_justification,
            "fixSuggestion": self.fix_suggestion,
            "issueType": self.issue_type,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class ReviewThread:
    """One code location plus the distinct issues the model raised there."""

    thread_context: ThreadContext
    comments: list[ReviewComment] = field(default_factory=list)
    status: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewThread:
        return cls(
            thread_context=ThreadContext.from_dict(data["threadContext"]),
            comments=[ReviewComment.from_dict(c) for c in data["comments"]],
            status=data.get("status", 1),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "threadContext": self.thread_context.to_dict(),
            "comments": [c.to_dict() for c in self.comments],
        }


# ---------------------------------------------------------------------------
# Review capability contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReviewOptions:
    checks: ChecksPolicy
    modified_lines_only: bool
    additional_prompts: tuple[str, ...]
    confidence_mode: bool
    system_prompt: str | None = None


@dataclass(frozen=True)
class ReviewRequest:
    """What the orchestrator sends to the injected review capability for one file."""

    file_path: str
    diff: str
    exclusion_content: tuple[str, ...]
    options: ReviewOptions


@dataclass
class ReviewResponse:
    threads: list[ReviewThread] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass
class Finding:
    """Normalized, severity-tagged unit of feedback. ``id`` is the content signature once assigned."""

    id: str
    file_path: str
    severity: Severity
    title: str
    content: str
    line_start: int | None = None
    line_end: int | None = None
    category: str | None = None
    confidence: float | None = None
    suggestion: str | None = None
    thread_context: ThreadContext | None = None
    source_thread: ReviewThread | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "filePath": self.file_path,
            "severity": self.severity.value,
            "title": self.title,
            "content": self.content,
        }
        optional = {
            "lineStart": self.line_start,
            "lineEnd": self.line_end,
            "category": self.category,
            "confidence": self.confidence,
            "suggestion": self.suggestion,
            "threadContext": self.thread_context.to_dict() if self.thread_context else None,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class ReviewReport:
    summary_markdown: str
    findings: list[Finding] = field(default_factory=list)
    filtered_out: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summaryMarkdown": self.summary_markdown,
            "findings": [f.to_dict() for f in self.findings],
            "filteredOut": [f.to_dict() for f in self.filtered_out],
        }
