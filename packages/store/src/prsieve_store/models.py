"""Review history data models.

Decoupled from prsieve_core so the store layer can be used independently
and prsieve_core has no knowledge of persistence concerns. Reports are read
by attribute (duck-typed), not by importing core types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class CommentRecord:
    """A single posted finding, kept so the next run can skip it."""

    file_path: str
    content: str
    line: int | None = None
    severity: str = "medium"
    finding_id: str = ""

    def to_previous_comment_dict(self) -> dict:
        """Wire form accepted by ``prsieve_core.models.PreviousComment.from_dict``."""
        data = {"filePath": self.file_path, "content": self.content}
        if self.finding_id:
            data["id"] = self.finding_id
        if self.line is not None:
            data["line"] = self.line
        return data


@dataclass
class ReviewRecord:
    """A completed review run for one PR, up to and including ``head_sha``."""

    repo: str
    pr_number: int
    head_sha: str
    summary: str
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    total_findings: int = 0
    filtered_out: int = 0
    comments: list[CommentRecord] = field(default_factory=list)

    @classmethod
    def from_report(cls, report, repo: str, pr_number: int, head_sha: str) -> ReviewRecord:
        """Build a record from a ``ReviewReport``-shaped object."""
        comments = [
            CommentRecord(
                file_path=f.file_path,
                content=f.content,
                line=f.line_start,
                severity=getattr(f.severity, "value", f.severity),
                finding_id=f.id,
            )
            for f in report.findings
        ]
        return cls(
            repo=repo,
            pr_number=pr_number,
            head_sha=head_sha,
            summary=report.summary_markdown,
            total_findings=len(report.findings),
            filtered_out=len(report.filtered_out),
            comments=comments,
        )
