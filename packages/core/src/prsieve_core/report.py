"""Rendering and gating helpers for a finished ``ReviewReport``."""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape

from prsieve_core.models import ReviewReport, Severity

_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
_SEVERITY_COLOR = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "yellow",
    Severity.MEDIUM: "blue",
    Severity.LOW: "dim",
}


def render_markdown(report: ReviewReport) -> str:
    """Compact markdown block suitable for terminals, CI logs or a PR summary comment."""
    lines = ["## AI Review", report.summary_markdown, ""]
    for finding in report.findings:
        location = f"{finding.file_path}:{finding.line_start or 0}"
        lines.append(f"- [{finding.severity.value.upper()}] {location}: {finding.content}")
    return "\n".join(lines)


def report_to_json(report: ReviewReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def severity_meets_threshold(severity: str, threshold: str) -> bool:
    """True if *severity* is at or above *threshold*; unknown values never block."""
    try:
        sev = _SEVERITY_ORDER.index(Severity((severity or "").lower()))
        limit = _SEVERITY_ORDER.index(Severity((threshold or "").lower()))
    except ValueError:
        return False
    return sev >= limit


def has_blocking_findings(report: ReviewReport, fail_on: str = "high") -> bool:
    return any(severity_meets_threshold(f.severity.value, fail_on) for f in report.findings)


def print_report(report: ReviewReport, console: Console | None = None) -> None:
    """Print findings to the terminal without publishing them anywhere."""
    console = console or Console()
    console.print(f"\n[bold]{report.summary_markdown}[/bold]\n")
    if not report.findings:
        console.print("[green]No findings.[/green]")
        return
    for f in report.findings:
        color = _SEVERITY_COLOR.get(f.severity, "white")
        line = f"line [bold]{f.line_start}[/bold]  " if f.line_start else ""
        console.print(
            f"[bold cyan]{escape(f.file_path)}[/bold cyan]  {line}"
            f"[{color}]{f.severity.value.upper()}[/{color}]  {escape(f.title)}"
        )
        console.print(f"  {escape(f.content)}")
        if f.suggestion:
            console.print(f"  [dim]Suggestion: {escape(f.suggestion)}[/dim]")
        console.print()
