"""Turn raw model output into review threads, or into a diagnostic thread when it can't.

A malformed answer for one file must not abort a whole run, so every parse
failure is reported back as a single BUG-level thread that carries the reason
and the start of the raw output.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from prsieve_core.models import IssueType, Position, ReviewComment, ReviewResponse, ReviewThread, ThreadContext

logger = logging.getLogger(__name__)

RAW_SNIPPET_CHARS = 800


class JsonObjectExtractor:
    """Locate the JSON object in free text: first ``{`` through last ``}``.

    Braces inside string values that fall outside the real object (e.g. prose
    after the JSON mentioning ``}``) defeat this heuristic. Subclass and
    override ``extract`` to plug in a stricter scanner.
    """

    def extract(self, text: str) -> str | None:
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end == -1 or end <= start:
            return None
        return text[start : end + 1]


def normalize_confidence(score: Any) -> float | None:
    """Bring a model-reported confidence into [0, 1]; scores above 1 are read as 0–10."""
    if score is None or isinstance(score, bool):
        return None
    try:
        value = float(score)
    except (TypeError, ValueError):
        return None
    if value > 1:
        value = value / 10
    return max(0.0, min(1.0, value))


def diagnostic_response(file_path: str, content: str) -> ReviewResponse:
    """Single synthetic thread reporting a tool-side problem with the model output."""
    ctx = ThreadContext(
        file_path=file_path,
        left_file_start=Position(1, 1),
        left_file_end=Position(1, 1),
        right_file_start=Position(1, 1),
        right_file_end=Position(1, 1),
    )
    comment = ReviewComment(
        content=content,
        comment_type=0,
        issue_type=IssueType.BUG.value,
        confidence_score=1.0,
        confidence_score_justification="Diagnostic message produced by the tool.",
        fix_suggestion="Inspect the raw LLM output and adjust the prompt/schema.",
    )
    return ReviewResponse(threads=[ReviewThread(thread_context=ctx, comments=[comment], status=1)])


def _is_valid_comment(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("content"), str)


def _is_valid_thread(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    ctx = value.get("threadContext")
    comments = value.get("comments")
    return (
        isinstance(ctx, dict)
        and bool(ctx.get("filePath"))
        and isinstance(comments, list)
        and all(_is_valid_comment(c) for c in comments)
    )


def is_valid_payload(payload: Any) -> bool:
    return (
        isinstance(payload, dict)
        and isinstance(payload.get("threads"), list)
        and all(_is_valid_thread(t) for t in payload["threads"])
    )


def response_from_payload(payload: Any, file_path: str, raw: str = "") -> ReviewResponse:
    """Validate a decoded ``{"threads": [...]}`` payload and build the typed response."""
    snippet = raw[:RAW_SNIPPET_CHARS]
    if not is_valid_payload(payload):
        logger.warning("Review output for %s has an invalid shape", file_path)
        return diagnostic_response(
            file_path,
            f"LLM_OUTPUT_INVALID_SHAPE: expected threads[] with threadContext and comments. Output snippet:\n{snippet}",
        )
    try:
        threads = [ReviewThread.from_dict(t) for t in payload["threads"]]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Review output for %s could not be converted: %s", file_path, e)
        return diagnostic_response(
            file_path,
            f"LLM_OUTPUT_INVALID_SHAPE: {e}. Output snippet:\n{snippet}",
        )
    return ReviewResponse(threads=threads)


def parse_review_output(raw: str, file_path: str, extractor: JsonObjectExtractor | None = None) -> ReviewResponse:
    """Parse raw model text into a ``ReviewResponse``; never raises."""
    extractor = extractor or JsonObjectExtractor()
    snippet = raw[:RAW_SNIPPET_CHARS]
    extracted = extractor.extract(raw)
    if extracted is None:
        logger.warning("No JSON object found in review output for %s", file_path)
        return diagnostic_response(
            file_path,
            f"LLM_OUTPUT_PARSE_ERROR: No JSON object found in output. Output snippet:\n{snippet}",
        )
    try:
        payload = json.loads(extracted)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse review output for %s as JSON: %s", file_path, e)
        return diagnostic_response(
            file_path,
            f"LLM_OUTPUT_PARSE_ERROR: Failed to parse JSON ({e.msg}). Output snippet:\n{snippet}",
        )
    return response_from_payload(payload, file_path, raw)
