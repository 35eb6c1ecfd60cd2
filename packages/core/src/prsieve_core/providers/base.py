"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    review() → _build_system_prompt() + _build_user_prompt()
             → token budget check
             → _call_api()   ← only this differs per provider
             → parse_review_output()

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return the text response

A provider is one concrete "review capability": it takes a ``ReviewRequest``
and returns a ``ReviewResponse``. Retries are left to the SDK transport, so
each review() performs at most one model call and transport errors propagate.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from prsieve_core.models import ReviewRequest, ReviewResponse
from prsieve_core.providers.parsing import JsonObjectExtractor, parse_review_output
from prsieve_core.utils.tokens import estimate_tokens

logger = logging.getLogger(__name__)

_MAX_OUTPUT_TOKENS = 5000

_OUTPUT_CONTRACT = """OUTPUT (STRICT):
Return ONLY a single JSON object and nothing else (no markdown, no backticks).
The JSON MUST match:

{
  "threads": [
    {
      "status": 1,
      "threadContext": {
        "filePath": "<same as fileName>",
        "leftFileStart": { "line": <int>, "offset": <int>, "snippet": "<exact code>" },
        "leftFileEnd":   { "line": <int>, "offset": <int> },
        "rightFileStart":{ "line": <int>, "offset": <int>, "snippet": "<exact code>" },
        "rightFileEnd":  { "line": <int>, "offset": <int> }
      },
      "comments": [
        {
          "content": "<explanation>",
          "commentType": 0,
          "issueType": "SECURITY" | "BUG" | "PERFORMANCE" | "BEST_PRACTICE",
          "confidenceScore": <number 0.0-1.0>,
          "confidenceScoreJustification": "<1 sentence>",
          "fixSuggestion": "<optional concrete fix>"
        }
      ]
    }
  ]
}

Rules:
- Use rightFileStart/rightFileEnd for the new code side whenever possible.
- Copy the exact code the comment refers to into "snippet" so it can be located in the diff.
- If exact locations are uncertain, set all positions to { "line": 1, "offset": 1 }.
- commentType must be a number (0).
- If there are multiple distinct issues in the same region, return multiple comments entries
  in the same thread rather than merging them into one paragraph.
- If there are no issues, return { "threads": [] }."""


class BaseReviewer(ABC):
    MAX_OUTPUT_TOKENS: int = _MAX_OUTPUT_TOKENS

    def __init__(self, max_input_tokens: int | None = None, extractor: JsonObjectExtractor | None = None):
        self.max_input_tokens = max_input_tokens
        self.extractor = extractor or JsonObjectExtractor()

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    async def review(self, request: ReviewRequest) -> ReviewResponse:
        """Review one file diff and return the model's threads.

        Returns an empty response without calling the model when the prompt
        is over the configured input-token budget.
        """
        system = self._build_system_prompt(request)
        user = self._build_user_prompt(request)
        if self._exceeds_token_limit(f"{system}\n{user}"):
            logger.warning(
                "%s: prompt for %s exceeds %d input tokens; skipping review",
                self.__class__.__name__,
                request.file_path,
                self.max_input_tokens,
            )
            return ReviewResponse(threads=[])
        raw = await self._call_api(system, user)
        return parse_review_output(raw or "", request.file_path, self.extractor)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response."""

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _exceeds_token_limit(self, prompt: str) -> bool:
        if not self.max_input_tokens:
            return False
        return estimate_tokens(prompt) > self.max_input_tokens

    def _build_system_prompt(self, request: ReviewRequest) -> str:
        options = request.options
        if options.system_prompt:
            persona = options.system_prompt.strip()
        else:
            persona = "You are a precise code reviewer."

        rules = [
            "Input: JSON with fileName, diff (unified diff), and existingComments.",
            "Do not repeat issues similar to existingComments.",
            "Only raise meaningful issues (avoid nits).",
        ]
        if options.modified_lines_only:
            rules.append("Only comment on modified lines.")
        if options.confidence_mode:
            rules.append("Include confidenceScore between 0.0 and 1.0.")
        rules.append("Report bugs." if options.checks.bugs else "Do not report bugs.")
        if options.checks.performance:
            rules.append("Report major performance issues.")
        rules.append("Report missed best-practices." if options.checks.best_practices else "Skip best-practices.")
        rules.extend(options.additional_prompts)

        bullet_list = "\n".join(f"- {rule}" for rule in rules)
        return f"{persona}\n{bullet_list}\n\n{_OUTPUT_CONTRACT}"

    def _build_user_prompt(self, request: ReviewRequest) -> str:
        payload = {
            "fileName": request.file_path,
            "diff": request.diff,
            "existingComments": list(request.exclusion_content),
        }
        return json.dumps(payload, indent=2)
