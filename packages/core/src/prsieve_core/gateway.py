"""Single-file bridge between the orchestrator and the injected review capability."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from prsieve_core.models import ReviewOptions, ReviewPolicy, ReviewRequest, ReviewResponse, ReviewThread, normalize_path
from prsieve_core.providers.parsing import normalize_confidence, response_from_payload

logger = logging.getLogger(__name__)


def build_review_request(file_path: str, diff: str, exclusion_content: list[str], policy: ReviewPolicy) -> ReviewRequest:
    return ReviewRequest(
        file_path=normalize_path(file_path),
        diff=diff,
        exclusion_content=tuple(exclusion_content),
        options=ReviewOptions(
            checks=policy.checks,
            modified_lines_only=policy.modified_lines_only,
            additional_prompts=tuple(policy.prompts.additional),
            confidence_mode=policy.confidence.enabled,
            system_prompt=policy.prompts.system_prompt,
        ),
    )


class LlmGateway:
    """Sends one review request per file through *reviewer* and normalizes the result.

    *reviewer* is any object exposing ``async review(request)`` that returns a
    ``ReviewResponse`` or a ``{"threads": [...]}`` mapping. Exceptions raised by
    the reviewer are not caught.
    """

    def __init__(self, reviewer):
        self.reviewer = reviewer

    async def review(
        self,
        file_path: str,
        diff: str,
        exclusion_content: list[str],
        policy: ReviewPolicy,
    ) -> list[ReviewThread]:
        request = build_review_request(file_path, diff, exclusion_content, policy)
        logger.debug("Requesting review for %s (%d exclusions)", request.file_path, len(exclusion_content))
        response = await self.reviewer.review(request)

        if isinstance(response, Mapping):
            response = response_from_payload(dict(response), request.file_path, repr(dict(response)))
        elif not isinstance(response, ReviewResponse) or response.threads is None:
            response = response_from_payload(None, request.file_path, repr(response))

        threads = list(response.threads)
        for thread in threads:
            for comment in thread.comments:
                comment.confidence_score = normalize_confidence(comment.confidence_score)
        return threads
