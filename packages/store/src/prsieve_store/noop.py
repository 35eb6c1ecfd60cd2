"""No-op store, the default when no store is configured.

Using a NoOpStore rather than None lets adapters always call store.save()
and store.previous_comments() without conditional checks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prsieve_store.base import BaseStore

if TYPE_CHECKING:
    from prsieve_store.models import ReviewRecord


class NoOpStore(BaseStore):
    """Silently discards all records; every run is a first run."""

    def save(self, record: ReviewRecord) -> None:
        pass  # intentional no-op

    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        return []
