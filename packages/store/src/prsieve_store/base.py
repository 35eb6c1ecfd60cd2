"""Abstract store interface.

A store is the adapter-side home of the two pieces of state that outlive a
review run: the comments already posted on a PR (fed back as previous
comments for dedup) and the last-reviewed head SHA (for incremental reviews).
The engine itself never touches a store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prsieve_store.models import CommentRecord, ReviewRecord


class BaseStore(ABC):
    """Pluggable persistence layer for review history."""

    @abstractmethod
    def save(self, record: ReviewRecord) -> None:
        """Persist a completed review record."""

    @abstractmethod
    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        """Return reviews for a repo, oldest first, optionally filtered by PR number.

        Returns an empty list if no reviews exist; never raises.
        """

    def last_reviewed_sha(self, repo: str, pr_number: int) -> str | None:
        """Head SHA of the most recent review of this PR, or None."""
        reviews = self.list_reviews(repo, pr_number)
        return reviews[-1].head_sha if reviews else None

    def previous_comments(self, repo: str, pr_number: int) -> list[CommentRecord]:
        """Every comment recorded for this PR across all of its reviews."""
        return [c for review in self.list_reviews(repo, pr_number) for c in review.comments]

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Default is a no-op so callers can always call close() safely.
        """
