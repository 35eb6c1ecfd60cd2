"""Tests for prsieve-store implementations."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from prsieve_store.factory import build_store
from prsieve_store.models import CommentRecord, ReviewRecord
from prsieve_store.noop import NoOpStore
from prsieve_store.sqlite import SQLiteStore


def _make_record(repo="owner/repo", pr_number=1, head_sha="a" * 40, reviewed_at="2026-01-01T00:00:00+00:00"):
    return ReviewRecord(
        repo=repo,
        pr_number=pr_number,
        head_sha=head_sha,
        summary="Findings: 1 (0 filtered out, total generated 1).",
        reviewed_at=reviewed_at,
        total_findings=1,
        filtered_out=0,
        comments=[
            CommentRecord(
                file_path="/src/auth.py",
                content="Missing null check",
                line=42,
                severity="high",
                finding_id="f" * 64,
            ),
        ],
    )


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestReviewRecordFromReport:
    def test_copies_findings(self):
        report = SimpleNamespace(
            summary_markdown="Findings: 1 (2 filtered out, total generated 3).",
            findings=[
                SimpleNamespace(
                    id="abc",
                    file_path="/src/a.py",
                    content="Issue",
                    line_start=7,
                    severity=SimpleNamespace(value="critical"),
                )
            ],
            filtered_out=[object(), object()],
        )
        record = ReviewRecord.from_report(report, repo="owner/repo", pr_number=5, head_sha="b" * 40)
        assert record.total_findings == 1
        assert record.filtered_out == 2
        assert record.summary.startswith("Findings: 1")
        assert record.comments == [
            CommentRecord(file_path="/src/a.py", content="Issue", line=7, severity="critical", finding_id="abc")
        ]
        assert record.reviewed_at

    def test_previous_comment_wire_form(self):
        comment = CommentRecord(file_path="/a.py", content="Issue", line=3, finding_id="abc")
        assert comment.to_previous_comment_dict() == {
            "filePath": "/a.py",
            "content": "Issue",
            "id": "abc",
            "line": 3,
        }

    def test_previous_comment_wire_form_omits_unset(self):
        assert CommentRecord(file_path="/a.py", content="Issue").to_previous_comment_dict() == {
            "filePath": "/a.py",
            "content": "Issue",
        }


# ---------------------------------------------------------------------------
# NoOpStore
# ---------------------------------------------------------------------------


class TestNoOpStore:
    def test_save_does_not_raise(self):
        NoOpStore().save(_make_record())

    def test_list_reviews_returns_empty(self):
        store = NoOpStore()
        store.save(_make_record())
        assert store.list_reviews("owner/repo") == []

    def test_every_run_is_a_first_run(self):
        store = NoOpStore()
        assert store.last_reviewed_sha("owner/repo", 1) is None
        assert store.previous_comments("owner/repo", 1) == []
        store.close()


# ---------------------------------------------------------------------------
# SQLiteStore
# ---------------------------------------------------------------------------


class TestSQLiteStore:
    def test_save_and_list(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record())

        results = store.list_reviews("owner/repo")
        assert len(results) == 1
        assert results[0].repo == "owner/repo"
        assert results[0].pr_number == 1
        assert results[0].total_findings == 1
        store.close()

    def test_list_by_pr_number(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record(pr_number=1))
        store.save(_make_record(pr_number=2))

        results = store.list_reviews("owner/repo", pr_number=1)
        assert len(results) == 1
        assert results[0].pr_number == 1
        store.close()

    def test_list_different_repo_isolated(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record(repo="owner/repo-a"))
        store.save(_make_record(repo="owner/repo-b"))

        results = store.list_reviews("owner/repo-a")
        assert len(results) == 1
        assert results[0].repo == "owner/repo-a"
        store.close()

    def test_comments_roundtrip(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record())

        comment = store.list_reviews("owner/repo")[0].comments[0]
        assert comment.file_path == "/src/auth.py"
        assert comment.line == 42
        assert comment.severity == "high"
        assert comment.content == "Missing null check"
        assert comment.finding_id == "f" * 64
        store.close()

    def test_empty_repo_returns_empty_list(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        assert store.list_reviews("owner/nonexistent") == []
        store.close()

    def test_last_reviewed_sha_is_most_recent(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record(head_sha="old", reviewed_at="2026-01-01T00:00:00+00:00"))
        store.save(_make_record(head_sha="new", reviewed_at="2026-01-02T00:00:00+00:00"))
        store.save(_make_record(pr_number=2, head_sha="other", reviewed_at="2026-01-03T00:00:00+00:00"))

        assert store.last_reviewed_sha("owner/repo", 1) == "new"
        assert store.last_reviewed_sha("owner/repo", 3) is None
        store.close()

    def test_same_timestamp_ordered_by_insertion(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record(head_sha="first"))
        store.save(_make_record(head_sha="second"))
        assert store.last_reviewed_sha("owner/repo", 1) == "second"
        store.close()

    def test_previous_comments_accumulate_across_reviews(self, tmp_path):
        store = SQLiteStore(db_path=str(tmp_path / "test.db"))
        store.save(_make_record())
        store.save(_make_record())
        store.save(_make_record(pr_number=2))

        comments = store.previous_comments("owner/repo", 1)
        assert len(comments) == 2
        assert all(c.content == "Missing null check" for c in comments)
        store.close()

    def test_persists_across_connections(self, tmp_path):
        """Data written by one SQLiteStore instance must be readable by another."""
        db_path = str(tmp_path / "test.db")
        store_a = SQLiteStore(db_path=db_path)
        store_a.save(_make_record())
        store_a.close()

        store_b = SQLiteStore(db_path=db_path)
        assert len(store_b.list_reviews("owner/repo")) == 1
        store_b.close()


# ---------------------------------------------------------------------------
# build_store
# ---------------------------------------------------------------------------


class TestBuildStore:
    def test_default_is_noop(self):
        assert isinstance(build_store({}), NoOpStore)
        assert isinstance(build_store({"store": "noop"}), NoOpStore)

    def test_sqlite_uses_store_path(self, tmp_path):
        db_path = tmp_path / "history.db"
        store = build_store({"store": "sqlite", "store_path": str(db_path)})
        assert isinstance(store, SQLiteStore)
        store.close()
        assert db_path.exists()

    def test_unknown_store_rejected(self):
        with pytest.raises(ValueError, match="store must be one of"):
            build_store({"store": "gist"})
