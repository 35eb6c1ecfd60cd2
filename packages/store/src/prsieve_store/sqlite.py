"""SQLiteStore: local file-based review history.

Schema:
  reviews: one row per completed review run; the posted comments are kept
             as a JSON column so reads need no JOIN.
"""

from __future__ import annotations

import json
import logging
import sqlite3

from prsieve_store.base import BaseStore
from prsieve_store.models import CommentRecord, ReviewRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS reviews (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    repo            TEXT NOT NULL,
    pr_number       INTEGER NOT NULL,
    head_sha        TEXT,
    reviewed_at     TEXT,
    summary         TEXT,
    total_findings  INTEGER DEFAULT 0,
    filtered_out    INTEGER DEFAULT 0,
    comments_json   TEXT DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_reviews_pr ON reviews (repo, pr_number);
"""


class SQLiteStore(BaseStore):
    """Stores review history in a local SQLite database file.

    Configure via .prsieve.yml: ``store: sqlite`` and ``store_path``.
    """

    def __init__(self, db_path: str = ".prsieve.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def save(self, record: ReviewRecord) -> None:
        comments_json = json.dumps(
            [
                {
                    "file_path": c.file_path,
                    "content": c.content,
                    "line": c.line,
                    "severity": c.severity,
                    "finding_id": c.finding_id,
                }
                for c in record.comments
            ]
        )
        self._conn.execute(
            """
            INSERT INTO reviews
              (repo, pr_number, head_sha, reviewed_at, summary,
               total_findings, filtered_out, comments_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.repo,
                record.pr_number,
                record.head_sha,
                record.reviewed_at,
                record.summary,
                record.total_findings,
                record.filtered_out,
                comments_json,
            ),
        )
        self._conn.commit()
        logger.debug("Saved review of %s#%d at %s", record.repo, record.pr_number, record.head_sha)

    def list_reviews(self, repo: str, pr_number: int | None = None) -> list[ReviewRecord]:
        # id breaks ties between runs saved within the same timestamp.
        if pr_number is not None:
            rows = self._conn.execute(
                "SELECT * FROM reviews WHERE repo=? AND pr_number=? ORDER BY reviewed_at, id",
                (repo, pr_number),
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM reviews WHERE repo=? ORDER BY reviewed_at, id",
                (repo,),
            ).fetchall()

        return [self._row_to_record(r) for r in rows]

    def close(self) -> None:
        self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ReviewRecord:
        comments_data = json.loads(row["comments_json"] or "[]")
        comments = [
            CommentRecord(
                file_path=c.get("file_path", ""),
                content=c.get("content", ""),
                line=c.get("line"),
                severity=c.get("severity", "medium"),
                finding_id=c.get("finding_id", ""),
            )
            for c in comments_data
        ]
        return ReviewRecord(
            repo=row["repo"],
            pr_number=row["pr_number"],
            head_sha=row["head_sha"] or "",
            reviewed_at=row["reviewed_at"] or "",
            summary=row["summary"] or "",
            total_findings=row["total_findings"],
            filtered_out=row["filtered_out"],
            comments=comments,
        )
