"""Candidate repository using SQLite."""
import sqlite3

import structlog
from pydantic import BaseModel, Field

from recruitops_core.db import DEFAULT_BUSY_TIMEOUT, get_conn, init_db
from recruitops_core.util import NotFoundError, generate_id, utc_now_iso

logger = structlog.get_logger()


class Candidate(BaseModel):
    """A sourced candidate."""

    id: str
    full_name: str | None = None
    email: str | None = None
    title: str | None = None
    company: str | None = None
    linkedin_url: str | None = None
    stage: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None


class CandidateRepository:
    """Reads and updates the candidate fields bulk actions work on."""

    def __init__(self, sqlite_path: str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.sqlite_path = sqlite_path
        self.busy_timeout = busy_timeout
        init_db(sqlite_path, busy_timeout)

    def _conn(self):
        return get_conn(self.sqlite_path, self.busy_timeout)

    def create(
        self,
        full_name: str | None = None,
        email: str | None = None,
        title: str | None = None,
        company: str | None = None,
        linkedin_url: str | None = None,
        stage: str | None = None,
        candidate_id: str | None = None,
    ) -> Candidate:
        """Insert a candidate."""
        candidate_id = candidate_id or generate_id()
        now = utc_now_iso()
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO candidates
                    (id, full_name, email, title, company, linkedin_url, stage, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (candidate_id, full_name, email, title, company, linkedin_url, stage, now, now),
            )
        return self.get(candidate_id)

    def _tags(self, conn: sqlite3.Connection, candidate_id: str) -> list[str]:
        rows = conn.execute(
            "SELECT tag FROM candidate_tags WHERE candidate_id = ? ORDER BY created_at, tag",
            (candidate_id,),
        ).fetchall()
        return [r["tag"] for r in rows]

    def get(self, candidate_id: str) -> Candidate:
        """Get a candidate with its tags."""
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM candidates WHERE id = ?", (candidate_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Candidate not found: {candidate_id}")
            return Candidate(**dict(row), tags=self._tags(conn, candidate_id))

    def exists(self, candidate_id: str) -> bool:
        with self._conn() as conn:
            row = conn.execute("SELECT 1 FROM candidates WHERE id = ?", (candidate_id,)).fetchone()
            return row is not None

    def add_tag(self, candidate_id: str, tag: str) -> bool:
        """Add a tag. Returns False when the candidate already had it."""
        now = utc_now_iso()
        with self._conn() as conn:
            cur = conn.execute(
                "INSERT OR IGNORE INTO candidate_tags (candidate_id, tag, created_at) VALUES (?, ?, ?)",
                (candidate_id, tag, now),
            )
            added = cur.rowcount == 1
            if added:
                conn.execute("UPDATE candidates SET updated_at = ? WHERE id = ?", (now, candidate_id))
            return added

    def list_tags(self, candidate_id: str) -> list[str]:
        with self._conn() as conn:
            return self._tags(conn, candidate_id)

    def set_stage(self, candidate_id: str, stage: str) -> bool:
        """Overwrite the pipeline stage. False if the candidate does not exist."""
        with self._conn() as conn:
            cur = conn.execute(
                "UPDATE candidates SET stage = ?, updated_at = ? WHERE id = ?",
                (stage, utc_now_iso(), candidate_id),
            )
            return cur.rowcount == 1
