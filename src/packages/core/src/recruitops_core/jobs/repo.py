"""Bulk action job repository using SQLite."""
import json
import sqlite3
from typing import Any

import structlog

from recruitops_core.db import DEFAULT_BUSY_TIMEOUT, get_conn, init_db
from recruitops_core.jobs.models import (
    COMPLETED,
    FAILED,
    PENDING,
    PROCESSING,
    BulkItem,
    BulkJob,
    ExecutorResult,
    ItemContext,
    JobProgress,
)
from recruitops_core.util import NotFoundError, generate_id, utc_iso_seconds_ago, utc_now_iso

logger = structlog.get_logger()


def _job_from_row(row: sqlite3.Row, error_log: list[str]) -> BulkJob:
    data = dict(row)
    data["parameters"] = json.loads(data.get("parameters") or "{}")
    data["error_log"] = error_log
    return BulkJob(**data)


def _item_from_row(row: sqlite3.Row) -> BulkItem:
    data = dict(row)
    data.pop("position", None)
    if data.get("result"):
        data["result"] = json.loads(data["result"])
    return BulkItem(**data)


class JobStore:
    """Persists bulk action jobs and their items.

    Job counters are only ever changed by single SQL statements so that
    concurrent item completions cannot lose updates.
    """

    def __init__(self, sqlite_path: str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.sqlite_path = sqlite_path
        self.busy_timeout = busy_timeout
        init_db(sqlite_path, busy_timeout)

    def _conn(self):
        return get_conn(self.sqlite_path, self.busy_timeout)

    def create_job(
        self,
        action_type: str,
        target_ids: list[str],
        parameters: dict[str, Any],
        requested_by: str,
    ) -> BulkJob:
        """Insert a job and one item per target in a single transaction."""
        job_id = generate_id()
        now = utc_now_iso()
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO bulk_action_jobs
                    (id, action_type, status, total_count, parameters, created_by, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (job_id, action_type, PENDING, len(target_ids), json.dumps(parameters), requested_by, now),
            )
            conn.executemany(
                """
                INSERT INTO bulk_action_items
                    (id, job_id, target_entity_id, action_type, status, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (generate_id("item"), job_id, str(target_id), action_type, PENDING, position)
                    for position, target_id in enumerate(target_ids)
                ],
            )
        logger.info("bulk_job_created", job_id=job_id, action_type=action_type, total=len(target_ids))
        return self.get_job(job_id)

    def _error_log(self, conn: sqlite3.Connection, job_id: str) -> list[str]:
        rows = conn.execute(
            "SELECT message FROM bulk_action_job_errors WHERE job_id = ? ORDER BY id",
            (job_id,),
        ).fetchall()
        return [r["message"] for r in rows]

    def get_job(self, job_id: str) -> BulkJob:
        """Get a job by ID."""
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM bulk_action_jobs WHERE id = ?", (job_id,)).fetchone()
            if row is None:
                raise NotFoundError(f"Job not found: {job_id}")
            return _job_from_row(row, self._error_log(conn, job_id))

    def list_recent_jobs(self, limit: int = 20) -> list[BulkJob]:
        """List recent jobs (active first, then newest)."""
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM bulk_action_jobs
                ORDER BY
                    CASE status
                        WHEN 'processing' THEN 0
                        WHEN 'pending' THEN 1
                        ELSE 2
                    END,
                    created_at DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
            return [_job_from_row(r, self._error_log(conn, r["id"])) for r in rows]

    def list_stale_jobs(self, older_than_seconds: float) -> list[BulkJob]:
        """Jobs nobody is working on, oldest first.

        That is pending jobs created before the cutoff, and processing jobs
        whose last heartbeat is older than the cutoff.
        """
        cutoff = utc_iso_seconds_ago(older_than_seconds)
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM bulk_action_jobs
                WHERE (status = ? AND created_at < ?)
                   OR (status = ? AND COALESCE(heartbeat_at, started_at) < ?)
                ORDER BY created_at
                """,
                (PENDING, cutoff, PROCESSING, cutoff),
            ).fetchall()
            return [_job_from_row(r, self._error_log(conn, r["id"])) for r in rows]

    def mark_processing(self, job_id: str, stale_before: str | None = None) -> bool:
        """Claim a job for one run. False if someone else holds it.

        A pending job is always claimable. A processing job is claimable only
        when ``stale_before`` is given and its heartbeat is older than that.
        The counters are rebuilt from the item rows, which recovers increments
        lost by a run that died.
        """
        now = utc_now_iso()
        with self._conn() as conn:
            cur = conn.execute(
                """
                UPDATE bulk_action_jobs
                SET status = ?,
                    started_at = COALESCE(started_at, ?),
                    heartbeat_at = ?,
                    processed_count = (
                        SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status != ?
                    ),
                    success_count = (
                        SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status = ?
                    ),
                    failed_count = (
                        SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status = ?
                    )
                WHERE id = ?
                  AND (
                      status = ?
                      OR (status = ? AND ? IS NOT NULL AND COALESCE(heartbeat_at, started_at) < ?)
                  )
                """,
                (
                    PROCESSING, now, now,
                    job_id, PENDING,
                    job_id, COMPLETED,
                    job_id, FAILED,
                    job_id,
                    PENDING,
                    PROCESSING, stale_before, stale_before,
                ),
            )
            return cur.rowcount == 1

    def list_pending_items(self, job_id: str) -> list[ItemContext]:
        """Pending items in submission order, joined with candidate fields."""
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT bi.id AS item_id, bi.job_id, bi.target_entity_id AS candidate_id,
                       bi.action_type, c.id IS NOT NULL AS candidate_found,
                       c.full_name, c.email, c.title, c.company, c.linkedin_url
                FROM bulk_action_items bi
                LEFT JOIN candidates c ON c.id = bi.target_entity_id
                WHERE bi.job_id = ? AND bi.status = ?
                ORDER BY bi.position
                """,
                (job_id, PENDING),
            ).fetchall()
            return [ItemContext(**dict(r)) for r in rows]

    def list_items(self, job_id: str) -> list[BulkItem]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM bulk_action_items WHERE job_id = ? ORDER BY position",
                (job_id,),
            ).fetchall()
            return [_item_from_row(r) for r in rows]

    def list_recent_items(self, job_id: str, limit: int = 5) -> list[BulkItem]:
        """Most recently processed items first; unprocessed items last."""
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT bi.*, c.full_name
                FROM bulk_action_items bi
                LEFT JOIN candidates c ON c.id = bi.target_entity_id
                WHERE bi.job_id = ?
                ORDER BY bi.processed_at IS NULL, bi.processed_at DESC, bi.position
                LIMIT ?
                """,
                (job_id, limit),
            ).fetchall()
            return [_item_from_row(r) for r in rows]

    def update_item_result(self, item_id: str, result: ExecutorResult) -> bool:
        """Write an item's terminal state. No-op (False) if already terminal."""
        status = COMPLETED if result.success else FAILED
        content = result.content
        if content is not None and not isinstance(content, str):
            content = json.dumps(content)
        with self._conn() as conn:
            cur = conn.execute(
                """
                UPDATE bulk_action_items
                SET status = ?, result = ?, content = ?, error_message = ?, processed_at = ?
                WHERE id = ? AND status = ?
                """,
                (
                    status,
                    result.model_dump_json(),
                    content,
                    None if result.success else result.error,
                    utc_now_iso(),
                    item_id,
                    PENDING,
                ),
            )
            return cur.rowcount == 1

    def increment_job_counters(self, job_id: str, success: bool, error: str | None = None) -> JobProgress:
        """Atomically count one finished item and read the counters back.

        The read happens inside the same write transaction, so exactly one
        caller observes processed_count reaching total_count.
        """
        with self._conn() as conn:
            cur = conn.execute(
                """
                UPDATE bulk_action_jobs
                SET processed_count = processed_count + 1,
                    success_count = success_count + ?,
                    failed_count = failed_count + ?,
                    heartbeat_at = ?
                WHERE id = ? AND processed_count < total_count
                """,
                (1 if success else 0, 0 if success else 1, utc_now_iso(), job_id),
            )
            if cur.rowcount == 0:
                logger.warning("bulk_job_counter_not_incremented", job_id=job_id)
            if error:
                self._append_error(conn, job_id, error)
            row = conn.execute(
                """
                SELECT id AS job_id, total_count, processed_count, success_count, failed_count
                FROM bulk_action_jobs WHERE id = ?
                """,
                (job_id,),
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Job not found: {job_id}")
            return JobProgress(**dict(row))

    def finalize_job(self, job_id: str, final_status: str, error: str | None = None) -> bool:
        """Set the terminal status once.

        ``completed`` requires every item to be counted. ``failed`` first
        fails any items still pending so the counters add up to the total.
        """
        if final_status not in (COMPLETED, FAILED):
            raise ValueError(f"Not a terminal status: {final_status}")
        now = utc_now_iso()
        with self._conn() as conn:
            if final_status == FAILED:
                conn.execute(
                    """
                    UPDATE bulk_action_items
                    SET status = ?, error_message = ?, processed_at = ?
                    WHERE job_id = ? AND status = ?
                      AND EXISTS (
                          SELECT 1 FROM bulk_action_jobs
                          WHERE id = ? AND status IN (?, ?)
                      )
                    """,
                    (FAILED, error or "Job failed", now, job_id, PENDING, job_id, PENDING, PROCESSING),
                )
                # Counters are rebuilt from the items so they match even if an
                # earlier increment was lost.
                cur = conn.execute(
                    """
                    UPDATE bulk_action_jobs
                    SET status = ?, completed_at = ?,
                        processed_count = (
                            SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status != ?
                        ),
                        success_count = (
                            SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status = ?
                        ),
                        failed_count = (
                            SELECT COUNT(*) FROM bulk_action_items WHERE job_id = ? AND status = ?
                        )
                    WHERE id = ? AND status IN (?, ?)
                    """,
                    (
                        FAILED, now,
                        job_id, PENDING,
                        job_id, COMPLETED,
                        job_id, FAILED,
                        job_id, PENDING, PROCESSING,
                    ),
                )
            else:
                cur = conn.execute(
                    """
                    UPDATE bulk_action_jobs
                    SET status = ?, completed_at = ?
                    WHERE id = ? AND status = ? AND processed_count = total_count
                    """,
                    (COMPLETED, now, job_id, PROCESSING),
                )
            finalized = cur.rowcount == 1
            if finalized and error:
                self._append_error(conn, job_id, error)
        if finalized:
            logger.info("bulk_job_finalized", job_id=job_id, status=final_status)
        return finalized

    def _append_error(self, conn: sqlite3.Connection, job_id: str, message: str):
        conn.execute(
            "INSERT INTO bulk_action_job_errors (job_id, message, created_at) VALUES (?, ?, ?)",
            (job_id, message, utc_now_iso()),
        )
