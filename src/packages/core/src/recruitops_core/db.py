"""SQLite connection handling and schema."""
import os
import sqlite3
from contextlib import contextmanager

import structlog

logger = structlog.get_logger()

DEFAULT_BUSY_TIMEOUT = 30.0

SCHEMA = """
CREATE TABLE IF NOT EXISTS candidates (
    id TEXT PRIMARY KEY,
    full_name TEXT,
    email TEXT,
    title TEXT,
    company TEXT,
    linkedin_url TEXT,
    stage TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS candidate_tags (
    candidate_id TEXT NOT NULL REFERENCES candidates(id) ON DELETE CASCADE,
    tag TEXT NOT NULL,
    created_at TEXT,
    PRIMARY KEY (candidate_id, tag)
);

CREATE TABLE IF NOT EXISTS personalization_templates (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    template_type TEXT NOT NULL,
    base_template TEXT NOT NULL,
    variables TEXT NOT NULL DEFAULT '[]',
    is_active INTEGER NOT NULL DEFAULT 1,
    usage_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS bulk_action_jobs (
    id TEXT PRIMARY KEY,
    action_type TEXT NOT NULL,
    status TEXT NOT NULL,
    total_count INTEGER NOT NULL,
    processed_count INTEGER NOT NULL DEFAULT 0,
    success_count INTEGER NOT NULL DEFAULT 0,
    failed_count INTEGER NOT NULL DEFAULT 0,
    parameters TEXT NOT NULL DEFAULT '{}',
    created_by TEXT NOT NULL,
    created_at TEXT,
    started_at TEXT,
    heartbeat_at TEXT,
    completed_at TEXT,
    CHECK (processed_count = success_count + failed_count),
    CHECK (processed_count <= total_count)
);

CREATE TABLE IF NOT EXISTS bulk_action_items (
    id TEXT PRIMARY KEY,
    job_id TEXT NOT NULL REFERENCES bulk_action_jobs(id) ON DELETE CASCADE,
    target_entity_id TEXT NOT NULL,
    action_type TEXT NOT NULL,
    status TEXT NOT NULL,
    result TEXT,
    content TEXT,
    error_message TEXT,
    processed_at TEXT,
    position INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bulk_action_items_job
    ON bulk_action_items (job_id, status);

CREATE TABLE IF NOT EXISTS bulk_action_job_errors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    job_id TEXT NOT NULL REFERENCES bulk_action_jobs(id) ON DELETE CASCADE,
    message TEXT NOT NULL,
    created_at TEXT
);
"""


def _connect(path: str, timeout: float) -> sqlite3.Connection:
    # Write transactions start with BEGIN IMMEDIATE.
    conn = sqlite3.connect(path, timeout=timeout, isolation_level="IMMEDIATE")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_conn(path: str, timeout: float = DEFAULT_BUSY_TIMEOUT):
    """Get a database connection; commits on success, rolls back on error."""
    conn = _connect(path, timeout)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(path: str, timeout: float = DEFAULT_BUSY_TIMEOUT):
    """Initialize the database."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    conn = _connect(path, timeout)
    try:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.executescript(SCHEMA)
    finally:
        conn.close()
    logger.debug("database_initialized", path=path)
