"""Job models."""
from typing import Any

from pydantic import BaseModel, Field

PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"

JOB_STATES = (PENDING, PROCESSING, COMPLETED, FAILED)
TERMINAL_JOB_STATES = (COMPLETED, FAILED)
ITEM_STATES = (PENDING, COMPLETED, FAILED)


class ExecutorResult(BaseModel):
    """Outcome of one executor call for one item.

    Executors report expected business failures as ``success=False`` with an
    ``error`` message instead of raising.
    """

    success: bool
    content: Any = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, content: Any = None, **details: Any) -> "ExecutorResult":
        return cls(success=True, content=content, details=details)

    @classmethod
    def fail(cls, error: str, **details: Any) -> "ExecutorResult":
        return cls(success=False, error=error, details=details)


class BulkJob(BaseModel):
    """One bulk action request spanning many candidates."""

    id: str
    action_type: str
    status: str
    total_count: int
    processed_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_by: str
    error_log: list[str] = Field(default_factory=list)
    created_at: str | None = None
    started_at: str | None = None
    heartbeat_at: str | None = None
    completed_at: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_JOB_STATES


class BulkItem(BaseModel):
    """One candidate's unit of work within a job."""

    id: str
    job_id: str
    target_entity_id: str
    action_type: str
    status: str
    result: dict[str, Any] | None = None
    content: Any = None
    error_message: str | None = None
    processed_at: str | None = None
    full_name: str | None = None


class ItemContext(BaseModel):
    """A pending item together with the candidate fields executors read."""

    item_id: str
    job_id: str
    candidate_id: str
    action_type: str
    candidate_found: bool = False
    full_name: str | None = None
    email: str | None = None
    title: str | None = None
    company: str | None = None
    linkedin_url: str | None = None

    @property
    def first_name(self) -> str | None:
        parts = (self.full_name or "").split()
        return parts[0] if parts else None


class JobProgress(BaseModel):
    """Counters read back right after an atomic increment."""

    job_id: str
    total_count: int
    processed_count: int
    success_count: int
    failed_count: int

    @property
    def is_complete(self) -> bool:
        return self.processed_count >= self.total_count


class JobStatus(BulkJob):
    """Job status response."""

    recent_items: list[BulkItem] = Field(default_factory=list, serialization_alias="recentItems")
