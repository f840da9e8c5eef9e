"""Job management module."""
from recruitops_core.jobs.models import (
    COMPLETED,
    FAILED,
    PENDING,
    PROCESSING,
    TERMINAL_JOB_STATES,
    BulkItem,
    BulkJob,
    ExecutorResult,
    ItemContext,
    JobProgress,
    JobStatus,
)
from recruitops_core.jobs.repo import JobStore

__all__ = [
    "JobStore",
    "BulkJob",
    "BulkItem",
    "ItemContext",
    "JobProgress",
    "JobStatus",
    "ExecutorResult",
    "PENDING",
    "PROCESSING",
    "COMPLETED",
    "FAILED",
    "TERMINAL_JOB_STATES",
]
