"""Bulk action job orchestration."""
from recruitops_core.bulk.factory import BulkConfig, BulkServices, build_services
from recruitops_core.bulk.limiter import DEFAULT_CONCURRENCY, ConcurrencyLimiter, safe_concurrency
from recruitops_core.bulk.orchestrator import IN_PROCESS, QUEUED, BulkActionOrchestrator
from recruitops_core.bulk.queue import DEFAULT_QUEUE_NAME, QueueAdapter, RQQueueAdapter
from recruitops_core.bulk.status import RECENT_ITEMS_LIMIT, StatusReporter

__all__ = [
    "BulkActionOrchestrator",
    "BulkConfig",
    "BulkServices",
    "build_services",
    "ConcurrencyLimiter",
    "DEFAULT_CONCURRENCY",
    "safe_concurrency",
    "QueueAdapter",
    "RQQueueAdapter",
    "DEFAULT_QUEUE_NAME",
    "StatusReporter",
    "RECENT_ITEMS_LIMIT",
    "QUEUED",
    "IN_PROCESS",
]
