"""Utility modules."""
from recruitops_core.util.ids import generate_id
from recruitops_core.util.time import utc_iso_seconds_ago, utc_now_iso
from recruitops_core.util.errors import (
    NotFoundError,
    QueueUnavailableError,
    RecruitOpsError,
    UnknownActionTypeError,
    ValidationError,
)

__all__ = [
    "generate_id",
    "utc_now_iso",
    "utc_iso_seconds_ago",
    "RecruitOpsError",
    "ValidationError",
    "NotFoundError",
    "UnknownActionTypeError",
    "QueueUnavailableError",
]
