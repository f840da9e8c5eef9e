"""Time utilities."""
from datetime import datetime, timedelta, timezone

# Fixed width so stored timestamps sort lexicographically.
ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now_iso() -> str:
    """Get current UTC time in ISO format."""
    return datetime.now(timezone.utc).strftime(ISO_FORMAT)


def utc_iso_seconds_ago(seconds: float) -> str:
    """ISO timestamp for `seconds` before now, comparable with utc_now_iso()."""
    return (datetime.now(timezone.utc) - timedelta(seconds=seconds)).strftime(ISO_FORMAT)
