"""Record identifiers."""
import uuid


def generate_id(prefix: str | None = None) -> str:
    """Random UUID4 string, optionally as ``<prefix>-<uuid>``."""
    value = str(uuid.uuid4())
    return f"{prefix}-{value}" if prefix else value
