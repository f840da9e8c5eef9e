"""Worker settings."""
import os

from recruitops_core.bulk import DEFAULT_QUEUE_NAME, BulkConfig


def get_redis_url() -> str:
    """Get Redis URL from environment."""
    return os.environ.get("REDIS_URL", "redis://redis:6379/0")


def get_sqlite_path() -> str:
    return os.environ.get("SQLITE_PATH", "/data/recruitops.db")


def get_queue_name() -> str:
    return os.environ.get("BULK_QUEUE_NAME", DEFAULT_QUEUE_NAME)


def get_bulk_config() -> BulkConfig:
    """Core configuration for processing jobs in this worker."""
    provider = os.environ.get("LLM_PROVIDER", "openai")
    return BulkConfig(
        sqlite_path=get_sqlite_path(),
        concurrency=os.environ.get("BULK_ACTION_CONCURRENCY", "5"),
        busy_timeout=float(os.environ.get("SQLITE_BUSY_TIMEOUT", "30")),
        llm_provider=provider,
        llm_api_key=os.environ.get(f"{provider.upper()}_API_KEY") or None,
        llm_model=os.environ.get(f"{provider.upper()}_MODEL") or None,
        llm_base_url=os.environ.get("OLLAMA_URL") if provider == "ollama" else None,
        generation_timeout=float(os.environ.get("GENERATION_TIMEOUT", "20")),
    )
