"""API settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings

from recruitops_core.bulk import DEFAULT_CONCURRENCY, DEFAULT_QUEUE_NAME, BulkConfig


class Settings(BaseSettings):
    """Application settings."""

    sqlite_path: str = "/data/recruitops.db"
    sqlite_busy_timeout: float = 30.0
    redis_url: str | None = "redis://redis:6379/0"
    bulk_disable_queue: bool = False
    bulk_queue_name: str = DEFAULT_QUEUE_NAME
    bulk_job_timeout: str = "1h"
    bulk_action_concurrency: str = str(DEFAULT_CONCURRENCY)
    resume_stale_after_seconds: float | None = 300.0
    llm_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.0-flash"
    ollama_url: str = "http://ollama:11434"
    ollama_model: str = "llama3.2"
    generation_timeout: float = 20.0
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def bulk_config(self) -> BulkConfig:
        """Core configuration derived from these settings."""
        llm = {
            "openai": (self.openai_api_key, self.openai_model, None),
            "gemini": (self.gemini_api_key, self.gemini_model, None),
            "ollama": (None, self.ollama_model, self.ollama_url),
        }
        api_key, model, base_url = llm.get(self.llm_provider, (None, None, None))
        return BulkConfig(
            sqlite_path=self.sqlite_path,
            redis_url=self.redis_url,
            disable_queue=self.bulk_disable_queue,
            queue_name=self.bulk_queue_name,
            job_timeout=self.bulk_job_timeout,
            concurrency=self.bulk_action_concurrency,
            busy_timeout=self.sqlite_busy_timeout,
            llm_provider=self.llm_provider,
            llm_api_key=api_key,
            llm_model=model,
            llm_base_url=base_url,
            generation_timeout=self.generation_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings."""
    return Settings()
