"""Wiring for the processes that own an orchestrator."""
from dataclasses import dataclass

import structlog

from recruitops_core.bulk.limiter import DEFAULT_CONCURRENCY, ConcurrencyLimiter
from recruitops_core.bulk.orchestrator import BulkActionOrchestrator
from recruitops_core.bulk.queue import DEFAULT_QUEUE_NAME, RQQueueAdapter
from recruitops_core.bulk.status import StatusReporter
from recruitops_core.candidates import CandidateRepository
from recruitops_core.db import DEFAULT_BUSY_TIMEOUT
from recruitops_core.executors import ExecutorRegistry, build_default_registry
from recruitops_core.generation import GenerationClient
from recruitops_core.jobs import JobStore
from recruitops_core.templates import TemplateRepository

logger = structlog.get_logger()


@dataclass
class BulkConfig:
    sqlite_path: str
    redis_url: str | None = None
    disable_queue: bool = False
    queue_name: str = DEFAULT_QUEUE_NAME
    job_timeout: str | int = "1h"
    concurrency: int | str | None = DEFAULT_CONCURRENCY
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    llm_provider: str = "openai"
    llm_api_key: str | None = None
    llm_model: str | None = None
    llm_base_url: str | None = None
    generation_timeout: float = 20.0


@dataclass
class BulkServices:
    store: JobStore
    candidates: CandidateRepository
    templates: TemplateRepository
    registry: ExecutorRegistry
    orchestrator: BulkActionOrchestrator
    status: StatusReporter
    queue: RQQueueAdapter | None = None


def build_services(config: BulkConfig, with_queue: bool = True) -> BulkServices:
    """Build the store, registry, queue adapter and orchestrator.

    ``with_queue=False`` is for the worker, which only ever processes jobs.
    """
    store = JobStore(config.sqlite_path, config.busy_timeout)
    candidates = CandidateRepository(config.sqlite_path, config.busy_timeout)
    templates = TemplateRepository(config.sqlite_path, config.busy_timeout)
    generation = GenerationClient(
        provider=config.llm_provider,
        api_key=config.llm_api_key,
        model=config.llm_model,
        base_url=config.llm_base_url,
        timeout=config.generation_timeout,
    )
    registry = build_default_registry(candidates, templates, generation)

    queue = None
    if with_queue and config.redis_url and not config.disable_queue:
        queue = RQQueueAdapter(config.redis_url, config.queue_name, config.job_timeout)
    elif with_queue:
        logger.info("bulk_queue_disabled_running_in_process")

    orchestrator = BulkActionOrchestrator(
        store,
        registry,
        queue=queue,
        limiter=ConcurrencyLimiter(config.concurrency),
    )
    return BulkServices(
        store=store,
        candidates=candidates,
        templates=templates,
        registry=registry,
        orchestrator=orchestrator,
        status=StatusReporter(store),
        queue=queue,
    )
