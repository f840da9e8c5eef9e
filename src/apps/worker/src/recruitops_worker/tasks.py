"""Bulk action task."""
import asyncio
from functools import lru_cache

import structlog

from recruitops_core.bulk import BulkServices, build_services
from recruitops_worker.settings import get_bulk_config

logger = structlog.get_logger()


@lru_cache
def get_services() -> BulkServices:
    """Services shared by every job this worker process runs."""
    return build_services(get_bulk_config(), with_queue=False)


def run_bulk_job(job_id: str) -> dict:
    """Process one bulk action job pulled from the queue."""
    logger.info("bulk_job_received", job_id=job_id)
    job = asyncio.run(get_services().orchestrator.process_job(job_id))
    return {
        "job_id": job.id,
        "status": job.status,
        "success_count": job.success_count,
        "failed_count": job.failed_count,
    }
