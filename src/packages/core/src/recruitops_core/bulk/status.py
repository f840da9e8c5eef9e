"""Read side of bulk jobs."""
import asyncio

from recruitops_core.jobs import BulkJob, JobStatus, JobStore

RECENT_ITEMS_LIMIT = 5


class StatusReporter:
    def __init__(self, store: JobStore, recent_limit: int = RECENT_ITEMS_LIMIT):
        self.store = store
        self.recent_limit = recent_limit

    def get_status(self, job_id: str) -> JobStatus:
        """Job fields plus its most recently processed items.

        Raises NotFoundError for unknown ids.
        """
        job = self.store.get_job(job_id)
        recent = self.store.list_recent_items(job_id, self.recent_limit)
        return JobStatus(**job.model_dump(), recent_items=recent)

    async def aget_status(self, job_id: str) -> JobStatus:
        return await asyncio.to_thread(self.get_status, job_id)

    def list_jobs(self, limit: int = 20) -> list[BulkJob]:
        return self.store.list_recent_jobs(limit)
