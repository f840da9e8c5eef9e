"""Bulk action orchestration: accept, dispatch, process, finalize."""
import asyncio
from typing import Any

import structlog

from recruitops_core.bulk.limiter import ConcurrencyLimiter
from recruitops_core.bulk.queue import QueueAdapter
from recruitops_core.executors import ActionExecutor, ExecutorRegistry
from recruitops_core.jobs import (
    COMPLETED,
    FAILED,
    PROCESSING,
    BulkJob,
    ExecutorResult,
    ItemContext,
    JobStore,
)
from recruitops_core.tiers import TierResult, with_fallback
from recruitops_core.util import ValidationError, utc_iso_seconds_ago

logger = structlog.get_logger()

QUEUED = "queued"
IN_PROCESS = "in_process"


class BulkActionOrchestrator:
    """Creates bulk jobs and drives them to a terminal state.

    Jobs go to the queue adapter when it is available and otherwise run as
    background tasks on the current event loop. Both paths end in
    ``process_job``.
    """

    def __init__(
        self,
        store: JobStore,
        registry: ExecutorRegistry,
        queue: QueueAdapter | None = None,
        limiter: ConcurrencyLimiter | None = None,
    ):
        self.store = store
        self.registry = registry
        self.queue = queue
        self.limiter = limiter or ConcurrencyLimiter()
        self._background: set[asyncio.Task] = set()

    def validate(self, action_type: str | None, candidate_ids: list[Any] | None):
        if not action_type:
            raise ValidationError("action_type and candidate_ids are required")
        if not candidate_ids:
            raise ValidationError("action_type and candidate_ids are required")
        # Raises UnknownActionTypeError for unregistered types.
        self.registry.get(action_type)

    async def create_job(
        self,
        action_type: str,
        candidate_ids: list[Any],
        parameters: dict[str, Any] | None = None,
        requested_by: str | None = None,
    ) -> BulkJob:
        """Validate, persist the job with its items, then dispatch it."""
        self.validate(action_type, candidate_ids)
        parameters = dict(parameters or {})
        requested_by = requested_by or parameters.get("userId") or "system"
        job = await asyncio.to_thread(
            self.store.create_job,
            action_type,
            [str(c) for c in candidate_ids],
            parameters,
            str(requested_by),
        )
        await self.dispatch(job.id)
        return job

    async def dispatch(self, job_id: str) -> str:
        """Send a job to the queue, or run it here if the queue can't take it."""

        async def enqueue() -> TierResult:
            if self.queue is None or not self.queue.available:
                return TierResult(ok=False, error="queue unavailable")
            await self.queue.enqueue(job_id)
            return TierResult(ok=True, value=QUEUED)

        async def run_here(error: str | None) -> TierResult:
            logger.warning("bulk_job_running_in_process", job_id=job_id, reason=error)
            self.start_background(job_id)
            return TierResult(ok=True, value=IN_PROCESS)

        outcome = await with_fallback(enqueue, run_here, operation="bulk_dispatch")
        return outcome.value

    def start_background(self, job_id: str, reclaim_after: float | None = None) -> asyncio.Task:
        task = asyncio.create_task(self._run_background(job_id, reclaim_after))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _run_background(self, job_id: str, reclaim_after: float | None = None):
        try:
            await self.process_job(job_id, reclaim_after=reclaim_after)
        except Exception as e:
            # process_job has already recorded the failure on the job.
            logger.error("bulk_job_background_failed", job_id=job_id, error=str(e))

    async def drain(self):
        """Wait for every in-process job started by this orchestrator."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def process_job(self, job_id: str, reclaim_after: float | None = None) -> BulkJob:
        """Run every pending item of a job and finalize it.

        Used by the RQ worker and by the in-process path alike. Only the run
        that claims the job executes items; a job already being processed is
        returned untouched unless its heartbeat is older than
        ``reclaim_after`` seconds.
        """
        job = await asyncio.to_thread(self.store.get_job, job_id)
        if job.is_terminal:
            logger.info("bulk_job_already_finished", job_id=job_id, status=job.status)
            return job

        stale_before = utc_iso_seconds_ago(reclaim_after) if reclaim_after is not None else None
        claimed = await asyncio.to_thread(self.store.mark_processing, job_id, stale_before)
        if not claimed:
            job = await asyncio.to_thread(self.store.get_job, job_id)
            logger.info("bulk_job_claimed_elsewhere", job_id=job_id, status=job.status)
            return job
        logger.info("bulk_job_processing", job_id=job_id, action_type=job.action_type, total=job.total_count)

        try:
            executor = self.registry.get(job.action_type)
            items = await asyncio.to_thread(self.store.list_pending_items, job_id)
        except Exception as e:
            logger.exception("bulk_job_failed", job_id=job_id, error=str(e))
            await asyncio.to_thread(self.store.finalize_job, job_id, FAILED, str(e))
            raise

        outcomes = await asyncio.gather(
            *(self.limiter.run(self._item_task(job, executor, item)) for item in items),
            return_exceptions=True,
        )
        unrecorded = [o for o in outcomes if isinstance(o, BaseException)]
        for err in unrecorded:
            logger.error("bulk_item_not_recorded", job_id=job_id, error=str(err))

        if unrecorded:
            await asyncio.to_thread(
                self.store.finalize_job,
                job_id,
                FAILED,
                f"{len(unrecorded)} item(s) could not be recorded",
            )
        job = await asyncio.to_thread(self.store.get_job, job_id)
        if job.status == PROCESSING:
            if job.processed_count >= job.total_count:
                await asyncio.to_thread(self.store.finalize_job, job_id, COMPLETED)
                job = await asyncio.to_thread(self.store.get_job, job_id)
            else:
                # Remaining items belong to a run that still holds them.
                logger.warning(
                    "bulk_job_left_processing",
                    job_id=job_id,
                    processed=job.processed_count,
                    total=job.total_count,
                )

        logger.info(
            "bulk_job_finished",
            job_id=job_id,
            status=job.status,
            success=job.success_count,
            failed=job.failed_count,
        )
        return job

    def _item_task(self, job: BulkJob, executor: ActionExecutor, item: ItemContext):
        async def task():
            result = await self._execute_item(job, executor, item)
            await self._record_item(job, item, result)

        return task

    async def _execute_item(self, job: BulkJob, executor: ActionExecutor, item: ItemContext) -> ExecutorResult:
        try:
            result = await executor.execute(item, job.parameters)
        except Exception as e:
            logger.warning(
                "bulk_item_executor_raised",
                job_id=job.id,
                item_id=item.item_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ExecutorResult.fail(str(e) or type(e).__name__)
        if not isinstance(result, ExecutorResult):
            return ExecutorResult.fail(f"Executor returned {type(result).__name__}, expected ExecutorResult")
        return result

    async def _record_item(self, job: BulkJob, item: ItemContext, result: ExecutorResult):
        written = await asyncio.to_thread(self.store.update_item_result, item.item_id, result)
        if not written:
            logger.info("bulk_item_already_recorded", job_id=job.id, item_id=item.item_id)
            return
        error = None if result.success else f"Item {item.item_id}: {result.error}"
        progress = await asyncio.to_thread(self.store.increment_job_counters, job.id, result.success, error)
        if progress.is_complete:
            await asyncio.to_thread(self.store.finalize_job, job.id, COMPLETED)

    async def resume_stale_jobs(self, older_than_seconds: float) -> list[str]:
        """Restart jobs that were never started or whose run stopped beating.

        Pending jobs are dispatched again. Stale processing jobs are reclaimed
        and finished in this process.
        """
        stale = await asyncio.to_thread(self.store.list_stale_jobs, older_than_seconds)
        for job in stale:
            if job.status == PROCESSING:
                logger.warning("bulk_job_reclaiming", job_id=job.id, heartbeat_at=job.heartbeat_at)
                self.start_background(job.id, reclaim_after=older_than_seconds)
            else:
                logger.info("bulk_job_resuming", job_id=job.id, created_at=job.created_at)
                await self.dispatch(job.id)
        return [job.id for job in stale]
