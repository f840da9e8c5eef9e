"""Optional RQ dispatch for bulk jobs."""
import asyncio
from typing import Callable, Protocol

import structlog
from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from rq import Queue

from recruitops_core.util import QueueUnavailableError

logger = structlog.get_logger()

DEFAULT_QUEUE_NAME = "bulk-actions"
WORKER_TASK = "recruitops_worker.tasks.run_bulk_job"

ErrorHandler = Callable[[Exception], None]


class QueueAdapter(Protocol):
    """What the orchestrator needs from a broker."""

    available: bool

    async def enqueue(self, job_id: str) -> None:
        ...

    def on_error(self, handler: ErrorHandler) -> None:
        ...


class RQQueueAdapter:
    """Hands bulk jobs to RQ workers.

    If Redis cannot be reached at construction the adapter marks itself
    unavailable for good instead of retrying; the orchestrator then runs
    jobs in-process.
    """

    def __init__(
        self,
        redis_url: str,
        queue_name: str = DEFAULT_QUEUE_NAME,
        job_timeout: str | int = "1h",
        connect_timeout: float = 2.0,
        connection: Redis | None = None,
    ):
        self.queue_name = queue_name
        self.job_timeout = job_timeout
        self.available = False
        self._handlers: list[ErrorHandler] = []
        self._queue: Queue | None = None
        try:
            conn = connection or Redis.from_url(
                redis_url,
                socket_connect_timeout=connect_timeout,
                socket_timeout=connect_timeout,
            )
            conn.ping()
            self._queue = Queue(queue_name, connection=conn)
            self.available = True
            logger.info("bulk_queue_ready", queue=queue_name)
        except (RedisError, OSError, ValueError) as e:
            logger.warning("bulk_queue_unavailable_running_in_process", queue=queue_name, error=str(e))

    def on_error(self, handler: ErrorHandler) -> None:
        self._handlers.append(handler)

    def _notify(self, exc: Exception):
        for handler in self._handlers:
            try:
                handler(exc)
            except Exception as handler_err:
                logger.warning("bulk_queue_error_handler_failed", error=str(handler_err))

    def disable(self):
        if self.available:
            logger.warning("bulk_queue_disabled", queue=self.queue_name)
        self.available = False

    async def enqueue(self, job_id: str) -> None:
        """Put a bulk job on the queue; raises if the broker refuses it."""
        if not self.available or self._queue is None:
            raise QueueUnavailableError("Bulk queue is unavailable")
        try:
            # job_id is passed positionally; RQ reserves the job_id kwarg for its own ID.
            await asyncio.to_thread(
                self._queue.enqueue,
                WORKER_TASK,
                job_id,
                job_id=f"bulk-{job_id}",
                job_timeout=self.job_timeout,
            )
        except (RedisConnectionError, RedisTimeoutError) as e:
            self.disable()
            self._notify(e)
            raise QueueUnavailableError(str(e)) from e
        except Exception as e:
            self._notify(e)
            raise
        logger.info("bulk_job_enqueued", job_id=job_id, queue=self.queue_name)
