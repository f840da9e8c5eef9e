"""RQ worker entrypoint."""
import structlog
from redis import Redis
from rq import Worker

from recruitops_worker.logging import configure_logging
from recruitops_worker.settings import get_queue_name, get_redis_url
from recruitops_worker.tasks import get_services, run_bulk_job  # noqa: F401

logger = structlog.get_logger()


def main():
    """Start the worker."""
    configure_logging()
    # Open the database and build executors before accepting jobs
    get_services()
    logger.info("bulk_worker_starting", queue=get_queue_name())

    conn = Redis.from_url(get_redis_url())
    worker = Worker([get_queue_name()], connection=conn)
    worker.work()


if __name__ == "__main__":
    main()
