"""Health check endpoint."""
from fastapi import APIRouter, Depends

from recruitops_api.dependencies import get_services
from recruitops_core.bulk import BulkServices

router = APIRouter(tags=["health"])


@router.get("/health")
def health(services: BulkServices = Depends(get_services)):
    """Health check."""
    queue = "available" if services.queue is not None and services.queue.available else "in_process"
    return {"status": "ok", "queue": queue}
