"""FastAPI application entrypoint."""
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recruitops_api.dependencies import get_services
from recruitops_api.logging import configure_logging
from recruitops_api.routers import bulk_actions, candidates, health
from recruitops_api.settings import get_settings

configure_logging(get_settings().log_level)
logger = structlog.get_logger()

app = FastAPI(title="RecruitOps API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(candidates.router, prefix="/api")
app.include_router(bulk_actions.router, prefix="/api")


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    logger.info("initializing_bulk_action_services")
    services = get_services()
    stale_after = get_settings().resume_stale_after_seconds
    if stale_after is not None:
        resumed = await services.orchestrator.resume_stale_jobs(stale_after)
        if resumed:
            logger.info("bulk_jobs_resumed", count=len(resumed))


@app.on_event("shutdown")
async def shutdown():
    """Let in-process bulk jobs finish before the loop closes."""
    await get_services().orchestrator.drain()
