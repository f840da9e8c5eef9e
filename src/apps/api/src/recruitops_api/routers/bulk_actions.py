"""Bulk action endpoints."""
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from recruitops_api.dependencies import get_services
from recruitops_core.bulk import BulkServices
from recruitops_core.executors import ActionType
from recruitops_core.util import NotFoundError, ValidationError

router = APIRouter(prefix="/bulk-actions", tags=["bulk-actions"])
logger = structlog.get_logger()

CandidateId = str | int


class BulkActionCreate(BaseModel):
    """Request to run one action over many candidates."""

    action_type: str | None = None
    candidate_ids: list[CandidateId] | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    requested_by: str | None = None


class PersonalizeEmailsRequest(BaseModel):
    candidate_ids: list[CandidateId] | None = None
    template_id: str | None = None


class LinkedInConnectRequest(BaseModel):
    candidate_ids: list[CandidateId] | None = None


class AddTagsRequest(BaseModel):
    candidate_ids: list[CandidateId] | None = None
    tag: str = "bulk_contacted"


class MoveToPipelineRequest(BaseModel):
    candidate_ids: list[CandidateId] | None = None
    stage: str = "contacted"


class TemplateCreate(BaseModel):
    """Request to create a personalization template."""

    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    base_template: str = Field(..., min_length=1)
    variables: list[str] = Field(default_factory=list)


async def _create(
    services: BulkServices,
    action_type: str | None,
    candidate_ids: list[CandidateId] | None,
    parameters: dict[str, Any],
    requested_by: str | None = None,
):
    try:
        return await services.orchestrator.create_job(action_type, candidate_ids, parameters, requested_by)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/execute")
async def execute_bulk_action(body: BulkActionCreate, services: BulkServices = Depends(get_services)):
    """Accept a bulk action; processing continues in the background."""
    job = await _create(services, body.action_type, body.candidate_ids, body.parameters, body.requested_by)
    return {"job_id": job.id, "status": job.status, "total_count": job.total_count}


@router.get("/status/{job_id}")
async def get_bulk_action_status(job_id: str, services: BulkServices = Depends(get_services)):
    """Get job counters and its most recently processed items."""
    try:
        status = await services.status.aget_status(job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Job not found") from e
    return status.model_dump(by_alias=True)


@router.get("/jobs")
def list_bulk_actions(limit: int = 20, services: BulkServices = Depends(get_services)):
    """List recent jobs, active ones first."""
    jobs = services.status.list_jobs(limit=max(1, min(limit, 100)))
    return {"jobs": [j.model_dump(exclude={"parameters", "error_log"}) for j in jobs]}


@router.post("/personalize-emails")
async def personalize_emails(body: PersonalizeEmailsRequest, services: BulkServices = Depends(get_services)):
    parameters = {"template_id": body.template_id} if body.template_id else {}
    job = await _create(services, ActionType.PERSONALIZED_EMAIL.value, body.candidate_ids, parameters)
    return {"job_id": job.id, "message": f"Personalizing emails for {job.total_count} candidates"}


@router.post("/linkedin-connect")
async def linkedin_connect(body: LinkedInConnectRequest, services: BulkServices = Depends(get_services)):
    job = await _create(services, ActionType.LINKEDIN_CONNECT.value, body.candidate_ids, {})
    return {"job_id": job.id, "message": f"Creating LinkedIn messages for {job.total_count} candidates"}


@router.post("/add-tags")
async def add_tags(body: AddTagsRequest, services: BulkServices = Depends(get_services)):
    job = await _create(services, ActionType.TAG.value, body.candidate_ids, {"tag": body.tag})
    return {"job_id": job.id, "message": f"Adding tag to {job.total_count} candidates"}


@router.post("/move-to-pipeline")
async def move_to_pipeline(body: MoveToPipelineRequest, services: BulkServices = Depends(get_services)):
    job = await _create(services, ActionType.PIPELINE_MOVE.value, body.candidate_ids, {"stage": body.stage})
    return {"job_id": job.id, "message": f"Moving {job.total_count} candidates"}


@router.get("/templates")
def list_templates(type: str | None = None, services: BulkServices = Depends(get_services)):
    """List active templates, optionally of one type."""
    return {"templates": [t.model_dump() for t in services.templates.list(type)]}


@router.post("/templates")
def create_template(body: TemplateCreate, services: BulkServices = Depends(get_services)):
    """Create a personalization template."""
    try:
        template = services.templates.create(body.name, body.type, body.base_template, body.variables)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"template": template.model_dump()}
