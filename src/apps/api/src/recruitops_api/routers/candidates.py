"""Candidate endpoints used to seed and inspect bulk action targets."""
import sqlite3

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from recruitops_api.dependencies import get_services
from recruitops_core.bulk import BulkServices
from recruitops_core.util import NotFoundError

router = APIRouter(prefix="/candidates", tags=["candidates"])


class CandidateCreate(BaseModel):
    """Request to create a candidate."""

    id: str | None = None
    full_name: str = Field(..., min_length=1)
    email: str | None = None
    title: str | None = None
    company: str | None = None
    linkedin_url: str | None = None
    stage: str | None = None


@router.post("")
def create_candidate(body: CandidateCreate, services: BulkServices = Depends(get_services)):
    """Create a candidate."""
    try:
        candidate = services.candidates.create(
            full_name=body.full_name,
            email=body.email,
            title=body.title,
            company=body.company,
            linkedin_url=body.linkedin_url,
            stage=body.stage,
            candidate_id=body.id,
        )
    except sqlite3.IntegrityError as e:
        raise HTTPException(status_code=409, detail="Candidate already exists") from e
    return candidate.model_dump()


@router.get("/{candidate_id}")
def get_candidate(candidate_id: str, services: BulkServices = Depends(get_services)):
    """Get a candidate with its tags."""
    try:
        return services.candidates.get(candidate_id).model_dump()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Candidate not found") from e
