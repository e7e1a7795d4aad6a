from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.core.auth import get_current_client, get_current_identity
from marketplace.database.deps import get_db
from marketplace.schemas.job import JobCreate, JobOut
from marketplace.schemas.proposal import ProposalOut
from marketplace.schemas.user import Identity
from marketplace.services.jobs import build_job_out, create_job, list_jobs
from marketplace.services.proposals import list_proposals_for_job

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def post_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    current_client: Identity = Depends(get_current_client),
):
    job = create_job(db, current_client, payload.title, payload.description, payload.budget)
    return build_job_out(job, current_client.username)


@router.get("", response_model=list[JobOut])
def read_jobs(db: Session = Depends(get_db)):
    return list_jobs(db)


@router.get("/{job_id}/proposals", response_model=list[ProposalOut])
def read_job_proposals(
    job_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return list_proposals_for_job(db, job_id)
