import logging
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from marketplace.core.errors import ForbiddenError, NotFoundError, ValidationError
from marketplace.core.roles import Role, has_role
from marketplace.models.job import Job, JobStatus
from marketplace.models.user import User
from marketplace.schemas.job import JobOut
from marketplace.schemas.user import Identity

logger = logging.getLogger("uvicorn.error")

CENT = Decimal("0.01")
# Numeric(12, 2) leaves ten digits before the decimal point.
MAX_MONEY_EXPONENT = 9


def parse_money(value, label: str) -> Decimal:
    error = ValidationError(f"{label} must be a positive amount with at most two decimal places")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise error
    if not amount.is_finite() or amount <= 0 or amount.adjusted() > MAX_MONEY_EXPONENT:
        raise error
    if amount != amount.quantize(CENT):
        raise error
    return amount


def build_job_out(job: Job, client_username: str | None = None) -> JobOut:
    return JobOut(
        id=job.id,
        title=job.title,
        description=job.description,
        budget=job.budget,
        client_id=job.client_id,
        client_username=client_username,
        status=job.status,
        created_at=job.created_at,
    )


def create_job(db: Session, identity: Identity, title: str, description: str, budget) -> Job:
    if not has_role(identity, Role.CLIENT):
        raise ForbiddenError("Only clients can post jobs")
    title = str(title or "").strip()
    description = str(description or "").strip()
    if not title or not description:
        raise ValidationError("Title and description are required")
    budget = parse_money(budget, "Budget")

    job = Job(
        title=title,
        description=description,
        budget=budget,
        client_id=identity.id,
        status=JobStatus.OPEN.value,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Client id=%s posted job id=%s", identity.id, job.id)
    return job


def get_job(db: Session, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found")
    return job


def list_jobs(db: Session) -> list[JobOut]:
    rows = (
        db.query(Job, User)
        .outerjoin(User, User.id == Job.client_id)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    return [build_job_out(job, client.username if client else None) for job, client in rows]
