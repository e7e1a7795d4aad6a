import logging
from typing import Optional

from sqlalchemy.orm import Session

from marketplace.core.errors import ConflictError, ForbiddenError
from marketplace.core.roles import Role, has_role
from marketplace.models.job import JobStatus
from marketplace.models.proposal import Proposal, ProposalStatus
from marketplace.models.user import User
from marketplace.schemas.proposal import ProposalOut
from marketplace.schemas.user import Identity
from marketplace.services.jobs import get_job, parse_money

logger = logging.getLogger("uvicorn.error")


def build_proposal_out(proposal: Proposal, freelancer_username: Optional[str] = None) -> ProposalOut:
    return ProposalOut(
        id=proposal.id,
        job_id=proposal.job_id,
        freelancer_id=proposal.freelancer_id,
        freelancer_username=freelancer_username,
        amount=proposal.amount,
        message=proposal.message,
        status=proposal.status,
        created_at=proposal.created_at,
    )


def describe_proposal(db: Session, proposal: Proposal) -> ProposalOut:
    freelancer = db.query(User).filter(User.id == proposal.freelancer_id).first()
    return build_proposal_out(proposal, freelancer.username if freelancer else None)


def submit_proposal(
    db: Session,
    identity: Identity,
    job_id: int,
    amount,
    message: Optional[str] = None,
) -> Proposal:
    if not has_role(identity, Role.FREELANCER):
        raise ForbiddenError("Only freelancers can submit proposals")
    amount = parse_money(amount, "Amount")

    job = get_job(db, job_id)
    if job.status != JobStatus.OPEN.value:
        raise ConflictError("Job is not open for proposals")

    proposal = Proposal(
        job_id=job.id,
        freelancer_id=identity.id,
        amount=amount,
        message=message,
        status=ProposalStatus.PENDING.value,
    )
    db.add(proposal)
    db.commit()
    db.refresh(proposal)
    logger.info("Freelancer id=%s submitted proposal id=%s on job id=%s", identity.id, proposal.id, job.id)
    return proposal


def list_proposals_for_job(db: Session, job_id: int) -> list[ProposalOut]:
    get_job(db, job_id)
    rows = (
        db.query(Proposal, User)
        .outerjoin(User, User.id == Proposal.freelancer_id)
        .filter(Proposal.job_id == job_id)
        .order_by(Proposal.created_at.asc(), Proposal.id.asc())
        .all()
    )
    return [
        build_proposal_out(proposal, freelancer.username if freelancer else None)
        for proposal, freelancer in rows
    ]
