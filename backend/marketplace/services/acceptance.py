"""
Acceptance and rejection of proposals.

Accepting a proposal assigns its job. Both rows change in one transaction, and
the job row is claimed with a conditional update (``open`` -> ``assigned``), so
of several concurrent accepts on the same job exactly one commits. The others
see zero affected rows and fail with ``ConflictError``.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.errors import ConflictError, ForbiddenError, NotFoundError
from marketplace.models.job import Job, JobStatus
from marketplace.models.proposal import Proposal, ProposalStatus
from marketplace.schemas.user import Identity

logger = logging.getLogger("uvicorn.error")


def _load_owned_proposal(db: Session, identity: Identity, proposal_id: int) -> tuple[Proposal, Job]:
    proposal = db.query(Proposal).filter(Proposal.id == proposal_id).first()
    if not proposal:
        raise NotFoundError("Proposal not found")
    job = db.query(Job).filter(Job.id == proposal.job_id).first()
    if not job:
        raise NotFoundError("Job not found")
    if job.client_id != identity.id:
        raise ForbiddenError("Only the job owner can decide on its proposals")
    return proposal, job


def _transition(db: Session, model, row_id: int, expected: str, target: str) -> bool:
    changed = (
        db.query(model)
        .filter(model.id == row_id, model.status == expected)
        .update({model.status: target}, synchronize_session=False)
    )
    return changed == 1


def accept_proposal(db: Session, identity: Identity, proposal_id: int) -> Proposal:
    proposal, job = _load_owned_proposal(db, identity, proposal_id)
    if job.status != JobStatus.OPEN.value:
        raise ConflictError("Job is already assigned")
    if proposal.status != ProposalStatus.PENDING.value:
        raise ConflictError("Proposal is no longer pending")

    job_id = job.id

    try:
        if not _transition(db, Job, job_id, JobStatus.OPEN.value, JobStatus.ASSIGNED.value):
            db.rollback()
            logger.warning("Accept of proposal id=%s lost the race for job id=%s", proposal_id, job_id)
            raise ConflictError("Job is already assigned")
        if not _transition(db, Proposal, proposal_id, ProposalStatus.PENDING.value, ProposalStatus.ACCEPTED.value):
            db.rollback()
            raise ConflictError("Proposal is no longer pending")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(proposal)
    logger.info("Client id=%s accepted proposal id=%s; job id=%s assigned", identity.id, proposal.id, job_id)
    return proposal


def reject_proposal(db: Session, identity: Identity, proposal_id: int) -> Proposal:
    proposal, job = _load_owned_proposal(db, identity, proposal_id)
    if job.status != JobStatus.OPEN.value:
        raise ConflictError("Job is already assigned")
    if proposal.status != ProposalStatus.PENDING.value:
        raise ConflictError("Proposal is no longer pending")

    try:
        if not _transition(db, Proposal, proposal_id, ProposalStatus.PENDING.value, ProposalStatus.REJECTED.value):
            db.rollback()
            raise ConflictError("Proposal is no longer pending")
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(proposal)
    logger.info("Client id=%s rejected proposal id=%s", identity.id, proposal.id)
    return proposal
