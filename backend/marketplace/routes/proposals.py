from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.core.auth import get_current_freelancer, get_current_identity
from marketplace.database.deps import get_db
from marketplace.schemas.proposal import ProposalCreate, ProposalOut
from marketplace.schemas.user import Identity
from marketplace.services.acceptance import accept_proposal, reject_proposal
from marketplace.services.proposals import build_proposal_out, describe_proposal, submit_proposal

router = APIRouter(prefix="/proposals", tags=["Proposals"])


@router.post("", response_model=ProposalOut, status_code=status.HTTP_201_CREATED)
def post_proposal(
    payload: ProposalCreate,
    db: Session = Depends(get_db),
    current_freelancer: Identity = Depends(get_current_freelancer),
):
    proposal = submit_proposal(db, current_freelancer, payload.job_id, payload.amount, payload.message)
    return build_proposal_out(proposal, current_freelancer.username)


@router.post("/{proposal_id}/accept", response_model=ProposalOut)
def accept(
    proposal_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return describe_proposal(db, accept_proposal(db, identity, proposal_id))


@router.post("/{proposal_id}/reject", response_model=ProposalOut)
def reject(
    proposal_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return describe_proposal(db, reject_proposal(db, identity, proposal_id))
