from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from marketplace.models.proposal import ProposalStatus


class ProposalCreate(BaseModel):
    job_id: int = Field(alias="jobId")
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2, allow_inf_nan=False)
    message: Optional[str] = None

    class Config:
        populate_by_name = True


class ProposalOut(BaseModel):
    id: int
    job_id: int
    freelancer_id: int
    freelancer_username: Optional[str] = None
    amount: float
    message: Optional[str] = None
    status: ProposalStatus
    created_at: datetime

    class Config:
        from_attributes = True
