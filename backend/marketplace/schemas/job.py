from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from marketplace.models.job import JobStatus


class JobCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    budget: Decimal = Field(gt=0, max_digits=12, decimal_places=2, allow_inf_nan=False)


class JobOut(BaseModel):
    id: int
    title: str
    description: str
    budget: float
    client_id: int
    client_username: Optional[str] = None
    status: JobStatus
    created_at: datetime

    class Config:
        from_attributes = True
