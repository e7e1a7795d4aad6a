from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from marketplace.database.base import Base


class JobStatus(str, Enum):
    OPEN = "open"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("budget > 0", name="ck_job_budget_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=JobStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
