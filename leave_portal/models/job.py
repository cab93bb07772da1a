"""
Job log SQLAlchemy model
"""
from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum, JSON, Index  # type: ignore
from datetime import datetime

from leave_portal.db import Base
from leave_portal.models.enums import JobStatusEnum


class JobLog(Base):
    """Job logs table; a SUCCESS row for a job name makes reruns no-ops"""
    __tablename__ = "job_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    job_name = Column(String(255), unique=True, nullable=False, comment="e.g. yearly_balance_reset_2026")
    executed_at = Column(DateTime, default=datetime.utcnow)
    status = Column(SQLEnum(JobStatusEnum), nullable=False)
    details = Column(JSON, nullable=True, comment="Result summary as JSON")
    executed_by = Column(String(255), nullable=True, comment="User who triggered the job")

    __table_args__ = (
        Index("idx_job_status", "job_name", "status"),
    )
