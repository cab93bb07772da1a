"""
Leave-related SQLAlchemy models and pydantic schemas
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Text, Numeric, ForeignKey, Enum as SQLEnum, Index  # type: ignore
from sqlalchemy.orm import relationship  # type: ignore
from datetime import datetime, date
from typing import Optional, List
from pydantic import BaseModel, Field

from leave_portal.db import Base
from leave_portal.models.enums import (
    LeaveTypeEnum, LeaveStatusEnum, PriorityEnum, HalfDayPeriodEnum, RoleEnum, enum_values
)


class LeaveRequestModel(Base):
    """Leave requests table"""
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    employee_name = Column(String(255), nullable=False, comment="Name snapshot taken at submission")
    leave_type = Column(SQLEnum(LeaveTypeEnum, values_callable=enum_values), nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    total_days = Column(Numeric(6, 2, asdecimal=False), nullable=False)
    is_half_day = Column(Boolean, nullable=False, default=False)
    half_day_period = Column(SQLEnum(HalfDayPeriodEnum, values_callable=enum_values), nullable=True)
    reason = Column(Text, nullable=False)
    replacement = Column(String(255), nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    attachment_url = Column(String(500), nullable=True)
    doctor_certificate = Column(String(500), nullable=True)
    priority = Column(SQLEnum(PriorityEnum, values_callable=enum_values), nullable=False, default=PriorityEnum.MEDIUM)
    status = Column(SQLEnum(LeaveStatusEnum, values_callable=enum_values), nullable=False, default=LeaveStatusEnum.PENDING)
    approved_by = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_by = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    comments = relationship(
        "LeaveComment",
        back_populates="leave",
        order_by="LeaveComment.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    approver = relationship("Employee", foreign_keys=[approved_by], lazy="selectin")
    rejecter = relationship("Employee", foreign_keys=[rejected_by], lazy="selectin")

    __table_args__ = (
        Index("idx_leave_employee_status", "employee_id", "status"),
        Index("idx_leave_dates", "from_date", "to_date"),
        Index("idx_leave_type", "leave_type"),
        Index("idx_leave_created_at", "created_at"),
    )


class LeaveComment(Base):
    """Leave comments table (append-only)"""
    __tablename__ = "leave_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    leave_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    role = Column(SQLEnum(RoleEnum, values_callable=enum_values), nullable=False, comment="Author role at time of comment")
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    leave = relationship("LeaveRequestModel", back_populates="comments")

    __table_args__ = (
        Index("idx_comment_leave_id", "leave_id"),
    )


# Pydantic Models (for API request/response)

class LeaveRequestCreate(BaseModel):
    """Leave submission; presence and cross-field rules are checked by the lifecycle service"""
    leave_type: Optional[LeaveTypeEnum] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = None
    employee_id: Optional[int] = None
    employee_name: Optional[str] = None
    replacement: Optional[str] = None
    emergency_contact: Optional[str] = None
    attachment_url: Optional[str] = None
    doctor_certificate: Optional[str] = None
    is_half_day: bool = False
    half_day_period: Optional[HalfDayPeriodEnum] = None
    priority: PriorityEnum = PriorityEnum.MEDIUM


class LeaveRequestPatch(BaseModel):
    """Owner edit of a pending request; unset fields are left alone"""
    leave_type: Optional[LeaveTypeEnum] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: Optional[str] = None
    replacement: Optional[str] = None
    emergency_contact: Optional[str] = None
    is_half_day: Optional[bool] = None
    half_day_period: Optional[HalfDayPeriodEnum] = None


class LeaveDecision(BaseModel):
    """Body for approve/reject/cancel: an optional note stored as a comment"""
    comment: Optional[str] = None


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=2000)


class CommentSchema(BaseModel):
    id: int
    author_id: Optional[int] = None
    role: RoleEnum
    text: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaveRequestSchema(BaseModel):
    """Leave request response"""
    id: int
    employee_id: Optional[int] = None
    employee_name: str
    leave_type: LeaveTypeEnum
    from_date: date
    to_date: date
    total_days: float
    is_half_day: bool
    half_day_period: Optional[HalfDayPeriodEnum] = None
    reason: str
    replacement: Optional[str] = None
    emergency_contact: Optional[str] = None
    attachment_url: Optional[str] = None
    doctor_certificate: Optional[str] = None
    priority: PriorityEnum
    status: LeaveStatusEnum
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    comments: List[CommentSchema] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LeaveListResponse(BaseModel):
    leaves: List[LeaveRequestSchema]
    total: int


class LeaveStatsEntry(BaseModel):
    leave_type: LeaveTypeEnum
    total_days: float
    count: int
