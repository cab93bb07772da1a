"""
Balance history SQLAlchemy model - audit trail of leave counter changes
"""
from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, ForeignKey, Enum as SQLEnum, Index  # type: ignore
from datetime import datetime

from leave_portal.db import Base
from leave_portal.models.enums import LeaveTypeEnum, BalanceChangeTypeEnum, enum_values


class BalanceHistory(Base):
    """One row per change of an employee's balance or taken counter"""
    __tablename__ = "balance_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    leave_type = Column(SQLEnum(LeaveTypeEnum, values_callable=enum_values), nullable=False)
    counter = Column(String(50), nullable=False, comment="Employee column changed, e.g. annual_leave_taken")
    change_amount = Column(Numeric(6, 2, asdecimal=False), nullable=False, comment="Positive for addition, negative for subtraction")
    change_type = Column(SQLEnum(BalanceChangeTypeEnum, values_callable=enum_values), nullable=False)
    reason = Column(Text, nullable=True)
    related_leave_id = Column(Integer, ForeignKey("leave_requests.id", ondelete="SET NULL"), nullable=True)
    changed_by = Column(Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    changed_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_balance_employee_type", "employee_id", "leave_type"),
        Index("idx_balance_related_leave", "related_leave_id"),
    )
