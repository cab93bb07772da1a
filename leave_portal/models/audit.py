"""
Audit log SQLAlchemy model.
Stores who did what, to which record, when.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, Index  # type: ignore
from datetime import datetime

from leave_portal.db import Base


class AuditLog(Base):
    """
    Audit logs table - trail of caller actions.

    affected_entity_type = kind of record that was affected (EMPLOYEE, LEAVE, HOLIDAY, BALANCE).
    affected_entity_id   = primary key of that record.
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(Integer, nullable=True, comment="Employee who performed the action")
    actor_email = Column(String(255), nullable=True)
    actor_role = Column(String(20), nullable=True, comment="Role of actor at time of action")

    affected_entity_type = Column(String(50), nullable=False)
    affected_entity_id = Column(Integer, nullable=True)

    action = Column(String(100), nullable=False, comment="e.g. SUBMIT_LEAVE, APPROVE_LEAVE")
    summary = Column(Text, nullable=True, comment="Human-readable one-line description")

    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_audit_action", "action"),
        Index("idx_audit_entity", "affected_entity_type", "affected_entity_id"),
        Index("idx_audit_created_at", "created_at"),
    )
