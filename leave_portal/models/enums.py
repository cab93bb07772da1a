"""
Enum definitions shared by SQLAlchemy columns and pydantic schemas
"""
import enum


class RoleEnum(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"
    MD = "md"


class LeaveTypeEnum(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    NOPAY = "nopay"
    FR = "fr"


class LeaveStatusEnum(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PriorityEnum(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class HalfDayPeriodEnum(str, enum.Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"


class BalanceChangeTypeEnum(str, enum.Enum):
    DEDUCTION = "deduction"
    REFUND = "refund"
    PERIOD_RESET = "period_reset"
    MANUAL_ADJUSTMENT = "manual_adjustment"


class JobStatusEnum(str, enum.Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


def enum_values(enum_cls):
    """Store enum values (not member names) in the database."""
    return [member.value for member in enum_cls]
