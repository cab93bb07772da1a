"""
Models package for the leave portal.

SQLAlchemy ORM models are split by domain; pydantic models live in the same
files as their corresponding SQLAlchemy models.
"""

# Enums
from .enums import (
    RoleEnum,
    LeaveTypeEnum,
    LeaveStatusEnum,
    PriorityEnum,
    HalfDayPeriodEnum,
    BalanceChangeTypeEnum,
    JobStatusEnum,
)

# SQLAlchemy Models - Employee first since the others reference it
from .employee import Employee, LEAVE_COUNTER_FIELDS, get_taken_field
from .leave import LeaveRequestModel, LeaveComment
from .holiday import Holiday
from .balance import BalanceHistory
from .audit import AuditLog
from .job import JobLog

LeaveRequest = LeaveRequestModel

# Pydantic Models
from .employee import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeSelfUpdate,
    EmployeeSchema,
    EmployeeListResponse,
    BalanceResetRequest,
)
from .leave import (
    LeaveRequestCreate,
    LeaveRequestPatch,
    LeaveDecision,
    CommentCreate,
    CommentSchema,
    LeaveRequestSchema,
    LeaveListResponse,
    LeaveStatsEntry,
)
from .holiday import HolidayCreate, HolidaySchema, CalendarSchema

__all__ = [
    # Enums
    "RoleEnum",
    "LeaveTypeEnum",
    "LeaveStatusEnum",
    "PriorityEnum",
    "HalfDayPeriodEnum",
    "BalanceChangeTypeEnum",
    "JobStatusEnum",
    # SQLAlchemy Models
    "Employee",
    "LeaveRequest",
    "LeaveRequestModel",
    "LeaveComment",
    "Holiday",
    "BalanceHistory",
    "AuditLog",
    "JobLog",
    "LEAVE_COUNTER_FIELDS",
    "get_taken_field",
    # Pydantic Models
    "EmployeeCreate",
    "EmployeeUpdate",
    "EmployeeSelfUpdate",
    "EmployeeSchema",
    "EmployeeListResponse",
    "BalanceResetRequest",
    "LeaveRequestCreate",
    "LeaveRequestPatch",
    "LeaveDecision",
    "CommentCreate",
    "CommentSchema",
    "LeaveRequestSchema",
    "LeaveListResponse",
    "LeaveStatsEntry",
    "HolidayCreate",
    "HolidaySchema",
    "CalendarSchema",
]
