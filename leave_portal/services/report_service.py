"""
Report projection: role-scoped, filtered, flattened leave rows for export.

Rows are plain dicts keyed by REPORT_COLUMNS so every renderer (json, csv,
excel, pdf) consumes the same shape. No pagination.
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, desc  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import LeaveRequestModel
from leave_portal.services.leave_service import parse_leave_type, parse_status
from leave_portal.utils.access import CallerContext, Operation, can, require_caller
from leave_portal.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

DATE_RANGES = ("all", "thisMonth", "lastMonth", "thisYear", "custom")

# (row key, column heading)
REPORT_COLUMNS: List[Tuple[str, str]] = [
    ("employee_name", "Employee Name"),
    ("leave_type", "Leave Type"),
    ("from_date", "Start Date"),
    ("to_date", "End Date"),
    ("total_days", "Total Days"),
    ("status", "Status"),
    ("priority", "Priority"),
    ("is_half_day", "Half Day"),
    ("half_day_period", "Half Day Period"),
    ("reason", "Reason"),
    ("replacement", "Replacement"),
    ("emergency_contact", "Emergency Contact"),
    ("requested_date", "Requested Date"),
    ("approved_by", "Approved By"),
    ("approved_date", "Approved Date"),
    ("rejected_by", "Rejected By"),
    ("rejected_date", "Rejected Date"),
]


def resolve_date_range(
    selector: Optional[str],
    today: date,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Optional[Tuple[date, date]]:
    """
    Turn a named bucket into an inclusive (start, end) pair of dates.

    "all" (or no selector) gives None. "custom" needs both bounds.
    """
    selector = selector or "all"
    if selector == "all":
        return None
    if selector == "thisMonth":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if selector == "lastMonth":
        end = today.replace(day=1) - timedelta(days=1)
        return end.replace(day=1), end
    if selector == "thisYear":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if selector == "custom":
        if from_date is None or to_date is None:
            raise ValidationError("From and To dates are required for custom range")
        if from_date > to_date:
            raise ValidationError("From date must be on or before To date")
        return from_date, to_date
    raise ValidationError(f"Invalid date range: {selector}", {"allowed": list(DATE_RANGES)})


def _fmt_date(value: Optional[Any]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def project_row(leave: LeaveRequestModel) -> Dict[str, Any]:
    """Flatten one request; approver and rejecter are resolved to names."""
    return {
        "employee_name": leave.employee_name,
        "leave_type": leave.leave_type.value,
        "from_date": _fmt_date(leave.from_date),
        "to_date": _fmt_date(leave.to_date),
        "total_days": float(leave.total_days),
        "status": leave.status.value,
        "priority": leave.priority.value,
        "is_half_day": bool(leave.is_half_day),
        "half_day_period": leave.half_day_period.value if leave.half_day_period else None,
        "reason": leave.reason,
        "replacement": leave.replacement,
        "emergency_contact": leave.emergency_contact,
        "requested_date": _fmt_date(leave.created_at),
        "approved_by": leave.approver.name if leave.approver else None,
        "approved_date": _fmt_date(leave.approved_at),
        "rejected_by": leave.rejecter.name if leave.rejecter else None,
        "rejected_date": _fmt_date(leave.rejected_at),
    }


async def project_rows(
    db: AsyncSession,
    caller: Optional[CallerContext],
    status: Optional[str] = None,
    leave_type: Optional[str] = None,
    date_range: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    employee_id: Optional[int] = None,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Employees only ever get their own rows; admin and md get the full filtered
    set (optionally narrowed to one employee). Newest request first.
    """
    caller = require_caller(caller)
    today = today or date.today()
    status_filter = parse_status(status)
    type_filter = parse_leave_type(leave_type)
    bounds = resolve_date_range(date_range, today, from_date, to_date)

    conditions = []
    if not can(Operation.VIEW_ALL_LEAVES, caller):
        conditions.append(LeaveRequestModel.employee_id == caller.caller_id)
    elif employee_id is not None:
        conditions.append(LeaveRequestModel.employee_id == employee_id)
    if status_filter:
        conditions.append(LeaveRequestModel.status == status_filter)
    if type_filter:
        conditions.append(LeaveRequestModel.leave_type == type_filter)
    if bounds:
        start, end = bounds
        conditions.append(LeaveRequestModel.created_at >= datetime.combine(start, time.min))
        conditions.append(LeaveRequestModel.created_at < datetime.combine(end + timedelta(days=1), time.min))

    result = await db.execute(
        select(LeaveRequestModel)
        .where(*conditions)
        .order_by(desc(LeaveRequestModel.created_at), desc(LeaveRequestModel.id))
    )
    rows = [project_row(leave) for leave in result.scalars().all()]
    logger.info("Projected %s report rows for %s (%s)", len(rows), caller.caller_email, caller.caller_role.value)
    return rows
