"""
Leave request lifecycle: submit, approve, reject, cancel, update, delete and comment.

States run pending -> approved | rejected | cancelled and never leave a
terminal state. Every transition is a conditional UPDATE guarded on the status
the caller observed, so two concurrent approvals cannot both succeed. Counter
changes run in the same transaction as the status change.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, func, desc, extract  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import (
    Employee, LeaveRequestModel, LeaveComment,
    LeaveTypeEnum, LeaveStatusEnum, PriorityEnum, BalanceChangeTypeEnum, RoleEnum,
    LeaveRequestCreate, LeaveRequestPatch,
)
from leave_portal.services.audit import log_action
from leave_portal.services.balance_history import adjust_taken
from leave_portal.utils.access import CallerContext, Operation, authorize, can, require_caller
from leave_portal.utils.action_log import log_user_action
from leave_portal.utils.exceptions import Conflict, NotFound, ValidationError
from leave_portal.utils.working_days import HolidayCalendar, compute_total_days

logger = logging.getLogger(__name__)

DEFAULT_REJECT_COMMENT = "Leave request rejected"
DEFAULT_CANCEL_COMMENT = "Leave request cancelled"

CLEARABLE_FIELDS = frozenset({"replacement", "emergency_contact", "half_day_period"})

# Query-string spellings used by the leave details page
LEAVE_TYPE_ALIASES = {
    "annual-leave": LeaveTypeEnum.ANNUAL,
    "sick-leave": LeaveTypeEnum.SICK,
    "fr-leave": LeaveTypeEnum.FR,
    "maternity-leave": LeaveTypeEnum.MATERNITY,
    "paternity-leave": LeaveTypeEnum.PATERNITY,
    "nopay-leave": LeaveTypeEnum.NOPAY,
}


def parse_leave_type(value: Optional[str]) -> Optional[LeaveTypeEnum]:
    """Resolve a category filter; None or "all" means no filter."""
    if value is None or value == "" or value == "all":
        return None
    if value in LEAVE_TYPE_ALIASES:
        return LEAVE_TYPE_ALIASES[value]
    try:
        return LeaveTypeEnum(value)
    except ValueError:
        raise ValidationError(f"Invalid leave type: {value}")


def parse_status(value: Optional[str]) -> Optional[LeaveStatusEnum]:
    if value is None or value == "" or value == "all":
        return None
    try:
        return LeaveStatusEnum(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}")


def _validate_request(
    leave_type: Optional[LeaveTypeEnum],
    from_date: Optional[date],
    to_date: Optional[date],
    reason: Optional[str],
    is_half_day: bool,
    half_day_period,
    priority: PriorityEnum,
    today: date,
    check_backdating: bool = True,
):
    """Check a complete request; returns the half-day period to store."""
    missing = [
        name for name, value in (
            ("leave_type", leave_type), ("from_date", from_date), ("to_date", to_date),
        ) if value is None
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", {"fields": missing})
    if reason is None or not reason.strip():
        raise ValidationError("Reason is required")
    if from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")
    if check_backdating and from_date < today:
        if priority != PriorityEnum.URGENT and leave_type != LeaveTypeEnum.SICK:
            raise ValidationError("Leave cannot start in the past unless it is sick leave or urgent")
    if is_half_day:
        if half_day_period is None:
            raise ValidationError("half_day_period is required for a half-day request")
        return half_day_period
    return None


def _snapshot(leave: LeaveRequestModel) -> Dict[str, Any]:
    return {
        "leave_type": leave.leave_type,
        "from_date": leave.from_date,
        "to_date": leave.to_date,
        "total_days": leave.total_days,
        "status": leave.status,
    }


async def _load(db: AsyncSession, leave_id: int) -> LeaveRequestModel:
    result = await db.execute(
        select(LeaveRequestModel)
        .where(LeaveRequestModel.id == leave_id)
        .execution_options(populate_existing=True)
    )
    leave = result.scalar_one_or_none()
    if not leave:
        raise NotFound("Leave request not found")
    return leave


async def _transition(
    db: AsyncSession,
    leave: LeaveRequestModel,
    from_status: LeaveStatusEnum,
    new_status: LeaveStatusEnum,
    **values,
) -> None:
    """Move `leave` from `from_status` to `new_status`, or raise Conflict."""
    result = await db.execute(
        update(LeaveRequestModel)
        .where(LeaveRequestModel.id == leave.id, LeaveRequestModel.status == from_status)
        .values(status=new_status, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict(f"Leave request already processed (status: {leave.status.value})")


def _add_comment(db: AsyncSession, leave_id: int, caller: CallerContext, text: str, role: Optional[RoleEnum] = None) -> None:
    db.add(LeaveComment(
        leave_id=leave_id,
        author_id=caller.caller_id,
        role=role or caller.caller_role,
        text=text,
    ))


def _action_log(action: str, caller: CallerContext, **details) -> None:
    log_user_action(
        action,
        user_id=caller.caller_id,
        email=caller.caller_email,
        role=caller.caller_role.value,
        **details,
    )


async def submit_leave(
    db: AsyncSession,
    caller: Optional[CallerContext],
    payload: LeaveRequestCreate,
    calendar: HolidayCalendar,
    today: Optional[date] = None,
) -> LeaveRequestModel:
    """Create a pending request for the caller, or for another employee when privileged."""
    caller = require_caller(caller)
    today = today or date.today()

    half_day_period = _validate_request(
        payload.leave_type, payload.from_date, payload.to_date, payload.reason,
        payload.is_half_day, payload.half_day_period, payload.priority, today,
    )

    target = payload.model_copy(update={"employee_id": payload.employee_id or caller.caller_id})
    authorize(Operation.SUBMIT_LEAVE, caller, target, "Only admin or md can submit leave for another employee")

    result = await db.execute(select(Employee).where(Employee.id == target.employee_id))
    employee = result.scalar_one_or_none()
    if not employee:
        raise NotFound("Employee not found")
    employee_name = employee.name
    if payload.employee_name and can(Operation.SUBMIT_FOR_OTHERS, caller):
        employee_name = payload.employee_name

    leave = LeaveRequestModel(
        employee_id=employee.id,
        employee_name=employee_name,
        leave_type=payload.leave_type,
        from_date=payload.from_date,
        to_date=payload.to_date,
        total_days=compute_total_days(payload.from_date, payload.to_date, payload.is_half_day, calendar),
        is_half_day=payload.is_half_day,
        half_day_period=half_day_period,
        reason=payload.reason.strip(),
        replacement=payload.replacement,
        emergency_contact=payload.emergency_contact,
        attachment_url=payload.attachment_url,
        doctor_certificate=payload.doctor_certificate,
        priority=payload.priority,
        status=LeaveStatusEnum.PENDING,
    )
    db.add(leave)
    await db.flush()

    await log_action(
        db, "CREATE_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        new_values=_snapshot(leave),
        summary=f"{caller.caller_email} submitted {leave.leave_type.value} leave for {leave.employee_name} ({leave.total_days} days)",
    )
    await db.flush()
    _action_log(
        "SUBMITTED_LEAVE", caller,
        leave_id=leave.id, employee_id=employee.id,
        leave_type=leave.leave_type.value, total_days=leave.total_days,
    )
    return await _load(db, leave.id)


async def approve_leave(
    db: AsyncSession,
    caller: Optional[CallerContext],
    leave_id: int,
    comment: Optional[str] = None,
) -> LeaveRequestModel:
    """pending -> approved; adds total_days to the owner's taken counter for the category."""
    caller = authorize(Operation.APPROVE_LEAVE, caller, message="Only admin or md can approve leave")
    leave = await _load(db, leave_id)

    await _transition(
        db, leave, LeaveStatusEnum.PENDING, LeaveStatusEnum.APPROVED,
        approved_by=caller.caller_id, approved_at=datetime.utcnow(),
    )
    if comment and comment.strip():
        _add_comment(db, leave.id, caller, comment.strip())

    await adjust_taken(
        db, leave.employee_id, leave.leave_type, float(leave.total_days),
        BalanceChangeTypeEnum.DEDUCTION,
        related_leave_id=leave.id, changed_by=caller.caller_id,
        reason=f"Leave request #{leave.id} approved",
    )
    await log_action(
        db, "APPROVE_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        old_values={"status": leave.status},
        new_values={"status": LeaveStatusEnum.APPROVED, "comment": comment},
        summary=f"{caller.caller_email} approved leave request #{leave.id}",
    )
    await db.flush()
    _action_log("APPROVED_LEAVE", caller, leave_id=leave.id, employee_id=leave.employee_id)
    return await _load(db, leave.id)


async def reject_leave(
    db: AsyncSession,
    caller: Optional[CallerContext],
    leave_id: int,
    comment: Optional[str] = None,
) -> LeaveRequestModel:
    """pending -> rejected, always leaving a comment behind."""
    caller = authorize(Operation.REJECT_LEAVE, caller, message="Only admin or md can reject leave")
    leave = await _load(db, leave_id)

    await _transition(
        db, leave, LeaveStatusEnum.PENDING, LeaveStatusEnum.REJECTED,
        rejected_by=caller.caller_id, rejected_at=datetime.utcnow(),
    )
    text = comment.strip() if comment and comment.strip() else DEFAULT_REJECT_COMMENT
    _add_comment(db, leave.id, caller, text)

    await log_action(
        db, "REJECT_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        old_values={"status": leave.status},
        new_values={"status": LeaveStatusEnum.REJECTED, "comment": text},
        summary=f"{caller.caller_email} rejected leave request #{leave.id}",
    )
    await db.flush()
    _action_log("REJECTED_LEAVE", caller, leave_id=leave.id, employee_id=leave.employee_id)
    return await _load(db, leave.id)


def can_be_cancelled(leave: LeaveRequestModel, today: date) -> bool:
    """Pending requests, and approved ones that have not started yet."""
    if leave.status == LeaveStatusEnum.PENDING:
        return True
    return leave.status == LeaveStatusEnum.APPROVED and leave.from_date > today


async def cancel_leave(
    db: AsyncSession,
    caller: Optional[CallerContext],
    leave_id: int,
    reason: Optional[str] = None,
    today: Optional[date] = None,
) -> LeaveRequestModel:
    """Owner cancels their request; an approved one gives its days back."""
    caller = require_caller(caller)
    today = today or date.today()
    leave = await _load(db, leave_id)
    authorize(Operation.CANCEL_LEAVE, caller, leave, "Only the owner can cancel this leave request")

    if not can_be_cancelled(leave, today):
        raise Conflict(f"Leave request cannot be cancelled (status: {leave.status.value})")

    was_approved = leave.status == LeaveStatusEnum.APPROVED
    await _transition(db, leave, leave.status, LeaveStatusEnum.CANCELLED)
    text = reason.strip() if reason and reason.strip() else DEFAULT_CANCEL_COMMENT
    _add_comment(db, leave.id, caller, text, role=RoleEnum.EMPLOYEE)

    if was_approved:
        await adjust_taken(
            db, leave.employee_id, leave.leave_type, -float(leave.total_days),
            BalanceChangeTypeEnum.REFUND,
            related_leave_id=leave.id, changed_by=caller.caller_id,
            reason=f"Approved leave request #{leave.id} cancelled",
        )
    await log_action(
        db, "CANCEL_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        old_values={"status": leave.status},
        new_values={"status": LeaveStatusEnum.CANCELLED, "comment": text},
        summary=f"{caller.caller_email} cancelled leave request #{leave.id}",
    )
    await db.flush()
    _action_log("CANCELLED_LEAVE", caller, leave_id=leave.id, refunded=was_approved)
    return await _load(db, leave.id)


async def update_leave(
    db: AsyncSession,
    caller: Optional[CallerContext],
    leave_id: int,
    patch: LeaveRequestPatch,
    calendar: HolidayCalendar,
    today: Optional[date] = None,
) -> LeaveRequestModel:
    """
    Owner edits a pending request. The merged request is validated as a whole
    before anything is written, and total_days is recomputed.
    """
    caller = require_caller(caller)
    today = today or date.today()
    leave = await _load(db, leave_id)
    authorize(Operation.UPDATE_LEAVE, caller, leave, "Only the owner can update this leave request")
    if leave.status != LeaveStatusEnum.PENDING:
        raise Conflict("Only pending leave requests can be updated")

    # Explicit nulls clear the optional fields; the required ones keep their value
    changes = {
        k: v for k, v in patch.model_dump(exclude_unset=True).items()
        if v is not None or k in CLEARABLE_FIELDS
    }
    merged = {
        "leave_type": leave.leave_type,
        "from_date": leave.from_date,
        "to_date": leave.to_date,
        "reason": leave.reason,
        "replacement": leave.replacement,
        "emergency_contact": leave.emergency_contact,
        "is_half_day": leave.is_half_day,
        "half_day_period": leave.half_day_period,
        **changes,
    }
    merged["half_day_period"] = _validate_request(
        merged["leave_type"], merged["from_date"], merged["to_date"], merged["reason"],
        merged["is_half_day"], merged["half_day_period"], leave.priority, today,
        check_backdating="from_date" in changes or "leave_type" in changes,
    )
    merged["reason"] = merged["reason"].strip()
    merged["total_days"] = compute_total_days(
        merged["from_date"], merged["to_date"], merged["is_half_day"], calendar
    )

    old_values = _snapshot(leave)
    result = await db.execute(
        update(LeaveRequestModel)
        .where(LeaveRequestModel.id == leave.id, LeaveRequestModel.status == LeaveStatusEnum.PENDING)
        .values(**merged)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict("Only pending leave requests can be updated")

    await log_action(
        db, "UPDATE_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        old_values=old_values,
        new_values=merged,
        summary=f"{caller.caller_email} updated leave request #{leave.id}",
    )
    await db.flush()
    _action_log("UPDATED_LEAVE", caller, leave_id=leave.id, fields=sorted(changes))
    return await _load(db, leave.id)


async def delete_leave(db: AsyncSession, caller: Optional[CallerContext], leave_id: int) -> None:
    """
    Owners may delete their own pending requests. Admin and md may delete any
    request; deleting an approved one gives its days back.
    """
    caller = require_caller(caller)
    leave = await _load(db, leave_id)
    authorize(Operation.DELETE_LEAVE, caller, leave, "You can only delete your own leave requests")

    privileged = can(Operation.DELETE_ANY_LEAVE, caller)
    if not privileged and leave.status != LeaveStatusEnum.PENDING:
        raise Conflict("Processed leave requests cannot be deleted; cancel instead")

    if leave.status == LeaveStatusEnum.APPROVED:
        await adjust_taken(
            db, leave.employee_id, leave.leave_type, -float(leave.total_days),
            BalanceChangeTypeEnum.REFUND,
            related_leave_id=leave.id, changed_by=caller.caller_id,
            reason=f"Approved leave request #{leave.id} deleted",
        )
    await log_action(
        db, "DELETE_LEAVE", "LEAVE",
        caller=caller,
        affected_entity_id=leave.id,
        old_values=_snapshot(leave),
        summary=f"{caller.caller_email} deleted leave request #{leave.id}",
    )
    await db.delete(leave)
    await db.flush()
    _action_log("DELETED_LEAVE", caller, leave_id=leave_id, status=leave.status.value)


async def add_comment(db: AsyncSession, caller: Optional[CallerContext], leave_id: int, text: Optional[str]) -> LeaveRequestModel:
    """Append a comment, whatever the request's status. Outside the caller's scope is NotFound."""
    caller = authorize(Operation.COMMENT_LEAVE, caller)
    if text is None or not text.strip():
        raise ValidationError("Comment text is required")
    leave = await _load(db, leave_id)
    if not can(Operation.VIEW_LEAVE, caller, leave):
        raise NotFound("Leave request not found")
    _add_comment(db, leave.id, caller, text.strip())
    await db.flush()
    _action_log("COMMENTED_LEAVE", caller, leave_id=leave.id)
    return await _load(db, leave.id)


async def get_leave(db: AsyncSession, caller: Optional[CallerContext], leave_id: int) -> LeaveRequestModel:
    """Owner or admin/md; anyone else gets NotFound."""
    caller = require_caller(caller)
    leave = await _load(db, leave_id)
    if not can(Operation.VIEW_LEAVE, caller, leave):
        raise NotFound("Leave request not found")
    return leave


async def list_leaves(
    db: AsyncSession,
    caller: Optional[CallerContext],
    status: Optional[str] = None,
    leave_type: Optional[str] = None,
    employee_id: Optional[int] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> Tuple[List[LeaveRequestModel], int]:
    """Employees see their own requests; admin and md see everyone's. Newest first."""
    caller = require_caller(caller)
    status_filter = parse_status(status)
    type_filter = parse_leave_type(leave_type)

    conditions = []
    if not can(Operation.VIEW_ALL_LEAVES, caller):
        conditions.append(LeaveRequestModel.employee_id == caller.caller_id)
    elif employee_id is not None:
        conditions.append(LeaveRequestModel.employee_id == employee_id)
    if status_filter:
        conditions.append(LeaveRequestModel.status == status_filter)
    if type_filter:
        conditions.append(LeaveRequestModel.leave_type == type_filter)

    query = (
        select(LeaveRequestModel)
        .where(*conditions)
        .order_by(desc(LeaveRequestModel.created_at), desc(LeaveRequestModel.id))
        .offset(skip)
    )
    if limit is not None:
        query = query.limit(limit)
    leaves = list((await db.execute(query)).scalars().all())
    total = (await db.execute(
        select(func.count()).select_from(LeaveRequestModel).where(*conditions)
    )).scalar() or 0
    return leaves, total


async def leave_stats(
    db: AsyncSession,
    caller: Optional[CallerContext],
    employee_id: int,
    year: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Approved days and request count per category for one calendar year."""
    caller = require_caller(caller)
    if employee_id != caller.caller_id and not can(Operation.VIEW_ALL_LEAVES, caller):
        raise NotFound("Employee not found")
    year = year or date.today().year

    result = await db.execute(
        select(
            LeaveRequestModel.leave_type,
            func.coalesce(func.sum(LeaveRequestModel.total_days), 0),
            func.count(LeaveRequestModel.id),
        )
        .where(
            LeaveRequestModel.employee_id == employee_id,
            LeaveRequestModel.status == LeaveStatusEnum.APPROVED,
            extract("year", LeaveRequestModel.from_date) == year,
        )
        .group_by(LeaveRequestModel.leave_type)
        .order_by(LeaveRequestModel.leave_type)
    )
    return [
        {"leave_type": leave_type, "total_days": float(total or 0), "count": count}
        for leave_type, total, count in result.all()
    ]
