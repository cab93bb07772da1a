import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.db import get_db
from leave_portal.models import (
    LeaveRequestCreate, LeaveRequestPatch, LeaveDecision, CommentCreate,
    LeaveRequestSchema, LeaveListResponse, LeaveStatsEntry,
)
from leave_portal.routes.auth import get_caller
from leave_portal.services import employee_service, holiday_service, leave_service, report_service
from leave_portal.services.email import notify_leave_submitted, notify_leave_decision
from leave_portal.services.report_renderers import FORMATS, render, report_filename
from leave_portal.utils.access import CallerContext
from leave_portal.utils.exceptions import ValidationError
from leave_portal.utils.id_utils import require_int_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/leaves", tags=["Leaves"])


def _schema(leave) -> LeaveRequestSchema:
    return LeaveRequestSchema.model_validate(leave)


async def _queue_decision_email(db: AsyncSession, background_tasks: BackgroundTasks, leave, comment: Optional[str]) -> None:
    if leave.employee_id is None:
        return
    owner = await employee_service.find_by_id(db, leave.employee_id)
    if not owner:
        return
    background_tasks.add_task(
        notify_leave_decision,
        to_email=owner.email,
        employee_name=leave.employee_name,
        leave_type=leave.leave_type.value,
        from_date=leave.from_date.isoformat(),
        to_date=leave.to_date.isoformat(),
        status=leave.status.value,
        comment=comment,
    )


@router.post("", response_model=LeaveRequestSchema, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: LeaveRequestCreate,
    background_tasks: BackgroundTasks,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    calendar = await holiday_service.effective_calendar(db)
    leave = await leave_service.submit_leave(db, caller, payload, calendar)

    approvers = [e for e in await employee_service.privileged_emails(db) if e != caller.caller_email]
    if approvers:
        background_tasks.add_task(
            notify_leave_submitted,
            approver_emails=approvers,
            employee_name=leave.employee_name,
            leave_type=leave.leave_type.value,
            from_date=leave.from_date.isoformat(),
            to_date=leave.to_date.isoformat(),
            total_days=leave.total_days,
            reason=leave.reason,
        )
    return _schema(leave)


@router.get("", response_model=LeaveListResponse)
async def list_leaves(
    status_filter: Optional[str] = Query(None, alias="status"),
    leave_type: Optional[str] = Query(None, alias="type"),
    employee_id: Optional[int] = None,
    skip: int = 0,
    limit: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Own requests for employees, all requests for admin/md. Newest first."""
    if skip < 0 or (limit is not None and limit < 1):
        raise ValidationError("skip must be >= 0 and limit >= 1")
    leaves, total = await leave_service.list_leaves(
        db, caller,
        status=status_filter, leave_type=leave_type, employee_id=employee_id,
        skip=skip, limit=limit,
    )
    return LeaveListResponse(leaves=[_schema(l) for l in leaves], total=total)


@router.get("/report")
async def leave_report(
    format: str = "json",
    status_filter: Optional[str] = Query(None, alias="status"),
    leave_type: Optional[str] = Query(None, alias="type"),
    date_range: Optional[str] = Query("all", alias="dateRange"),
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    employee_id: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Export leave requests. `format` is json, csv, excel or pdf; files are sent
    as attachments named leave-report-YYYY-MM-DD.<ext>.
    """
    if format != "json" and format not in FORMATS:
        raise ValidationError(f"Invalid format: {format}", {"allowed": ["json", *FORMATS]})

    rows = await report_service.project_rows(
        db, caller,
        status=status_filter, leave_type=leave_type, date_range=date_range,
        from_date=from_date, to_date=to_date, employee_id=employee_id,
    )
    if format == "json":
        return {"rows": rows, "total": len(rows)}

    media_type, _ = FORMATS[format]
    return Response(
        content=render(format, rows),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{report_filename(format)}"'},
    )


@router.get("/stats/{employee_id}", response_model=list[LeaveStatsEntry])
async def leave_stats(
    employee_id: str,
    year: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    return await leave_service.leave_stats(db, caller, require_int_id(employee_id, "employee ID"), year)


@router.get("/{leave_id}", response_model=LeaveRequestSchema)
async def get_leave(leave_id: str, caller: CallerContext = Depends(get_caller), db: AsyncSession = Depends(get_db)):
    return _schema(await leave_service.get_leave(db, caller, require_int_id(leave_id, "leave request ID")))


@router.patch("/{leave_id}", response_model=LeaveRequestSchema)
async def update_leave(
    leave_id: str,
    patch: LeaveRequestPatch,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    calendar = await holiday_service.effective_calendar(db)
    leave = await leave_service.update_leave(db, caller, require_int_id(leave_id, "leave request ID"), patch, calendar)
    return _schema(leave)


@router.delete("/{leave_id}")
async def delete_leave(leave_id: str, caller: CallerContext = Depends(get_caller), db: AsyncSession = Depends(get_db)):
    leave_id_int = require_int_id(leave_id, "leave request ID")
    await leave_service.delete_leave(db, caller, leave_id_int)
    return {"message": "Leave request deleted", "id": leave_id_int}


@router.post("/{leave_id}/approve", response_model=LeaveRequestSchema)
async def approve_leave(
    leave_id: str,
    background_tasks: BackgroundTasks,
    decision: Optional[LeaveDecision] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    comment = decision.comment if decision else None
    leave = await leave_service.approve_leave(db, caller, require_int_id(leave_id, "leave request ID"), comment)
    await _queue_decision_email(db, background_tasks, leave, comment)
    return _schema(leave)


@router.post("/{leave_id}/reject", response_model=LeaveRequestSchema)
async def reject_leave(
    leave_id: str,
    background_tasks: BackgroundTasks,
    decision: Optional[LeaveDecision] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    comment = decision.comment if decision else None
    leave = await leave_service.reject_leave(db, caller, require_int_id(leave_id, "leave request ID"), comment)
    await _queue_decision_email(db, background_tasks, leave, comment)
    return _schema(leave)


@router.post("/{leave_id}/cancel", response_model=LeaveRequestSchema)
async def cancel_leave(
    leave_id: str,
    decision: Optional[LeaveDecision] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    reason = decision.comment if decision else None
    leave = await leave_service.cancel_leave(db, caller, require_int_id(leave_id, "leave request ID"), reason)
    return _schema(leave)


@router.post("/{leave_id}/comments", response_model=LeaveRequestSchema, status_code=status.HTTP_201_CREATED)
async def add_comment(
    leave_id: str,
    body: CommentCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    leave = await leave_service.add_comment(db, caller, require_int_id(leave_id, "leave request ID"), body.text)
    return _schema(leave)
