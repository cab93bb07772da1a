from fastapi import APIRouter, Depends, status
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.db import get_db
from leave_portal.models import HolidayCreate, HolidaySchema, CalendarSchema
from leave_portal.routes.auth import get_caller
from leave_portal.services import holiday_service
from leave_portal.services.audit import log_action as audit_log_action
from leave_portal.utils.access import CallerContext, Operation, authorize
from leave_portal.utils.action_log import log_user_action
from leave_portal.utils.exceptions import Conflict
from leave_portal.utils.id_utils import require_int_id

router = APIRouter(prefix="/holidays", tags=["Holidays"])


@router.get("", response_model=List[HolidaySchema])
async def list_holidays(
    year: Optional[int] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    return await holiday_service.list_holidays(db, year)


@router.get("/calendar", response_model=CalendarSchema)
async def get_calendar(caller: CallerContext = Depends(get_caller), db: AsyncSession = Depends(get_db)):
    """The calendar working days are counted against: configured dates plus the table."""
    calendar = await holiday_service.effective_calendar(db)
    return CalendarSchema(
        weekly_holiday=calendar.weekly_holiday,
        public_holidays=list(calendar.public_holidays),
    )


@router.post("", response_model=HolidaySchema, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    holiday: HolidayCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    authorize(Operation.MANAGE_HOLIDAYS, caller, message="Only admin or md can manage holidays")
    new_holiday = await holiday_service.create_holiday(db, holiday)
    await audit_log_action(
        db, "CREATE_HOLIDAY", "HOLIDAY",
        caller=caller,
        affected_entity_id=new_holiday.id,
        new_values={"name": new_holiday.name, "date": new_holiday.date},
        summary=f"{caller.caller_email} added holiday {new_holiday.name} on {new_holiday.date}",
    )
    log_user_action(
        "CREATED_HOLIDAY",
        user_id=caller.caller_id, email=caller.caller_email, role=caller.caller_role.value,
        holiday_id=new_holiday.id, date=new_holiday.date.isoformat(),
    )
    return new_holiday


@router.post("/bulk")
async def bulk_create_holidays(
    holidays: List[HolidayCreate],
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Bulk import holidays. Skips duplicates based on date.
    """
    authorize(Operation.MANAGE_HOLIDAYS, caller, message="Only admin or md can manage holidays")
    inserted_count = 0
    errors = []
    for h in holidays:
        try:
            await holiday_service.create_holiday(db, h)
        except Conflict as e:
            errors.append(e.message)
            continue
        inserted_count += 1

    await audit_log_action(
        db, "BULK_CREATE_HOLIDAYS", "HOLIDAY",
        caller=caller,
        new_values={"inserted": inserted_count, "skipped": len(errors)},
        summary=f"{caller.caller_email} imported {inserted_count} holidays",
    )
    return {"success": True, "count": inserted_count, "errors": errors}


@router.delete("/{holiday_id}")
async def delete_holiday(
    holiday_id: str,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    authorize(Operation.MANAGE_HOLIDAYS, caller, message="Only admin or md can manage holidays")
    holiday = await holiday_service.delete_holiday(db, require_int_id(holiday_id, "holiday ID"))
    await audit_log_action(
        db, "DELETE_HOLIDAY", "HOLIDAY",
        caller=caller,
        affected_entity_id=holiday.id,
        old_values={"name": holiday.name, "date": holiday.date},
        summary=f"{caller.caller_email} removed holiday {holiday.name}",
    )
    return {"message": "Holiday deleted", "id": holiday.id}
