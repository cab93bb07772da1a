"""
Leave counter changes: atomic SQL increments plus a balance_history row per change.
"""
from typing import Optional
from sqlalchemy import update  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import Employee, BalanceHistory, get_taken_field
from leave_portal.models.enums import LeaveTypeEnum, BalanceChangeTypeEnum


async def record_balance_change(
    db: AsyncSession,
    employee_id: int,
    leave_type: LeaveTypeEnum,
    counter: str,
    change_amount: float,
    change_type: BalanceChangeTypeEnum,
    reason: Optional[str] = None,
    related_leave_id: Optional[int] = None,
    changed_by: Optional[int] = None,
) -> None:
    """Insert a row into balance_history. Caller must commit. Zero changes are skipped."""
    change_amount = round(change_amount, 2)
    if change_amount == 0:
        return
    db.add(BalanceHistory(
        employee_id=employee_id,
        leave_type=leave_type,
        counter=counter,
        change_amount=change_amount,
        change_type=change_type,
        reason=reason,
        related_leave_id=related_leave_id,
        changed_by=changed_by,
    ))


async def adjust_taken(
    db: AsyncSession,
    employee_id: Optional[int],
    leave_type: LeaveTypeEnum,
    days: float,
    change_type: BalanceChangeTypeEnum,
    *,
    related_leave_id: Optional[int] = None,
    changed_by: Optional[int] = None,
    reason: Optional[str] = None,
) -> bool:
    """
    Add `days` (negative to refund) to the employee's taken counter for the category.

    Uses `taken = taken + :days` so concurrent approvals for the same employee
    never lose an update. Returns False when the category has no counter or the
    employee no longer exists.
    """
    taken_field = get_taken_field(leave_type)
    if not taken_field or employee_id is None or not days:
        return False

    column = getattr(Employee, taken_field)
    result = await db.execute(
        update(Employee)
        .where(Employee.id == employee_id)
        .values({taken_field: column + days})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return False

    await record_balance_change(
        db,
        employee_id,
        leave_type,
        taken_field,
        days,
        change_type,
        reason=reason,
        related_leave_id=related_leave_id,
        changed_by=changed_by,
    )
    return True
