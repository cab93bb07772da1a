"""
Employee record store: lookup, create/update/delete and the bulk period reset.
Password hashes are written here and never returned by the schemas.
"""
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, update, or_  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import (
    Employee, LeaveRequest, LeaveStatusEnum, LeaveTypeEnum, BalanceChangeTypeEnum, RoleEnum,
    EmployeeCreate, EmployeeUpdate, EmployeeSelfUpdate,
)
from leave_portal.services.balance_history import record_balance_change
from leave_portal.utils.exceptions import Conflict, NotFound
from leave_portal.utils.security import get_password_hash

logger = logging.getLogger(__name__)

DEFAULT_ANNUAL_BALANCE = float(os.getenv("DEFAULT_ANNUAL_BALANCE", 30))
DEFAULT_FR_BALANCE = float(os.getenv("DEFAULT_FR_BALANCE", 15))


async def find_by_email(db: AsyncSession, email: str) -> Optional[Employee]:
    result = await db.execute(select(Employee).where(Employee.email == email))
    return result.scalar_one_or_none()


async def find_by_id(db: AsyncSession, employee_id: int) -> Optional[Employee]:
    result = await db.execute(select(Employee).where(Employee.id == employee_id))
    return result.scalar_one_or_none()


async def get_or_404(db: AsyncSession, employee_id: int) -> Employee:
    employee = await find_by_id(db, employee_id)
    if not employee:
        raise NotFound("Employee not found")
    return employee


async def _ensure_unique(db: AsyncSession, email: Optional[str], employee_code: Optional[str], exclude_id: Optional[int] = None) -> None:
    conditions = []
    if email:
        conditions.append(Employee.email == email)
    if employee_code:
        conditions.append(Employee.employee_code == employee_code)
    if not conditions:
        return
    query = select(Employee).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(Employee.id != exclude_id)
    result = await db.execute(query)
    existing = result.scalars().first()
    if existing is None:
        return
    if email and existing.email == email:
        raise Conflict("Email already used")
    raise Conflict(f"Employee ID {employee_code} already exists")


async def create(db: AsyncSession, fields: EmployeeCreate) -> Employee:
    """Create an employee; Conflict when the email or employee code is taken."""
    email = fields.email.lower()
    await _ensure_unique(db, email, fields.employee_code)

    data = fields.model_dump(exclude={"password"})
    data["email"] = email
    employee = Employee(**data, hashed_password=get_password_hash(fields.password))
    db.add(employee)
    await db.flush()
    logger.info("Created employee id=%s email=%s role=%s", employee.id, employee.email, employee.role.value)
    return employee


def _apply(employee: Employee, changes: Dict[str, Any]) -> None:
    password = changes.pop("password", None)
    for key, value in changes.items():
        setattr(employee, key, value)
    if password:
        employee.hashed_password = get_password_hash(password)


async def update_employee(db: AsyncSession, employee_id: int, fields: EmployeeUpdate) -> Employee:
    """Apply only the supplied fields. NotFound if absent, Conflict on a taken email/code."""
    employee = await get_or_404(db, employee_id)
    changes = fields.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
    await _ensure_unique(db, changes.get("email"), changes.get("employee_code"), exclude_id=employee_id)
    _apply(employee, changes)
    await db.flush()
    return employee


async def update_self(db: AsyncSession, employee_id: int, fields: EmployeeSelfUpdate) -> Employee:
    """Settings edit by the employee; the schema excludes role and counters."""
    employee = await get_or_404(db, employee_id)
    _apply(employee, fields.model_dump(exclude_unset=True, exclude_none=True))
    await db.flush()
    return employee


async def delete(db: AsyncSession, employee_id: int) -> Employee:
    """Hard delete. Leave requests keep their employee_name snapshot."""
    employee = await get_or_404(db, employee_id)
    await db.delete(employee)
    await db.flush()
    return employee


async def privileged_emails(db: AsyncSession) -> List[str]:
    """Addresses of everyone who can approve leave."""
    result = await db.execute(
        select(Employee.email).where(Employee.role.in_([RoleEnum.ADMIN, RoleEnum.MD]))
    )
    return list(result.scalars().all())


async def list_employees(db: AsyncSession, skip: int = 0, limit: int = 10) -> Tuple[List[Employee], int]:
    result = await db.execute(
        select(Employee).order_by(Employee.id).offset(skip).limit(limit)
    )
    employees = list(result.scalars().all())
    total = (await db.execute(select(func.count()).select_from(Employee))).scalar() or 0
    return employees, total


async def reset_category_balances(
    db: AsyncSession,
    annual: Optional[float] = None,
    fr: Optional[float] = None,
    changed_by: Optional[int] = None,
) -> int:
    """
    Set every employee's annual and fr entitlement for a new period.
    Taken counters are left alone. Returns the number of employees updated.
    """
    annual = DEFAULT_ANNUAL_BALANCE if annual is None else annual
    fr = DEFAULT_FR_BALANCE if fr is None else fr

    result = await db.execute(select(Employee.id, Employee.annual_leave_balance, Employee.fr_leave_balance))
    rows = result.all()
    for employee_id, previous_annual, previous_fr in rows:
        await record_balance_change(
            db, employee_id, LeaveTypeEnum.ANNUAL, "annual_leave_balance",
            annual - float(previous_annual or 0), BalanceChangeTypeEnum.PERIOD_RESET,
            reason="Period balance reset", changed_by=changed_by,
        )
        await record_balance_change(
            db, employee_id, LeaveTypeEnum.FR, "fr_leave_balance",
            fr - float(previous_fr or 0), BalanceChangeTypeEnum.PERIOD_RESET,
            reason="Period balance reset", changed_by=changed_by,
        )

    await db.execute(
        update(Employee)
        .values(annual_leave_balance=annual, fr_leave_balance=fr)
        .execution_options(synchronize_session=False)
    )
    logger.info("Reset balances for %s employees (annual=%s, fr=%s)", len(rows), annual, fr)
    return len(rows)


async def stats(db: AsyncSession) -> Dict[str, int]:
    """Dashboard counters."""
    total_employees = (await db.execute(select(func.count()).select_from(Employee))).scalar() or 0
    pending = (await db.execute(
        select(func.count()).select_from(LeaveRequest).where(LeaveRequest.status == LeaveStatusEnum.PENDING)
    )).scalar() or 0
    approved = (await db.execute(
        select(func.count()).select_from(LeaveRequest).where(LeaveRequest.status == LeaveStatusEnum.APPROVED)
    )).scalar() or 0
    return {
        "total_employees": total_employees,
        "pending_requests": pending,
        "approved_leaves": approved,
    }
