import logging
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.db import get_db
from leave_portal.models import (
    EmployeeCreate, EmployeeUpdate, EmployeeSelfUpdate, EmployeeSchema,
    EmployeeListResponse, BalanceResetRequest,
)
from leave_portal.routes.auth import get_caller
from leave_portal.services import employee_service
from leave_portal.services.audit import log_action as audit_log_action
from leave_portal.utils.access import CallerContext, Operation, authorize
from leave_portal.utils.action_log import log_user_action
from leave_portal.utils.exceptions import ValidationError
from leave_portal.utils.id_utils import require_int_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/employees", tags=["Employees"])
stats_router = APIRouter(tags=["Stats"])

MAX_PAGE_SIZE = 100


def _admin(caller: CallerContext) -> CallerContext:
    return authorize(Operation.MANAGE_EMPLOYEES, caller, message="Admin or md access required")


def _log(action: str, caller: CallerContext, **details) -> None:
    log_user_action(
        action,
        user_id=caller.caller_id, email=caller.caller_email, role=caller.caller_role.value,
        **details,
    )


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    skip: int = 0,
    limit: int = 10,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    _admin(caller)
    if skip < 0 or limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"skip must be >= 0 and limit between 1 and {MAX_PAGE_SIZE}")
    employees, total = await employee_service.list_employees(db, skip=skip, limit=limit)
    return EmployeeListResponse(
        employees=[EmployeeSchema.model_validate(e) for e in employees],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.post("", response_model=EmployeeSchema, status_code=status.HTTP_201_CREATED)
async def create_employee(
    request: Request,
    fields: EmployeeCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    _admin(caller)
    employee = await employee_service.create(db, fields)
    await audit_log_action(
        db, "CREATE_EMPLOYEE", "EMPLOYEE",
        caller=caller,
        affected_entity_id=employee.id,
        new_values={"email": employee.email, "role": employee.role, "employee_code": employee.employee_code},
        summary=f"{caller.caller_email} created employee {employee.email}",
    )
    _log("CREATED_EMPLOYEE", caller, employee_id=employee.id)
    return employee


@router.get("/me", response_model=EmployeeSchema)
async def get_me(caller: CallerContext = Depends(get_caller), db: AsyncSession = Depends(get_db)):
    return await employee_service.get_or_404(db, caller.caller_id)


@router.patch("/me", response_model=EmployeeSchema)
async def update_me(
    fields: EmployeeSelfUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Settings page: profile fields, name, password and image URL."""
    changed = sorted(fields.model_dump(exclude_unset=True, exclude_none=True))
    employee = await employee_service.update_self(db, caller.caller_id, fields)
    await audit_log_action(
        db, "UPDATE_PROFILE", "EMPLOYEE",
        caller=caller,
        affected_entity_id=employee.id,
        new_values={"fields": [f for f in changed if f != "password"], "password_changed": "password" in changed},
        summary=f"{caller.caller_email} updated their settings",
    )
    _log("UPDATED_PROFILE", caller, fields=changed)
    return employee


@router.post("/reset-balances")
async def reset_balances(
    body: BalanceResetRequest,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Start a new period: set every employee's annual and fr entitlement."""
    authorize(Operation.RESET_BALANCES, caller, message="Only admin or md can reset balances")
    updated = await employee_service.reset_category_balances(
        db,
        annual=body.annual_leave_balance,
        fr=body.fr_leave_balance,
        changed_by=caller.caller_id,
    )
    annual = employee_service.DEFAULT_ANNUAL_BALANCE if body.annual_leave_balance is None else body.annual_leave_balance
    fr = employee_service.DEFAULT_FR_BALANCE if body.fr_leave_balance is None else body.fr_leave_balance
    await audit_log_action(
        db, "RESET_BALANCES", "BALANCE",
        caller=caller,
        new_values={"annual_leave_balance": annual, "fr_leave_balance": fr, "employees_updated": updated},
        summary=f"{caller.caller_email} reset balances for {updated} employees",
    )
    _log("RESET_BALANCES", caller, employees_updated=updated, annual=annual, fr=fr)
    return {
        "message": "Leave balances reset",
        "employees_updated": updated,
        "annual_leave_balance": annual,
        "fr_leave_balance": fr,
    }


@router.get("/{employee_id}", response_model=EmployeeSchema)
async def get_employee(
    employee_id: str,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    _admin(caller)
    return await employee_service.get_or_404(db, require_int_id(employee_id, "employee ID"))


@router.put("/{employee_id}", response_model=EmployeeSchema)
async def update_employee(
    employee_id: str,
    fields: EmployeeUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    _admin(caller)
    employee_id_int = require_int_id(employee_id, "employee ID")
    changed = sorted(fields.model_dump(exclude_unset=True, exclude_none=True))
    employee = await employee_service.update_employee(db, employee_id_int, fields)
    await audit_log_action(
        db, "UPDATE_EMPLOYEE", "EMPLOYEE",
        caller=caller,
        affected_entity_id=employee.id,
        new_values={"fields": [f for f in changed if f != "password"], "password_changed": "password" in changed},
        summary=f"{caller.caller_email} updated employee {employee.email}",
    )
    _log("UPDATED_EMPLOYEE", caller, employee_id=employee.id, fields=changed)
    return employee


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: str,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    _admin(caller)
    employee = await employee_service.delete(db, require_int_id(employee_id, "employee ID"))
    await audit_log_action(
        db, "DELETE_EMPLOYEE", "EMPLOYEE",
        caller=caller,
        affected_entity_id=employee.id,
        old_values={"email": employee.email, "name": employee.name, "employee_code": employee.employee_code},
        summary=f"{caller.caller_email} deleted employee {employee.email}",
    )
    _log("DELETED_EMPLOYEE", caller, employee_id=employee.id)
    return {"message": "Employee deleted", "id": employee.id}


@stats_router.get("/stats")
async def get_stats(caller: CallerContext = Depends(get_caller), db: AsyncSession = Depends(get_db)):
    """Dashboard counters for admin and md."""
    authorize(Operation.VIEW_STATS, caller, message="Admin or md access required")
    return await employee_service.stats(db)
