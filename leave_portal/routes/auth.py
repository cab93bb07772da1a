from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from jose import JWTError
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore
from typing import Optional

from leave_portal.db import get_db
from leave_portal.models import EmployeeCreate, EmployeeSchema, RoleEnum
from leave_portal.services import employee_service
from leave_portal.services.audit import log_action as audit_log_action
from leave_portal.utils.access import CallerContext, Operation, authorize
from leave_portal.utils.action_log import log_user_action
from leave_portal.utils.exceptions import Unauthorized
from leave_portal.utils.security import verify_password, create_access_token, decode_access_token

router = APIRouter(prefix="/auth", tags=["Authentication"])

# auto_error=False so a missing token surfaces as our Unauthorized, not FastAPI's
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: RoleEnum
    employee_id: int
    name: str


async def get_caller(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CallerContext:
    """
    Resolve the caller from the bearer token.
    The role is re-read from the employee record so demotions apply immediately.
    """
    if not token:
        raise Unauthorized("Not authenticated")
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise Unauthorized()

    email = payload.get("sub")
    uid = payload.get("uid")
    if email is None or uid is None:
        raise Unauthorized()

    employee = await employee_service.find_by_id(db, int(uid))
    if not employee or employee.email != email:
        raise Unauthorized()
    return CallerContext(caller_id=employee.id, caller_role=employee.role, caller_email=employee.email)


@router.post("/login", response_model=LoginResponse)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    employee = await employee_service.find_by_email(db, form_data.username.strip().lower())
    if not employee or not verify_password(form_data.password, employee.hashed_password):
        log_user_action("LOGIN_FAILED", email=form_data.username)
        raise Unauthorized("Incorrect email or password")

    access_token = create_access_token(
        data={"sub": employee.email, "uid": employee.id, "role": employee.role.value}
    )
    log_user_action("LOGIN", user_id=employee.id, email=employee.email, role=employee.role.value)
    return LoginResponse(
        access_token=access_token,
        role=employee.role,
        employee_id=employee.id,
        name=employee.name,
    )


@router.post("/register", response_model=EmployeeSchema, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    fields: EmployeeCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Admin or md creates an employee who can log in straight away."""
    authorize(Operation.MANAGE_EMPLOYEES, caller, message="Only admin or md can register employees")
    employee = await employee_service.create(db, fields)
    await audit_log_action(
        db, "REGISTER_EMPLOYEE", "EMPLOYEE",
        caller=caller,
        affected_entity_id=employee.id,
        new_values={"email": employee.email, "role": employee.role, "employee_code": employee.employee_code},
        summary=f"{caller.caller_email} registered {employee.email} via {request.url.path}",
    )
    log_user_action(
        "REGISTERED_EMPLOYEE",
        user_id=caller.caller_id, email=caller.caller_email, role=caller.caller_role.value,
        employee_id=employee.id,
    )
    return employee
