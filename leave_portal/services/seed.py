"""
Seed logic for the first admin account.
Used by scripts/seed_admin.py; without an admin nobody can register employees.
"""
import os
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import EmployeeCreate, RoleEnum
from leave_portal.services import employee_service


# Default admin credentials
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@company.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Admin@123")
ADMIN_EMPLOYEE_CODE = os.getenv("SEED_ADMIN_EMPLOYEE_CODE", "ADMIN001")
ADMIN_NAME = os.getenv("SEED_ADMIN_NAME", "Super Admin")


async def run_seed_admin(db: AsyncSession) -> bool:
    """
    Create the default admin if not present. Does not commit.
    Returns True when an admin was created.
    """
    if await employee_service.find_by_email(db, ADMIN_EMAIL.lower()):
        return False
    await employee_service.create(db, EmployeeCreate(
        name=ADMIN_NAME,
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        role=RoleEnum.ADMIN,
        employee_code=ADMIN_EMPLOYEE_CODE,
        designation="Administrator",
        joined_date=date.today(),
    ))
    return True
