import os
import tempfile
from datetime import date, timedelta

# Point the app at a throwaway SQLite file before leave_portal is imported
_TMP_DIR = tempfile.mkdtemp(prefix="leave_portal_tests_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["MAIL_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["PUBLIC_HOLIDAYS"] = "2025-01-01"
os.environ["WEEKLY_HOLIDAY"] = "4"
os.environ["DEFAULT_ANNUAL_BALANCE"] = "30"
os.environ["DEFAULT_FR_BALANCE"] = "15"

import pytest
from httpx import ASGITransport, AsyncClient

from leave_portal.db import AsyncSessionLocal, Base, engine
from leave_portal.main import app
from leave_portal.models import Employee, EmployeeCreate, RoleEnum
from leave_portal.services import employee_service
from leave_portal.utils.security import create_access_token

DEFAULT_PASSWORD = "secret123"


def upcoming_monday(weeks_ahead: int = 1) -> date:
    """A Monday at least `weeks_ahead` weeks from today."""
    today = date.today()
    days_until_monday = (7 - today.weekday()) % 7 or 7
    return today + timedelta(days=days_until_monday + 7 * (weeks_ahead - 1))


@pytest.fixture
async def database():
    import leave_portal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_employee(database):
    """Factory: commit an employee and return it."""
    counter = {"n": 0}

    async def _create(role: RoleEnum = RoleEnum.EMPLOYEE, name: str = None, email: str = None, **fields) -> Employee:
        counter["n"] += 1
        n = counter["n"]
        async with AsyncSessionLocal() as session:
            employee = await employee_service.create(session, EmployeeCreate(
                name=name or f"{role.value.title()} {n}",
                email=email or f"{role.value}{n}@company.com",
                password=DEFAULT_PASSWORD,
                role=role,
                employee_code=fields.pop("employee_code", f"EMP{n:03d}"),
                designation=fields.pop("designation", "Officer"),
                joined_date=fields.pop("joined_date", date(2024, 1, 1)),
                **fields,
            ))
            await session.commit()
            return employee

    return _create


@pytest.fixture
def auth_headers():
    def _headers(employee: Employee) -> dict:
        token = create_access_token({"sub": employee.email, "uid": employee.id, "role": employee.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def fetch_employee(database):
    """Re-read an employee in a fresh session so counters reflect committed state."""
    async def _fetch(employee_id: int):
        async with AsyncSessionLocal() as session:
            return await session.get(Employee, employee_id)

    return _fetch


@pytest.fixture
async def admin(create_employee):
    return await create_employee(RoleEnum.ADMIN, name="Aishath Admin", email="admin@company.com", employee_code="ADM001")


@pytest.fixture
async def employee(create_employee):
    return await create_employee(RoleEnum.EMPLOYEE, name="Ibrahim Employee", email="ibrahim@company.com", employee_code="EMP100")


@pytest.fixture
async def other_employee(create_employee):
    return await create_employee(RoleEnum.EMPLOYEE, name="Mariyam Other", email="mariyam@company.com", employee_code="EMP200")


@pytest.fixture
def leave_payload():
    def _payload(**overrides) -> dict:
        start = upcoming_monday(2)
        payload = {
            "leave_type": "annual",
            "from_date": start.isoformat(),
            "to_date": (start + timedelta(days=2)).isoformat(),
            "reason": "Family trip",
        }
        payload.update(overrides)
        return payload

    return _payload
