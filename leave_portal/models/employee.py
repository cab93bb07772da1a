"""
Employee SQLAlchemy model and pydantic schemas
"""
import re
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Numeric, Enum as SQLEnum, Index  # type: ignore
from datetime import datetime, date
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from leave_portal.db import Base
from leave_portal.models.enums import RoleEnum, LeaveTypeEnum, enum_values


class Employee(Base):
    """Employees table"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(RoleEnum, values_callable=enum_values), nullable=False, default=RoleEnum.EMPLOYEE)

    # Leave counters (remaining = balance - taken)
    annual_leave_balance = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=30)
    annual_leave_taken = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=0)
    fr_leave_balance = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=15)
    fr_leave_taken = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=0)
    sick_leave_balance = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=10)
    sick_leave_taken = Column(Numeric(6, 2, asdecimal=False), nullable=False, default=0)

    # Employment
    employee_code = Column(String(50), unique=True, nullable=False, comment="Business employee ID")
    designation = Column(String(255), nullable=False)
    joined_date = Column(Date, nullable=False)
    gross_salary = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    image_url = Column(String(500), nullable=True)

    # Identity & contact
    nid = Column(String(20), nullable=True, comment="National ID or passport number")
    nationality = Column(String(100), nullable=True)
    permanent_address = Column(Text, nullable=True)
    present_address = Column(Text, nullable=True)
    emergency_contact_name = Column(String(255), nullable=True)
    emergency_contact_number = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("idx_employees_role", "role"),
        Index("idx_employees_created_at", "created_at"),
    )


# Leave categories that carry a balance/taken counter pair on Employee
LEAVE_COUNTER_FIELDS = {
    LeaveTypeEnum.ANNUAL: ("annual_leave_balance", "annual_leave_taken"),
    LeaveTypeEnum.FR: ("fr_leave_balance", "fr_leave_taken"),
    LeaveTypeEnum.SICK: ("sick_leave_balance", "sick_leave_taken"),
}


def get_taken_field(leave_type: LeaveTypeEnum) -> Optional[str]:
    """Name of the `taken` counter for a category, None for untracked categories."""
    fields = LEAVE_COUNTER_FIELDS.get(leave_type)
    return fields[1] if fields else None


# Pydantic Models (for API request/response)

MALDIVIAN_NID = re.compile(r"^[A-Z]\d{6}$")
FOREIGN_NID = re.compile(r"^[A-Z0-9]{5,20}$")
PHONE_NUMBER = re.compile(r"^[793]\d{6}$")
MIN_PASSWORD_LENGTH = 6


class ProfileValidators(BaseModel):
    """Format checks shared by every schema that accepts profile fields."""

    @field_validator("nid", mode="before", check_fields=False)
    @classmethod
    def normalize_nid(cls, v):
        if v is None or v == "":
            return None
        v = str(v).strip().upper()
        if not (MALDIVIAN_NID.match(v) or FOREIGN_NID.match(v)):
            raise ValueError("Invalid NID format. Must be Maldivian (A123456) or valid foreign ID/passport.")
        return v

    @field_validator("emergency_contact_number", mode="before", check_fields=False)
    @classmethod
    def check_phone(cls, v):
        if v is None or v == "":
            return None
        v = str(v).strip()
        if not PHONE_NUMBER.match(v):
            raise ValueError("Phone number must be 7 digits starting with 7, 9, or 3")
        return v

    @field_validator("role", mode="before", check_fields=False)
    @classmethod
    def normalize_role(cls, v):
        """Convert role to lowercase and validate"""
        if v is None:
            return None
        if isinstance(v, str):
            v_lower = v.lower().strip()
            for role_enum in RoleEnum:
                if role_enum.value == v_lower:
                    return role_enum
            raise ValueError(f"Invalid role '{v}'. Must be one of: {', '.join([r.value for r in RoleEnum])}")
        return v

    @field_validator("password", check_fields=False)
    @classmethod
    def check_password(cls, v):
        if v is not None and len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v


class EmployeeProfileFields(ProfileValidators):
    nid: Optional[str] = None
    nationality: Optional[str] = None
    permanent_address: Optional[str] = None
    present_address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    image_url: Optional[str] = None


class EmployeeCreate(EmployeeProfileFields):
    """Admin creating an employee, or registering one with login credentials"""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    role: RoleEnum = RoleEnum.EMPLOYEE
    employee_code: str = Field(..., min_length=1)
    designation: str = Field(..., min_length=1)
    joined_date: date
    gross_salary: float = 0
    annual_leave_balance: float = 30
    annual_leave_taken: float = 0
    fr_leave_balance: float = 15
    fr_leave_taken: float = 0
    sick_leave_balance: float = 10
    sick_leave_taken: float = 0


class EmployeeUpdate(EmployeeProfileFields):
    """Admin updating an employee; only supplied fields are applied"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[RoleEnum] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    joined_date: Optional[date] = None
    gross_salary: Optional[float] = None
    annual_leave_balance: Optional[float] = None
    annual_leave_taken: Optional[float] = None
    fr_leave_balance: Optional[float] = None
    fr_leave_taken: Optional[float] = None
    sick_leave_balance: Optional[float] = None
    sick_leave_taken: Optional[float] = None


class EmployeeSelfUpdate(EmployeeProfileFields):
    """Settings page: an employee editing their own record. No role or counters."""
    name: Optional[str] = None
    password: Optional[str] = None


class BalanceResetRequest(BaseModel):
    """New-period reset of entitlements; omitted values use the configured defaults"""
    annual_leave_balance: Optional[float] = Field(None, ge=0)
    fr_leave_balance: Optional[float] = Field(None, ge=0)


class EmployeeSchema(BaseModel):
    """Employee response; never carries the password hash"""
    id: int
    email: str
    name: str
    role: RoleEnum
    employee_code: str
    designation: str
    joined_date: date
    gross_salary: float = 0
    image_url: Optional[str] = None
    nid: Optional[str] = None
    nationality: Optional[str] = None
    permanent_address: Optional[str] = None
    present_address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    annual_leave_balance: float
    annual_leave_taken: float
    fr_leave_balance: float
    fr_leave_taken: float
    sick_leave_balance: float
    sick_leave_taken: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    employees: list[EmployeeSchema]
    total: int
    skip: int
    limit: int
