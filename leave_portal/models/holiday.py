"""
Holiday SQLAlchemy model and pydantic schemas
"""
from sqlalchemy import Column, Integer, String, Boolean, Date, Index  # type: ignore
from datetime import date
from pydantic import BaseModel, model_validator

from leave_portal.db import Base


class Holiday(Base):
    """Public holidays managed by admins, on top of the configured list"""
    __tablename__ = "holidays"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    date = Column(Date, unique=True, nullable=False)
    year = Column(Integer, nullable=False)
    is_optional = Column(Boolean, default=False)

    __table_args__ = (
        Index("idx_holiday_year", "year"),
    )


class HolidayCreate(BaseModel):
    name: str
    date: date
    is_optional: bool = False


class HolidaySchema(BaseModel):
    id: int
    name: str
    date: date
    year: int
    is_optional: bool = False

    class Config:
        from_attributes = True


class CalendarSchema(BaseModel):
    """Effective calendar: weekly holiday plus every listed public holiday"""
    weekly_holiday: int
    public_holidays: list[date]

    @model_validator(mode="after")
    def sort_dates(self):
        self.public_holidays = sorted(self.public_holidays)
        return self
