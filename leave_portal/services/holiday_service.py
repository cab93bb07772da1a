"""
Holiday store and the effective calendar used for working-day counts.
"""
import logging
from typing import List, Optional

from sqlalchemy import select  # type: ignore
from sqlalchemy.ext.asyncio import AsyncSession  # type: ignore

from leave_portal.models import Holiday, HolidayCreate
from leave_portal.utils.exceptions import Conflict, NotFound
from leave_portal.utils.working_days import HolidayCalendar, load_holiday_calendar

logger = logging.getLogger(__name__)


async def effective_calendar(db: AsyncSession, base: Optional[HolidayCalendar] = None) -> HolidayCalendar:
    """Configured calendar plus every date in the holidays table."""
    base = base or load_holiday_calendar()
    result = await db.execute(select(Holiday.date))
    return base.with_holidays(result.scalars().all())


async def list_holidays(db: AsyncSession, year: Optional[int] = None) -> List[Holiday]:
    query = select(Holiday).order_by(Holiday.date)
    if year is not None:
        query = query.where(Holiday.year == year)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_holiday(db: AsyncSession, fields: HolidayCreate) -> Holiday:
    existing = await db.execute(select(Holiday).where(Holiday.date == fields.date))
    if existing.scalar_one_or_none():
        raise Conflict(f"A holiday already exists on {fields.date.isoformat()}")
    holiday = Holiday(
        name=fields.name.strip(),
        date=fields.date,
        year=fields.date.year,
        is_optional=fields.is_optional,
    )
    db.add(holiday)
    await db.flush()
    logger.info("Added holiday %s on %s", holiday.name, holiday.date)
    return holiday


async def delete_holiday(db: AsyncSession, holiday_id: int) -> Holiday:
    result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
    holiday = result.scalar_one_or_none()
    if not holiday:
        raise NotFound("Holiday not found")
    await db.delete(holiday)
    await db.flush()
    return holiday
