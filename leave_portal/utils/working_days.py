"""
Working-day calculation against an explicit holiday calendar.

The organization's weekend is a single weekly holiday (Friday by default),
plus a list of public holiday dates. Callers build a HolidayCalendar and pass
it in; nothing here reads global state.
"""
import os
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import FrozenSet, Iterable, Optional

FRIDAY = 4  # date.weekday(): Monday=0 ... Sunday=6

DEFAULT_PUBLIC_HOLIDAYS = (
    "2025-01-01", "2025-03-26", "2025-04-08", "2025-05-01", "2025-06-15",
    "2025-07-26", "2025-10-03", "2025-10-28", "2025-11-03", "2025-11-11",
)

HALF_DAY = 0.5


@dataclass(frozen=True)
class HolidayCalendar:
    """Weekly holiday weekday plus a set of public holiday dates."""
    public_holidays: FrozenSet[date] = field(default_factory=frozenset)
    weekly_holiday: int = FRIDAY

    def is_holiday(self, day: date) -> bool:
        return day.weekday() == self.weekly_holiday or day in self.public_holidays

    def with_holidays(self, extra: Iterable[date]) -> "HolidayCalendar":
        """Return a calendar that also treats `extra` dates as holidays."""
        return HolidayCalendar(
            public_holidays=self.public_holidays | frozenset(extra),
            weekly_holiday=self.weekly_holiday,
        )


def parse_holiday_list(raw: Optional[str]) -> FrozenSet[date]:
    """Parse a comma-separated list of ISO dates; blank entries are skipped."""
    if not raw:
        return frozenset()
    return frozenset(date.fromisoformat(part.strip()) for part in raw.split(",") if part.strip())


def load_holiday_calendar() -> HolidayCalendar:
    """Build the configured calendar from PUBLIC_HOLIDAYS and WEEKLY_HOLIDAY."""
    raw = os.getenv("PUBLIC_HOLIDAYS", ",".join(DEFAULT_PUBLIC_HOLIDAYS))
    weekly = int(os.getenv("WEEKLY_HOLIDAY", FRIDAY))
    if not 0 <= weekly <= 6:
        raise ValueError(f"WEEKLY_HOLIDAY must be between 0 and 6, got {weekly}")
    return HolidayCalendar(public_holidays=parse_holiday_list(raw), weekly_holiday=weekly)


def count_working_days(start: date, end: date, calendar: HolidayCalendar) -> int:
    """Count days in [start, end] inclusive that are not holidays. Empty span gives 0."""
    count = 0
    current = start
    while current <= end:
        if not calendar.is_holiday(current):
            count += 1
        current += timedelta(days=1)
    return count


def compute_total_days(start: date, end: date, is_half_day: bool, calendar: HolidayCalendar) -> float:
    """Days a request consumes: a half day is always 0.5, whatever the span."""
    if is_half_day:
        return HALF_DAY
    return float(count_working_days(start, end, calendar))
