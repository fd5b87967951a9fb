"""Calendar window arithmetic and pixel geometry for the schedule grid."""

from datetime import date, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

WEEK_LENGTH = 7
MONTH_GRID_DAYS = 42


class CalendarMode(Enum):
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def from_string(cls, value: str) -> "CalendarMode":
        normalized = (value or "").lower().strip()
        if normalized == "week":
            return cls.WEEK
        elif normalized == "month":
            return cls.MONTH
        else:
            raise ValueError(f"Invalid calendar mode '{value}'. Must be 'week' or 'month'.")


def start_of_week(d: date) -> date:
    """Monday on or before ``d``; Sunday counts as the last day of the week."""
    return d - timedelta(days=d.isoweekday() - 1)


def week_window(d: date) -> list[date]:
    monday = start_of_week(d)
    return [monday + timedelta(days=i) for i in range(WEEK_LENGTH)]


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def month_window(d: date) -> list[date]:
    """Six Monday-start weeks fully containing the month of ``d``.

    Leading days come from the previous month, trailing days from the next,
    so the result is always 42 consecutive dates.
    """
    first = start_of_month(d)
    weekday = first.isoweekday()
    pad_start = 6 if weekday == 7 else weekday - 1
    grid_start = first - timedelta(days=pad_start)
    return [grid_start + timedelta(days=i) for i in range(MONTH_GRID_DAYS)]


def navigate(d: date, mode: CalendarMode, delta: int) -> date:
    """Move the cursor by ``delta`` weeks or months.

    Month steps clamp to the last day of the target month
    (2025-01-31 + 1 month is 2025-02-28).
    """
    if mode is CalendarMode.WEEK:
        return d + timedelta(days=WEEK_LENGTH * delta)
    return d + relativedelta(months=delta)


def vertical_offset(
    hour: int, minute: int, start_hour: int, cell_height: float
) -> float:
    """Pixels from the top of the grid to ``hour:minute``.

    Times before ``start_hour`` give a negative offset; the grid window is a
    display setting, not a filter.
    """
    return (hour - start_hour) * cell_height + (minute / 60) * cell_height


def block_height(duration_minutes: int, cell_height: float) -> float:
    return (duration_minutes / 60) * cell_height


def hour_labels(start_hour: int, end_hour: int) -> list[dict]:
    return [
        {"hour": hour, "label": f"{hour}:00"} for hour in range(start_hour, end_hour)
    ]
