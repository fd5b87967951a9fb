"""
Schedule grid view model.

Buckets meetings into the days of the current week or month window and, in
week mode, computes the absolute position of each meeting block inside its
day column.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence, Union

from jci_connect import calendar_math
from jci_connect.calendar_math import CalendarMode
from jci_connect.config import CalendarDisplayConfig
from jci_connect.models import Meeting
from jci_connect.timezone import AppClock, parse_time_of_day

logger = logging.getLogger(__name__)

MeetingCallback = Callable[[str], object]

WEEKDAY_LABELS = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")


@dataclass(frozen=True)
class PositionedBlock:
    meeting: Meeting
    top: float
    height: float

    @property
    def style(self) -> str:
        return f"top: {self.top:g}px; height: {self.height:g}px;"


@dataclass(frozen=True)
class DayColumn:
    date: date
    key: str
    is_today: bool
    blocks: tuple[PositionedBlock, ...]
    now_offset: Optional[float] = None

    @property
    def weekday_label(self) -> str:
        return WEEKDAY_LABELS[self.date.weekday()]


@dataclass(frozen=True)
class WeekGrid:
    days: tuple[DayColumn, ...]
    hours: tuple[int, ...]
    cell_height: int

    mode = CalendarMode.WEEK


@dataclass(frozen=True)
class MonthCell:
    date: date
    key: str
    is_today: bool
    is_current_month: bool
    meetings: tuple[Meeting, ...]
    hidden_count: int


@dataclass(frozen=True)
class MonthGrid:
    cells: tuple[MonthCell, ...]

    mode = CalendarMode.MONTH

    @property
    def weeks(self) -> list[tuple[MonthCell, ...]]:
        size = calendar_math.WEEK_LENGTH
        return [self.cells[i : i + size] for i in range(0, len(self.cells), size)]


def bucket_by_date(meetings: Sequence[Meeting]) -> dict[str, list[Meeting]]:
    """Group meetings by their stored date-key, keeping collection order."""
    buckets: dict[str, list[Meeting]] = {}
    for meeting in meetings:
        buckets.setdefault(meeting.date, []).append(meeting)
    return buckets


class GridRenderer:
    """Week/month calendar state plus the bucketing and positioning pass."""

    def __init__(
        self,
        clock: AppClock,
        display: Optional[CalendarDisplayConfig] = None,
        on_delete: Optional[MeetingCallback] = None,
        on_edit: Optional[MeetingCallback] = None,
        mode: CalendarMode = CalendarMode.WEEK,
        cursor: Optional[date] = None,
    ):
        self.clock = clock
        self.display = display or CalendarDisplayConfig()
        self.on_delete = on_delete
        self.on_edit = on_edit
        self.mode = mode
        self.cursor = cursor or clock.today_date()
        self.selected_meeting: Optional[Meeting] = None

    def navigate(self, delta: int) -> None:
        self.cursor = calendar_math.navigate(self.cursor, self.mode, delta)

    def go_to_today(self) -> None:
        self.cursor = self.clock.today_date()

    def switch_mode(self, mode: CalendarMode) -> None:
        self.mode = mode

    def select_meeting(self, meeting: Meeting) -> None:
        self.selected_meeting = meeting

    def clear_selection(self) -> None:
        self.selected_meeting = None

    def delete_selected(self) -> None:
        """Hand the selected meeting's id to ``on_delete`` and close the detail view."""
        if self.selected_meeting is None:
            return
        if self.on_delete:
            self.on_delete(self.selected_meeting.id)
        self.clear_selection()

    def edit_selected(self) -> None:
        if self.selected_meeting is None:
            return
        if self.on_edit:
            self.on_edit(self.selected_meeting.id)
        self.clear_selection()

    def title(self) -> str:
        return calendar_math.start_of_month(self.cursor).strftime("%b %Y")

    def window(self) -> list[date]:
        if self.mode is CalendarMode.WEEK:
            return calendar_math.week_window(self.cursor)
        return calendar_math.month_window(self.cursor)

    def position(self, meeting: Meeting) -> Optional[PositionedBlock]:
        """Block geometry for ``meeting``, or None when its start time is unusable."""
        try:
            start = parse_time_of_day(meeting.start_time)
        except ValueError:
            logger.warning(
                "Skipping meeting %s: unparseable start time %r",
                meeting.id,
                meeting.start_time,
            )
            return None

        cell_height = self.display.cell_height
        top = calendar_math.vertical_offset(
            start.hour, start.minute, self.display.start_hour, cell_height
        )
        height = calendar_math.block_height(meeting.duration_minutes, cell_height)
        return PositionedBlock(meeting=meeting, top=top, height=height)

    def render(self, meetings: Sequence[Meeting]) -> Union[WeekGrid, MonthGrid]:
        buckets = bucket_by_date(meetings)
        today = self.clock.today()

        if self.mode is CalendarMode.WEEK:
            return self._render_week(buckets, today)
        return self._render_month(buckets, today)

    def _render_week(self, buckets: dict[str, list[Meeting]], today: str) -> WeekGrid:
        days = []
        for day in self.window():
            key = self.clock.date_key(day)
            is_today = key == today
            blocks = []
            for meeting in buckets.get(key, []):
                block = self.position(meeting)
                if block is not None:
                    blocks.append(block)

            now_offset = None
            if is_today:
                hour, minute = self.clock.now()
                now_offset = calendar_math.vertical_offset(
                    hour, minute, self.display.start_hour, self.display.cell_height
                )

            days.append(
                DayColumn(
                    date=day,
                    key=key,
                    is_today=is_today,
                    blocks=tuple(blocks),
                    now_offset=now_offset,
                )
            )

        return WeekGrid(
            days=tuple(days),
            hours=tuple(range(self.display.start_hour, self.display.end_hour)),
            cell_height=self.display.cell_height,
        )

    def _render_month(
        self, buckets: dict[str, list[Meeting]], today: str
    ) -> MonthGrid:
        cap = self.display.month_display_cap
        current_month = (self.cursor.year, self.cursor.month)
        cells = []
        for day in self.window():
            key = self.clock.date_key(day)
            day_meetings = buckets.get(key, [])
            cells.append(
                MonthCell(
                    date=day,
                    key=key,
                    is_today=key == today,
                    is_current_month=(day.year, day.month) == current_month,
                    meetings=tuple(day_meetings[:cap]),
                    hidden_count=max(0, len(day_meetings) - cap),
                )
            )
        return MonthGrid(cells=tuple(cells))
