"""Chronological meeting list shared by the list view and the dashboard."""

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from jci_connect.models import Meeting
from jci_connect.timezone import AppClock

logger = logging.getLogger(__name__)


def _timed(
    meetings: Sequence[Meeting], clock: AppClock
) -> tuple[list[tuple[datetime, Meeting]], list[Meeting]]:
    timed: list[tuple[datetime, Meeting]] = []
    invalid: list[Meeting] = []
    for meeting in meetings:
        try:
            timed.append((clock.to_instant(meeting.date, meeting.start_time), meeting))
        except ValueError:
            logger.warning(
                "Meeting %s has an invalid date/time (%r %r); listing it last",
                meeting.id,
                meeting.date,
                meeting.start_time,
            )
            invalid.append(meeting)
    # list.sort is stable, so equal instants keep their input order
    timed.sort(key=lambda item: item[0])
    return timed, invalid


def sort_chronologically(
    meetings: Sequence[Meeting], clock: AppClock
) -> list[Meeting]:
    """Meetings ordered by their app-timezone start instant; ties keep input order."""
    timed, invalid = _timed(meetings, clock)
    return [meeting for _, meeting in timed] + invalid


def group_by_date(meetings: Sequence[Meeting]) -> dict[str, list[Meeting]]:
    grouped: dict[str, list[Meeting]] = {}
    for meeting in meetings:
        grouped.setdefault(meeting.date, []).append(meeting)
    return grouped


def upcoming(meetings: Sequence[Meeting], clock: AppClock) -> list[Meeting]:
    """Meetings starting at or after the current instant, soonest first."""
    now = clock.current_instant()
    timed, _ = _timed(meetings, clock)
    return [meeting for instant, meeting in timed if instant >= now]


class ListRenderer:
    """Flat chronological list with the same selection/callback contract as the grid."""

    def __init__(
        self,
        clock: AppClock,
        on_delete: Optional[Callable[[str], object]] = None,
        on_edit: Optional[Callable[[str], object]] = None,
    ):
        self.clock = clock
        self.on_delete = on_delete
        self.on_edit = on_edit
        self.selected_meeting: Optional[Meeting] = None

    def select_meeting(self, meeting: Meeting) -> None:
        self.selected_meeting = meeting

    def clear_selection(self) -> None:
        self.selected_meeting = None

    def delete(self, meeting_id: str) -> None:
        if self.on_delete:
            self.on_delete(meeting_id)
        self.clear_selection()

    def edit(self, meeting_id: str) -> None:
        if self.on_edit:
            self.on_edit(meeting_id)
        self.clear_selection()

    def render(self, meetings: Sequence[Meeting]) -> list[Meeting]:
        return sort_chronologically(meetings, self.clock)
