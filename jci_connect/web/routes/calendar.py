from datetime import date
from typing import Optional
from urllib.parse import urlencode
import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from jci_connect import calendar_math
from jci_connect.calendar_math import CalendarMode
from jci_connect.grid import GridRenderer
from jci_connect.listing import ListRenderer, group_by_date
from jci_connect.storage import get_store
from jci_connect.sync import load_meetings
from jci_connect.timezone import AppClock, parse_date_key
from jci_connect.web import get_app_config, get_clock, get_template_context, templates
from jci_connect.zoom_client import get_zoom_client

router = APIRouter()
logger = logging.getLogger(__name__)


def _parse_mode(value: Optional[str]) -> CalendarMode:
    try:
        return CalendarMode.from_string(value or "week")
    except ValueError:
        logger.warning("Unknown calendar mode %r; showing week", value)
        return CalendarMode.WEEK


def _parse_cursor(value: Optional[str], clock: AppClock) -> date:
    if not value:
        return clock.today_date()
    try:
        return parse_date_key(value)
    except ValueError:
        logger.warning("Invalid calendar cursor %r; showing today", value)
        return clock.today_date()


def schedule_url(view: str, mode: CalendarMode, cursor: Optional[date] = None) -> str:
    params = {"view": view, "mode": mode.value}
    if cursor is not None:
        params["cursor"] = cursor.isoformat()
    return f"/schedule?{urlencode(params)}"


@router.get("/schedule", response_class=HTMLResponse)
async def schedule_view(
    request: Request,
    view: str = Query("calendar"),
    mode: Optional[str] = Query("week"),
    cursor: Optional[str] = Query(None),
    selected: Optional[str] = Query(None),
):
    clock = get_clock()
    calendar_mode = _parse_mode(mode)
    cursor_date = _parse_cursor(cursor, clock)
    view = "list" if view == "list" else "calendar"

    error = None
    try:
        meetings = await load_meetings(get_store(), get_zoom_client(), clock)
    except Exception as e:
        logger.error(f"Failed to load meetings: {e}", exc_info=True)
        meetings = []
        error = "Could not load meetings. Please try again."

    renderer = GridRenderer(
        clock,
        display=get_app_config().calendar,
        mode=calendar_mode,
        cursor=cursor_date,
    )
    if selected:
        match = next((m for m in meetings if m.id == selected), None)
        if match is not None:
            renderer.select_meeting(match)

    context = {
        "active_page": "schedule",
        "view": view,
        "mode": calendar_mode.value,
        "cursor": cursor_date.isoformat(),
        "title": renderer.title(),
        "selected_meeting": renderer.selected_meeting,
        "prev_url": schedule_url(
            view, calendar_mode, calendar_math.navigate(cursor_date, calendar_mode, -1)
        ),
        "next_url": schedule_url(
            view, calendar_mode, calendar_math.navigate(cursor_date, calendar_mode, 1)
        ),
        "today_url": schedule_url(view, calendar_mode),
        "week_url": schedule_url(view, CalendarMode.WEEK, cursor_date),
        "month_url": schedule_url(view, CalendarMode.MONTH, cursor_date),
        "calendar_url": schedule_url("calendar", calendar_mode, cursor_date),
        "list_url": schedule_url("list", calendar_mode, cursor_date),
        "error": error,
    }

    if view == "list":
        ordered = ListRenderer(clock).render(meetings)
        context["grouped_meetings"] = group_by_date(ordered)
        context["meeting_count"] = len(ordered)
    else:
        grid = renderer.render(meetings)
        context["grid"] = grid
        context["hour_labels"] = calendar_math.hour_labels(
            renderer.display.start_hour, renderer.display.end_hour
        )

    return templates.TemplateResponse(
        request, "schedule.html", get_template_context(request, **context)
    )


@router.get("/schedule/navigate")
async def navigate_schedule(
    mode: Optional[str] = Query("week"),
    cursor: Optional[str] = Query(None),
    delta: int = Query(0),
    view: str = Query("calendar"),
):
    clock = get_clock()
    calendar_mode = _parse_mode(mode)
    cursor_date = _parse_cursor(cursor, clock)
    moved = calendar_math.navigate(cursor_date, calendar_mode, delta)
    return RedirectResponse(url=schedule_url(view, calendar_mode, moved), status_code=302)
