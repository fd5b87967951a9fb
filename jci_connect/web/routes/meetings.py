from typing import Optional
import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse

from jci_connect.agenda import get_agenda_generator
from jci_connect.models import CATEGORIES, Category, Meeting
from jci_connect.storage import get_store
from jci_connect.sync import sync_meetings_from_zoom
from jci_connect.timezone import parse_date_key, parse_time_of_day
from jci_connect.web import get_clock, get_template_context, templates
from jci_connect.zoom_client import (
    ZoomAPIError,
    ZoomNotConfiguredError,
    get_zoom_client,
)

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_START_TIME = "19:00"
DEFAULT_DURATION_MINUTES = 60
DURATION_CHOICES = [30, 45, 60, 90, 120, 180]


def _validate_schedule(date: str, start_time: str, duration_minutes: int) -> Optional[str]:
    try:
        parse_date_key(date)
        parse_time_of_day(start_time)
    except ValueError as e:
        return str(e)
    if duration_minutes <= 0:
        return "Duration must be a positive number of minutes"
    return None


def _normalize_time(start_time: str) -> str:
    """Stored start times are zero-padded HH:mm so they also sort as text."""
    return parse_time_of_day(start_time).strftime("%H:%M")


def _booking_page(request: Request, meeting: Optional[Meeting], error: Optional[str] = None):
    clock = get_clock()
    form = {
        "title": "",
        "description": "",
        "host": "",
        "email": "",
        "date": clock.today(),
        "start_time": DEFAULT_START_TIME,
        "duration_minutes": DEFAULT_DURATION_MINUTES,
        "category": Category.PROJECT.value,
        "zoom_link": "",
    }
    if meeting is not None:
        form.update(meeting.to_dict())
        form["email"] = meeting.email or ""

    return templates.TemplateResponse(
        request,
        "booking.html",
        get_template_context(
            request,
            active_page="book",
            form=form,
            editing=meeting,
            categories=CATEGORIES,
            durations=DURATION_CHOICES,
            error=error,
        ),
        status_code=404 if error and meeting is None else 200,
    )


@router.get("/book", response_class=HTMLResponse)
async def booking_form(request: Request):
    return _booking_page(request, None)


@router.get("/book/{meeting_id}/edit", response_class=HTMLResponse)
async def edit_booking_form(request: Request, meeting_id: str):
    meeting = get_store().get_meeting(meeting_id)
    if meeting is None:
        return _booking_page(request, None, error="Meeting not found")
    return _booking_page(request, meeting)


@router.post("/api/meetings")
async def create_meeting(
    title: str = Form(...),
    date: str = Form(...),
    start_time: str = Form(...),
    duration_minutes: int = Form(DEFAULT_DURATION_MINUTES),
    category: str = Form(Category.PROJECT.value),
    description: str = Form(""),
    host: str = Form(""),
    email: str = Form(""),
    zoom_link: str = Form(""),
    zoom_password: str = Form(""),
):
    error = _validate_schedule(date, start_time, duration_minutes)
    if error:
        return JSONResponse({"success": False, "error": error}, status_code=400)
    start_time = _normalize_time(start_time)

    clock = get_clock()
    link = zoom_link.strip()
    zoom_meeting_id = None
    password = zoom_password or None

    # Without a manual link the meeting only exists once Zoom has created it
    if not link:
        try:
            result = await get_zoom_client().create_meeting(
                topic=title,
                start_time_utc=clock.app_to_utc_iso(date, start_time),
                duration_minutes=duration_minutes,
                agenda=description,
                password=password,
            )
        except ZoomNotConfiguredError as e:
            logger.warning(f"Cannot create Zoom meeting: {e}")
            return JSONResponse({"success": False, "error": str(e)}, status_code=503)
        except ZoomAPIError as e:
            logger.error(f"Failed to create Zoom meeting: {e}")
            return JSONResponse(
                {"success": False, "error": e.message}, status_code=502
            )
        link = result.join_url
        zoom_meeting_id = result.meeting_id
        password = result.password or password

    meeting = Meeting(
        id=str(int(clock.current_instant().timestamp() * 1000)),
        title=title,
        description=description,
        host=host,
        email=email or None,
        date=date,
        start_time=start_time,
        duration_minutes=duration_minutes,
        category=Category.from_string(category),
        zoom_link=link,
        zoom_password=password,
        zoom_meeting_id=zoom_meeting_id,
    )
    try:
        get_store().save_meeting(meeting)
    except Exception as e:
        logger.error(f"Failed to save meeting {meeting.id}: {e}", exc_info=True)
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)

    logger.info(f"Booked meeting {meeting.id} on {date} {start_time}")
    return JSONResponse({"success": True, "meeting": meeting.to_dict()})


@router.post("/api/meetings/sync")
async def sync_meetings():
    try:
        meetings = await sync_meetings_from_zoom(
            get_store(), get_zoom_client(), get_clock()
        )
    except Exception as e:
        logger.error(f"Zoom sync failed: {e}", exc_info=True)
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)
    return JSONResponse({"success": True, "count": len(meetings)})


@router.post("/api/meetings/{meeting_id}")
async def update_meeting(
    meeting_id: str,
    title: str = Form(...),
    date: str = Form(...),
    start_time: str = Form(...),
    duration_minutes: int = Form(DEFAULT_DURATION_MINUTES),
    category: str = Form(Category.PROJECT.value),
    description: str = Form(""),
    host: str = Form(""),
    email: str = Form(""),
    zoom_link: str = Form(""),
):
    error = _validate_schedule(date, start_time, duration_minutes)
    if error:
        return JSONResponse({"success": False, "error": error}, status_code=400)
    start_time = _normalize_time(start_time)

    store = get_store()
    existing = store.get_meeting(meeting_id)
    if existing is None:
        return JSONResponse(
            {"success": False, "error": "Meeting not found"}, status_code=404
        )

    link = zoom_link.strip()
    if not link:
        link = existing.zoom_link
        if existing.zoom_meeting_id:
            try:
                result = await get_zoom_client().update_meeting(
                    existing.zoom_meeting_id,
                    topic=title,
                    start_time_utc=get_clock().app_to_utc_iso(date, start_time),
                    duration_minutes=duration_minutes,
                    agenda=description,
                )
                link = result.join_url
            except (ZoomAPIError, ZoomNotConfiguredError) as e:
                logger.error(
                    f"Failed to update Zoom meeting {existing.zoom_meeting_id}, keeping existing link: {e}"
                )

    updated = existing.with_changes(
        title=title,
        description=description,
        host=host,
        email=email or None,
        date=date,
        start_time=start_time,
        duration_minutes=duration_minutes,
        category=Category.from_string(category),
        zoom_link=link,
    )
    try:
        store.update_meeting(meeting_id, updated)
    except Exception as e:
        logger.error(f"Failed to update meeting {meeting_id}: {e}", exc_info=True)
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)

    return JSONResponse({"success": True, "meeting": updated.to_dict()})


@router.post("/api/meetings/{meeting_id}/delete")
async def delete_meeting(meeting_id: str):
    store = get_store()
    meeting = store.get_meeting(meeting_id)
    if meeting is None:
        return JSONResponse(
            {"success": False, "error": "Meeting not found"}, status_code=404
        )

    zoom = get_zoom_client()
    if meeting.zoom_meeting_id and zoom.is_configured:
        try:
            await zoom.delete_meeting(meeting.zoom_meeting_id)
        except ZoomAPIError as e:
            # The stored meeting is removed regardless
            logger.error(f"Failed to delete Zoom meeting {meeting.zoom_meeting_id}: {e}")

    try:
        store.delete_meeting(meeting_id)
    except Exception as e:
        logger.error(f"Failed to delete meeting {meeting_id}: {e}", exc_info=True)
        return JSONResponse({"success": False, "error": str(e)}, status_code=500)

    logger.info(f"Deleted meeting {meeting_id}")
    return JSONResponse({"success": True})


@router.post("/api/agenda")
async def generate_agenda(
    title: str = Form(""),
    category: str = Form(Category.PROJECT.value),
    duration_minutes: int = Form(DEFAULT_DURATION_MINUTES),
):
    if not title.strip():
        return JSONResponse(
            {"success": False, "error": "Please enter a meeting title first."},
            status_code=400,
        )

    agenda = await get_agenda_generator().generate_agenda(
        title.strip(), Category.from_string(category).value, duration_minutes
    )
    return JSONResponse({"success": True, "agenda": agenda})
