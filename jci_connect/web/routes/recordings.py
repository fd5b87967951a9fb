from typing import Optional
import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from jci_connect.storage import get_store
from jci_connect.web import get_clock, get_template_context, templates
from jci_connect.zoom_client import ZoomAPIError, ZoomNotConfiguredError, get_zoom_client

router = APIRouter()
logger = logging.getLogger(__name__)


def _display_start(start_time: Optional[str]) -> str:
    if not start_time:
        return ""
    try:
        date, time_of_day = get_clock().utc_to_app(start_time)
    except ValueError:
        return start_time
    return f"{date} {time_of_day}"


@router.get("/recordings", response_class=HTMLResponse)
async def recordings_view(
    request: Request,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    page_token: Optional[str] = Query(None),
):
    zoom = get_zoom_client()
    meetings = []
    next_page_token = ""
    error = None

    if zoom.is_configured:
        try:
            data = await zoom.list_account_recordings(
                from_date=from_date, to_date=to_date, next_page_token=page_token
            )
            meetings = [
                {**meeting, "display_start": _display_start(meeting.get("start_time"))}
                for meeting in data.get("meetings", [])
            ]
            next_page_token = data.get("next_page_token") or ""
            from_date = data.get("from") or from_date
            to_date = data.get("to") or to_date
        except ZoomAPIError as e:
            logger.error(f"Failed to load recordings: {e}")
            error = e.message or "Failed to load recordings"

    return templates.TemplateResponse(
        request,
        "recordings.html",
        get_template_context(
            request,
            active_page="recordings",
            recordings=meetings,
            next_page_token=next_page_token,
            from_date=from_date or "",
            to_date=to_date or "",
            error=error,
        ),
    )


async def _load_meeting_recordings(meeting_id: str) -> tuple[Optional[dict], Optional[str], int]:
    """Fetch a stored meeting's cloud recordings as ``(payload, error, status)``."""
    meeting = get_store().get_meeting(meeting_id)
    if meeting is None:
        return None, "Meeting not found", 404
    if not meeting.zoom_meeting_id:
        return None, "Meeting is not linked to Zoom", 400

    try:
        data = await get_zoom_client().get_meeting_recordings(meeting.zoom_meeting_id)
    except ZoomNotConfiguredError as e:
        return None, str(e), 503
    except ZoomAPIError as e:
        logger.warning(f"No recordings for meeting {meeting_id}: {e}")
        return None, e.message or "Failed to load recordings", e.status_code

    return {
        "topic": data.get("topic", meeting.title),
        "start_time": data.get("start_time"),
        "duration": data.get("duration"),
        "share_url": data.get("share_url"),
        "recording_files": data.get("recording_files", []),
    }, None, 200


@router.get("/api/meetings/{meeting_id}/recordings")
async def meeting_recordings(meeting_id: str):
    payload, error, status_code = await _load_meeting_recordings(meeting_id)
    if error:
        return JSONResponse({"success": False, "error": error}, status_code=status_code)
    return JSONResponse({"success": True, **payload})


@router.get("/api/meetings/{meeting_id}/recordings/panel", response_class=HTMLResponse)
async def meeting_recordings_panel(request: Request, meeting_id: str):
    payload, error, _ = await _load_meeting_recordings(meeting_id)
    return templates.TemplateResponse(
        request,
        "partials/meeting_recordings.html",
        get_template_context(
            request,
            recording_files=payload["recording_files"] if payload else [],
            share_url=payload["share_url"] if payload else None,
            recordings_error=error,
        ),
    )
