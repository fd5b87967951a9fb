import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from jci_connect.listing import upcoming
from jci_connect.storage import get_store
from jci_connect.sync import load_meetings
from jci_connect.web import get_clock, get_template_context, templates
from jci_connect.zoom_client import get_zoom_client

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    clock = get_clock()
    error = None
    try:
        meetings = await load_meetings(get_store(), get_zoom_client(), clock)
    except Exception as e:
        logger.error(f"Failed to load meetings: {e}", exc_info=True)
        meetings = []
        error = "Could not load meetings. Please try again."

    today = clock.today()
    next_up = upcoming(meetings, clock)

    stats = {
        "total": len(meetings),
        "today": len([m for m in meetings if m.date == today]),
        "upcoming": len(next_up),
    }

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        get_template_context(
            request,
            active_page="dashboard",
            stats=stats,
            upcoming_meetings=next_up,
            error=error,
        ),
    )
