"""
Web UI for JCI Connect - meeting booking and schedule dashboard.

Provides a human interface to the meeting store with:
- Dashboard with today's sessions and upcoming meetings
- Week/month calendar grid and chronological list
- Booking form backed by the Zoom API
- AI agenda drafting
- Cloud recording browser
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response
from fastapi.templating import Jinja2Templates

from jci_connect.config import AppConfig
from jci_connect.timezone import AppClock
from jci_connect.zoom_client import format_file_size, format_recording_type

logger = logging.getLogger(__name__)

# Initialize Jinja2 templates
_templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(_templates_dir))


def _strftime_filter(value, format_string: str) -> str:
    """Format date/datetime values using strftime. Handles ISO strings too."""
    if value is None:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    if hasattr(value, "strftime"):
        return value.strftime(format_string)
    return str(value)


templates.env.filters["strftime"] = _strftime_filter
templates.env.filters["recording_type"] = format_recording_type
templates.env.filters["file_size"] = format_file_size

_app_config: Optional[AppConfig] = None
_clock: Optional[AppClock] = None
_routers_included = False


@asynccontextmanager
async def lifespan(app):
    yield
    from jci_connect import storage, zoom_client

    if zoom_client._zoom_client is not None:
        await zoom_client._zoom_client.close()
    if storage._store is not None:
        storage._store.close()
        storage.init_store(None)
    logger.info("Web app shut down")


web_app = FastAPI(
    title="JCI Connect",
    description="Meeting booking and schedule dashboard",
    docs_url="/api/docs",
    redoc_url=None,
    lifespan=lifespan,
)


def _include_routers() -> None:
    global _routers_included
    if _routers_included:
        return

    from jci_connect.web.routes import (
        dashboard,
        calendar,
        meetings,
        recordings,
        health,
    )

    web_app.include_router(dashboard.router)
    web_app.include_router(calendar.router)
    web_app.include_router(meetings.router)
    web_app.include_router(recordings.router)
    web_app.include_router(health.router)
    _routers_included = True


def init_web_app(config: Optional[AppConfig] = None, clock: Optional[AppClock] = None):
    global _app_config, _clock
    _app_config = config or AppConfig()
    _clock = clock or AppClock(_app_config.timezone)
    _include_routers()
    logger.info(f"Web app initialized (timezone={_app_config.timezone})")


def get_app_config() -> AppConfig:
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config


def get_clock() -> AppClock:
    global _clock
    if _clock is None:
        _clock = AppClock(get_app_config().timezone)
    return _clock


def get_template_context(request: Request, **kwargs) -> dict:
    config = get_app_config()
    clock = get_clock()
    from jci_connect.zoom_client import get_zoom_client

    return {
        "request": request,
        "theme": config.web.theme,
        "app_timezone": config.timezone,
        "today": clock.today(),
        "zoom_enabled": get_zoom_client().is_configured,
        "active_page": kwargs.pop("active_page", None),
        **kwargs,
    }


@web_app.get("/favicon.ico")
async def favicon():
    return Response(content=b"", media_type="image/x-icon")
