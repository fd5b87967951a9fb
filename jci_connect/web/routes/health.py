from fastapi import APIRouter

from jci_connect.web import get_app_config, get_clock
from jci_connect.zoom_client import get_zoom_client

router = APIRouter()


@router.get("/health")
async def health():
    config = get_app_config()
    return {
        "status": "ok",
        "service": "jci-connect",
        "timezone": config.timezone,
        "today": get_clock().today(),
        "storage": config.storage.backend.value,
        "zoom_configured": get_zoom_client().is_configured,
    }
