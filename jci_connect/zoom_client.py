"""
Zoom REST API client.

Server-to-Server OAuth: an ``account_credentials`` token is fetched with the
app's client id/secret and reused until shortly before it expires.
"""

import base64
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from jci_connect.config import ZoomConfig

logger = logging.getLogger(__name__)

TOKEN_EXPIRY_MARGIN_SECONDS = 60
DEFAULT_RECORDINGS_DAYS = 30
MAX_RECORDINGS_PAGE_SIZE = 300

RECORDING_TYPE_LABELS = {
    "shared_screen_with_speaker_view": "Shared screen",
    "shared_screen_with_gallery_view": "Gallery view",
    "active_speaker": "Active speaker",
    "gallery_view": "Gallery",
    "shared_screen": "Shared screen",
    "audio_only": "Audio only",
    "audio_transcript": "Transcript",
    "chat_file": "Chat",
    "timeline": "Timeline",
}


class ZoomAPIError(Exception):
    """Non-success response from the Zoom API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"Zoom API error ({status_code}): {message}")


class ZoomNotConfiguredError(Exception):
    """Zoom integration is disabled or its credentials are missing."""


@dataclass
class ZoomMeetingResult:
    join_url: str
    start_url: str
    meeting_id: str
    password: Optional[str] = None


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
    except ValueError:
        pass
    return response.text or response.reason_phrase


def _meeting_result(data: dict[str, Any]) -> ZoomMeetingResult:
    join_url = data.get("join_url")
    if not join_url:
        raise ZoomAPIError(502, "Zoom did not return a join_url")
    return ZoomMeetingResult(
        join_url=join_url,
        start_url=data.get("start_url", ""),
        meeting_id=str(data.get("id", "")),
        password=data.get("password"),
    )


class ZoomClient:
    def __init__(
        self,
        config: ZoomConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=30, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_access_token(self) -> str:
        if not self.is_configured:
            raise ZoomNotConfiguredError(
                "Zoom API is not configured. Set USE_ZOOM_API and the ZOOM_* credentials."
            )
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        credentials = f"{self.config.client_id}:{self.config.client_secret}"
        basic = base64.b64encode(credentials.encode()).decode()
        client = self._get_client()
        try:
            response = await client.post(
                self.config.oauth_url,
                params={
                    "grant_type": "account_credentials",
                    "account_id": self.config.account_id,
                },
                headers={"Authorization": f"Basic {basic}"},
            )
        except httpx.RequestError as e:
            logger.error(f"Zoom OAuth connection error: {e}")
            raise ZoomAPIError(503, "Zoom OAuth endpoint unreachable")

        if response.status_code != 200:
            message = _error_message(response)
            logger.error(f"Zoom OAuth error: {response.status_code} {message}")
            raise ZoomAPIError(response.status_code, message)

        data = response.json()
        self._access_token = data["access_token"]
        expires_in = int(data.get("expires_in", 3600))
        self._token_expires_at = (
            time.monotonic() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        )
        logger.info("Obtained Zoom access token")
        return self._access_token

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        token = await self.get_access_token()
        client = self._get_client()
        try:
            return await client.request(
                method,
                f"{self.config.api_base_url}{path}",
                json=json,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as e:
            logger.error(f"Zoom API connection error: {e}")
            raise ZoomAPIError(503, "Zoom API unreachable")

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if response.is_success:
            return
        message = _error_message(response)
        logger.error(f"Zoom {action} failed: {response.status_code} {message}")
        raise ZoomAPIError(response.status_code, message)

    async def create_meeting(
        self,
        topic: str,
        start_time_utc: str,
        duration_minutes: int,
        agenda: str = "",
        password: Optional[str] = None,
    ) -> ZoomMeetingResult:
        """Schedule a meeting. ``start_time_utc`` is an ISO instant ending in ``Z``."""
        body: dict[str, Any] = {
            "topic": topic,
            "type": 2,
            "start_time": start_time_utc,
            "duration": duration_minutes,
            "timezone": self.config.timezone,
            "agenda": agenda,
            "settings": {
                "host_video": True,
                "participant_video": True,
                "join_before_host": False,
                "mute_upon_entry": False,
                "approval_type": 0,
                "audio": "both",
                "auto_recording": "none",
                "registration_type": self.config.registration_type,
            },
        }
        if password:
            body["password"] = password

        response = await self._request("POST", "/users/me/meetings", json=body)
        self._raise_for_status(response, "create meeting")
        result = _meeting_result(response.json())
        logger.info(f"Created Zoom meeting {result.meeting_id}")
        return result

    async def update_meeting(
        self,
        meeting_id: str,
        topic: Optional[str] = None,
        start_time_utc: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        agenda: Optional[str] = None,
    ) -> ZoomMeetingResult:
        body: dict[str, Any] = {}
        if topic is not None:
            body["topic"] = topic
        if start_time_utc is not None:
            body["start_time"] = start_time_utc
            body["timezone"] = self.config.timezone
        if duration_minutes is not None:
            body["duration"] = duration_minutes
        if agenda is not None:
            body["agenda"] = agenda

        response = await self._request("PATCH", f"/meetings/{meeting_id}", json=body)
        self._raise_for_status(response, "update meeting")

        # PATCH answers 204 with no body; read the meeting back for its links
        if response.status_code == 204:
            response = await self._request("GET", f"/meetings/{meeting_id}")
            self._raise_for_status(response, "get meeting")
        return _meeting_result(response.json())

    async def delete_meeting(self, meeting_id: str) -> None:
        """Delete a meeting; one that is already gone counts as deleted."""
        response = await self._request("DELETE", f"/meetings/{meeting_id}")
        if response.status_code in (204, 404):
            logger.info(f"Deleted Zoom meeting {meeting_id}")
            return
        self._raise_for_status(response, "delete meeting")

    async def list_meetings(self) -> list[dict[str, Any]]:
        """Scheduled meetings of the account owner, or [] when Zoom can't be read."""
        try:
            response = await self._request(
                "GET",
                "/users/me/meetings",
                params={"type": "scheduled"},
            )
            self._raise_for_status(response, "list meetings")
        except (ZoomAPIError, ZoomNotConfiguredError) as e:
            logger.warning(f"Could not list Zoom meetings: {e}")
            return []
        return response.json().get("meetings", [])

    async def get_meeting_recordings(self, meeting_id: str) -> dict[str, Any]:
        response = await self._request("GET", f"/meetings/{meeting_id}/recordings")
        self._raise_for_status(response, "get recordings")
        return response.json()

    async def list_account_recordings(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        page_size: int = MAX_RECORDINGS_PAGE_SIZE,
        next_page_token: Optional[str] = None,
    ) -> dict[str, Any]:
        """Cloud recordings between two ``YYYY-MM-DD`` dates (default: last 30 days)."""
        today = datetime.now(timezone.utc).date()
        params: dict[str, Any] = {
            "from": from_date
            or (today - timedelta(days=DEFAULT_RECORDINGS_DAYS)).isoformat(),
            "to": to_date or today.isoformat(),
            "page_size": max(1, min(page_size, MAX_RECORDINGS_PAGE_SIZE)),
        }
        if next_page_token:
            params["next_page_token"] = next_page_token

        response = await self._request("GET", "/users/me/recordings", params=params)
        self._raise_for_status(response, "list recordings")
        return response.json()


def format_recording_type(recording_type: Optional[str]) -> str:
    if not recording_type:
        return ""
    return RECORDING_TYPE_LABELS.get(recording_type, recording_type.replace("_", " "))


def format_file_size(size_bytes: Optional[int]) -> str:
    if not size_bytes:
        return ""
    if size_bytes >= 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{round(size_bytes / 1024)} KB"


_zoom_client: Optional[ZoomClient] = None


def get_zoom_client() -> ZoomClient:
    global _zoom_client
    if _zoom_client is None:
        _zoom_client = ZoomClient(ZoomConfig())
    return _zoom_client


def init_zoom_client(config: ZoomConfig) -> ZoomClient:
    global _zoom_client
    _zoom_client = ZoomClient(config)
    logger.info(f"Zoom client initialized: configured={_zoom_client.is_configured}")
    return _zoom_client
