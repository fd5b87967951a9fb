"""Merge the Zoom account's scheduled meetings into the meeting store."""

import logging
from typing import Any, Sequence

from jci_connect.listing import sort_chronologically
from jci_connect.models import Category, Meeting
from jci_connect.storage import MeetingStore
from jci_connect.timezone import AppClock
from jci_connect.zoom_client import ZoomClient

logger = logging.getLogger(__name__)


def zoom_to_meeting(raw: dict[str, Any], clock: AppClock) -> Meeting:
    """Map a Zoom meeting object onto a Meeting in the app timezone."""
    date, start_time = clock.utc_to_app(raw.get("start_time", ""))
    zoom_id = str(raw["id"])
    return Meeting(
        id=f"zoom-{zoom_id}",
        title=raw.get("topic") or "Untitled",
        description=raw.get("agenda") or "",
        host="",
        date=date,
        start_time=start_time,
        duration_minutes=int(raw.get("duration") or 60),
        zoom_link=raw.get("join_url") or "",
        zoom_password=raw.get("password") or None,
        category=Category.PROJECT,
        zoom_meeting_id=zoom_id,
    )


def merge_meetings(
    local: Sequence[Meeting], zoom_meetings: Sequence[dict[str, Any]], clock: AppClock
) -> list[Meeting]:
    """Combine stored meetings with the Zoom list.

    Meetings without a Zoom id are kept as they are. A stored meeting linked
    to a listed Zoom meeting takes Zoom's title, link, date, time and
    duration; its description and password survive when Zoom has none.
    The result is chronological with one entry per id.
    """
    linked: dict[str, Meeting] = {}
    merged: list[Meeting] = []
    for meeting in local:
        if meeting.zoom_meeting_id:
            linked[meeting.zoom_meeting_id] = meeting
        else:
            merged.append(meeting)

    for raw in zoom_meetings:
        try:
            from_zoom = zoom_to_meeting(raw, clock)
        except (KeyError, ValueError) as e:
            logger.warning(f"Skipping Zoom meeting {raw.get('id')}: {e}")
            continue

        existing = linked.get(from_zoom.zoom_meeting_id)
        if existing is None:
            merged.append(from_zoom)
            continue
        merged.append(
            existing.with_changes(
                title=from_zoom.title,
                zoom_link=from_zoom.zoom_link,
                date=from_zoom.date,
                start_time=from_zoom.start_time,
                duration_minutes=from_zoom.duration_minutes,
                description=from_zoom.description or existing.description,
                zoom_password=from_zoom.zoom_password or existing.zoom_password,
                zoom_meeting_id=from_zoom.zoom_meeting_id,
            )
        )

    # dict keeps the first position of a key while later values overwrite it
    deduped: dict[str, Meeting] = {}
    for meeting in sort_chronologically(merged, clock):
        deduped[meeting.id] = meeting
    return list(deduped.values())


async def sync_meetings_from_zoom(
    store: MeetingStore, zoom: ZoomClient, clock: AppClock
) -> list[Meeting]:
    """Pull scheduled Zoom meetings into ``store`` and return the merged collection."""
    local = store.load_meetings()
    zoom_meetings = await zoom.list_meetings()
    if not zoom_meetings:
        logger.info("Zoom returned no scheduled meetings; keeping stored meetings")
        return local

    merged = merge_meetings(local, zoom_meetings, clock)
    store.upsert_meetings(merged)
    logger.info(
        f"Synced {len(zoom_meetings)} Zoom meetings ({len(merged)} meetings stored)"
    )
    return merged



async def load_meetings(
    store: MeetingStore, zoom: ZoomClient, clock: AppClock
) -> list[Meeting]:
    """Stored meetings, refreshed from Zoom first when Zoom is configured.

    A failed refresh is logged and the stored meetings are returned as they are.
    """
    if zoom.is_configured:
        try:
            return await sync_meetings_from_zoom(store, zoom, clock)
        except Exception as e:
            logger.warning(f"Zoom refresh failed, showing stored meetings: {e}")
    return store.load_meetings()
