"""Tests for merging Zoom meetings into the store."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from jci_connect.models import Category
from jci_connect.sync import (
    load_meetings,
    merge_meetings,
    sync_meetings_from_zoom,
    zoom_to_meeting,
)


def zoom_raw(zoom_id=111, **overrides):
    raw = {
        "id": zoom_id,
        "topic": "Zoom topic",
        "start_time": "2025-03-12T11:00:00Z",
        "duration": 45,
        "join_url": f"https://zoom.us/j/{zoom_id}",
        "agenda": "From Zoom",
    }
    raw.update(overrides)
    return raw


class TestZoomToMeeting:
    def test_mapping(self, clock):
        meeting = zoom_to_meeting(zoom_raw(password="pw"), clock)
        assert meeting.id == "zoom-111"
        assert meeting.zoom_meeting_id == "111"
        assert meeting.title == "Zoom topic"
        assert (meeting.date, meeting.start_time) == ("2025-03-12", "19:00")
        assert meeting.duration_minutes == 45
        assert meeting.category is Category.PROJECT
        assert meeting.zoom_password == "pw"
        assert meeting.host == ""

    def test_defaults_for_missing_fields(self, clock):
        meeting = zoom_to_meeting(zoom_raw(topic="", duration=None, agenda=None), clock)
        assert meeting.title == "Untitled"
        assert meeting.duration_minutes == 60
        assert meeting.description == ""


class TestMergeMeetings:
    def test_manual_meetings_are_kept(self, clock, make_meeting):
        manual = make_meeting("manual", zoom_link="https://meet.example/abc")
        merged = merge_meetings([manual], [zoom_raw()], clock)
        assert [m.id for m in merged] == ["manual", "zoom-111"]
        assert merged[0] == manual

    def test_linked_meeting_takes_zoom_schedule(self, clock, make_meeting):
        linked = make_meeting(
            "1700000000000",
            title="Old title",
            description="Local notes",
            host="Aisyah",
            category=Category.BOARD,
            zoom_password="local-pw",
            zoom_meeting_id="111",
        )
        merged = merge_meetings([linked], [zoom_raw(agenda="")], clock)

        assert len(merged) == 1
        result = merged[0]
        assert result.id == "1700000000000"
        assert result.title == "Zoom topic"
        assert (result.date, result.start_time) == ("2025-03-12", "19:00")
        assert result.duration_minutes == 45
        assert result.description == "Local notes"
        assert result.zoom_password == "local-pw"
        assert result.host == "Aisyah"
        assert result.category is Category.BOARD

    def test_zoom_description_wins_when_present(self, clock, make_meeting):
        linked = make_meeting("x", description="Local", zoom_meeting_id="111")
        (result,) = merge_meetings([linked], [zoom_raw()], clock)
        assert result.description == "From Zoom"

    def test_result_is_chronological(self, clock, make_meeting):
        late = make_meeting("late", date="2025-03-20")
        early = make_meeting("early", date="2025-03-01")
        merged = merge_meetings([late, early], [zoom_raw()], clock)
        assert [m.id for m in merged] == ["early", "zoom-111", "late"]

    def test_duplicate_ids_keep_last_value(self, clock, make_meeting):
        first = make_meeting("zoom-111", title="Manual copy", date="2025-03-01")
        merged = merge_meetings([first], [zoom_raw()], clock)
        assert [m.id for m in merged] == ["zoom-111"]
        assert merged[0].title == "Zoom topic"

    def test_unparseable_zoom_meeting_is_skipped(self, clock):
        merged = merge_meetings([], [zoom_raw(start_time=""), zoom_raw(222)], clock)
        assert [m.id for m in merged] == ["zoom-222"]


class TestSyncMeetingsFromZoom:
    @pytest.mark.asyncio
    async def test_empty_zoom_list_returns_local(self, clock, sqlite_store, make_meeting):
        sqlite_store.save_meeting(make_meeting("local"))
        zoom = MagicMock()
        zoom.list_meetings = AsyncMock(return_value=[])

        result = await sync_meetings_from_zoom(sqlite_store, zoom, clock)

        assert [m.id for m in result] == ["local"]
        assert [m.id for m in sqlite_store.load_meetings()] == ["local"]

    @pytest.mark.asyncio
    async def test_sync_persists_merged_meetings(self, clock, sqlite_store, make_meeting):
        sqlite_store.save_meeting(make_meeting("local", date="2025-03-01"))
        sqlite_store.save_meeting(make_meeting("linked", title="Old", zoom_meeting_id="111"))
        zoom = MagicMock()
        zoom.list_meetings = AsyncMock(return_value=[zoom_raw(), zoom_raw(222, topic="New one")])

        result = await sync_meetings_from_zoom(sqlite_store, zoom, clock)

        assert [m.id for m in result] == ["local", "linked", "zoom-222"]
        stored = {m.id: m for m in sqlite_store.load_meetings()}
        assert stored["linked"].title == "Zoom topic"
        assert stored["zoom-222"].title == "New one"


class TestLoadMeetings:
    """Page loads refresh from Zoom first when it is configured."""

    @pytest.mark.asyncio
    async def test_refreshes_from_zoom(self, clock, sqlite_store):
        zoom = MagicMock()
        zoom.is_configured = True
        zoom.list_meetings = AsyncMock(return_value=[zoom_raw()])

        result = await load_meetings(sqlite_store, zoom, clock)

        assert [m.id for m in result] == ["zoom-111"]
        assert sqlite_store.get_meeting("zoom-111") is not None

    @pytest.mark.asyncio
    async def test_skips_zoom_when_not_configured(self, clock, sqlite_store, make_meeting):
        sqlite_store.save_meeting(make_meeting("local"))
        zoom = MagicMock()
        zoom.is_configured = False
        zoom.list_meetings = AsyncMock()

        result = await load_meetings(sqlite_store, zoom, clock)

        assert [m.id for m in result] == ["local"]
        zoom.list_meetings.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_refresh_returns_stored(self, clock, sqlite_store, make_meeting, caplog):
        sqlite_store.save_meeting(make_meeting("local"))
        zoom = MagicMock()
        zoom.is_configured = True
        zoom.list_meetings = AsyncMock(side_effect=RuntimeError("network down"))

        with caplog.at_level(logging.WARNING, logger="jci_connect.sync"):
            result = await load_meetings(sqlite_store, zoom, clock)

        assert [m.id for m in result] == ["local"]
        assert "Zoom refresh failed" in caplog.text
