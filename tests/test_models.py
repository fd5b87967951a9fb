"""Tests for the meeting model and categories."""

import pytest

from jci_connect.models import CATEGORIES, DEFAULT_COLOR_CLASSES, Category, Meeting


class TestCategory:
    def test_every_category_has_its_own_color(self):
        colors = [category.color_classes for category in Category]
        assert DEFAULT_COLOR_CLASSES not in colors
        assert len(set(colors)) == len(Category)

    def test_every_category_has_its_own_badge(self):
        badges = [category.badge_classes for category in Category]
        assert len(set(badges)) == len(Category)

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Board", Category.BOARD),
            ("training", Category.TRAINING),
            (" SOCIAL ", Category.SOCIAL),
            ("Project", Category.PROJECT),
            ("Retreat", Category.PROJECT),
            (None, Category.PROJECT),
        ],
    )
    def test_from_string(self, value, expected):
        assert Category.from_string(value) is expected

    def test_categories_in_form_order(self):
        assert [c.value for c in CATEGORIES] == ["Board", "Training", "Social", "Project"]


class TestMeeting:
    def test_from_dict_defaults(self):
        meeting = Meeting.from_dict(
            {"id": 42, "date": "2025-03-10", "start_time": "19:00", "duration_minutes": None}
        )
        assert meeting.id == "42"
        assert meeting.duration_minutes == 60
        assert meeting.category is Category.PROJECT
        assert meeting.zoom_link == ""
        assert meeting.zoom_meeting_id is None

    def test_to_dict_round_trips_through_storage_row(self, make_meeting):
        meeting = make_meeting(
            "m1",
            category=Category.SOCIAL,
            zoom_link="https://zoom.us/j/1",
            zoom_meeting_id="1",
            email="host@example.com",
        )
        row = meeting.to_dict()
        assert row["category"] == "Social"
        assert Meeting.from_dict(row) == meeting

    def test_with_changes_returns_copy(self, make_meeting):
        meeting = make_meeting("m1")
        moved = meeting.with_changes(date="2025-03-11")
        assert moved.date == "2025-03-11"
        assert meeting.date == "2025-03-10"

    def test_invitation_text(self, make_meeting):
        meeting = make_meeting(
            "m1",
            title="Board sync",
            date="2025-03-10",
            start_time="19:30",
            duration_minutes=90,
            zoom_link="https://zoom.us/j/555",
        )
        assert meeting.invitation_text() == (
            "Topic: Board sync\n"
            "Date: 2025-03-10\n"
            "Time: 19:30 (90 min)\n"
            "Zoom link: https://zoom.us/j/555"
        )
