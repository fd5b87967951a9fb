"""Tests for the chronological meeting list."""

import logging

from jci_connect.listing import ListRenderer, group_by_date, sort_chronologically, upcoming


class TestSortChronologically:
    def test_same_day_ordered_by_start_time(self, clock, make_meeting):
        nine = make_meeting("nine", start_time="09:00")
        eight = make_meeting("eight", start_time="08:00")
        assert [m.id for m in sort_chronologically([nine, eight], clock)] == ["eight", "nine"]

    def test_dates_before_times(self, clock, make_meeting):
        late_first_day = make_meeting("a", date="2025-03-10", start_time="23:00")
        early_next_day = make_meeting("b", date="2025-03-11", start_time="07:00")
        ordered = sort_chronologically([early_next_day, late_first_day], clock)
        assert [m.id for m in ordered] == ["a", "b"]

    def test_ties_keep_insertion_order(self, clock, make_meeting):
        meetings = [make_meeting(name, start_time="10:00") for name in ("x", "y", "z")]
        assert [m.id for m in sort_chronologically(meetings, clock)] == ["x", "y", "z"]

    def test_hour_without_padding_sorts_numerically(self, clock, make_meeting):
        nine = make_meeting("nine", start_time="9:00")
        ten = make_meeting("ten", start_time="10:00")
        assert [m.id for m in sort_chronologically([ten, nine], clock)] == ["nine", "ten"]

    def test_invalid_meetings_go_last(self, clock, make_meeting, caplog):
        broken = make_meeting("broken", date="not-a-date")
        fine = make_meeting("fine")
        with caplog.at_level(logging.WARNING):
            ordered = sort_chronologically([broken, fine], clock)
        assert [m.id for m in ordered] == ["fine", "broken"]
        assert "broken" in caplog.text


class TestGroupingAndUpcoming:
    def test_group_by_date_keeps_order(self, clock, sample_meetings):
        grouped = group_by_date(sort_chronologically(sample_meetings, clock))
        assert list(grouped) == ["2025-03-03", "2025-03-10", "2025-03-12", "2025-03-16"]
        assert [m.id for m in grouped["2025-03-10"]] == ["board"]

    def test_upcoming_excludes_started_meetings(self, clock, make_meeting):
        # The pinned clock reads 09:15
        started = make_meeting("started", start_time="09:00")
        later = make_meeting("later", start_time="09:15")
        tomorrow = make_meeting("tomorrow", date="2025-03-11", start_time="08:00")
        result = upcoming([tomorrow, started, later], clock)
        assert [m.id for m in result] == ["later", "tomorrow"]


class TestListRenderer:
    def test_render_sorts(self, clock, sample_meetings):
        ordered = ListRenderer(clock).render(sample_meetings)
        assert [m.id for m in ordered] == ["past", "board", "training", "social"]

    def test_delete_and_edit_forward_ids(self, clock, make_meeting):
        deleted, edited = [], []
        renderer = ListRenderer(clock, on_delete=deleted.append, on_edit=edited.append)
        renderer.select_meeting(make_meeting("a"))
        renderer.delete("a")
        assert renderer.selected_meeting is None
        renderer.edit("b")
        assert deleted == ["a"]
        assert edited == ["b"]

    def test_render_does_not_mutate_input(self, clock, sample_meetings):
        before = list(sample_meetings)
        ListRenderer(clock).render(sample_meetings)
        assert sample_meetings == before
