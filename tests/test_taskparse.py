"""Tests for lazyfocus.taskparse."""

from datetime import datetime

import pytest

from lazyfocus.dateparse import DateParseError
from lazyfocus.taskparse import QuickAdd, TaskParseError, parse_task_text

# Wednesday
NOW = datetime(2027, 3, 10, 9, 15)


def _day(result):
    return result.year, result.month, result.day


class TestParseTaskText:
    """Tests for parse_task_text."""

    def test_plain_name(self):
        assert parse_task_text("Buy milk", now=NOW) == QuickAdd(name="Buy milk")

    def test_all_modifiers(self):
        parsed = parse_task_text("Review PR @Work due:tomorrow defer:today ! #urgent", now=NOW)

        assert parsed.name == "Review PR"
        assert parsed.project_name == "Work"
        assert parsed.tag_names == ["urgent"]
        assert _day(parsed.due_date) == (2027, 3, 11)
        assert _day(parsed.defer_date) == (2027, 3, 10)
        assert parsed.flagged is True

    def test_multiple_tags_in_order(self):
        parsed = parse_task_text("#home Call mom #phone #quick-win", now=NOW)
        assert parsed.name == "Call mom"
        assert parsed.tag_names == ["home", "phone", "quick-win"]

    def test_quoted_project_and_dates(self):
        parsed = parse_task_text(
            'Send invoice @"Client Work" due:"next friday" defer:"in 2 days"', now=NOW
        )
        assert parsed.name == "Send invoice"
        assert parsed.project_name == "Client Work"
        assert _day(parsed.due_date) == (2027, 3, 12)
        assert _day(parsed.defer_date) == (2027, 3, 12)

    def test_first_project_wins(self):
        parsed = parse_task_text("Plan trip @Travel @Home", now=NOW)
        assert parsed.project_name == "Travel"
        assert parsed.name == "Plan trip"

    def test_dates_resolve_to_five_pm(self):
        parsed = parse_task_text("Pay rent due:2027-04-01", now=NOW)
        assert parsed.due_date.hour == 17
        assert parsed.due_date.tzinfo is not None

    def test_no_flag_leaves_flagged_unset(self):
        assert parse_task_text("Water plants", now=NOW).flagged is None

    def test_whitespace_collapsed(self):
        parsed = parse_task_text("  Write   report  #work   ", now=NOW)
        assert parsed.name == "Write report"

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty_input(self, text):
        with pytest.raises(TaskParseError, match="empty task input"):
            parse_task_text(text, now=NOW)

    def test_only_modifiers(self):
        with pytest.raises(TaskParseError, match="task name is required"):
            parse_task_text("#urgent @Work !", now=NOW)

    def test_bad_due_date(self):
        with pytest.raises(DateParseError, match="invalid due date"):
            parse_task_text("Buy milk due:someday", now=NOW)

    def test_bad_defer_date(self):
        with pytest.raises(DateParseError, match="invalid defer date"):
            parse_task_text('Buy milk defer:"blue moon"', now=NOW)

    def test_parse_error_is_value_error(self):
        assert issubclass(TaskParseError, ValueError)
