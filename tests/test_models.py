"""
Tests for scheduled events and the day / uid helpers.
"""
from datetime import date, datetime, timezone

import pytest

from jrrp.errors import InvalidDayError, ValidationError
from jrrp.models import LuckResult, ScheduledEvent, find_event, load_events
from jrrp.utils import make_uid, normalize_day, normalize_month, split_uid, today_string


class TestScheduledEvent:
    @pytest.mark.parametrize("day,expected", [
        ("2024-01-01", True),
        ("2025-01-01", True),
        ("2024-01-02", False),
        ("2024-02-01", False),
    ])
    def test_new_years_day_every_year(self, day, expected):
        event = ScheduledEvent(value=100, reason="Happy new year", month=1, day=1)
        assert event.matches(day) is expected

    def test_all_wildcards_match_every_day(self):
        event = ScheduledEvent(value=50, reason="Flat")
        assert event.matches("1999-12-31")
        assert event.matches("2024-02-29")

    def test_year_only(self):
        event = ScheduledEvent(value=1, reason="Bad year", year=2023)
        assert event.matches("2023-06-15")
        assert not event.matches("2024-06-15")

    def test_describe(self):
        assert ScheduledEvent(value=100, reason="Jan", year=2024, month=1).describe() == "2024-01-* → 100 (Jan)"
        assert ScheduledEvent(value=0, reason="Any").describe() == "*-*-* → 0 (Any)"

    def test_json_round_trip(self):
        event = ScheduledEvent(value=88, reason="Festival", month=2, day=10)
        assert ScheduledEvent.from_json(event.to_json()) == event

    def test_from_json_strips_reason(self):
        event = ScheduledEvent.from_json({"value": 5, "reason": "  spaced  "})
        assert event.reason == "spaced"

    @pytest.mark.parametrize("data", [
        {"value": 101, "reason": "too high"},
        {"value": -1, "reason": "too low"},
        {"value": True, "reason": "bool"},
        {"value": "50", "reason": "string"},
        {"value": 50, "reason": ""},
        {"value": 50, "reason": "   "},
        {"value": 50},
        {"value": 50, "reason": "bad month", "month": 13},
        {"value": 50, "reason": "bad day", "day": 0},
        {"value": 50, "reason": "bad year", "year": "2024"},
        ["not", "a", "mapping"],
    ])
    def test_from_json_rejects(self, data):
        with pytest.raises(ValidationError):
            ScheduledEvent.from_json(data)

    @pytest.mark.parametrize("kwargs", [
        {"value": 101, "reason": "too high"},
        {"value": 50, "reason": ""},
        {"value": 50, "reason": "bad month", "month": 0},
        {"value": 50, "reason": "bad day", "day": 32},
        {"value": 50.0, "reason": "float"},
    ])
    def test_constructor_validates(self, kwargs):
        with pytest.raises(ValidationError):
            ScheduledEvent(**kwargs)

    @pytest.mark.parametrize("pattern,fields", [
        ("*-01-01", (None, 1, 1)),
        ("2024-01-*", (2024, 1, None)),
        ("*-*-13", (None, None, 13)),
        ("*-*-*", (None, None, None)),
    ])
    def test_from_pattern(self, pattern, fields):
        event = ScheduledEvent.from_pattern(pattern, 100, "reason")
        assert (event.year, event.month, event.day) == fields

    @pytest.mark.parametrize("pattern", ["2024-01", "2024-01-01-01", "2024-jan-01", "*-13-01", ""])
    def test_from_pattern_rejects(self, pattern):
        with pytest.raises(ValidationError):
            ScheduledEvent.from_pattern(pattern, 100, "reason")

    def test_load_events_keeps_order(self):
        events = load_events([
            {"value": 0, "reason": "first", "day": 13},
            {"value": 100, "reason": "second", "day": 13},
        ])
        assert [e.reason for e in events] == ["first", "second"]
        assert find_event(events, "2024-09-13").reason == "first"
        assert find_event(events, "2024-09-14") is None

    def test_result_from_event(self):
        assert LuckResult(value=1, created=True, event_reason="x").from_event
        assert not LuckResult(value=1, created=True).from_event


class TestDays:
    def test_string_passes_through(self):
        assert normalize_day("2024-02-29") == "2024-02-29"

    def test_date_and_datetime(self):
        assert normalize_day(date(2024, 3, 5)) == "2024-03-05"
        assert normalize_day(datetime(2024, 3, 5, 23, 59)) == "2024-03-05"

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-3-5", "20240305", " 2024-03-05", None, 20240305])
    def test_invalid_days(self, value):
        with pytest.raises(InvalidDayError) as exc:
            normalize_day(value)
        assert exc.value.code == "INVALID_DAY"

    def test_months(self):
        assert normalize_month("2024-02") == "2024-02"
        with pytest.raises(InvalidDayError) as exc:
            normalize_month("2024-2")
        assert exc.value.details["expected"] == "YYYY-MM"

    def test_today_in_timezone(self):
        now = datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)
        assert today_string("UTC", now=now) == "2024-01-01"
        assert today_string("Asia/Shanghai", now=now) == "2024-01-02"
        assert today_string("America/New_York", now=now) == "2024-01-01"

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            today_string("Mars/Olympus_Mons")


class TestUids:
    def test_make_and_split(self):
        uid = make_uid("discord", 1234)
        assert uid == "discord:1234"
        assert split_uid(uid) == ("discord", "1234")

    def test_split_without_platform(self):
        assert split_uid("1234") == ("", "1234")

    def test_split_keeps_extra_separators_in_id(self):
        assert split_uid("matrix:@me:example.org") == ("matrix", "@me:example.org")
