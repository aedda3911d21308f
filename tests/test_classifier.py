from datetime import date, datetime, time, timezone

import pytest

from app.services.classifier import (
    canonical_status, civil_to_instant, is_past_due, is_terminal, is_urgent_pending,
    normalize_clock_hour, parse_civil_time,
)
from tests.conftest import NOW, TODAY, make_appointment


class TestCanonicalStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("Pending", "pending"),
        ("APPROVED", "approved"),
        ("canceled", "cancelled"),
        ("Cancelled", "cancelled"),
        ("", "pending"),
        (None, "pending"),
        ("in-progress", "in-progress"),
    ])
    def test_canonical_status(self, raw, expected):
        assert canonical_status(raw) == expected

    def test_both_cancel_spellings_are_terminal(self):
        assert is_terminal("canceled")
        assert is_terminal("cancelled")
        assert is_terminal("Completed")
        assert not is_terminal("approved")


class TestUrgentPending:

    @pytest.mark.parametrize("day, expected", [
        ("2026-02-21", False),
        ("2026-02-22", True),
        ("2026-02-23", True),
        ("2026-02-24", True),
        ("2026-02-25", False),
    ])
    def test_window_is_today_through_two_days_ahead(self, day, expected):
        appointment = make_appointment(date=day, status="pending")
        assert is_urgent_pending(appointment, TODAY) is expected

    def test_status_is_case_insensitive(self):
        assert is_urgent_pending(make_appointment(date="2026-02-23", status="PENDING"), TODAY)

    def test_empty_status_counts_as_pending(self):
        assert is_urgent_pending(make_appointment(date="2026-02-23", status=""), TODAY)

    @pytest.mark.parametrize("status", ["approved", "completed", "cancelled", "canceled"])
    def test_only_pending_can_be_urgent(self, status):
        assert not is_urgent_pending(make_appointment(date="2026-02-23", status=status), TODAY)

    def test_datetime_reference_uses_its_date(self):
        appointment = make_appointment(date="2026-02-24")
        assert is_urgent_pending(appointment, datetime(2026, 2, 22, 23, 59))

    def test_malformed_date_is_not_urgent(self):
        assert not is_urgent_pending(make_appointment(date="22/02/2026"), TODAY)

    def test_custom_window(self):
        appointment = make_appointment(date="2026-02-27")
        assert is_urgent_pending(appointment, TODAY, window_days=5)
        assert not is_urgent_pending(appointment, TODAY, window_days=4)


class TestParseCivilTime:

    @pytest.mark.parametrize("raw, expected", [
        ("09:05", time(9, 5)),
        ("9:05", time(9, 5)),
        ("17:45", time(17, 45)),
        ("10:30 AM", time(10, 30)),
        ("7:05 pm", time(19, 5)),
        ("12:00 AM", time(0, 0)),
        ("12:15 PM", time(12, 15)),
        ("24:15", time(0, 15)),
    ])
    def test_parses_both_clock_formats(self, raw, expected):
        assert parse_civil_time(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "noon", "13:00 PM", "25:00", "10:75"])
    def test_rejects_unparseable_values(self, raw):
        with pytest.raises(ValueError):
            parse_civil_time(raw)

    def test_hour_24_wraps_to_zero(self):
        assert normalize_clock_hour(24) == 0
        assert normalize_clock_hour(23) == 23


class TestPastDue:
    # NOW is 12:00 in Toronto

    @pytest.mark.parametrize("clock, expected", [
        ("11:30", True),
        ("12:30", False),
        ("11:30 AM", True),
        ("12:30 PM", False),
        ("12:00 AM", True),
    ])
    def test_compares_in_doctor_zone(self, clock, expected):
        appointment = make_appointment(date="2026-02-22", time=clock, status="approved")
        assert is_past_due(appointment, NOW) is expected

    def test_scheduled_instant_equal_to_now_is_not_past(self):
        appointment = make_appointment(date="2026-02-22", time="12:00", status="approved")
        assert not is_past_due(appointment, NOW)

    def test_hour_24_stays_on_the_same_date(self):
        appointment = make_appointment(date="2026-02-22", time="24:15", status="approved")
        assert is_past_due(appointment, NOW)

    def test_missing_zone_uses_default(self):
        appointment = make_appointment(date="2026-02-22", time="11:30", doctorTimeZone=None)
        assert is_past_due(appointment, NOW)

    def test_unknown_zone_falls_back_to_default(self):
        unknown = make_appointment(date="2026-02-22", time="11:30", doctorTimeZone="Mars/Olympus")
        assert is_past_due(unknown, NOW)

    def test_other_zone(self):
        # 10:00 in Vancouver is 18:00 UTC, after NOW
        appointment = make_appointment(date="2026-02-22", time="10:00", doctorTimeZone="America/Vancouver")
        assert not is_past_due(appointment, NOW)

    def test_empty_time_is_never_past(self):
        assert not is_past_due(make_appointment(date="2020-01-01", time=""), NOW)

    def test_garbage_time_is_never_past(self):
        assert not is_past_due(make_appointment(date="2020-01-01", time="soon"), NOW)

    def test_earlier_date(self):
        assert is_past_due(make_appointment(date="2026-02-21", time="23:59"), NOW)

    def test_civil_to_instant_is_zone_aware(self):
        instant = civil_to_instant("2026-07-01", "09:00", "America/Toronto")
        assert instant.astimezone(timezone.utc) == datetime(2026, 7, 1, 13, 0, tzinfo=timezone.utc)

    def test_date_reference_default(self):
        # far-future appointments are never past, whatever the wall clock says
        assert not is_past_due(make_appointment(date="2999-01-01", time="09:00"))
        assert date(2999, 1, 1) > TODAY
