import logging
import pytest
from datetime import date, timedelta
from decimal import Decimal
from django.test import override_settings

from payroll.exceptions import InvalidStateError
from payroll.models import AttendanceRecord
from payroll.services.time_metrics import (
    compute_time_metrics, recalculate_attendance_metrics, effective_time_out, parse_time_value,
)

D = date(2025, 10, 6)


def rec(at, time_in="08:00", time_out="17:00", **kw):
    return AttendanceRecord(
        attendance_date=D,
        time_in=at(D, time_in) if time_in else None,
        time_out=at(D, time_out) if time_out else None,
        **kw,
    )


def test_full_day_no_break_recorded_uses_default_break(at):
    m = compute_time_metrics(rec(at))
    assert m.late_minutes == 0
    assert m.undertime_minutes == 0
    assert m.hours_worked == Decimal("8.00")

def test_grace_window_is_inclusive(at):
    assert compute_time_metrics(rec(at, "08:05")).late_minutes == 0

def test_late_counted_from_expected_start_not_grace_end(at):
    m = compute_time_metrics(rec(at, "08:06"))
    assert m.late_minutes == 6
    assert m.undertime_minutes == 6
    assert m.hours_worked == Decimal("7.90")

def test_recorded_break_replaces_default(at):
    r = rec(at, break_out=at(D, "12:00"), break_in=at(D, "12:30"))
    m = compute_time_metrics(r)
    assert m.hours_worked == Decimal("8.50")
    assert m.undertime_minutes == 0

def test_inverted_break_falls_back_to_default(at):
    r = rec(at, break_out=at(D, "13:00"), break_in=at(D, "12:00"))
    assert compute_time_metrics(r).hours_worked == Decimal("8.00")

def test_missing_time_in_zeroes_everything(at):
    m = compute_time_metrics(rec(at, time_in=None))
    assert (m.late_minutes, m.undertime_minutes, m.hours_worked) == (0, 0, 0)

def test_missing_time_out_keeps_lateness_only(at):
    m = compute_time_metrics(rec(at, "09:00", None))
    assert m.late_minutes == 60
    assert m.undertime_minutes == 0
    assert m.hours_worked == 0

def test_net_minutes_floored_at_zero(at):
    m = compute_time_metrics(rec(at, "08:00", "08:30"))
    assert m.hours_worked == 0
    assert m.undertime_minutes == 480

def test_night_shift_uses_next_day_timeout(at):
    r = rec(at, "22:00", "23:00", is_nightshift=True,
            next_day_timeout=at(D + timedelta(days=1), "07:00"))
    assert effective_time_out(r) == at(D + timedelta(days=1), "07:00")
    m = compute_time_metrics(r)
    assert m.hours_worked == Decimal("8.00")
    assert m.undertime_minutes == 0

def test_clock_string_next_day_timeout_falls_on_following_day(at):
    r = AttendanceRecord(attendance_date=D, time_in="22:00", is_nightshift=True, next_day_timeout="06:00")
    assert effective_time_out(r) == at(D + timedelta(days=1), "06:00")
    m = compute_time_metrics(r)
    assert m.hours_worked == Decimal("7.00")
    assert m.undertime_minutes == 60

def test_next_day_timeout_ignored_without_night_shift_flag(at):
    r = rec(at, next_day_timeout=at(D + timedelta(days=1), "07:00"))
    assert effective_time_out(r) == at(D, "17:00")

def test_clock_strings_are_parsed_against_attendance_date(at):
    r = AttendanceRecord(attendance_date=D, time_in="08:30", time_out="17:30")
    assert parse_time_value("08:30", D) == at(D, "08:30")
    m = compute_time_metrics(r)
    assert m.late_minutes == 30
    assert m.hours_worked == Decimal("8.00")

def test_unparseable_time_falls_back_to_zero_and_logs(at, caplog):
    r = AttendanceRecord(attendance_date=D, time_in="not-a-time", time_out=at(D, "17:00"))
    with caplog.at_level(logging.WARNING, logger="payroll.services.time_metrics"):
        m = compute_time_metrics(r)
    assert (m.late_minutes, m.undertime_minutes, m.hours_worked) == (0, 0, 0)
    assert "fallback to 0" in caplog.text

@override_settings(PAYROLL_GRACE_MINUTES=0)
def test_grace_is_configurable(at):
    assert compute_time_metrics(rec(at, "08:01")).late_minutes == 1

def test_force_recompute_overwrites_manual_values(at):
    r = rec(at, "08:30", late_minutes=Decimal("5"))
    recalculate_attendance_metrics(r, force=True)
    assert r.late_minutes == 30

def test_non_forced_keeps_nonzero_manual_value(at):
    r = rec(at, "08:30", late_minutes=Decimal("5"))
    recalculate_attendance_metrics(r, force=False)
    assert r.late_minutes == Decimal("5")
    assert r.hours_worked == Decimal("7.50")

def test_non_forced_manual_zero_is_not_respected(at):
    # known limitation: an explicit 0 looks the same as "never set"
    r = rec(at, "08:30", late_minutes=Decimal("0"))
    recalculate_attendance_metrics(r, force=False)
    assert r.late_minutes == 30

def test_posted_record_is_frozen(at):
    r = rec(at, posting_status=AttendanceRecord.PostingStatus.POSTED)
    with pytest.raises(InvalidStateError):
        recalculate_attendance_metrics(r)
