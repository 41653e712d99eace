# -*- coding: utf-8 -*-
"""
Time metrics for one attendance record: late minutes, undertime minutes, hours worked.

- Works on any object exposing the AttendanceRecord raw fields (model instance or a plain stub)
- Raw values may be datetimes, times or strings (imports / biometric sync); anything unparseable
  is logged and that metric falls back to 0 so one bad row never blocks a whole department
- Nothing here touches the database; callers decide when to save
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime, time, date as date_type, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Optional
import logging

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_time

from payroll.exceptions import InvalidStateError, MetricsComputationError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class TimeMetrics:
    late_minutes: Decimal = ZERO
    undertime_minutes: Decimal = ZERO
    hours_worked: Decimal = ZERO

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


# ========= policy (read at call time so override_settings works) =========
def _standard_start_hour() -> int:
    return int(getattr(settings, "PAYROLL_STANDARD_START_HOUR", 8))

def _grace_minutes() -> int:
    return int(getattr(settings, "PAYROLL_GRACE_MINUTES", 5))

def _default_break_minutes() -> int:
    return int(getattr(settings, "PAYROLL_DEFAULT_BREAK_MINUTES", 60))

def _standard_work_minutes() -> int:
    return int(getattr(settings, "PAYROLL_STANDARD_WORK_MINUTES", 8 * 60))


# ========= parsing =========
def _aware(dt: datetime) -> datetime:
    if settings.USE_TZ:
        if timezone.is_naive(dt):
            return timezone.make_aware(dt, timezone.get_current_timezone())
        return dt
    if timezone.is_aware(dt):
        return timezone.make_naive(dt, timezone.get_current_timezone())
    return dt

def parse_time_value(value: Any, on_date: Optional[date_type] = None) -> Optional[datetime]:
    """
    Normalise a raw clock value to a datetime.
    Accepts datetime, time (combined with ``on_date``), ISO datetime strings and "HH:MM[:SS]" strings.
    Raises MetricsComputationError when the value cannot be understood.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _aware(value)
    if isinstance(value, time):
        if on_date is None:
            raise MetricsComputationError(f"time {value} given without a date")
        return _aware(datetime.combine(on_date, value))
    if isinstance(value, str):
        raw = value.strip()
        try:
            dt = parse_datetime(raw)
            if dt is not None:
                return _aware(dt)
            t = parse_time(raw)
        except ValueError as ex:
            raise MetricsComputationError(f"invalid time {value!r}: {ex}") from ex
        if t is not None and on_date is not None:
            return _aware(datetime.combine(on_date, t))
    raise MetricsComputationError(f"cannot parse time value {value!r}")


def clock_date(name: str, attendance_date: Optional[date_type]) -> Optional[date_type]:
    """Date a time-only value of field ``name`` belongs to; next_day_timeout falls on the day after."""
    if attendance_date is not None and name == "next_day_timeout":
        return attendance_date + timedelta(days=1)
    return attendance_date

def _field_dt(record, name: str) -> Optional[datetime]:
    return parse_time_value(getattr(record, name, None), clock_date(name, getattr(record, "attendance_date", None)))

def _minutes(a: datetime, b: datetime) -> int:
    return int((b - a).total_seconds() // 60)

def _anchor(d: date_type, hour: int) -> datetime:
    return _aware(datetime.combine(d, time(hour, 0)))


# ========= metrics =========
def effective_time_out(record) -> Optional[datetime]:
    """Night shifts clocking out after midnight use next_day_timeout; everyone else uses time_out."""
    if getattr(record, "is_nightshift", False):
        nxt = _field_dt(record, "next_day_timeout")
        if nxt is not None:
            return nxt
    return _field_dt(record, "time_out")

def compute_late_minutes(record) -> Decimal:
    time_in = _field_dt(record, "time_in")
    if time_in is None:
        return ZERO
    expected = _anchor(record.attendance_date, _standard_start_hour())
    grace_end = expected + timedelta(minutes=_grace_minutes())
    if time_in <= grace_end:
        return ZERO
    # counted from the expected start, not from the end of the grace window
    return Decimal(_minutes(expected, time_in))

def compute_break_minutes(record) -> int:
    # break_out is when the break starts, break_in is when the employee comes back
    break_out = _field_dt(record, "break_out")
    break_in = _field_dt(record, "break_in")
    if break_out is not None and break_in is not None and break_in > break_out:
        return _minutes(break_out, break_in)
    return _default_break_minutes()

def net_worked_minutes(record) -> Optional[int]:
    time_in = _field_dt(record, "time_in")
    time_out = effective_time_out(record)
    if time_in is None or time_out is None:
        return None
    total = _minutes(time_in, time_out)
    return max(0, total - compute_break_minutes(record))

def compute_undertime_minutes(record) -> Decimal:
    net = net_worked_minutes(record)
    if net is None:
        return ZERO
    return Decimal(max(0, _standard_work_minutes() - net))

def compute_hours_worked(record) -> Decimal:
    net = net_worked_minutes(record)
    if net is None:
        return ZERO
    return (Decimal(net) / Decimal(60)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _safe(record, label: str, fn: Callable[[Any], Decimal]) -> Decimal:
    try:
        return fn(record)
    except (MetricsComputationError, TypeError, ValueError, OverflowError) as ex:
        logger.warning("[attendance] %s fallback to 0 for record id=%s employee_id=%s date=%s: %s",
                       label, getattr(record, "id", None), getattr(record, "employee_id", None),
                       getattr(record, "attendance_date", None), ex)
        return ZERO

def compute_time_metrics(record) -> TimeMetrics:
    return TimeMetrics(
        late_minutes=_safe(record, "late_minutes", compute_late_minutes),
        undertime_minutes=_safe(record, "undertime_minutes", compute_undertime_minutes),
        hours_worked=_safe(record, "hours_worked", compute_hours_worked),
    )


def recalculate_attendance_metrics(record, *, force: bool = True):
    """
    Write late/undertime/hours_worked onto ``record`` (no save) and return it.

    force=True  -> overwrite unconditionally (raw time fields changed).
    force=False -> only fill values that are null or zero. A manual value of exactly 0 is therefore
                   indistinguishable from "never set" and always gets recomputed.
    Posted records are frozen.
    """
    if getattr(record, "is_posted", False):
        raise InvalidStateError(
            f"Attendance #{getattr(record, 'id', None)} is posted; its metrics can no longer change.",
            record_id=getattr(record, "id", None), posting_status=getattr(record, "posting_status", None),
        )
    metrics = compute_time_metrics(record)
    for name, value in metrics.as_dict().items():
        current = getattr(record, name, None)
        if force or not current:
            setattr(record, name, value)
    return record
