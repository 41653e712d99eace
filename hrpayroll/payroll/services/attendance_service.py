# -*- coding: utf-8 -*-
"""
Service for AttendanceRecord:
- create / update with the explicit metric recompute rules
  (create: fill derived fields unless given a nonzero value; update: any raw clock change forces a recompute)
- posted records are frozen
- bulk recompute over a pay period
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from django.db import transaction
from django.utils.dateparse import parse_date

from payroll.exceptions import InvalidStateError, MetricsComputationError, PayrollValidationError
from payroll.models import AttendanceRecord, Employee
from payroll.repositories import attendance_repository as repo
from payroll.services.time_metrics import clock_date, parse_time_value, recalculate_attendance_metrics
from payroll.utils.periods import period_bounds

logger = logging.getLogger(__name__)

DATETIME_FIELDS = ("time_in", "time_out", "break_in", "break_out", "next_day_timeout")
EDITABLE_FIELDS = (
    "day", *AttendanceRecord.RAW_TIME_FIELDS, *AttendanceRecord.DERIVED_FIELDS,
    "overtime", "travel_order", "slvl", "holiday", "ot_reg_holiday", "ot_special_holiday",
    "retromultiplier", "restday", "offset", "trip", "ct", "cs", "ob", "source", "remarks",
)


def _coerce_times(values: Dict[str, Any], on_date, record_id=None) -> Dict[str, Any]:
    out = dict(values)
    for name in DATETIME_FIELDS:
        if name not in out:
            continue
        try:
            out[name] = parse_time_value(out[name], clock_date(name, on_date))
        except MetricsComputationError as ex:
            logger.warning("[attendance] drop unparseable %s for record id=%s date=%s: %s",
                           name, record_id, on_date, ex)
            out[name] = None
    return out

def _ensure_not_posted(obj: AttendanceRecord) -> None:
    if obj.is_posted:
        raise InvalidStateError(
            f"Attendance #{obj.id} ({obj.attendance_date}) is already posted to payroll.",
            record_id=obj.id, employee_id=obj.employee_id, posting_status=obj.posting_status,
        )


def create_attendance_record(*, employee_id: int, attendance_date, **fields: Any) -> AttendanceRecord:
    if isinstance(attendance_date, str):
        attendance_date = parse_date(attendance_date)
    if attendance_date is None:
        raise PayrollValidationError("attendance_date is required.", employee_id=employee_id)
    if not Employee.objects.filter(id=employee_id).exists():
        raise PayrollValidationError(f"Employee #{employee_id} does not exist.", employee_id=employee_id)

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise PayrollValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}.")

    data = _coerce_times(fields, attendance_date)
    data.setdefault("day", attendance_date.strftime("%A"))
    obj = AttendanceRecord(employee_id=employee_id, attendance_date=attendance_date, **data)
    recalculate_attendance_metrics(obj, force=False)

    obj = repo.insert(obj)
    logger.info("[attendance] created id=%s employee_id=%s date=%s late=%s under=%s hours=%s",
                obj.id, employee_id, attendance_date, obj.late_minutes, obj.undertime_minutes, obj.hours_worked)
    return obj


@transaction.atomic
def update_attendance_record(*, record_id: int, **changes: Any) -> AttendanceRecord:
    for k in ("id", "pk", "employee", "employee_id", "attendance_date", "posting_status",
              "posted_at", "posted_by", "created_at", "updated_at"):
        changes.pop(k, None)
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise PayrollValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}.", record_id=record_id)

    obj = repo.get_for_update(record_id)
    _ensure_not_posted(obj)

    changes = _coerce_times(changes, obj.attendance_date, record_id=record_id)
    raw_changed = any(
        name in changes and changes[name] != getattr(obj, name)
        for name in AttendanceRecord.RAW_TIME_FIELDS
    )
    for k, v in changes.items():
        setattr(obj, k, v)
    fields: List[str] = list(changes)
    if raw_changed:
        recalculate_attendance_metrics(obj, force=True)
        fields.extend(f for f in AttendanceRecord.DERIVED_FIELDS if f not in fields)
        logger.info("[attendance] raw time changed, recomputed id=%s", obj.id)
    if fields:
        repo.save(obj, fields)
    return obj


@transaction.atomic
def recalculate_record(*, record_id: int) -> AttendanceRecord:
    obj = repo.get_for_update(record_id)
    _ensure_not_posted(obj)
    recalculate_attendance_metrics(obj, force=True)
    return repo.save(obj, list(AttendanceRecord.DERIVED_FIELDS))


@transaction.atomic
def recalculate_period_metrics(year, month, period_type, *, employee_ids: Optional[List[int]] = None,
                               department: Optional[str] = None) -> int:
    """Force-recompute every not-posted record in the period. Returns how many were rewritten."""
    start, end = period_bounds(year, month, period_type)
    count = 0
    for obj in repo.unposted_in_period(start, end, employee_ids=employee_ids, department=department):
        recalculate_attendance_metrics(obj, force=True)
        repo.save(obj, list(AttendanceRecord.DERIVED_FIELDS))
        count += 1
    logger.info("[attendance] recalculated %s record(s) for %s-%02d %s", count, int(year), int(month), period_type)
    return count
