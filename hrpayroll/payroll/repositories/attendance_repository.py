# -*- coding: utf-8 -*-
"""
Repository for AttendanceRecord (pure DB):
- filters, period windows, row locks
- bulk posting flip
- no recompute / posting rules here; the services decide
"""
from __future__ import annotations
from datetime import date
from typing import Any, Dict, Iterable, List, Optional
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from payroll.exceptions import DuplicateRecordError
from payroll.models import AttendanceRecord
from payroll.repositories.base import for_update


# ============================
# Base queries
# ============================
def base_qs() -> QuerySet[AttendanceRecord]:
    return AttendanceRecord.objects.select_related("employee")

def get_for_update(record_id: int) -> AttendanceRecord:
    return for_update(AttendanceRecord.objects).get(id=record_id)

def in_period(start: date, end: date, *, employee_ids: Optional[List[int]] = None,
              department: Optional[str] = None) -> QuerySet[AttendanceRecord]:
    qs = base_qs().filter(attendance_date__gte=start, attendance_date__lte=end)
    if employee_ids:
        qs = qs.filter(employee_id__in=employee_ids)
    if department:
        qs = qs.filter(employee__department=department)
    return qs

def unposted_in_period(start: date, end: date, **filters: Any) -> QuerySet[AttendanceRecord]:
    return in_period(start, end, **filters).filter(posting_status=AttendanceRecord.PostingStatus.NOT_POSTED)

def unposted_for_employee(employee_id: int, start: date, end: date, *, lock: bool = False) -> List[AttendanceRecord]:
    qs = AttendanceRecord.objects.filter(
        employee_id=employee_id,
        attendance_date__gte=start,
        attendance_date__lte=end,
        posting_status=AttendanceRecord.PostingStatus.NOT_POSTED,
    ).order_by("attendance_date", "id")
    if lock:
        qs = for_update(qs)
    return list(qs)

def unposted_employee_ids(start: date, end: date, **filters: Any) -> List[int]:
    return sorted(set(unposted_in_period(start, end, **filters).values_list("employee_id", flat=True)))

def filter_records(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[AttendanceRecord]:
    qs = base_qs()
    if (emp_ids := filters.get("employee_id")):
        qs = qs.filter(employee_id__in=emp_ids)
    if (d_from := filters.get("date_from")):
        qs = qs.filter(attendance_date__gte=d_from)
    if (d_to := filters.get("date_to")):
        qs = qs.filter(attendance_date__lte=d_to)
    if (statuses := filters.get("posting_status")):
        qs = qs.filter(posting_status__in=statuses)
    if (dept := filters.get("department")):
        qs = qs.filter(employee__department=dept)
    return qs.order_by(*order_by) if order_by else qs.order_by("-attendance_date", "employee_id")


# ============================
# Mutations (pure DB)
# ============================
def insert(obj: AttendanceRecord) -> AttendanceRecord:
    try:
        with transaction.atomic():
            obj.save(force_insert=True)
    except IntegrityError as ex:
        raise DuplicateRecordError(
            f"Attendance for employee #{obj.employee_id} on {obj.attendance_date} already exists.",
            employee_id=obj.employee_id, attendance_date=str(obj.attendance_date),
        ) from ex
    return obj

def save(obj: AttendanceRecord, fields: Optional[Iterable[str]] = None) -> AttendanceRecord:
    if fields is None:
        obj.save()
    else:
        obj.save(update_fields=list(fields) + ["updated_at"])
    return obj

def mark_posted(record_ids: Iterable[int], actor_id: Optional[int]) -> int:
    ids = list(record_ids)
    if not ids:
        return 0
    now = timezone.now()
    return AttendanceRecord.objects.filter(
        id__in=ids, posting_status=AttendanceRecord.PostingStatus.NOT_POSTED,
    ).update(
        posting_status=AttendanceRecord.PostingStatus.POSTED,
        posted_at=now,
        posted_by=actor_id,
        updated_at=now,
    )
