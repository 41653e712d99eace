# -*- coding: utf-8 -*-
"""
Selector for AttendanceRecord:
- normalise query params
- delegate to the repository
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from django.db.models import QuerySet

from payroll.models import AttendanceRecord
from payroll.repositories import attendance_repository as repo
from payroll.selectors._normalize import as_date, as_int_list, as_str_list


def filter_records(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[AttendanceRecord]:
    norm = {
        "employee_id": as_int_list(filters.get("employee_id")),
        "date_from": as_date(filters.get("date_from")),
        "date_to": as_date(filters.get("date_to")),
        "posting_status": as_str_list(filters.get("posting_status")),
        "department": (filters.get("department") or "").strip(),
    }
    return repo.filter_records(norm, order_by=order_by)
