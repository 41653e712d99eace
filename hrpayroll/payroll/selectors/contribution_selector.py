# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Any, Dict, Type
from django.db.models import QuerySet

from payroll.models.contributions import CutoffRecord
from payroll.repositories import contribution_repository as repo
from payroll.selectors._normalize import as_date, as_int_list


def _as_bool(v: Any):
    if v is None or v == "":
        return None
    return str(v).strip().lower() in ("1", "true", "yes")

def filter_records(model: Type[CutoffRecord], filters: Dict[str, Any]) -> QuerySet:
    norm = {
        "employee_id": as_int_list(filters.get("employee_id")),
        "cutoff": (filters.get("cutoff") or "").strip(),
        "is_default": _as_bool(filters.get("is_default")),
        "is_posted": _as_bool(filters.get("is_posted")),
        "date_from": as_date(filters.get("date_from")),
        "date_to": as_date(filters.get("date_to")),
    }
    return repo.filter_records(model, norm)
