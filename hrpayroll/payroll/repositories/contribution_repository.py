# -*- coding: utf-8 -*-
"""
Repository for the per-cutoff Benefit / Deduction rows (pure DB).
Functions take the model class so both kinds share one code path.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Type
from django.db.models import QuerySet

from payroll.models.contributions import CutoffRecord
from payroll.repositories.base import for_update


def get_by_id(model: Type[CutoffRecord], record_id: int) -> CutoffRecord:
    return model.objects.get(id=record_id)

def get_for_update(model: Type[CutoffRecord], record_id: int) -> CutoffRecord:
    return for_update(model.objects).get(id=record_id)

def find_for_period(model: Type[CutoffRecord], employee_id: int, cutoff: str, year: int, month: int) -> Optional[CutoffRecord]:
    return (
        model.objects
        .filter(employee_id=employee_id, cutoff=cutoff, date__year=year, date__month=month, is_default=False)
        .order_by("-date", "-id")
        .first()
    )

def latest_default(model: Type[CutoffRecord], employee_id: int) -> Optional[CutoffRecord]:
    return model.objects.filter(employee_id=employee_id, is_default=True).order_by("-date", "-id").first()

def clear_defaults(model: Type[CutoffRecord], employee_id: int, *, exclude_id: Optional[int] = None) -> int:
    qs = for_update(model.objects.filter(employee_id=employee_id, is_default=True))
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs.update(is_default=False)

def filter_records(model: Type[CutoffRecord], filters: Dict[str, Any]) -> QuerySet:
    qs = model.objects.select_related("employee")
    if (emp_ids := filters.get("employee_id")):
        qs = qs.filter(employee_id__in=emp_ids)
    if (cutoff := filters.get("cutoff")):
        qs = qs.filter(cutoff=cutoff)
    if filters.get("is_default") is not None:
        qs = qs.filter(is_default=filters["is_default"])
    if filters.get("is_posted") is not None:
        qs = qs.filter(is_posted=filters["is_posted"])
    if (d_from := filters.get("date_from")):
        qs = qs.filter(date__gte=d_from)
    if (d_to := filters.get("date_to")):
        qs = qs.filter(date__lte=d_to)
    return qs

def create(model: Type[CutoffRecord], data: Dict[str, Any]) -> CutoffRecord:
    return model.objects.create(**data)
