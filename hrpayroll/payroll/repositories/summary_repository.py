# -*- coding: utf-8 -*-
"""
Repository for PeriodSummary (pure DB).
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from payroll.exceptions import DuplicateRecordError
from payroll.models import PeriodSummary
from payroll.repositories.base import for_update


def base_qs() -> QuerySet[PeriodSummary]:
    return PeriodSummary.objects.select_related("employee")

def get_by_id(summary_id: int) -> PeriodSummary:
    return base_qs().get(id=summary_id)

def get_or_none(summary_id: int) -> Optional[PeriodSummary]:
    return base_qs().filter(id=summary_id).first()

def get_for_update(summary_id: int) -> PeriodSummary:
    return for_update(PeriodSummary.objects).get(id=summary_id)

def find_for_period(employee_id: int, year: int, month: int, period_type: str, *, lock: bool = False) -> Optional[PeriodSummary]:
    qs = PeriodSummary.objects.filter(employee_id=employee_id, year=year, month=month, period_type=period_type)
    if lock:
        qs = for_update(qs)
    return qs.first()

def for_period(year: int, month: int, period_type: str, *, employee_ids: Optional[List[int]] = None,
               department: Optional[str] = None) -> QuerySet[PeriodSummary]:
    qs = base_qs().filter(year=year, month=month, period_type=period_type)
    if employee_ids:
        qs = qs.filter(employee_id__in=employee_ids)
    if department:
        qs = qs.filter(department=department)
    return qs

def filter_summaries(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[PeriodSummary]:
    qs = base_qs()
    if (emp_ids := filters.get("employee_id")):
        qs = qs.filter(employee_id__in=emp_ids)
    if (year := filters.get("year")):
        qs = qs.filter(year=year)
    if (month := filters.get("month")):
        qs = qs.filter(month=month)
    if (ptype := filters.get("period_type")):
        qs = qs.filter(period_type=ptype)
    if (statuses := filters.get("status")):
        qs = qs.filter(status__in=statuses)
    if (dept := filters.get("department")):
        qs = qs.filter(department=dept)
    return qs.order_by(*order_by) if order_by else qs


def create(data: Dict[str, Any]) -> PeriodSummary:
    try:
        with transaction.atomic():
            return PeriodSummary.objects.create(**data)
    except IntegrityError as ex:
        raise DuplicateRecordError(
            f"A summary for employee #{data.get('employee_id')} {data.get('year')}-{data.get('month')} "
            f"{data.get('period_type')} already exists.",
            employee_id=data.get("employee_id"), year=data.get("year"),
            month=data.get("month"), period_type=data.get("period_type"),
        ) from ex

def overwrite(obj: PeriodSummary, data: Dict[str, Any]) -> PeriodSummary:
    for k, v in data.items():
        setattr(obj, k, v)
    obj.save()
    return obj

def save_status(obj: PeriodSummary, fields: List[str]) -> PeriodSummary:
    obj.save(update_fields=fields + ["updated_at"])
    return obj
