# -*- coding: utf-8 -*-
"""
Repository for FinalPayroll (pure DB).
The unique (employee, year, month, period_type) key is the mutual-exclusion point for
concurrent generation; IntegrityError on it surfaces as DuplicateRecordError.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from payroll.exceptions import DuplicateRecordError
from payroll.models import FinalPayroll
from payroll.repositories.base import for_update


def base_qs() -> QuerySet[FinalPayroll]:
    return FinalPayroll.objects.select_related("employee", "payroll_summary", "benefit", "deduction")

def get_by_id(payroll_id: int) -> FinalPayroll:
    return base_qs().get(id=payroll_id)

def get_for_update(payroll_id: int) -> FinalPayroll:
    return for_update(FinalPayroll.objects).get(id=payroll_id)

def find_for_period(employee_id: int, year: int, month: int, period_type: str) -> Optional[FinalPayroll]:
    return FinalPayroll.objects.filter(
        employee_id=employee_id, year=year, month=month, period_type=period_type,
    ).first()

def for_period(year: int, month: int, period_type: str, *, department: Optional[str] = None) -> QuerySet[FinalPayroll]:
    qs = FinalPayroll.objects.filter(year=year, month=month, period_type=period_type)
    if department:
        qs = qs.filter(department=department)
    return qs

def filter_payrolls(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[FinalPayroll]:
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
    if (approvals := filters.get("approval_status")):
        qs = qs.filter(approval_status__in=approvals)
    if (dept := filters.get("department")):
        qs = qs.filter(department=dept)
    return qs.order_by(*order_by) if order_by else qs


def insert(obj: FinalPayroll) -> FinalPayroll:
    try:
        with transaction.atomic():
            obj.save(force_insert=True)
    except IntegrityError as ex:
        raise DuplicateRecordError(
            f"Final payroll for employee #{obj.employee_id} {obj.year}-{obj.month:02d} {obj.period_type} already exists.",
            employee_id=obj.employee_id, year=obj.year, month=obj.month, period_type=obj.period_type,
        ) from ex
    return obj

def save(obj: FinalPayroll, fields: Optional[List[str]] = None) -> FinalPayroll:
    if fields is None:
        obj.save()
    else:
        obj.save(update_fields=fields + ["updated_at"])
    return obj
