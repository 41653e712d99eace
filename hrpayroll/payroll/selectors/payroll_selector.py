# -*- coding: utf-8 -*-
"""
Selector for FinalPayroll: filtered listings and per-period roll-ups.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List, Optional
from django.db.models import Avg, Count, Q, QuerySet, Sum

from payroll.models import FinalPayroll
from payroll.repositories import payroll_repository as repo
from payroll.selectors._normalize import as_int, as_int_list, as_str_list
from payroll.utils.periods import validate_period

ZERO = Decimal("0.00")
SUM_FIELDS = (
    "basic_pay", "overtime_pay", "premium_pay", "gross_earnings",
    "total_government_deductions", "total_company_deductions", "total_other_deductions",
    "withholding_tax", "total_deductions", "net_pay",
)


def filter_payrolls(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[FinalPayroll]:
    norm = {
        "employee_id": as_int_list(filters.get("employee_id")),
        "year": as_int(filters.get("year")),
        "month": as_int(filters.get("month")),
        "period_type": (filters.get("period_type") or "").strip(),
        "status": as_str_list(filters.get("status")),
        "approval_status": as_str_list(filters.get("approval_status")),
        "department": (filters.get("department") or "").strip(),
    }
    return repo.filter_payrolls(norm, order_by=order_by)


def period_statistics(year, month, period_type: str, department: Optional[str] = None) -> Dict[str, Any]:
    year, month, period_type = validate_period(year, month, period_type)
    qs = repo.for_period(year, month, period_type, department=department or None)

    aggregates = {f"total_{name}": Sum(name) for name in SUM_FIELDS}
    aggregates["avg_net_pay"] = Avg("net_pay")
    aggregates["count"] = Count("id")
    aggregates["adjusted"] = Count("id", filter=Q(has_adjustments=True))
    for value in FinalPayroll.Status.values:
        aggregates[f"status_{value}"] = Count("id", filter=Q(status=value))
    for value in FinalPayroll.ApprovalStatus.values:
        aggregates[f"approval_{value}"] = Count("id", filter=Q(approval_status=value))
    raw = qs.aggregate(**aggregates)

    avg = raw["avg_net_pay"]
    stats: Dict[str, Any] = {
        "year": year,
        "month": month,
        "period_type": period_type,
        "department": department or None,
        "count": raw["count"],
        "adjusted": raw["adjusted"],
        "avg_net_pay": Decimal(str(avg)).quantize(Decimal("0.01")) if avg is not None else ZERO,
        "by_status": {v: raw[f"status_{v}"] for v in FinalPayroll.Status.values},
        "by_approval_status": {v: raw[f"approval_{v}"] for v in FinalPayroll.ApprovalStatus.values},
    }
    for name in SUM_FIELDS:
        stats[f"total_{name}"] = raw[f"total_{name}"] or ZERO
    return stats
