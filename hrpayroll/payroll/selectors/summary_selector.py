# -*- coding: utf-8 -*-
"""
Selector for PeriodSummary: filtered listings and per-period roll-ups.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Any, Dict, List, Optional
from django.db.models import Avg, Count, Q, QuerySet, Sum

from payroll.models import PeriodSummary
from payroll.repositories import summary_repository as repo
from payroll.selectors._normalize import as_int, as_int_list, as_str_list
from payroll.utils.periods import validate_period

ZERO = Decimal("0.00")
STAT_FIELDS = ("days_worked", "ot_hours", "late_under_minutes", "nsd_hours", "slvl_days", "retro")
PASS_THROUGH_DEDUCTIONS = PeriodSummary.DEDUCTION_FIELDS + (
    "mf_loan", "sss_loan", "hmdf_loan", "hmdf_prem", "sss_prem", "philhealth",
)


def filter_summaries(filters: Dict[str, Any], order_by: Optional[List[str]] = None) -> QuerySet[PeriodSummary]:
    norm = {
        "employee_id": as_int_list(filters.get("employee_id")),
        "year": as_int(filters.get("year")),
        "month": as_int(filters.get("month")),
        "period_type": (filters.get("period_type") or "").strip(),
        "status": as_str_list(filters.get("status")),
        "department": (filters.get("department") or "").strip(),
    }
    return repo.filter_summaries(norm, order_by=order_by)


def period_statistics(year, month, period_type: str, department: Optional[str] = None) -> Dict[str, Any]:
    year, month, period_type = validate_period(year, month, period_type)
    qs = repo.for_period(year, month, period_type, department=department or None)

    aggregates = {f"total_{name}": Sum(name) for name in STAT_FIELDS}
    aggregates.update({f"avg_{name}": Avg(name) for name in ("days_worked", "late_under_minutes")})
    aggregates.update({f"sum_{name}": Sum(name) for name in PASS_THROUGH_DEDUCTIONS + ("mf_shares", "allowances")})
    aggregates.update({
        "count": Count("id"),
        "draft": Count("id", filter=Q(status=PeriodSummary.Status.DRAFT)),
        "posted": Count("id", filter=Q(status=PeriodSummary.Status.POSTED)),
        "locked": Count("id", filter=Q(status=PeriodSummary.Status.LOCKED)),
    })
    raw = qs.aggregate(**aggregates)

    stats: Dict[str, Any] = {
        "year": year,
        "month": month,
        "period_type": period_type,
        "department": department or None,
        "count": raw["count"],
        "by_status": {"draft": raw["draft"], "posted": raw["posted"], "locked": raw["locked"]},
    }
    for name in STAT_FIELDS:
        stats[f"total_{name}"] = raw[f"total_{name}"] or ZERO
    for name in ("days_worked", "late_under_minutes"):
        avg = raw[f"avg_{name}"]
        stats[f"avg_{name}"] = Decimal(str(avg)).quantize(Decimal("0.01")) if avg is not None else ZERO
    stats["total_deductions"] = sum((raw[f"sum_{n}"] or ZERO for n in PASS_THROUGH_DEDUCTIONS), ZERO)
    stats["total_benefits"] = (raw["sum_mf_shares"] or ZERO) + (raw["sum_allowances"] or ZERO)
    return stats
