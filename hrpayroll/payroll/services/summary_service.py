# -*- coding: utf-8 -*-
"""
Service for PeriodSummary:
- pure fold of not-posted attendance into period totals
- generate (replace draft in place; posted/locked summaries are refused)
- post (draft -> posted, flips the contributing attendance to posted) and lock (posted -> locked)
- batch posting + dry-run preview over a whole period
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional
import logging

from django.db import transaction

from payroll.exceptions import (
    InvalidStateError, LockedError, MissingSummaryError, PayrollError, PayrollValidationError,
)
from payroll.models import Employee, PeriodSummary
from payroll.repositories import attendance_repository as attendance_repo
from payroll.repositories import summary_repository as repo
from payroll.services.audit_service import log_action, snapshot
from payroll.services.benefit_service import lookup_benefit, lookup_deduction
from payroll.utils.periods import cutoff_for, period_bounds, validate_period

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")

# summary total -> attendance field, straight sums
STRAIGHT_SUMS = {
    "ot_hours": "overtime",
    "slvl_days": "slvl",
    "retro": "retromultiplier",
    "travel_order_hours": "travel_order",
    "holiday_hours": "holiday",
    "ot_reg_holiday_hours": "ot_reg_holiday",
    "ot_special_holiday_hours": "ot_special_holiday",
    "offset_hours": "offset",
    "trip_count": "trip",
}
FLAG_SOURCES = {"has_ct": "ct", "has_cs": "cs", "has_ob": "ob"}
STATUS_FIELDS = ("status", "posted_by", "posted_at", "locked_by", "locked_at")


def _dec(value) -> Decimal:
    return ZERO if value is None else Decimal(str(value))

def _day_credit(record) -> Decimal:
    if getattr(record, "time_in", None) is None:
        return ZERO
    slvl = _dec(getattr(record, "slvl", None))
    if slvl >= ONE:
        return ZERO
    if slvl > ZERO:
        return ONE - slvl
    return ONE


def aggregate_attendance(records: Iterable[Any]) -> Dict[str, Any]:
    """Fold attendance rows into summary totals. Order-independent: every rule is a sum or an OR."""
    totals: Dict[str, Any] = {name: ZERO for name in PeriodSummary.TOTAL_FIELDS}
    totals.update({name: False for name in PeriodSummary.FLAG_FIELDS})

    for r in records:
        totals["days_worked"] += _day_credit(r)
        if getattr(r, "restday", False):
            totals["off_days"] += ONE
        totals["late_under_minutes"] += _dec(getattr(r, "late_minutes", None)) + _dec(getattr(r, "undertime_minutes", None))
        hours = _dec(getattr(r, "hours_worked", None))
        if getattr(r, "is_nightshift", False) and hours > ZERO:
            totals["nsd_hours"] += hours
        for total_name, field in STRAIGHT_SUMS.items():
            totals[total_name] += _dec(getattr(r, field, None))
        for flag, field in FLAG_SOURCES.items():
            totals[flag] = totals[flag] or bool(getattr(r, field, False))

    totals["days_worked"] = totals["days_worked"].quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return totals


# ====== helpers ======
def _get_employee(employee_id: int) -> Employee:
    try:
        return Employee.objects.get(id=employee_id)
    except Employee.DoesNotExist:
        raise PayrollValidationError(f"Employee #{employee_id} does not exist.", employee_id=employee_id)

def _get_summary(summary_id: int, *, lock: bool = False) -> PeriodSummary:
    try:
        return repo.get_for_update(summary_id) if lock else repo.get_by_id(summary_id)
    except PeriodSummary.DoesNotExist:
        raise MissingSummaryError(f"Period summary #{summary_id} does not exist.", summary_id=summary_id)

def _refuse_regeneration(existing: PeriodSummary) -> None:
    raise LockedError(
        f"Summary for {existing.employee_name or existing.employee_id} {existing.full_period} is "
        f"{existing.status}; it can no longer be regenerated.",
        summary_id=existing.id, employee_id=existing.employee_id, year=existing.year,
        month=existing.month, period_type=existing.period_type, status=existing.status,
    )

def _pass_through(employee_id: int, year: int, month: int, period_type: str) -> Dict[str, Any]:
    cutoff = cutoff_for(period_type)
    benefit = lookup_benefit(employee_id, cutoff, year, month)
    deduction = lookup_deduction(employee_id, cutoff, year, month)
    data = {name: (getattr(benefit, name) if benefit else ZERO) for name in PeriodSummary.BENEFIT_FIELDS}
    data.update({name: (getattr(deduction, name) if deduction else ZERO) for name in PeriodSummary.DEDUCTION_FIELDS})
    return data

def _summary_data(employee: Employee, year: int, month: int, period_type: str, records: List[Any]) -> Dict[str, Any]:
    start, end = period_bounds(year, month, period_type)
    data: Dict[str, Any] = {
        "employee_id": employee.id,
        "employee_no": employee.employee_no,
        "employee_name": employee.full_name,
        "cost_center": employee.cost_center,
        "department": employee.department,
        "line": employee.line,
        "year": year,
        "month": month,
        "period_type": period_type,
        "period_start": start,
        "period_end": end,
    }
    data.update(aggregate_attendance(records))
    data.update(_pass_through(employee.id, year, month, period_type))
    return data

def _write_summary(employee: Employee, year: int, month: int, period_type: str,
                   actor_id, records: List[Any]) -> tuple:
    """Create or replace the draft summary. Caller holds the transaction. Returns (summary, created)."""
    existing = repo.find_for_period(employee.id, year, month, period_type, lock=True)
    if existing is not None and not existing.is_draft:
        _refuse_regeneration(existing)

    data = _summary_data(employee, year, month, period_type, records)
    data["generated_by"] = actor_id
    if existing is None:
        data["status"] = PeriodSummary.Status.DRAFT
        return repo.create(data), True
    return repo.overwrite(existing, data), False

def _post(summary: PeriodSummary, records: List[Any], actor_id) -> int:
    summary.mark_posted(actor_id)
    repo.save_status(summary, ["status", "posted_by", "posted_at"])
    return attendance_repo.mark_posted([r.id for r in records], actor_id)


# ====== operations ======
@transaction.atomic
def generate_period_summary(employee_id: int, year, month, period_type: str, *, actor_id=None) -> PeriodSummary:
    year, month, period_type = validate_period(year, month, period_type)
    employee = _get_employee(employee_id)
    start, end = period_bounds(year, month, period_type)
    records = attendance_repo.unposted_for_employee(employee.id, start, end, lock=True)

    summary, created = _write_summary(employee, year, month, period_type, actor_id, records)
    log_action(actor=actor_id, action="generate" if created else "regenerate", object_type="period_summary",
               object_id=summary.id, after=snapshot(summary, "status", "days_worked", "late_under_minutes"))
    logger.info("[summary] %s id=%s employee_id=%s %s-%02d %s from %s record(s)",
                "generated" if created else "regenerated", summary.id, employee.id,
                year, month, period_type, len(records))
    return summary


@transaction.atomic
def post_period_summary(summary_id: int, actor_id=None) -> PeriodSummary:
    summary = _get_summary(summary_id, lock=True)
    if summary.is_locked:
        raise LockedError(f"Summary #{summary.id} is locked.", summary_id=summary.id, status=summary.status)
    if not summary.is_draft:
        raise InvalidStateError(
            f"Summary #{summary.id} is already {summary.status}.",
            summary_id=summary.id, status=summary.status,
        )
    before = snapshot(summary, *STATUS_FIELDS)
    employee = _get_employee(summary.employee_id)
    records = attendance_repo.unposted_for_employee(summary.employee_id, summary.period_start, summary.period_end, lock=True)
    # attendance may have been edited since generation; post what is actually being consumed
    summary = repo.overwrite(summary, _summary_data(employee, summary.year, summary.month, summary.period_type, records))
    flipped = _post(summary, records, actor_id)

    log_action(actor=actor_id, action="post", object_type="period_summary", object_id=summary.id,
               before=before, after=snapshot(summary, *STATUS_FIELDS))
    logger.info("[summary] posted id=%s employee_id=%s %s, %s attendance record(s) posted",
                summary.id, summary.employee_id, summary.full_period, flipped)
    return summary


@transaction.atomic
def lock_period_summary(summary_id: int, actor_id=None) -> PeriodSummary:
    summary = _get_summary(summary_id, lock=True)
    if summary.is_locked:
        raise LockedError(f"Summary #{summary.id} is already locked.", summary_id=summary.id, status=summary.status)
    if not summary.is_posted:
        raise InvalidStateError(
            f"Only posted summaries can be locked (summary #{summary.id} is {summary.status}).",
            summary_id=summary.id, status=summary.status,
        )
    before = snapshot(summary, *STATUS_FIELDS)
    summary.mark_locked(actor_id)
    repo.save_status(summary, ["status", "locked_by", "locked_at"])
    log_action(actor=actor_id, action="lock", object_type="period_summary", object_id=summary.id,
               before=before, after=snapshot(summary, *STATUS_FIELDS))
    logger.info("[summary] locked id=%s by %s", summary.id, actor_id)
    return summary


def preview_posting(year, month, period_type: str, *, employee_ids: Optional[List[int]] = None,
                    department: Optional[str] = None) -> Dict[str, Any]:
    """What a batch posting would do, without writing anything."""
    year, month, period_type = validate_period(year, month, period_type)
    start, end = period_bounds(year, month, period_type)
    ids = attendance_repo.unposted_employee_ids(start, end, employee_ids=employee_ids, department=department)

    rows: List[Dict[str, Any]] = []
    grand: Dict[str, Decimal] = {name: ZERO for name in PeriodSummary.TOTAL_FIELDS}
    record_count = 0
    for employee in Employee.objects.filter(id__in=ids).order_by("last_name", "first_name", "id"):
        records = attendance_repo.unposted_for_employee(employee.id, start, end)
        totals = aggregate_attendance(records)
        existing = repo.find_for_period(employee.id, year, month, period_type)
        record_count += len(records)
        for name in PeriodSummary.TOTAL_FIELDS:
            grand[name] += totals[name]
        rows.append({
            "employee_id": employee.id,
            "employee_no": employee.employee_no,
            "employee_name": employee.full_name,
            "department": employee.department,
            "record_count": len(records),
            "has_existing_summary": existing is not None,
            "existing_status": existing.status if existing else None,
            "will_update": bool(existing and existing.is_draft),
            "blocked": bool(existing and not existing.is_draft),
            **totals,
        })
    return {
        "year": year,
        "month": month,
        "period_type": period_type,
        "period_start": start,
        "period_end": end,
        "employee_count": len(rows),
        "record_count": record_count,
        "employees": rows,
        "totals": grand,
    }


@transaction.atomic
def post_attendance_to_payroll(year, month, period_type: str, *, actor_id=None,
                               employee_ids: Optional[List[int]] = None,
                               department: Optional[str] = None) -> Dict[str, Any]:
    """
    Generate and post one summary per employee with not-posted attendance in the period.
    Employees whose summary is already posted/locked are reported in ``errors`` and skipped;
    each employee runs in its own savepoint so one refusal does not undo the others.
    """
    year, month, period_type = validate_period(year, month, period_type)
    start, end = period_bounds(year, month, period_type)
    ids = attendance_repo.unposted_employee_ids(start, end, employee_ids=employee_ids, department=department)
    if not ids:
        raise PayrollValidationError(
            "No employees selected: there is no unposted attendance for this period and filter.",
            year=year, month=month, period_type=period_type, department=department,
        )

    result: Dict[str, Any] = {
        "created": 0, "updated": 0, "records_posted": 0,
        "summary_ids": [], "errors": [],
    }
    for employee in Employee.objects.filter(id__in=ids).order_by("id"):
        try:
            with transaction.atomic():
                records = attendance_repo.unposted_for_employee(employee.id, start, end, lock=True)
                summary, created = _write_summary(employee, year, month, period_type, actor_id, records)
                flipped = _post(summary, records, actor_id)
                log_action(actor=actor_id, action="post", object_type="period_summary", object_id=summary.id,
                           after=snapshot(summary, *STATUS_FIELDS))
        except PayrollError as ex:
            logger.warning("[summary] batch post skipped employee_id=%s: %s", employee.id, ex)
            result["errors"].append(f"{employee.full_name} (#{employee.id}): {ex}")
            continue
        result["created" if created else "updated"] += 1
        result["records_posted"] += flipped
        result["summary_ids"].append(summary.id)

    logger.info("[summary] batch post %s-%02d %s: created=%s updated=%s records=%s errors=%s",
                year, month, period_type, result["created"], result["updated"],
                result["records_posted"], len(result["errors"]))
    return result
