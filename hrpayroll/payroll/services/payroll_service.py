# -*- coding: utf-8 -*-
"""
Service for FinalPayroll generation and edits.

Generation order: summary exists -> no payroll yet for the key -> summary posted/locked
-> map inputs -> calculate -> insert. The duplicate check runs before any calculation;
the unique constraint backs it up for concurrent requests.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional
import logging

from django.db import transaction

from payroll.exceptions import DuplicateRecordError, InvalidStateError, MissingSummaryError, PayrollValidationError
from payroll.models import Benefit, Deduction, FinalPayroll, PeriodSummary
from payroll.repositories import payroll_repository as repo
from payroll.repositories import summary_repository as summary_repo
from payroll.services.approval_service import ensure_editable, get_payroll
from payroll.services.audit_service import log_action, snapshot
from payroll.services.benefit_service import lookup_benefit, lookup_deduction
from payroll.services.payroll_calculator import calculate_payroll
from payroll.utils.periods import cutoff_for

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# PeriodSummary field -> FinalPayroll field
SUMMARY_MAP = {
    "days_worked": "days_worked",
    "late_under_minutes": "late_under_minutes",
    "ot_hours": "ot_regular_hours",
    "nsd_hours": "nsd_hours",
    "holiday_hours": "holiday_hours",
    "ot_reg_holiday_hours": "ot_regular_holiday_hours",
    "ot_special_holiday_hours": "ot_special_holiday_hours",
    "travel_order_hours": "travel_order_hours",
    "slvl_days": "slvl_days",
    "retro": "retro_amount",
    "offset_hours": "offset_hours",
    "trip_count": "trip_count",
    "has_ct": "has_ct",
    "has_cs": "has_cs",
    "has_ob": "has_ob",
}
BENEFIT_MAP = {"mf_shares": "mf_shares", "allowances": "allowances"}
DEDUCTION_MAP = {
    "charge_store": "charge_store",
    "charge": "charge_deduction",
    "meals": "meals_deduction",
    "miscellaneous": "miscellaneous_deduction",
    "other_deductions": "other_deductions",
}
SUMMARY_FIGURES = ("gross_earnings", "total_deductions", "net_pay", "has_adjustments")


def fit_to_column(name: str, value: Any) -> Any:
    """Round a numeric input to the stored precision of FinalPayroll.<name> (half-up)."""
    places = getattr(FinalPayroll._meta.get_field(name), "decimal_places", None)
    if places is None or value is None or isinstance(value, bool):
        return value
    return Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def map_inputs(payroll: FinalPayroll, summary: PeriodSummary,
               benefit: Optional[Benefit], deduction: Optional[Deduction]) -> FinalPayroll:
    # the calculator must see exactly what the columns will store
    for src, dst in SUMMARY_MAP.items():
        setattr(payroll, dst, fit_to_column(dst, getattr(summary, src)))
    payroll.late_under_hours = fit_to_column("late_under_hours", summary.late_under_hours)
    for src, dst in BENEFIT_MAP.items():
        setattr(payroll, dst, getattr(benefit, src) if benefit else ZERO)
    advance = deduction.advance if deduction else ZERO
    payroll.mf_loan = advance
    payroll.advance_deduction = advance
    for src, dst in DEDUCTION_MAP.items():
        setattr(payroll, dst, getattr(deduction, src) if deduction else ZERO)
    payroll.benefit = benefit
    payroll.deduction = deduction
    return payroll


def _new_payroll(summary: PeriodSummary, actor_id) -> FinalPayroll:
    employee = summary.employee
    return FinalPayroll(
        employee=employee,
        employee_no=employee.employee_no,
        employee_name=employee.full_name,
        cost_center=employee.cost_center,
        department=employee.department,
        line=employee.line,
        job_title=employee.job_title,
        rank_file=employee.rank_file,
        year=summary.year,
        month=summary.month,
        period_type=summary.period_type,
        period_start=summary.period_start,
        period_end=summary.period_end,
        pay_type=employee.pay_type,
        basic_rate=employee.basic_rate,
        pay_allowance=employee.pay_allowance,
        is_taxable=employee.is_taxable,
        payroll_summary=summary,
        status=FinalPayroll.Status.DRAFT,
        approval_status=FinalPayroll.ApprovalStatus.PENDING,
        created_by=actor_id,
    )


@transaction.atomic
def generate_final_payroll(summary_id: int, actor_id=None) -> FinalPayroll:
    summary = summary_repo.get_or_none(summary_id)
    if summary is None:
        raise MissingSummaryError(f"Period summary #{summary_id} does not exist.", summary_id=summary_id)

    existing = repo.find_for_period(summary.employee_id, summary.year, summary.month, summary.period_type)
    if existing is not None:
        raise DuplicateRecordError(
            f"Final payroll already exists for {summary.employee_name or summary.employee_id} {summary.full_period}.",
            payroll_id=existing.id, employee_id=summary.employee_id, year=summary.year,
            month=summary.month, period_type=summary.period_type,
        )
    if summary.is_draft:
        raise InvalidStateError(
            f"Summary #{summary.id} is still a draft; post it before generating payroll.",
            summary_id=summary.id, status=summary.status,
        )

    cutoff = cutoff_for(summary.period_type)
    benefit = lookup_benefit(summary.employee_id, cutoff, summary.year, summary.month)
    deduction = lookup_deduction(summary.employee_id, cutoff, summary.year, summary.month)

    payroll = map_inputs(_new_payroll(summary, actor_id), summary, benefit, deduction)
    calculate_payroll(payroll)
    repo.insert(payroll)

    log_action(actor=actor_id, action="generate", object_type="final_payroll", object_id=payroll.id,
               after=snapshot(payroll, "status", "approval_status", *SUMMARY_FIGURES))
    logger.info("[payroll] generated id=%s employee_id=%s %s net=%s",
                payroll.id, payroll.employee_id, payroll.full_period, payroll.net_pay)
    return payroll


@transaction.atomic
def recalculate_payroll(payroll_id: int, actor_id=None) -> FinalPayroll:
    payroll = get_payroll(payroll_id, lock=True)
    ensure_editable(payroll, "recalculate")
    before = snapshot(payroll, *SUMMARY_FIGURES)
    calculate_payroll(payroll)
    repo.save(payroll, list(FinalPayroll.COMPUTED_FIELDS) + ["calculation_breakdown"])
    log_action(actor=actor_id, action="recalculate", object_type="final_payroll", object_id=payroll.id,
               before=before, after=snapshot(payroll, *SUMMARY_FIGURES))
    logger.info("[payroll] recalculated id=%s net=%s", payroll.id, payroll.net_pay)
    return payroll


@transaction.atomic
def adjust_final_payroll(payroll_id: int, actor_id=None, **changes: Any) -> FinalPayroll:
    unknown = set(changes) - set(FinalPayroll.ADJUSTABLE_FIELDS)
    if unknown:
        raise PayrollValidationError(
            f"These fields cannot be adjusted: {', '.join(sorted(unknown))}.", payroll_id=payroll_id,
        )
    if not changes:
        raise PayrollValidationError("Nothing to adjust.", payroll_id=payroll_id)

    payroll = get_payroll(payroll_id, lock=True)
    ensure_editable(payroll, "adjust")
    before = snapshot(payroll, *changes, *SUMMARY_FIGURES)
    for k, v in changes.items():
        setattr(payroll, k, fit_to_column(k, v))
    payroll.has_adjustments = True
    calculate_payroll(payroll)
    repo.save(payroll, list(changes) + ["has_adjustments", "calculation_breakdown"] + list(FinalPayroll.COMPUTED_FIELDS))

    log_action(actor=actor_id, action="adjust", object_type="final_payroll", object_id=payroll.id,
               before=before, after=snapshot(payroll, *changes, *SUMMARY_FIGURES))
    logger.info("[payroll] adjusted id=%s fields=%s net=%s", payroll.id, sorted(changes), payroll.net_pay)
    return payroll
