# -*- coding: utf-8 -*-
"""
Final payroll calculator.

Runs a fixed sequence of steps over one FinalPayroll instance (no DB access):
    basic pay -> overtime -> premium -> company/other deductions
    -> government contributions -> withholding tax -> totals
Each step reads the results of the earlier ones. Every money figure is a Decimal
rounded half-up to centavos, so re-running on the same inputs gives identical output.

Contribution rates, caps and the tax table are simplified placeholders.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict
import logging

from django.conf import settings

from payroll.models import FinalPayroll
from payroll.utils.periods import expected_days_in_half

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENTS = Decimal("0.01")

HOURS_PER_DAY = Decimal("8")
DAYS_PER_MONTH = Decimal("30")
PERIODS_PER_MONTH = Decimal("2")

OT_REGULAR_RATE = Decimal("1.25")
OT_REST_DAY_RATE = Decimal("1.30")
OT_SPECIAL_HOLIDAY_RATE = Decimal("1.30")
OT_REGULAR_HOLIDAY_RATE = Decimal("2.0")
NSD_RATE = Decimal("0.10")

SSS_RATE, SSS_CAP = Decimal("0.045"), Decimal("1000")
PHILHEALTH_RATE, PHILHEALTH_CAP = Decimal("0.015"), Decimal("2000")
HDMF_RATE, HDMF_CAP = Decimal("0.02"), Decimal("100")

# (monthly ceiling, base tax, excess over, rate); last row has no ceiling
TAX_TABLE = (
    (Decimal("20833"), ZERO, Decimal("0"), Decimal("0")),
    (Decimal("33333"), ZERO, Decimal("20833"), Decimal("0.15")),
    (Decimal("66667"), Decimal("1875"), Decimal("33333"), Decimal("0.20")),
    (Decimal("166667"), Decimal("8541.80"), Decimal("66667"), Decimal("0.25")),
    (Decimal("666667"), Decimal("33541.80"), Decimal("166667"), Decimal("0.30")),
    (None, Decimal("183541.80"), Decimal("666667"), Decimal("0.35")),
)


def _d(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(str(value))

def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)

def _trip_rate() -> Decimal:
    return _d(getattr(settings, "PAYROLL_TRIP_RATE", 50))

def hourly_rate(payroll: FinalPayroll) -> Decimal:
    return _d(payroll.basic_rate) / HOURS_PER_DAY


def compute_withholding_tax(monthly_taxable_income) -> Decimal:
    """Semi-monthly withholding for a monthly taxable income (monthly table result halved)."""
    income = _d(monthly_taxable_income)
    for ceiling, base, excess_over, rate in TAX_TABLE:
        if ceiling is None or income <= ceiling:
            if rate == 0:
                return ZERO
            return _money((base + (income - excess_over) * rate) / PERIODS_PER_MONTH)
    return ZERO


# ========= steps =========
def _basic_pay(p: FinalPayroll) -> None:
    rate = _d(p.basic_rate)
    if p.pay_type == "hourly":
        basic = rate * _d(p.hours_worked)
    elif p.pay_type == "monthly":
        basic = rate / DAYS_PER_MONTH * expected_days_in_half(p.period_type, p.period_end)
    else:
        basic = rate * _d(p.days_worked)
    p.basic_pay = _money(basic)
    p.allowances = _money(_d(p.pay_allowance))

    late_hours = _d(p.late_under_hours)
    if late_hours > 0:
        p.late_under_deduction = _money(rate / HOURS_PER_DAY * late_hours)
    absence = _d(p.absence_days)
    if absence > 0:
        p.absence_deduction = _money(rate * absence)

def _overtime(p: FinalPayroll) -> None:
    hr = hourly_rate(p)
    p.ot_regular_amount = _money(_d(p.ot_regular_hours) * hr * OT_REGULAR_RATE)
    p.ot_rest_day_amount = _money(_d(p.ot_rest_day_hours) * hr * OT_REST_DAY_RATE)
    p.ot_special_holiday_amount = _money(_d(p.ot_special_holiday_hours) * hr * OT_SPECIAL_HOLIDAY_RATE)
    p.ot_regular_holiday_amount = _money(_d(p.ot_regular_holiday_hours) * hr * OT_REGULAR_HOLIDAY_RATE)
    p.overtime_pay = (p.ot_regular_amount + p.ot_rest_day_amount
                      + p.ot_special_holiday_amount + p.ot_regular_holiday_amount)

def _premium(p: FinalPayroll) -> None:
    hr = hourly_rate(p)
    p.nsd_amount = _money(_d(p.nsd_hours) * hr * NSD_RATE)
    p.holiday_amount = _money(_d(p.holiday_hours) * hr)
    p.travel_order_amount = _money(_d(p.travel_order_hours) * hr)
    p.slvl_amount = _money(_d(p.slvl_days) * _d(p.basic_rate))
    p.offset_amount = _money(_d(p.offset_hours) * hr)
    p.trip_amount = _money(_d(p.trip_count) * _trip_rate())
    # slvl_amount and trip_amount go into gross earnings, not into this subtotal
    p.premium_pay = p.nsd_amount + p.holiday_amount + p.travel_order_amount + p.offset_amount

def _deductions(p: FinalPayroll) -> None:
    p.total_company_deductions = _money(_d(p.mf_shares) + _d(p.mf_loan) + _d(p.sss_loan) + _d(p.hdmf_loan))
    p.total_other_deductions = _money(
        _d(p.advance_deduction) + _d(p.charge_store) + _d(p.charge_deduction)
        + _d(p.meals_deduction) + _d(p.miscellaneous_deduction) + _d(p.other_deductions)
    )

def _government(p: FinalPayroll) -> None:
    if not p.is_taxable:
        return
    monthly_basic = p.basic_pay * PERIODS_PER_MONTH
    p.sss_contribution = _money(min(monthly_basic * SSS_RATE, SSS_CAP))
    p.philhealth_contribution = _money(min(monthly_basic * PHILHEALTH_RATE, PHILHEALTH_CAP))
    p.hdmf_contribution = _money(min(monthly_basic * HDMF_RATE, HDMF_CAP))
    p.total_government_deductions = p.sss_contribution + p.philhealth_contribution + p.hdmf_contribution

def _withholding(p: FinalPayroll) -> None:
    if not p.is_taxable:
        return
    p.taxable_income = _money(
        p.basic_pay + p.overtime_pay + p.premium_pay + p.allowances + _d(p.retro_amount) + _d(p.other_earnings)
        - p.total_government_deductions - p.absence_deduction - p.late_under_deduction
    )
    p.withholding_tax = compute_withholding_tax(p.taxable_income * PERIODS_PER_MONTH)

def _totals(p: FinalPayroll) -> None:
    p.gross_earnings = _money(
        p.basic_pay + p.overtime_pay + p.premium_pay + p.allowances + _d(p.retro_amount)
        + p.slvl_amount + p.trip_amount + _d(p.other_earnings)
    )
    p.total_deductions = _money(
        p.total_government_deductions + p.total_company_deductions + p.total_other_deductions
        + p.withholding_tax + p.absence_deduction + p.late_under_deduction
    )
    p.net_pay = max(ZERO, p.gross_earnings - p.total_deductions)

STEPS = (_basic_pay, _overtime, _premium, _deductions, _government, _withholding, _totals)


def calculate_payroll(payroll: FinalPayroll) -> FinalPayroll:
    """Recompute every derived field of ``payroll`` in place (no save) and attach the breakdown."""
    for name in FinalPayroll.COMPUTED_FIELDS:
        setattr(payroll, name, ZERO)
    for step in STEPS:
        step(payroll)
    payroll.calculation_breakdown = build_calculation_breakdown(payroll)
    logger.debug("[payroll] calculated employee_id=%s %s-%s %s gross=%s deductions=%s net=%s",
                 payroll.employee_id, payroll.year, payroll.month, payroll.period_type,
                 payroll.gross_earnings, payroll.total_deductions, payroll.net_pay)
    return payroll


def _s(value) -> str:
    return str(_d(value))

def build_calculation_breakdown(p: FinalPayroll) -> Dict[str, Any]:
    hr = _money(hourly_rate(p))
    return {
        "basic": {
            "pay_type": p.pay_type,
            "basic_rate": _s(p.basic_rate),
            "days_worked": _s(p.days_worked),
            "hours_worked": _s(p.hours_worked),
            "expected_days": expected_days_in_half(p.period_type, p.period_end) if p.pay_type == "monthly" else None,
            "basic_pay": _s(p.basic_pay),
            "allowances": _s(p.allowances),
        },
        "overtime": {
            "hourly_rate": _s(hr),
            "regular": {"hours": _s(p.ot_regular_hours), "rate": _s(OT_REGULAR_RATE), "amount": _s(p.ot_regular_amount)},
            "rest_day": {"hours": _s(p.ot_rest_day_hours), "rate": _s(OT_REST_DAY_RATE), "amount": _s(p.ot_rest_day_amount)},
            "special_holiday": {"hours": _s(p.ot_special_holiday_hours), "rate": _s(OT_SPECIAL_HOLIDAY_RATE),
                                "amount": _s(p.ot_special_holiday_amount)},
            "regular_holiday": {"hours": _s(p.ot_regular_holiday_hours), "rate": _s(OT_REGULAR_HOLIDAY_RATE),
                                "amount": _s(p.ot_regular_holiday_amount)},
            "total": _s(p.overtime_pay),
        },
        "premium": {
            "nsd": {"hours": _s(p.nsd_hours), "rate": _s(NSD_RATE), "amount": _s(p.nsd_amount)},
            "holiday": {"hours": _s(p.holiday_hours), "amount": _s(p.holiday_amount)},
            "travel_order": {"hours": _s(p.travel_order_hours), "amount": _s(p.travel_order_amount)},
            "offset": {"hours": _s(p.offset_hours), "amount": _s(p.offset_amount)},
            "slvl": {"days": _s(p.slvl_days), "amount": _s(p.slvl_amount)},
            "trip": {"count": _s(p.trip_count), "rate": _s(_trip_rate()), "amount": _s(p.trip_amount)},
            "total": _s(p.premium_pay),
        },
        "deductions": {
            "late_under": {"hours": _s(p.late_under_hours), "amount": _s(p.late_under_deduction)},
            "absence": {"days": _s(p.absence_days), "amount": _s(p.absence_deduction)},
            "government": {
                "sss": _s(p.sss_contribution),
                "philhealth": _s(p.philhealth_contribution),
                "hdmf": _s(p.hdmf_contribution),
                "total": _s(p.total_government_deductions),
            },
            "company": _s(p.total_company_deductions),
            "other": _s(p.total_other_deductions),
            "withholding_tax": _s(p.withholding_tax),
            "taxable_income": _s(p.taxable_income),
            "total": _s(p.total_deductions),
        },
        "summary": {
            "gross_earnings": _s(p.gross_earnings),
            "total_deductions": _s(p.total_deductions),
            "net_pay": _s(p.net_pay),
            "is_taxable": bool(p.is_taxable),
            "period": p.full_period,
        },
    }
