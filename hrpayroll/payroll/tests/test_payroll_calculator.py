import pytest
from datetime import date
from decimal import Decimal
from django.test import override_settings

from payroll.models import FinalPayroll
from payroll.services.payroll_calculator import calculate_payroll, compute_withholding_tax


def payroll(**kw):
    base = dict(
        year=2025, month=10, period_type="1st_half",
        period_start=date(2025, 10, 1), period_end=date(2025, 10, 15),
        pay_type="daily", basic_rate=Decimal("500"), days_worked=Decimal("10"),
        is_taxable=False,
    )
    base.update(kw)
    return FinalPayroll(**base)

def computed(p):
    return {name: getattr(p, name) for name in FinalPayroll.COMPUTED_FIELDS}


def test_daily_non_taxable_scenario():
    p = calculate_payroll(payroll())
    assert p.basic_pay == Decimal("5000.00")
    assert p.overtime_pay == 0 and p.premium_pay == 0
    assert p.gross_earnings == Decimal("5000.00")
    assert p.total_deductions == 0
    assert p.net_pay == Decimal("5000.00")

def test_daily_taxable_scenario():
    p = calculate_payroll(payroll(is_taxable=True))
    assert p.sss_contribution == Decimal("450.00")
    assert p.philhealth_contribution == Decimal("150.00")
    assert p.hdmf_contribution == Decimal("100.00")
    assert p.total_government_deductions == Decimal("700.00")
    assert p.taxable_income == Decimal("4300.00")
    assert p.withholding_tax == 0
    assert p.net_pay == Decimal("4300.00")

def test_contribution_caps():
    p = calculate_payroll(payroll(is_taxable=True, basic_rate=Decimal("5000"), days_worked=Decimal("15")))
    assert p.basic_pay == Decimal("75000.00")
    assert p.sss_contribution == Decimal("1000.00")
    assert p.philhealth_contribution == Decimal("2000.00")
    assert p.hdmf_contribution == Decimal("100.00")

@pytest.mark.parametrize("monthly, expected", [
    ("20833", "0.00"),
    ("30000", "687.53"),
    ("50000", "2604.20"),
    ("100000", "8437.53"),
    ("200000", "21770.85"),
    ("1000000", "150104.18"),
])
def test_tax_table(monthly, expected):
    assert compute_withholding_tax(Decimal(monthly)) == Decimal(expected)

@pytest.mark.parametrize("ptype, end, expected", [
    ("1st_half", date(2025, 10, 15), "7500.00"),
    ("2nd_half", date(2025, 10, 31), "8000.00"),
    ("2nd_half", date(2025, 2, 28), "6500.00"),
])
def test_monthly_basic_uses_days_in_half(ptype, end, expected):
    p = calculate_payroll(payroll(pay_type="monthly", basic_rate=Decimal("15000"), period_type=ptype, period_end=end))
    assert p.basic_pay == Decimal(expected)

def test_hourly_and_unknown_pay_types():
    assert calculate_payroll(payroll(pay_type="hourly", basic_rate=Decimal("100"),
                                     hours_worked=Decimal("40"))).basic_pay == Decimal("4000.00")
    assert calculate_payroll(payroll(pay_type="weekly")).basic_pay == Decimal("5000.00")

def test_overtime_premium_and_the_slvl_trip_asymmetry():
    p = calculate_payroll(payroll(
        basic_rate=Decimal("800"),
        ot_regular_hours=Decimal("2"), ot_rest_day_hours=Decimal("1"),
        ot_special_holiday_hours=Decimal("1"), ot_regular_holiday_hours=Decimal("1"),
        nsd_hours=Decimal("8"), holiday_hours=Decimal("8"), travel_order_hours=Decimal("2"),
        offset_hours=Decimal("1"), slvl_days=Decimal("1"), trip_count=Decimal("3"),
    ))
    assert (p.ot_regular_amount, p.ot_rest_day_amount) == (Decimal("250.00"), Decimal("130.00"))
    assert (p.ot_special_holiday_amount, p.ot_regular_holiday_amount) == (Decimal("130.00"), Decimal("200.00"))
    assert p.overtime_pay == Decimal("710.00")
    assert p.nsd_amount == Decimal("80.00")
    assert p.slvl_amount == Decimal("800.00")
    assert p.trip_amount == Decimal("150.00")
    assert p.premium_pay == Decimal("1180.00")
    assert p.gross_earnings == Decimal("8000") + Decimal("710") + Decimal("1180") + Decimal("800") + Decimal("150")

@override_settings(PAYROLL_TRIP_RATE="75")
def test_trip_rate_setting():
    assert calculate_payroll(payroll(trip_count=Decimal("2"))).trip_amount == Decimal("150.00")

def test_allowance_retro_and_other_earnings_feed_gross():
    p = calculate_payroll(payroll(pay_allowance=Decimal("300"), retro_amount=Decimal("120.50"),
                                  other_earnings=Decimal("79.50")))
    assert p.allowances == Decimal("300.00")
    assert p.gross_earnings == Decimal("5500.00")

def test_late_and_absence_deductions():
    p = calculate_payroll(payroll(late_under_hours=Decimal("2"), absence_days=Decimal("1")))
    assert p.late_under_deduction == Decimal("125.00")
    assert p.absence_deduction == Decimal("500.00")
    assert p.total_deductions == Decimal("625.00")
    assert p.net_pay == Decimal("4375.00")

def test_company_and_other_deductions():
    p = calculate_payroll(payroll(
        mf_shares=Decimal("100"), mf_loan=Decimal("200"), sss_loan=Decimal("50"), hdmf_loan=Decimal("25"),
        advance_deduction=Decimal("200"), charge_store=Decimal("10"), charge_deduction=Decimal("20"),
        meals_deduction=Decimal("30"), miscellaneous_deduction=Decimal("40"), other_deductions=Decimal("50"),
    ))
    assert p.total_company_deductions == Decimal("375.00")
    assert p.total_other_deductions == Decimal("350.00")
    assert p.net_pay == Decimal("4275.00")

def test_net_pay_never_negative():
    p = calculate_payroll(payroll(mf_loan=Decimal("10000")))
    assert p.gross_earnings - p.total_deductions < 0
    assert p.net_pay == 0

def test_recalculation_is_idempotent():
    p = payroll(is_taxable=True, basic_rate=Decimal("1500"), ot_regular_hours=Decimal("3.5"),
                nsd_hours=Decimal("4"), late_under_hours=Decimal("0.75"), mf_shares=Decimal("100"))
    first = computed(calculate_payroll(p))
    assert computed(calculate_payroll(p)) == first
    assert first["withholding_tax"] > 0

def test_breakdown_is_attached():
    p = calculate_payroll(payroll(is_taxable=True))
    b = p.calculation_breakdown
    assert b["basic"]["basic_pay"] == "5000.00"
    assert b["deductions"]["government"]["total"] == "700.00"
    assert b["summary"]["net_pay"] == "4300.00"
    assert b["summary"]["period"] == "October 2025 (1-15)"
