import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from payroll.exceptions import InvalidStateError, LockedError, MissingSummaryError, PayrollValidationError
from payroll.models import AttendanceRecord, AuditLog, Benefit, Deduction, PeriodSummary
from payroll.selectors.summary_selector import period_statistics
from payroll.services.summary_service import (
    aggregate_attendance, generate_period_summary, post_period_summary, lock_period_summary,
    preview_posting, post_attendance_to_payroll,
)

PERIOD = (2025, 10, "1st_half")


def stub(**kw):
    base = dict(time_in=None, slvl=None, overtime=None, restday=False, late_minutes=None,
                undertime_minutes=None, hours_worked=None, is_nightshift=False, retromultiplier=None,
                travel_order=None, holiday=None, ot_reg_holiday=None, ot_special_holiday=None,
                offset=None, trip=None, ct=False, cs=False, ob=False)
    base.update(kw)
    return SimpleNamespace(**base)

IN = "08:00"


# ===== pure fold =====
def test_partial_leave_counts_remaining_fraction():
    assert aggregate_attendance([stub(time_in=IN, slvl=Decimal("0.5"))])["days_worked"] == Decimal("0.5")

def test_full_leave_day_and_absence_do_not_count_as_worked():
    totals = aggregate_attendance([stub(time_in=IN, slvl=Decimal("1.0")), stub(slvl=Decimal("0.5"))])
    assert totals["days_worked"] == 0
    assert totals["slvl_days"] == Decimal("1.5")

def test_night_differential_only_for_night_shift():
    assert aggregate_attendance([stub(time_in=IN, is_nightshift=True, hours_worked=Decimal("7.5"))])["nsd_hours"] == Decimal("7.5")
    assert aggregate_attendance([stub(time_in=IN, is_nightshift=False, hours_worked=Decimal("7.5"))])["nsd_hours"] == 0

def test_sums_flags_and_rounding():
    rows = [
        stub(time_in=IN, slvl=Decimal("0.25"), overtime=Decimal("2"), late_minutes=Decimal("10"),
             undertime_minutes=Decimal("5"), ct=True, trip=Decimal("1")),
        stub(time_in=IN, slvl=Decimal("0.25"), restday=True, retromultiplier=Decimal("150.50"), ob=True),
        stub(time_in=IN, slvl=Decimal("0.25"), holiday=Decimal("8"), offset=Decimal("1.5"), trip=Decimal("2")),
    ]
    t = aggregate_attendance(rows)
    assert t["days_worked"] == Decimal("2.3")  # 2.25 rounded half-up
    assert t["ot_hours"] == 2
    assert t["off_days"] == 1
    assert t["late_under_minutes"] == 15
    assert t["retro"] == Decimal("150.50")
    assert t["holiday_hours"] == 8
    assert t["offset_hours"] == Decimal("1.5")
    assert t["trip_count"] == 3
    assert (t["has_ct"], t["has_cs"], t["has_ob"]) == (True, False, True)

def test_fold_is_order_independent():
    rows = [
        stub(time_in=IN, overtime=Decimal("1.25"), ct=True),
        stub(time_in=IN, slvl=Decimal("0.5"), is_nightshift=True, hours_worked=Decimal("6")),
        stub(restday=True, late_minutes=Decimal("3")),
    ]
    assert aggregate_attendance(rows) == aggregate_attendance(list(reversed(rows)))

def test_empty_period_gives_zero_totals():
    t = aggregate_attendance([])
    assert all(t[name] == 0 for name in PeriodSummary.TOTAL_FIELDS)
    assert not any(t[name] for name in PeriodSummary.FLAG_FIELDS)


# ===== generation / posting =====
@pytest.mark.django_db
def test_generate_folds_only_unposted_records_in_range(employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    make_attendance(employee, date(2025, 10, 2), overtime=Decimal("2"))
    make_attendance(employee, date(2025, 10, 16))
    make_attendance(employee, date(2025, 10, 3), posting_status=AttendanceRecord.PostingStatus.POSTED)

    s = generate_period_summary(employee.id, *PERIOD, actor_id=7)
    assert s.status == PeriodSummary.Status.DRAFT
    assert s.days_worked == 2
    assert s.ot_hours == 2
    assert (s.period_start, s.period_end) == (date(2025, 10, 1), date(2025, 10, 15))
    assert s.employee_name == "Maria Santos"
    assert s.generated_by == 7
    assert s.period_label == "1-15"
    assert s.full_period == "October 2025 (1-15)"

@pytest.mark.django_db
def test_employee_without_records_still_gets_a_summary(employee):
    s = generate_period_summary(employee.id, 2025, 10, "2nd_half")
    assert s.days_worked == 0
    assert s.period_end == date(2025, 10, 31)
    assert s.period_label == "16-31"

@pytest.mark.django_db
def test_regenerating_draft_replaces_in_place(employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    first = generate_period_summary(employee.id, *PERIOD)
    make_attendance(employee, date(2025, 10, 2))
    second = generate_period_summary(employee.id, *PERIOD)
    assert second.id == first.id
    assert second.days_worked == 2
    assert PeriodSummary.objects.count() == 1

@pytest.mark.django_db
def test_regenerating_posted_summary_is_refused_and_unchanged(employee, posted_summary, make_attendance):
    make_attendance(employee, date(2025, 10, 12))
    with pytest.raises(LockedError) as exc:
        generate_period_summary(employee.id, *PERIOD)
    assert exc.value.context["status"] == "posted"
    posted_summary.refresh_from_db()
    assert posted_summary.days_worked == 10
    assert posted_summary.status == PeriodSummary.Status.POSTED

@pytest.mark.django_db
def test_post_flips_contributing_attendance(posted_summary, ten_days):
    assert posted_summary.posted_by == 1
    assert posted_summary.posted_at is not None
    assert AttendanceRecord.objects.filter(posting_status="posted").count() == 10
    assert all(r.posted_by == 1 for r in AttendanceRecord.objects.all())
    assert AuditLog.objects.filter(object_type="period_summary", action="post").exists()

@pytest.mark.django_db
def test_post_refolds_records_changed_after_generation(employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    s = generate_period_summary(employee.id, *PERIOD)
    make_attendance(employee, date(2025, 10, 2))
    s = post_period_summary(s.id, actor_id=3)
    assert s.days_worked == 2

@pytest.mark.django_db
def test_post_twice_and_missing_summary(posted_summary):
    with pytest.raises(InvalidStateError):
        post_period_summary(posted_summary.id, actor_id=1)
    with pytest.raises(MissingSummaryError):
        post_period_summary(999999, actor_id=1)

@pytest.mark.django_db
def test_lock_requires_posted(employee, posted_summary):
    draft = generate_period_summary(employee.id, 2025, 10, "2nd_half")
    with pytest.raises(InvalidStateError):
        lock_period_summary(draft.id, actor_id=2)
    locked = lock_period_summary(posted_summary.id, actor_id=2)
    assert locked.is_locked and locked.locked_by == 2
    with pytest.raises(LockedError):
        lock_period_summary(posted_summary.id, actor_id=2)
    with pytest.raises(LockedError):
        post_period_summary(posted_summary.id, actor_id=2)

@pytest.mark.django_db
def test_benefit_and_deduction_amounts_pass_through(employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    Benefit.objects.create(employee=employee, cutoff="1st", date=date(2025, 10, 5),
                           mf_shares=Decimal("100"), allowances=Decimal("250"), sss_loan=Decimal("40"))
    Benefit.objects.create(employee=employee, cutoff="1st", date=date(2025, 9, 1), is_default=True,
                           mf_shares=Decimal("999"))
    Deduction.objects.create(employee=employee, cutoff="1st", date=date(2025, 10, 5),
                             advance=Decimal("200"), meals=Decimal("50"))
    Deduction.objects.create(employee=employee, cutoff="2nd", date=date(2025, 10, 20), charge=Decimal("80"))

    s = generate_period_summary(employee.id, *PERIOD)
    assert s.mf_shares == 100
    assert s.allowances == 250
    assert s.advance == 200 and s.meals == 50 and s.charge == 0
    assert s.total_benefits == 350
    assert s.total_deductions == Decimal("290.00")  # advance + meals + sss_loan

@pytest.mark.django_db
def test_late_under_hours_property(employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1), late_minutes=Decimal("20"), undertime_minutes=Decimal("25"))
    s = generate_period_summary(employee.id, *PERIOD)
    assert s.late_under_minutes == 45
    assert s.late_under_hours == Decimal("0.75")

@pytest.mark.django_db
def test_invalid_period_and_unknown_employee(employee):
    with pytest.raises(PayrollValidationError):
        generate_period_summary(employee.id, 2025, 13, "1st_half")
    with pytest.raises(PayrollValidationError):
        generate_period_summary(employee.id, 2025, 10, "3rd_half")
    with pytest.raises(PayrollValidationError):
        generate_period_summary(424242, *PERIOD)


# ===== batch posting / preview =====
@pytest.mark.django_db
def test_preview_writes_nothing(employee, other_employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    make_attendance(other_employee, date(2025, 10, 2))
    generate_period_summary(employee.id, *PERIOD)

    p = preview_posting(*PERIOD)
    assert p["employee_count"] == 2
    assert p["record_count"] == 2
    assert p["totals"]["days_worked"] == 2
    rows = {r["employee_id"]: r for r in p["employees"]}
    assert rows[employee.id]["will_update"] is True
    assert rows[other_employee.id]["has_existing_summary"] is False
    assert PeriodSummary.objects.count() == 1
    assert not AttendanceRecord.objects.filter(posting_status="posted").exists()

@pytest.mark.django_db
def test_batch_post_skips_employees_already_posted(employee, other_employee, make_attendance, posted_summary):
    make_attendance(employee, date(2025, 10, 12))
    make_attendance(other_employee, date(2025, 10, 2))
    make_attendance(other_employee, date(2025, 10, 3))

    result = post_attendance_to_payroll(*PERIOD, actor_id=5)
    assert result["created"] == 1
    assert result["records_posted"] == 2
    assert len(result["errors"]) == 1 and "Maria Santos" in result["errors"][0]
    other = PeriodSummary.objects.get(employee=other_employee)
    assert other.status == "posted" and other.days_worked == 2
    assert AttendanceRecord.objects.get(employee=employee, attendance_date=date(2025, 10, 12)).posting_status == "not_posted"

@pytest.mark.django_db
def test_batch_post_department_filter_and_empty_selection(employee, other_employee, make_attendance):
    make_attendance(employee, date(2025, 10, 1))
    make_attendance(other_employee, date(2025, 10, 1))
    result = post_attendance_to_payroll(*PERIOD, department="Warehouse")
    assert result["summary_ids"] == [PeriodSummary.objects.get(employee=other_employee).id]
    with pytest.raises(PayrollValidationError):
        post_attendance_to_payroll(*PERIOD, department="Warehouse")


# ===== statistics =====
@pytest.mark.django_db
def test_period_statistics(employee, other_employee, make_attendance, posted_summary):
    make_attendance(other_employee, date(2025, 10, 1), late_minutes=Decimal("30"))
    generate_period_summary(other_employee.id, *PERIOD)
    stats = period_statistics(*PERIOD)
    assert stats["count"] == 2
    assert stats["by_status"] == {"draft": 1, "posted": 1, "locked": 0}
    assert stats["total_days_worked"] == 11
    assert stats["avg_days_worked"] == Decimal("5.50")
    assert stats["total_late_under_minutes"] == 30
    assert period_statistics(*PERIOD, department="Warehouse")["count"] == 1
