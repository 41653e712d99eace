import pytest
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from django.utils import timezone
from payroll.models import Employee, AttendanceRecord

PERIOD = (2025, 10, "1st_half")


@pytest.fixture
def at():
    """Aware datetime on ``d`` at "HH:MM" in the project time zone."""
    def _at(d, hhmm):
        h, m = (int(x) for x in hhmm.split(":"))
        return timezone.make_aware(datetime.combine(d, time(h, m)))
    return _at

@pytest.fixture
def employee(db):
    return Employee.objects.create(
        employee_no="E-001", first_name="Maria", last_name="Santos", department="Production",
        cost_center="CC-10", line="L1", job_title="Operator", rank_file="Rank and file",
        pay_type=Employee.PayType.DAILY, basic_rate=Decimal("500.00"),
    )

@pytest.fixture
def other_employee(db):
    return Employee.objects.create(
        employee_no="E-002", first_name="Jose", last_name="Reyes", department="Warehouse",
        pay_type=Employee.PayType.DAILY, basic_rate=Decimal("600.00"), is_taxable=True,
    )

@pytest.fixture
def make_attendance(db, at):
    """ORM-level factory: derived metrics are stored as given (default: a clean 8h day)."""
    def _make(employee, d, time_in="08:00", time_out="17:00", **extra):
        full_day = bool(time_in and time_out)
        extra.setdefault("hours_worked", Decimal("8.00") if full_day else Decimal("0"))
        return AttendanceRecord.objects.create(
            employee=employee,
            attendance_date=d,
            time_in=at(d, time_in) if time_in else None,
            time_out=at(d, time_out) if time_out else None,
            **extra,
        )
    return _make

@pytest.fixture
def ten_days(employee, make_attendance):
    start = date(2025, 10, 1)
    return [make_attendance(employee, start + timedelta(days=i)) for i in range(10)]

@pytest.fixture
def posted_summary(employee, ten_days):
    from payroll.services.summary_service import generate_period_summary, post_period_summary
    summary = generate_period_summary(employee.id, *PERIOD, actor_id=1)
    return post_period_summary(summary.id, actor_id=1)

@pytest.fixture
def final_payroll(posted_summary):
    from payroll.services.payroll_service import generate_final_payroll
    return generate_final_payroll(posted_summary.id, actor_id=1)
