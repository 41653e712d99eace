import pytest
from datetime import date
from decimal import Decimal
from django.utils import timezone

from payroll.exceptions import DuplicateRecordError, InvalidStateError, PayrollValidationError
from payroll.models import AttendanceRecord
from payroll.services.attendance_service import (
    create_attendance_record, recalculate_period_metrics, recalculate_record, update_attendance_record,
)

OCT1 = date(2025, 10, 1)


def _post(record):
    AttendanceRecord.objects.filter(id=record.id).update(posting_status=AttendanceRecord.PostingStatus.POSTED)


@pytest.mark.django_db
def test_create_fills_metrics_from_clock_strings(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date="2025-10-01",
                                 time_in="08:30", time_out="17:00")
    assert r.day == "Wednesday"
    assert r.late_minutes == 30
    assert r.undertime_minutes == 30
    assert r.hours_worked == Decimal("7.50")
    r.refresh_from_db()
    local_in = timezone.localtime(r.time_in)
    assert (local_in.hour, local_in.minute) == (8, 30)
    assert r.posting_status == AttendanceRecord.PostingStatus.NOT_POSTED

@pytest.mark.django_db
def test_create_keeps_nonzero_manual_values(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1,
                                 time_in="08:30", time_out="17:00", late_minutes=Decimal("15"))
    assert r.late_minutes == 15
    assert r.hours_worked == Decimal("7.50")

@pytest.mark.django_db
def test_create_manual_zero_is_recomputed(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1,
                                 time_in="08:30", time_out="17:00", late_minutes=Decimal("0"))
    assert r.late_minutes == 30

@pytest.mark.django_db
def test_create_with_garbage_time_drops_it(employee, caplog):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1,
                                 time_in="not a time", time_out="17:00")
    assert r.time_in is None
    assert (r.late_minutes, r.undertime_minutes, r.hours_worked) == (0, 0, 0)
    assert "drop unparseable time_in" in caplog.text

@pytest.mark.django_db
def test_create_validation(employee):
    with pytest.raises(PayrollValidationError):
        create_attendance_record(employee_id=999999, attendance_date=OCT1)
    with pytest.raises(PayrollValidationError):
        create_attendance_record(employee_id=employee.id, attendance_date=None)
    with pytest.raises(PayrollValidationError):
        create_attendance_record(employee_id=employee.id, attendance_date=OCT1, colour="red")

@pytest.mark.django_db
def test_one_record_per_employee_and_date(employee):
    create_attendance_record(employee_id=employee.id, attendance_date=OCT1, time_in="08:00", time_out="17:00")
    with pytest.raises(DuplicateRecordError):
        create_attendance_record(employee_id=employee.id, attendance_date=OCT1, time_in="09:00")
    assert AttendanceRecord.objects.count() == 1

@pytest.mark.django_db
def test_raw_change_forces_recompute(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1,
                                 time_in="08:00", time_out="17:00", late_minutes=Decimal("12"))
    assert r.late_minutes == 12

    r = update_attendance_record(record_id=r.id, time_out="16:00")
    r.refresh_from_db()
    assert r.late_minutes == 0
    assert r.undertime_minutes == 60
    assert r.hours_worked == Decimal("7.00")

@pytest.mark.django_db
def test_non_raw_change_keeps_manual_metrics(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1,
                                 time_in="08:00", time_out="17:00", late_minutes=Decimal("12"))
    r = update_attendance_record(record_id=r.id, remarks="approved late", overtime=Decimal("2"))
    r.refresh_from_db()
    assert r.late_minutes == 12
    assert r.overtime == 2
    assert r.remarks == "approved late"

@pytest.mark.django_db
def test_protected_fields_are_ignored(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1, time_in="08:00", time_out="17:00")
    r = update_attendance_record(record_id=r.id, attendance_date=date(2025, 10, 2),
                                 posting_status="posted", remarks="x")
    r.refresh_from_db()
    assert r.attendance_date == OCT1
    assert not r.is_posted

@pytest.mark.django_db
def test_posted_record_is_frozen(employee, make_attendance):
    r = make_attendance(employee, OCT1)
    _post(r)
    with pytest.raises(InvalidStateError):
        update_attendance_record(record_id=r.id, time_out="16:00")
    with pytest.raises(InvalidStateError):
        recalculate_record(record_id=r.id)
    r.refresh_from_db()
    assert timezone.localtime(r.time_out).hour == 17

@pytest.mark.django_db
def test_recalculate_record_overwrites_manual_values(employee, make_attendance):
    r = make_attendance(employee, OCT1, time_in="08:20", late_minutes=Decimal("1"))
    r = recalculate_record(record_id=r.id)
    assert r.late_minutes == 20

@pytest.mark.django_db
def test_recalculate_period_skips_posted_and_other_periods(employee, other_employee, make_attendance):
    a = make_attendance(employee, OCT1, time_in="08:10", late_minutes=Decimal("0"))
    b = make_attendance(employee, date(2025, 10, 2), time_in="08:10")
    c = make_attendance(other_employee, OCT1, time_in="08:10")
    d = make_attendance(employee, date(2025, 10, 20), time_in="08:10")
    _post(b)

    assert recalculate_period_metrics(2025, 10, "1st_half") == 2
    for rec in (a, b, c, d):
        rec.refresh_from_db()
    assert a.late_minutes == 10 and c.late_minutes == 10
    assert b.late_minutes == 0 and d.late_minutes == 0

    assert recalculate_period_metrics(2025, 10, "1st_half", department="Warehouse") == 1

@pytest.mark.django_db
def test_night_shift_clock_out_lands_on_next_day(employee):
    r = create_attendance_record(employee_id=employee.id, attendance_date=OCT1, is_nightshift=True,
                                 time_in="22:00", next_day_timeout="06:00")
    assert r.hours_worked == Decimal("7.00")
    assert r.undertime_minutes == 60
    r.refresh_from_db()
    out = timezone.localtime(r.next_day_timeout)
    assert (out.date(), out.hour) == (date(2025, 10, 2), 6)

    r = update_attendance_record(record_id=r.id, next_day_timeout="07:00")
    assert timezone.localtime(r.next_day_timeout).date() == date(2025, 10, 2)
    assert r.hours_worked == Decimal("8.00")
    assert r.undertime_minutes == 0
