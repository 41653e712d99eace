import pytest
from datetime import date, timedelta
from decimal import Decimal
from rest_framework.test import APIClient

BASE = "/api/payroll"
PERIOD = {"year": 2025, "month": 10, "period_type": "1st_half"}


@pytest.fixture
def client():
    return APIClient()

def _num(value):
    return Decimal(str(value))


@pytest.mark.django_db
def test_attendance_create_list_and_update(client, employee):
    r1 = client.post(f"{BASE}/attendance/", {
        "employee_id": employee.id, "attendance_date": "2025-10-01", "time_in": "08:30", "time_out": "17:00",
    }, format="json")
    assert r1.status_code == 201, r1.content
    body = r1.json()
    assert _num(body["late_minutes"]) == 30
    assert _num(body["hours_worked"]) == Decimal("7.5")
    assert body["employee_name"] == "Maria Santos"

    dup = client.post(f"{BASE}/attendance/", {"employee_id": employee.id, "attendance_date": "2025-10-01"}, format="json")
    assert dup.status_code == 409
    assert dup.json()["code"] == "duplicate"

    r2 = client.patch(f"{BASE}/attendance/{body['id']}/", {"time_in": "08:00"}, format="json")
    assert r2.status_code == 200, r2.content
    assert _num(r2.json()["late_minutes"]) == 0

    r3 = client.get(f"{BASE}/attendance/?employee_id={employee.id}")
    assert r3.status_code == 200
    assert r3.json()["count"] == 1

@pytest.mark.django_db
def test_full_payroll_flow(client, employee, make_attendance):
    for i in range(10):
        make_attendance(employee, date(2025, 10, 1) + timedelta(days=i))

    preview = client.get(f"{BASE}/summaries/preview/", PERIOD)
    assert preview.status_code == 200, preview.content
    assert preview.json()["employee_count"] == 1
    assert preview.json()["record_count"] == 10

    batch = client.post(f"{BASE}/summaries/post-batch/", {**PERIOD, "actor_id": 7}, format="json")
    assert batch.status_code == 200, batch.content
    result = batch.json()
    assert (result["created"], result["records_posted"], result["errors"]) == (1, 10, [])
    summary_id = result["summary_ids"][0]

    again = client.post(f"{BASE}/summaries/post-batch/", PERIOD, format="json")
    assert again.status_code == 400

    gen = client.post(f"{BASE}/final-payrolls/generate/", {"summary_id": summary_id, "actor_id": 7}, format="json")
    assert gen.status_code == 201, gen.content
    payroll = gen.json()
    assert _num(payroll["net_pay"]) == Decimal("5000")
    assert payroll["next_action"] == "approve"
    pid = payroll["id"]

    dup = client.post(f"{BASE}/final-payrolls/generate/", {"summary_id": summary_id}, format="json")
    assert dup.status_code == 409
    assert dup.json()["code"] == "duplicate"
    assert dup.json()["payroll_id"] == pid

    early = client.post(f"{BASE}/final-payrolls/{pid}/finalize/", {"actor_id": 8}, format="json")
    assert early.status_code == 409
    assert early.json()["code"] == "invalid_state"

    adj = client.patch(f"{BASE}/final-payrolls/{pid}/adjust/", {"absence_days": "1", "actor_id": 8}, format="json")
    assert adj.status_code == 200, adj.content
    assert _num(adj.json()["net_pay"]) == Decimal("4500")
    assert adj.json()["has_adjustments"] is True

    ok = client.post(f"{BASE}/final-payrolls/{pid}/approve/", {"actor_id": 9, "remarks": "ok"}, format="json")
    assert ok.status_code == 200
    assert ok.json()["approval_status"] == "approved"

    locked = client.patch(f"{BASE}/final-payrolls/{pid}/adjust/", {"other_earnings": "10"}, format="json")
    assert locked.status_code == 409

    assert client.post(f"{BASE}/final-payrolls/{pid}/finalize/", {"actor_id": 9}, format="json").status_code == 200
    paid = client.post(f"{BASE}/final-payrolls/{pid}/mark-paid/", {"actor_id": 9}, format="json")
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"
    assert paid.json()["next_action"] is None

    stats = client.get(f"{BASE}/final-payrolls/statistics/", PERIOD)
    assert stats.status_code == 200
    assert stats.json()["count"] == 1
    assert stats.json()["by_status"]["paid"] == 1
    assert _num(stats.json()["total_net_pay"]) == Decimal("4500")

    summary_stats = client.get(f"{BASE}/summaries/statistics/", PERIOD)
    assert summary_stats.status_code == 200
    assert summary_stats.json()["count"] == 1

@pytest.mark.django_db
def test_summary_state_errors(client, posted_summary):
    again = client.post(f"{BASE}/summaries/{posted_summary.id}/post/", {}, format="json")
    assert again.status_code == 409
    assert again.json()["code"] == "invalid_state"

    lock = client.post(f"{BASE}/summaries/{posted_summary.id}/lock/", {"actor_id": 2}, format="json")
    assert lock.status_code == 200
    assert lock.json()["status"] == "locked"

    regen = client.post(f"{BASE}/summaries/generate/", {"employee_id": posted_summary.employee_id, **PERIOD},
                        format="json")
    assert regen.status_code == 409
    assert regen.json()["code"] == "locked"

@pytest.mark.django_db
def test_not_found_and_bad_input(client):
    missing = client.post(f"{BASE}/final-payrolls/generate/", {"summary_id": 999}, format="json")
    assert missing.status_code == 404
    assert missing.json()["code"] == "missing_summary"

    assert client.post(f"{BASE}/final-payrolls/999/approve/", {}, format="json").status_code == 404
    assert client.get(f"{BASE}/final-payrolls/statistics/", {"year": 2025, "month": 13,
                                                              "period_type": "1st_half"}).status_code == 400

@pytest.mark.django_db
def test_deduction_endpoints(client, employee):
    none = client.post(f"{BASE}/deductions/copy-from-default/", {
        "employee_id": employee.id, "cutoff": "1st", "date": "2025-10-10",
    }, format="json")
    assert none.status_code == 404
    assert none.json()["code"] == "no_default"

    tmpl = client.post(f"{BASE}/deductions/", {
        "employee_id": employee.id, "cutoff": "1st", "date": "2025-09-01", "is_default": True, "advance": "250.00",
    }, format="json")
    assert tmpl.status_code == 201, tmpl.content

    copy = client.post(f"{BASE}/deductions/copy-from-default/", {
        "employee_id": employee.id, "cutoff": "1st", "date": "2025-10-10",
    }, format="json")
    assert copy.status_code == 201, copy.content
    assert copy.json()["advance"] == "250.00"
    assert copy.json()["is_default"] is False

    posted = client.post(f"{BASE}/deductions/{copy.json()['id']}/post/", {}, format="json")
    assert posted.status_code == 200
    edit = client.patch(f"{BASE}/deductions/{copy.json()['id']}/", {"advance": "1.00"}, format="json")
    assert edit.status_code == 409
