from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from staff.models import Shift
from tests.factories import EmployeeFactory, ShiftFactory


def _day():
    return (timezone.localdate() + timedelta(days=2)).isoformat()


@pytest.mark.django_db
def test_employee_crud_generates_codes(staff_api_client: APIClient):
    resp = staff_api_client.post(
        "/api/staff/employees/",
        {
            "first_name": "Lin",
            "last_name": "Okafor",
            "email": "Lin.Okafor@Example.com",
            "phone": "+1 555 0300",
            "position": "Chef",
            "department": "Kitchen",
        },
        format="json",
    )
    assert resp.status_code == 201, resp.content
    data = resp.json()
    assert data["employee_code"] == "EMP0001"
    assert data["email"] == "lin.okafor@example.com"
    assert data["full_name"] == "Lin Okafor"

    resp = staff_api_client.get("/api/staff/employees/?department=Kitchen")
    assert resp.json()["count"] == 1


@pytest.mark.django_db
def test_shift_create_conflict_and_self_update(staff_api_client: APIClient):
    employee = EmployeeFactory()
    resp = staff_api_client.post(
        "/api/staff/shifts/",
        {"employee": employee.pk, "date": _day(), "start_time": "09:00", "end_time": "13:00", "position": "Barista"},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    first = resp.json()
    assert first["shift_type"] == "morning"
    assert first["scheduled_duration"] == 210

    resp = staff_api_client.post(
        "/api/staff/shifts/",
        {"employee": employee.pk, "date": _day(), "start_time": "12:30", "end_time": "16:00", "position": "Barista"},
        format="json",
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "conflict_detected"
    assert [c["id"] for c in body["conflicts"]] == [first["id"]]

    resp = staff_api_client.patch(
        f"/api/staff/shifts/{first['id']}/", {"start_time": "10:00", "end_time": "14:00"}, format="json"
    )
    assert resp.status_code == 200, resp.content
    assert resp.json()["start_time"] == "10:00"


@pytest.mark.django_db
def test_check_conflicts_endpoint(staff_api_client: APIClient):
    shift = ShiftFactory(start_time="09:00", end_time="13:00")
    payload = {
        "employee": shift.employee_id,
        "date": shift.date.isoformat(),
        "start_time": "12:30",
        "end_time": "16:00",
    }
    resp = staff_api_client.post("/api/staff/shifts/check-conflicts/", payload, format="json")
    assert resp.json()["has_conflicts"] is True
    assert resp.json()["conflicts"][0]["id"] == shift.pk

    payload["exclude_shift_id"] = shift.pk
    resp = staff_api_client.post("/api/staff/shifts/check-conflicts/", payload, format="json")
    assert resp.json() == {"has_conflicts": False, "conflicts": []}

    payload["employee"] = 999999
    resp = staff_api_client.post("/api/staff/shifts/check-conflicts/", payload, format="json")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.django_db
def test_clock_in_out_and_lifecycle_errors(staff_api_client: APIClient):
    shift = ShiftFactory(start_time="08:00", end_time="16:00", break_duration=30)
    base = f"/api/staff/shifts/{shift.pk}"

    resp = staff_api_client.post(f"{base}/clock-out/", {"time": "16:00"}, format="json")
    assert resp.status_code == 409
    assert resp.json()["current"] == "scheduled"
    assert resp.json()["requested"] == "completed"

    assert staff_api_client.post(f"{base}/clock-in/", {"time": "08:00"}, format="json").json()["status"] == "in-progress"
    assert staff_api_client.delete(f"{base}/").status_code == 409

    resp = staff_api_client.post(f"{base}/clock-out/", {"time": "17:00"}, format="json")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "completed"
    assert data["actual_duration"] == 510
    assert data["is_overtime"] is True
    assert data["overtime_hours"] == "0.50"


@pytest.mark.django_db
def test_employee_schedule_and_summary(staff_api_client: APIClient):
    employee = EmployeeFactory()
    ShiftFactory(employee=employee, start_time="09:00", end_time="13:00", break_duration=0)
    ShiftFactory(
        employee=employee, date=timezone.localdate(), start_time="09:00", end_time="13:00", break_duration=0,
        status=Shift.STATUS_COMPLETED, actual_start_time="09:00", actual_end_time="13:00",
    )
    ShiftFactory()

    resp = staff_api_client.get(f"/api/staff/employees/{employee.pk}/schedule/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["employee"]["employee_code"] == employee.employee_code
    assert len(data["shifts"]) == 2
    assert data["statistics"]["total_scheduled_hours"] == 8.0
    assert data["statistics"]["total_actual_hours"] == 4.0
    assert data["statistics"]["completion_rate"] == 50.0

    resp = staff_api_client.get(f"/api/staff/employees/{employee.pk}/schedule/?status=completed")
    assert resp.status_code == 200, resp.content
    assert resp.json()["statistics"]["total"] == 1
    assert [s["status"] for s in resp.json()["shifts"]] == ["completed"]

    resp = staff_api_client.get("/api/staff/shifts/summary/")
    assert resp.json()["total"] == 3


@pytest.mark.django_db
def test_staff_endpoints_require_staff(auth_api_client: APIClient):
    assert auth_api_client.get("/api/staff/shifts/").status_code == 403
    assert auth_api_client.get("/api/staff/employees/").status_code == 403


@pytest.mark.django_db
def test_scheduling_report_is_admin_only(staff_api_client: APIClient, auth_api_client: APIClient):
    ShiftFactory()
    resp = staff_api_client.get("/api/reports/scheduling/")
    assert resp.status_code == 200
    assert set(resp.json()) == {"date_from", "date_to", "reservations", "shifts"}

    assert staff_api_client.get("/api/reports/scheduling/shifts/").json()["total"] == 1
    assert staff_api_client.get("/api/reports/scheduling/reservations/").json()["total"] == 0
    assert staff_api_client.get("/api/reports/scheduling/?date_from=2030-02-01&date_to=2030-01-01").status_code == 400

    assert auth_api_client.get("/api/reports/scheduling/").status_code == 403
