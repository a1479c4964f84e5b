from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import RestaurantSettings
from loyalty.models import LoyaltyProfile
from reservations.models import Reservation
from tests.factories import ReservationFactory, UserFactory


def _payload(**overrides):
    data = {
        "date": (timezone.localdate() + timedelta(days=7)).isoformat(),
        "time": "19:00",
        "party_size": 4,
        "contact_name": "Ada Guest",
        "contact_phone": "+1 555 0100",
        "contact_email": "ada@example.com",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
def test_guest_can_book_without_account(api_client: APIClient):
    resp = api_client.post("/api/reservations/", _payload(), format="json")
    assert resp.status_code == 201, resp.content
    data = resp.json()
    assert data["status"] == "pending"
    assert len(data["confirmation_code"]) == 8
    assert data["user"] is None
    assert len(mail.outbox) == 1
    assert data["confirmation_code"] in mail.outbox[0].body


@pytest.mark.django_db
def test_signed_in_booking_uses_profile_and_earns_points(auth_api_client: APIClient, user):
    payload = _payload()
    del payload["contact_name"], payload["contact_email"]
    resp = auth_api_client.post("/api/reservations/", payload, format="json")
    assert resp.status_code == 201, resp.content
    data = resp.json()
    assert data["user"] == user.id
    assert data["contact_email"] == "test@example.com"
    assert data["contact_name"] == "Test User"
    assert LoyaltyProfile.objects.get(user=user).points == 10


@pytest.mark.django_db
def test_booking_without_contact_details_is_rejected(api_client: APIClient):
    payload = _payload()
    del payload["contact_email"]
    resp = api_client.post("/api/reservations/", payload, format="json")
    assert resp.status_code == 400
    assert "contact_email" in resp.json()


@pytest.mark.django_db
def test_booking_blocked_slot_returns_structured_error(api_client: APIClient, settings_row):
    day = timezone.localdate() + timedelta(days=7)
    settings_row.block_slot(day, "18:00")
    settings_row.save()

    resp = api_client.post("/api/reservations/", _payload(time="18:00"), format="json")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "slot_blocked"
    assert body["status_code"] == 409
    assert body["reason"] == "slot blocked"
    assert body["availability"]["blocked"] is True


@pytest.mark.django_db
def test_booking_over_capacity_returns_availability(api_client: APIClient, settings_row):
    settings_row.max_capacity = 6
    settings_row.save()
    assert api_client.post("/api/reservations/", _payload(party_size=4), format="json").status_code == 201

    resp = api_client.post("/api/reservations/", _payload(time="19:30", party_size=3), format="json")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "capacity_exceeded"
    assert body["availability"]["remaining_capacity"] == 2


@pytest.mark.django_db
def test_check_availability_and_slots_are_public(api_client: APIClient):
    day = timezone.localdate() + timedelta(days=7)
    ReservationFactory(date=day, time="12:00", party_size=10, status=Reservation.STATUS_CONFIRMED)

    resp = api_client.get(f"/api/reservations/check-availability/?date={day.isoformat()}&time=12:30&party_size=40")
    assert resp.status_code == 200
    assert resp.json() == {
        "available": True,
        "remaining_capacity": 40,
        "reserved_capacity": 10,
        "max_capacity": 50,
        "conflicting_count": 1,
        "blocked": False,
        "reason": "",
    }

    resp = api_client.get(f"/api/reservations/check-availability/?date={day.isoformat()}&time=12:30&party_size=41")
    assert resp.json()["available"] is False

    resp = api_client.get(f"/api/reservations/available-slots/?date={day.isoformat()}&party_size=45")
    assert resp.status_code == 200
    slots = {s["time"]: s for s in resp.json()["slots"]}
    assert len(slots) == len(RestaurantSettings.get_or_create_defaults().time_slots)
    assert slots["12:30"]["available"] is False
    assert slots["18:00"]["available"] is True


@pytest.mark.django_db
def test_check_availability_validates_query(api_client: APIClient):
    resp = api_client.get("/api/reservations/check-availability/?date=2030-01-01&time=25:00&party_size=2")
    assert resp.status_code == 400
    assert "time" in resp.json()


@pytest.mark.django_db
def test_staff_floor_flow(staff_api_client: APIClient, user):
    reservation = ReservationFactory(user=user)
    base = f"/api/reservations/{reservation.pk}"

    resp = staff_api_client.post(f"{base}/check-in/", {"table_number": "5"}, format="json")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "invalid_transition"
    assert body["current"] == "pending"
    assert body["requested"] == "seated"

    assert staff_api_client.post(f"{base}/confirm/").json()["status"] == "confirmed"
    assert staff_api_client.post(f"{base}/check-in/", {}, format="json").status_code == 400
    assert staff_api_client.post(f"{base}/check-in/", {"table_number": "5"}, format="json").json()["table_number"] == "5"

    resp = staff_api_client.post(f"{base}/notes/", {"content": "Birthday cake at 20:00"}, format="json")
    assert resp.status_code == 201
    assert resp.json()["author_name"] == "staffer"

    resp = staff_api_client.post(f"{base}/complete/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["completed_at"] is not None
    assert len(resp.json()["notes"]) == 1
    assert LoyaltyProfile.objects.get(user=user).points == 20


@pytest.mark.django_db
def test_guests_cannot_run_staff_actions(auth_api_client: APIClient, user):
    reservation = ReservationFactory(user=user)
    assert auth_api_client.post(f"/api/reservations/{reservation.pk}/confirm/").status_code == 403
    assert auth_api_client.get("/api/reservations/").status_code == 403
    assert APIClient().get("/api/reservations/").status_code in (401, 403)


@pytest.mark.django_db
def test_owner_reads_updates_and_cancels(auth_api_client: APIClient, user):
    mine = ReservationFactory(user=user)
    theirs = ReservationFactory(user=UserFactory())

    assert auth_api_client.get(f"/api/reservations/{mine.pk}/").status_code == 200
    assert auth_api_client.get(f"/api/reservations/{theirs.pk}/").status_code == 403

    resp = auth_api_client.patch(f"/api/reservations/{mine.pk}/", {"party_size": 5}, format="json")
    assert resp.status_code == 200, resp.content
    assert resp.json()["party_size"] == 5

    resp = auth_api_client.post(f"/api/reservations/{mine.pk}/cancel/", {"reason": "sick"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    assert resp.json()["cancellation_reason"] == "sick"

    resp = auth_api_client.post(f"/api/reservations/{mine.pk}/cancel/", {}, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_my_reservations_lists_only_own(auth_api_client: APIClient, user):
    ReservationFactory(user=user)
    ReservationFactory(user=user, date=timezone.localdate() - timedelta(days=3), status=Reservation.STATUS_COMPLETED)
    ReservationFactory(user=UserFactory())

    resp = auth_api_client.get("/api/reservations/my-reservations/")
    assert resp.status_code == 200
    assert len(resp.json()["results"]) == 2

    resp = auth_api_client.get("/api/reservations/my-reservations/?upcoming=true")
    assert len(resp.json()["results"]) == 1


@pytest.mark.django_db
def test_upcoming_excludes_closed_bookings_and_accepts_status(auth_api_client: APIClient, user):
    future = timezone.localdate() + timedelta(days=5)
    pending = ReservationFactory(user=user, date=future)
    confirmed = ReservationFactory(user=user, date=future, time="12:00", status=Reservation.STATUS_CONFIRMED)
    ReservationFactory(user=user, date=future, time="13:00", status=Reservation.STATUS_CANCELLED)
    ReservationFactory(user=user, date=future, time="14:00", status=Reservation.STATUS_NO_SHOW)

    resp = auth_api_client.get("/api/reservations/my-reservations/?upcoming=true")
    assert resp.status_code == 200
    assert sorted(r["id"] for r in resp.json()["results"]) == sorted([pending.pk, confirmed.pk])

    resp = auth_api_client.get("/api/reservations/my-reservations/?upcoming=true&status=confirmed")
    assert [r["id"] for r in resp.json()["results"]] == [confirmed.pk]

    resp = auth_api_client.get("/api/reservations/my-reservations/?status=cancelled")
    assert [r["status"] for r in resp.json()["results"]] == ["cancelled"]


@pytest.mark.django_db
def test_lookup_by_code_and_email(api_client: APIClient):
    reservation = ReservationFactory(contact_email="Walk.In@example.com")
    resp = api_client.get(
        f"/api/reservations/lookup/?code={reservation.confirmation_code.lower()}&email=walk.in@example.com"
    )
    assert resp.status_code == 200
    assert resp.json()["id"] == reservation.pk

    resp = api_client.get(f"/api/reservations/lookup/?code={reservation.confirmation_code}&email=other@example.com")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


@pytest.mark.django_db
def test_staff_list_filters_and_export(staff_api_client: APIClient):
    day = timezone.localdate() + timedelta(days=4)
    ReservationFactory(date=day, contact_name="Grace Hopper")
    ReservationFactory(date=day, status=Reservation.STATUS_CONFIRMED)
    ReservationFactory(date=day + timedelta(days=1))

    resp = staff_api_client.get(f"/api/reservations/?date={day.isoformat()}")
    assert resp.json()["count"] == 2
    resp = staff_api_client.get("/api/reservations/?status=confirmed")
    assert resp.json()["count"] == 1
    resp = staff_api_client.get("/api/reservations/?search=hopper")
    assert resp.json()["count"] == 1

    resp = staff_api_client.get(f"/api/reservations/export-csv/?date_from={day.isoformat()}&date_to={day.isoformat()}")
    assert resp.status_code == 200
    assert resp["Content-Type"].startswith("text/csv")
    lines = resp.content.decode().strip().splitlines()
    assert lines[0].startswith("confirmation_code,date,time")
    assert len(lines) == 3

    resp = staff_api_client.get("/api/reservations/stats/")
    assert resp.json()["total"] == 3


@pytest.mark.django_db
def test_send_reminder_marks_reservation(staff_api_client: APIClient):
    reservation = ReservationFactory(status=Reservation.STATUS_CONFIRMED)
    resp = staff_api_client.post(f"/api/reservations/{reservation.pk}/send-reminder/")
    assert resp.status_code == 200
    assert resp.json()["reminder_sent"] is True
    assert resp.json()["email_sent"] is True
    assert len(mail.outbox) == 1


@pytest.mark.django_db
def test_capacity_administration(staff_api_client: APIClient, api_client: APIClient):
    day = (timezone.localdate() + timedelta(days=9)).isoformat()

    resp = staff_api_client.patch("/api/reservations/capacity/settings/", {"max_capacity": 30}, format="json")
    assert resp.status_code == 200
    assert resp.json()["max_capacity"] == 30

    resp = staff_api_client.patch("/api/reservations/capacity/settings/", {"max_party_size": 21}, format="json")
    assert resp.status_code == 400
    assert "max_party_size" in resp.json()

    resp = staff_api_client.post(
        "/api/reservations/capacity/overrides/", {"date": day, "time": "19:00", "capacity": 12}, format="json"
    )
    assert resp.json()["slot_capacity_overrides"] == {f"{day}_19:00": 12}
    check = api_client.get(f"/api/reservations/check-availability/?date={day}&time=19:00&party_size=2").json()
    assert check["max_capacity"] == 12

    staff_api_client.post("/api/reservations/capacity/block-date/", {"date": day}, format="json")
    check = api_client.get(f"/api/reservations/check-availability/?date={day}&time=19:00&party_size=2").json()
    assert check["blocked"] is True
    assert check["reason"] == "date blocked"

    resp = staff_api_client.post("/api/reservations/capacity/block-date/", {"date": day, "blocked": False}, format="json")
    assert resp.json()["blocked_dates"] == []

    resp = staff_api_client.post(
        "/api/reservations/capacity/overrides/", {"date": day, "time": "19:00", "capacity": None}, format="json"
    )
    assert resp.json()["slot_capacity_overrides"] == {}

    assert api_client.get("/api/reservations/capacity/").status_code in (401, 403)
