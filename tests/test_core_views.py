import pytest


@pytest.mark.django_db
def test_health_check_reports_database(api_client):
    resp = api_client.get("/api/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert "X-Request-ID" in resp


@pytest.mark.django_db
def test_request_id_is_echoed(api_client):
    resp = api_client.get("/api/health/", HTTP_X_REQUEST_ID="abc-123")
    assert resp["X-Request-ID"] == "abc-123"


@pytest.mark.django_db
def test_public_settings_expose_booking_rules(api_client, settings_row):
    settings_row.max_party_size = 8
    settings_row.save()

    resp = api_client.get("/api/settings/public/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["max_party_size"] == 8
    assert data["enable_reservations"] is True
    assert data["time_slots"][0] == "11:00"
    assert "max_capacity" not in data
