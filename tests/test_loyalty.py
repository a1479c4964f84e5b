import pytest

from loyalty.models import LoyaltyPointsLedger, LoyaltyProfile, tier_for_points
from loyalty.services import InsufficientPoints, adjust_points, award_points, redeem_points
from tests.factories import UserFactory


def test_tier_thresholds():
    assert tier_for_points(0) == "bronze"
    assert tier_for_points(199) == "bronze"
    assert tier_for_points(200) == "silver"
    assert tier_for_points(500) == "gold"
    assert tier_for_points(1000) == "platinum"


@pytest.mark.django_db
def test_profile_created_with_user():
    user = UserFactory()
    assert LoyaltyProfile.objects.filter(user=user, points=0).exists()


@pytest.mark.django_db
def test_award_points_writes_ledger_and_updates_tier():
    user = UserFactory()
    award_points(user.pk, 150, reason="Reservation completed", reference="ABCD1234")
    award_points(user.pk, 60)

    profile = LoyaltyProfile.objects.get(user=user)
    assert profile.points == 210
    assert profile.tier == "silver"
    entries = list(profile.ledger.order_by("created_at", "id"))
    assert [e.delta for e in entries] == [150, 60]
    assert entries[0].type == LoyaltyPointsLedger.TYPE_EARN
    assert entries[0].reference == "ABCD1234"


@pytest.mark.django_db
def test_award_points_rejects_non_positive():
    user = UserFactory()
    with pytest.raises(ValueError):
        award_points(user.pk, 0)


@pytest.mark.django_db
def test_redeem_and_adjust_never_go_negative():
    user = UserFactory()
    award_points(user.pk, 100)

    with pytest.raises(InsufficientPoints):
        redeem_points(user.pk, 150)
    redeem_points(user.pk, 40, reason="Free coffee")
    profile = LoyaltyProfile.objects.get(user=user)
    assert profile.points == 60

    with pytest.raises(InsufficientPoints):
        adjust_points(profile, -61, reason="correction")
    adjust_points(profile, -60, reason="correction")
    profile.refresh_from_db()
    assert profile.points == 0
    assert profile.ledger.count() == 3


@pytest.mark.django_db
def test_me_and_ledger_endpoints(auth_api_client, user):
    award_points(user.pk, 30, reason="Reservation completed")

    resp = auth_api_client.get("/api/loyalty/profiles/me/")
    assert resp.status_code == 200
    assert resp.json()["points"] == 30
    assert resp.json()["tier"] == "bronze"

    profile_id = resp.json()["id"]
    resp = auth_api_client.get(f"/api/loyalty/profiles/{profile_id}/ledger/")
    assert [e["delta"] for e in resp.json()] == [30]


@pytest.mark.django_db
def test_profiles_are_private_and_adjust_is_staff_only(auth_api_client, staff_api_client, user):
    other = LoyaltyProfile.objects.get(user=UserFactory())
    mine = LoyaltyProfile.objects.get(user=user)

    assert auth_api_client.get(f"/api/loyalty/profiles/{other.pk}/").status_code == 404
    assert auth_api_client.post(
        f"/api/loyalty/profiles/{mine.pk}/adjust/", {"delta": 500, "reason": "gift"}, format="json"
    ).status_code == 403

    resp = staff_api_client.post(
        f"/api/loyalty/profiles/{mine.pk}/adjust/", {"delta": 500, "reason": "gift"}, format="json"
    )
    assert resp.status_code == 200
    assert resp.json()["points"] == 500
    assert resp.json()["tier"] == "gold"

    resp = staff_api_client.post(
        f"/api/loyalty/profiles/{mine.pk}/adjust/", {"delta": -600, "reason": "oops"}, format="json"
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "insufficient_points"
