from __future__ import annotations

import logging

from django.db import transaction

from core.exceptions import SchedulingError

from .models import LoyaltyPointsLedger, LoyaltyProfile

logger = logging.getLogger(__name__)


class InsufficientPoints(SchedulingError):
    code = "insufficient_points"
    default_message = "Not enough loyalty points."


def _locked_profile(user_id) -> LoyaltyProfile:
    LoyaltyProfile.objects.get_or_create(user_id=user_id)
    return LoyaltyProfile.objects.select_for_update().get(user_id=user_id)


@transaction.atomic
def award_points(user_id, points: int, reason: str = "", reference: str = "", created_by=None) -> LoyaltyPointsLedger:
    """Credit ``points`` to the user's profile, creating the profile when missing."""
    if int(points) <= 0:
        raise ValueError("points must be positive")
    profile = _locked_profile(user_id)
    entry = LoyaltyPointsLedger.objects.create(
        profile=profile,
        delta=int(points),
        type=LoyaltyPointsLedger.TYPE_EARN,
        reason=reason,
        reference=reference,
        created_by=created_by,
    )
    entry.apply()
    logger.info(f"Awarded {points} points to user {user_id} ({reason or 'no reason'})")
    return entry


@transaction.atomic
def redeem_points(user_id, points: int, reason: str = "", reference: str = "") -> LoyaltyPointsLedger:
    if int(points) <= 0:
        raise ValueError("points must be positive")
    profile = _locked_profile(user_id)
    if profile.points < int(points):
        raise InsufficientPoints(f"Balance is {profile.points} points, {points} requested.")
    entry = LoyaltyPointsLedger.objects.create(
        profile=profile, delta=-int(points), type=LoyaltyPointsLedger.TYPE_BURN,
        reason=reason, reference=reference,
    )
    entry.apply()
    logger.info(f"Redeemed {points} points for user {user_id}")
    return entry


@transaction.atomic
def adjust_points(profile: LoyaltyProfile, delta: int, reason: str, reference: str = "", created_by=None) -> LoyaltyPointsLedger:
    """Manual staff correction; the balance never goes below zero."""
    profile = LoyaltyProfile.objects.select_for_update().get(pk=profile.pk)
    if profile.points + int(delta) < 0:
        raise InsufficientPoints(f"Adjustment would leave a negative balance ({profile.points} points).")
    entry = LoyaltyPointsLedger.objects.create(
        profile=profile, delta=int(delta), type=LoyaltyPointsLedger.TYPE_ADJUST,
        reason=reason, reference=reference, created_by=created_by,
    )
    entry.apply()
    logger.info(f"Adjusted user {profile.user_id} by {delta} points: {reason}")
    return entry
