from __future__ import annotations

from django.conf import settings
from django.db import models


TIER_BRONZE = "bronze"
TIER_SILVER = "silver"
TIER_GOLD = "gold"
TIER_PLATINUM = "platinum"

TIER_CHOICES = [
    (TIER_BRONZE, "Bronze"),
    (TIER_SILVER, "Silver"),
    (TIER_GOLD, "Gold"),
    (TIER_PLATINUM, "Platinum"),
]

# Lowest points balance for each tier, highest first
TIER_THRESHOLDS = (
    (1000, TIER_PLATINUM),
    (500, TIER_GOLD),
    (200, TIER_SILVER),
    (0, TIER_BRONZE),
)


def tier_for_points(points: int) -> str:
    for minimum, tier in TIER_THRESHOLDS:
        if points >= minimum:
            return tier
    return TIER_BRONZE


class LoyaltyProfile(models.Model):
    """Per-user points balance and the tier it earns."""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="loyalty_profile")
    points = models.PositiveIntegerField(default=0)
    tier = models.CharField(max_length=10, choices=TIER_CHOICES, default=TIER_BRONZE)
    notes = models.TextField(blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Loyalty Profile"
        verbose_name_plural = "Loyalty Profiles"

    def __str__(self) -> str:
        return f"{self.user_id}: {self.points} pts ({self.tier})"


class LoyaltyPointsLedger(models.Model):
    """
    Points ledger with reasons. Positive = earn, Negative = burn/adjustment.
    """
    TYPE_EARN = "EARN"
    TYPE_BURN = "BURN"
    TYPE_ADJUST = "ADJUST"
    TYPE_CHOICES = (
        (TYPE_EARN, "Earn"),
        (TYPE_BURN, "Burn"),
        (TYPE_ADJUST, "Adjust"),
    )
    profile = models.ForeignKey(LoyaltyProfile, on_delete=models.CASCADE, related_name="ledger")
    delta = models.IntegerField(help_text="Points change (positive or negative)")
    type = models.CharField(max_length=8, choices=TYPE_CHOICES, default=TYPE_EARN)
    reason = models.CharField(max_length=200, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="", help_text="Reservation code or external reference")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="loyalty_adjustments"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["profile", "-created_at"], name="loyalty_loy_profile_9c1f2e_idx"),
            models.Index(fields=["type", "-created_at"], name="loyalty_loy_type_5b7d1a_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.profile_id} {self.type} {self.delta}"

    def apply(self):
        p = self.profile
        p.points = int(p.points) + int(self.delta)
        p.tier = tier_for_points(p.points)
        p.save(update_fields=["points", "tier", "updated_at"])
