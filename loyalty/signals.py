from __future__ import annotations

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import LoyaltyProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def ensure_loyalty_profile(sender, instance, created: bool, **kwargs):
    """Every new user starts with an empty bronze profile."""
    if created:
        LoyaltyProfile.objects.get_or_create(user=instance)
