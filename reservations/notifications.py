"""
Guest emails for reservation events.

Sent by the API layer after the change is committed; a failed email is
logged and never undoes the change.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail

from core.models import RestaurantSettings

from .models import Reservation

logger = logging.getLogger(__name__)


def _details(reservation: Reservation) -> list[str]:
    lines = [
        f"Confirmation code: {reservation.confirmation_code}",
        f"Date: {reservation.date:%A, %d %B %Y}",
        f"Time: {reservation.time}",
        f"Party size: {reservation.party_size}",
    ]
    if reservation.table_number:
        lines.append(f"Table: {reservation.table_number}")
    if reservation.special_requests:
        lines.append(f"Special requests: {reservation.special_requests}")
    return lines


def _send(reservation: Reservation, subject: str, intro: str, outro: str = "") -> bool:
    if not reservation.contact_email:
        return False
    business = RestaurantSettings.get_or_create_defaults().business_name
    lines = [f"Hello {reservation.contact_name},", "", intro, "", *_details(reservation)]
    if outro:
        lines += ["", outro]
    site = getattr(settings, "SITE_URL", "")
    if site:
        lines += ["", site]
    lines += ["", business]
    try:
        send_mail(
            f"{subject} - {business}",
            "\n".join(lines),
            settings.DEFAULT_FROM_EMAIL,
            [reservation.contact_email],
            fail_silently=False,
        )
    except Exception:
        logger.exception("Failed sending '%s' email for reservation %s", subject, reservation.confirmation_code)
        return False
    return True


def send_booking_received(reservation: Reservation) -> bool:
    return _send(
        reservation,
        "Reservation received",
        "Thank you for your reservation. We will confirm it shortly.",
    )


def send_confirmation(reservation: Reservation) -> bool:
    return _send(reservation, "Reservation confirmed", "Your reservation is confirmed. We look forward to seeing you.")


def send_cancellation(reservation: Reservation) -> bool:
    outro = f"Reason: {reservation.cancellation_reason}" if reservation.cancellation_reason else ""
    return _send(reservation, "Reservation cancelled", "Your reservation has been cancelled.", outro)


def send_reminder(reservation: Reservation) -> bool:
    return _send(
        reservation,
        "Reservation reminder",
        "This is a friendly reminder of your upcoming reservation.",
        f"If your plans change, please cancel at least {settings.RESERVATION_CANCELLATION_CUTOFF_MINUTES // 60} hours in advance.",
    )
