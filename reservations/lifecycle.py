"""
Reservation lifecycle: booking, edits and status transitions.

Every status move goes through ``Reservation.TRANSITIONS``. A move either
saves the reservation in its new state or raises and leaves both the row
and the in-memory instance as they were.

``actor`` arguments are the requesting user. ``None`` means a trusted
internal caller and skips the role checks.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.exceptions import (
    BookingWindowError,
    InvalidTransition,
    NotPermitted,
    ReservationsDisabled,
    TooLateToCancel,
    TooLateToModify,
)
from core.models import RestaurantSettings
from core.permissions import is_staff_member
from core.transitions import apply_transition, lock_status
from loyalty.services import award_points as loyalty_award_points

from .availability import AvailabilityChecker
from .capacity import CapacitySettings
from .models import Reservation, ReservationNote

logger = logging.getLogger(__name__)

# Fields whose change re-runs the availability check
CAPACITY_FIELDS = ("date", "time", "party_size")

EDITABLE_FIELDS = (
    "date", "time", "party_size", "estimated_duration", "table_type", "occasion",
    "preferences", "special_requests", "contact_name", "contact_phone", "contact_email",
)


class ReservationLifecycle:
    def __init__(
        self,
        award_points: Callable | None = None,
        now: Callable | None = None,
        checker: AvailabilityChecker | None = None,
        settings_provider: Callable[..., RestaurantSettings] = RestaurantSettings.get_or_create_defaults,
        cutoff_minutes: int | None = None,
        min_lead_minutes: int | None = None,
        completion_points: int | None = None,
        booking_points: int | None = None,
    ):
        self.award_points = award_points or loyalty_award_points
        self.now = now or timezone.now
        self.settings_provider = settings_provider
        self.checker = checker or AvailabilityChecker(settings_provider)
        self.cutoff_minutes = _setting(cutoff_minutes, "RESERVATION_CANCELLATION_CUTOFF_MINUTES")
        self.min_lead_minutes = _setting(min_lead_minutes, "RESERVATION_MIN_LEAD_MINUTES")
        self.completion_points = _setting(completion_points, "RESERVATION_COMPLETION_POINTS")
        self.booking_points = _setting(booking_points, "RESERVATION_BOOKING_POINTS")

    # ------------------------------------------------------------------
    # Booking and edits
    # ------------------------------------------------------------------

    def book(self, *, user=None, date, time, party_size: int, **fields) -> Reservation:
        """Create a pending reservation if the slot has room for the party.

        The settings row is locked for the duration of the check and the
        insert, so concurrent bookings are serialized.
        """
        with transaction.atomic():
            row = self.settings_provider(for_update=True)
            reservation = Reservation(user=user, date=date, time=time, party_size=party_size, **fields)
            reservation.full_clean(exclude=["confirmation_code"], validate_unique=False)
            self._check_booking_window(row, reservation)
            self.checker.ensure_available(
                reservation.date, reservation.time, reservation.party_size,
                capacity_settings=CapacitySettings.from_model(row),
            )
            reservation.status = Reservation.STATUS_PENDING
            reservation.save()
            if user is not None and self.booking_points:
                self.award_points(
                    user.pk, self.booking_points,
                    reason="Reservation booked", reference=reservation.confirmation_code,
                )

        logger.info(
            f"Reservation {reservation.confirmation_code} booked for {reservation.date} "
            f"{reservation.time}, party of {reservation.party_size}"
        )
        return reservation

    def ensure_modifiable(self, reservation: Reservation) -> None:
        if reservation.is_terminal:
            raise InvalidTransition(
                reservation.status, "update",
                message=f"A {reservation.status} reservation cannot be modified.",
            )
        if reservation.minutes_until_start(self.now()) <= self.cutoff_minutes:
            raise TooLateToModify(
                f"Reservations can only be changed more than {self.cutoff_minutes} minutes in advance."
            )

    def update(self, reservation: Reservation, actor=None, **changes) -> Reservation:
        """Apply guest-editable changes, re-checking capacity when the slot or party changes."""
        self._require_owner_or_staff(reservation, actor)
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            row = self.settings_provider(for_update=True)
            lock_status(reservation)
            self.ensure_modifiable(reservation)

            snapshot = {name: getattr(reservation, name) for name in changes}
            for name, value in changes.items():
                setattr(reservation, name, value)
            try:
                reservation.full_clean(validate_unique=False)
                if any(snapshot[name] != getattr(reservation, name) for name in CAPACITY_FIELDS if name in changes):
                    self._check_booking_window(row, reservation)
                    self.checker.ensure_available(
                        reservation.date, reservation.time, reservation.party_size,
                        exclude_id=reservation.pk,
                        capacity_settings=CapacitySettings.from_model(row),
                    )
                reservation.save()
            except Exception:
                for name, value in snapshot.items():
                    setattr(reservation, name, value)
                raise

        logger.info(f"Reservation {reservation.confirmation_code} updated: {', '.join(sorted(changes))}")
        return reservation

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def confirm(self, reservation: Reservation, actor=None) -> Reservation:
        self._require_staff(actor)
        return self._transition(reservation, Reservation.STATUS_CONFIRMED)

    def check_in(self, reservation: Reservation, table_number: str, actor=None) -> Reservation:
        self._require_staff(actor)
        Reservation.TRANSITIONS.check(reservation.status, Reservation.STATUS_SEATED)
        table_number = str(table_number or "").strip()
        if not table_number:
            raise ValidationError({"table_number": "A table number is required to seat a reservation."})
        return self._transition(
            reservation, Reservation.STATUS_SEATED,
            table_number=table_number, checked_in_at=self.now(),
        )

    def complete(self, reservation: Reservation, actor=None) -> Reservation:
        self._require_staff(actor)

        def _award():
            if reservation.user_id and self.completion_points:
                self.award_points(
                    reservation.user_id, self.completion_points,
                    reason="Reservation completed", reference=reservation.confirmation_code,
                )

        return self._transition(
            reservation, Reservation.STATUS_COMPLETED,
            after_save=_award, completed_at=self.now(),
        )

    def cancel(self, reservation: Reservation, reason: str = "", actor=None) -> Reservation:
        self._require_owner_or_staff(reservation, actor)
        Reservation.TRANSITIONS.check(reservation.status, Reservation.STATUS_CANCELLED)
        if reservation.minutes_until_start(self.now()) <= self.cutoff_minutes:
            raise TooLateToCancel(
                f"Reservations can only be cancelled more than {self.cutoff_minutes} minutes in advance."
            )
        return self._transition(
            reservation, Reservation.STATUS_CANCELLED,
            cancelled_at=self.now(),
            cancelled_by=actor,
            cancellation_reason=(reason or "").strip(),
        )

    def mark_no_show(self, reservation: Reservation, actor=None) -> Reservation:
        self._require_staff(actor)
        return self._transition(reservation, Reservation.STATUS_NO_SHOW)

    # ------------------------------------------------------------------
    # Notes and reminders
    # ------------------------------------------------------------------

    def add_note(self, reservation: Reservation, content: str, author) -> ReservationNote:
        if author is None or not is_staff_member(author):
            raise NotPermitted("Only staff can add notes.")
        if reservation.is_terminal:
            raise InvalidTransition(
                reservation.status, "note",
                message=f"Notes cannot be added to a {reservation.status} reservation.",
            )
        return ReservationNote.objects.create(
            reservation=reservation, content=content, author=author, created_at=self.now(),
        )

    def mark_reminder_sent(self, reservation: Reservation, actor=None) -> Reservation:
        self._require_staff(actor)
        if reservation.is_terminal:
            raise InvalidTransition(
                reservation.status, "reminder",
                message=f"No reminder is sent for a {reservation.status} reservation.",
            )
        reservation.reminder_sent = True
        reservation.reminder_sent_at = self.now()
        reservation.save(update_fields=["reminder_sent", "reminder_sent_at", "updated_at"])
        return reservation

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, reservation: Reservation, target: str, after_save: Callable | None = None, **changes) -> Reservation:
        previous = apply_transition(reservation, Reservation.TRANSITIONS, target, after_save=after_save, **changes)
        logger.info(f"Reservation {reservation.confirmation_code}: {previous} -> {target}")
        return reservation

    def _check_booking_window(self, row: RestaurantSettings, reservation: Reservation) -> None:
        if not row.enable_reservations:
            raise ReservationsDisabled()
        if not (row.min_party_size <= reservation.party_size <= row.max_party_size):
            raise BookingWindowError(
                f"Party size must be between {row.min_party_size} and {row.max_party_size}."
            )
        now = self.now()
        if reservation.starts_at < now + timedelta(minutes=self.min_lead_minutes):
            raise BookingWindowError(
                f"Reservations must be made at least {self.min_lead_minutes} minutes in advance."
            )
        if reservation.date > timezone.localtime(now).date() + timedelta(days=row.max_advance_days):
            raise BookingWindowError(
                f"Reservations can be made at most {row.max_advance_days} days in advance."
            )

    @staticmethod
    def _require_staff(actor) -> None:
        if actor is not None and not is_staff_member(actor):
            raise NotPermitted("Only staff can perform this action.")

    @staticmethod
    def _require_owner_or_staff(reservation: Reservation, actor) -> None:
        if actor is None or is_staff_member(actor):
            return
        if reservation.user_id is None or reservation.user_id != actor.pk:
            raise NotPermitted("Only the guest who booked or staff can change this reservation.")


def _setting(value, name):
    return getattr(settings, name) if value is None else value
