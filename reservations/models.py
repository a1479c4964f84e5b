from __future__ import annotations

import string
from datetime import datetime, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator, RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.html import strip_tags

from core.intervals import is_valid_time, normalize_time, to_minutes
from core.transitions import TransitionTable

CONFIRMATION_CODE_LENGTH = 8
CONFIRMATION_CODE_CHARS = string.ascii_uppercase + string.digits


def generate_confirmation_code() -> str:
    return get_random_string(CONFIRMATION_CODE_LENGTH, allowed_chars=CONFIRMATION_CODE_CHARS)


class ReservationQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status__in=Reservation.ACTIVE_STATUSES)

    def on_date(self, date):
        return self.filter(date=date)

    def upcoming(self, now=None):
        now = timezone.localtime(now or timezone.now())
        today = now.date()
        return self.filter(
            models.Q(date__gt=today) | models.Q(date=today, time__gte=now.strftime("%H:%M")),
            status__in=Reservation.UPCOMING_STATUSES,
        )


class Reservation(models.Model):
    """
    A guest booking for a ``(date, time)`` slot.

    Capacity is shared by the whole restaurant: a booking occupies
    ``party_size`` seats for the configured dining duration. Status moves
    are driven by ``reservations.lifecycle.ReservationLifecycle`` and are
    limited to ``Reservation.TRANSITIONS``.
    """
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_SEATED = "seated"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_NO_SHOW = "no-show"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_SEATED, "Seated"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_NO_SHOW, "No Show"),
    ]

    # Statuses that consume capacity
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_SEATED)
    # Bookings a guest still has ahead of them
    UPCOMING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    TRANSITIONS = TransitionTable({
        STATUS_PENDING: (STATUS_CONFIRMED, STATUS_CANCELLED),
        STATUS_CONFIRMED: (STATUS_SEATED, STATUS_CANCELLED, STATUS_NO_SHOW),
        STATUS_SEATED: (STATUS_COMPLETED, STATUS_NO_SHOW),
        STATUS_COMPLETED: (),
        STATUS_CANCELLED: (),
        STATUS_NO_SHOW: (),
    })

    TABLE_REGULAR = "regular"
    TABLE_TYPE_CHOICES = [
        (TABLE_REGULAR, "Regular"),
        ("high-top", "High-top"),
        ("booth", "Booth"),
        ("outdoor", "Outdoor"),
        ("private", "Private"),
    ]

    OCCASION_CHOICES = [
        ("none", "None"),
        ("birthday", "Birthday"),
        ("anniversary", "Anniversary"),
        ("business", "Business"),
        ("date", "Date"),
        ("celebration", "Celebration"),
        ("other", "Other"),
    ]

    phone_regex = RegexValidator(
        regex=r'^[\+]?[0-9\s\-()]{7,20}$',
        message="Phone number must be valid. Use digits with optional +, spaces or dashes."
    )
    time_regex = RegexValidator(
        regex=r'^([01]\d|2[0-3]):([0-5]\d)$',
        message="Time must be HH:MM (24h)."
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservations",
        help_text="Owning account; empty for guest bookings",
    )

    date = models.DateField()
    time = models.CharField(max_length=5, validators=[time_regex], help_text="Start time, HH:MM (24h)")
    estimated_duration = models.PositiveIntegerField(
        default=90,
        validators=[MinValueValidator(30), MaxValueValidator(180)],
        help_text="Expected stay in minutes (30-180)",
    )
    party_size = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(20)],
        help_text="Number of guests (1-20)",
    )
    table_number = models.CharField(max_length=10, blank=True, default="")
    table_type = models.CharField(max_length=10, choices=TABLE_TYPE_CHOICES, default=TABLE_REGULAR)
    occasion = models.CharField(max_length=12, choices=OCCASION_CHOICES, default="none")
    preferences = models.JSONField(default=list, blank=True, help_text="Seating preferences, e.g. window, quiet")
    special_requests = models.TextField(blank=True, default="", help_text="HTML tags will be stripped")

    # Contact snapshot taken at booking time
    contact_name = models.CharField(max_length=120)
    contact_phone = models.CharField(max_length=30, validators=[phone_regex])
    contact_email = models.EmailField()

    confirmation_code = models.CharField(max_length=CONFIRMATION_CODE_LENGTH, unique=True, editable=False)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_PENDING)

    reminder_sent = models.BooleanField(default=False)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancellation_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        ordering = ["date", "time", "id"]
        indexes = [
            models.Index(fields=["date", "status"], name="reservation_date_status_idx"),
            models.Index(fields=["user", "status"], name="reservation_user_status_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self):
        return f"{self.confirmation_code} {self.contact_name} x{self.party_size} @ {self.date} {self.time}"

    # ---------------- Derived state ----------------

    @property
    def starts_at(self) -> datetime:
        naive = datetime.combine(self.date, datetime.min.time()) + timedelta(minutes=to_minutes(self.time))
        return timezone.make_aware(naive, timezone.get_current_timezone())

    @property
    def is_terminal(self) -> bool:
        return self.TRANSITIONS.is_terminal(self.status)

    @property
    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def minutes_until_start(self, now=None) -> float:
        return (self.starts_at - (now or timezone.now())).total_seconds() / 60

    def can_be_cancelled(self, now=None, cutoff_minutes=None) -> bool:
        if not self.TRANSITIONS.can(self.status, self.STATUS_CANCELLED):
            return False
        if cutoff_minutes is None:
            cutoff_minutes = settings.RESERVATION_CANCELLATION_CUTOFF_MINUTES
        return self.minutes_until_start(now) > cutoff_minutes

    # ---------------- Validation ----------------

    def clean(self):
        if self.contact_name:
            self.contact_name = strip_tags(self.contact_name).strip()
        if self.special_requests:
            self.special_requests = strip_tags(self.special_requests).strip()
        if self.time and is_valid_time(self.time):
            self.time = normalize_time(self.time)
        if self.preferences is not None and not isinstance(self.preferences, list):
            raise ValidationError({"preferences": "Preferences must be a list."})
        if self.table_number:
            self.table_number = self.table_number.strip()

    def save(self, *args, **kwargs):
        if not self.confirmation_code:
            self.confirmation_code = self._unique_confirmation_code()
        self.full_clean()
        super().save(*args, **kwargs)

    @classmethod
    def _unique_confirmation_code(cls) -> str:
        code = generate_confirmation_code()
        while cls.objects.filter(confirmation_code=code).exists():
            code = generate_confirmation_code()
        return code


class ReservationNote(models.Model):
    """Append-only staff note on a reservation."""
    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name="notes")
    content = models.TextField(help_text="HTML tags will be stripped")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="reservation_notes",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Note on {self.reservation_id} by {self.author_id}"

    def clean(self):
        self.content = strip_tags(self.content or "").strip()
        if not self.content:
            raise ValidationError({"content": "Note content is required."})

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Reservation notes cannot be edited.")
        self.full_clean()
        super().save(*args, **kwargs)
