from __future__ import annotations

from datetime import date as dt_date

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from .intervals import format_minutes, is_valid_time, normalize_time, to_minutes


def default_time_slots() -> list[str]:
    """Lunch 11:00-14:30 and dinner 17:00-21:00, every 30 minutes."""
    lunch = range(to_minutes("11:00"), to_minutes("14:30") + 1, 30)
    dinner = range(to_minutes("17:00"), to_minutes("21:00") + 1, 30)
    return [format_minutes(m) for m in (*lunch, *dinner)]


def iso_date(value) -> str:
    if isinstance(value, dt_date):
        return value.isoformat()
    try:
        return dt_date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid date '{value}'. Expected YYYY-MM-DD.")


def slot_key(date, time) -> str:
    """Key of a ``(date, time)`` slot in the capacity override mapping."""
    return f"{iso_date(date)}_{normalize_time(time)}"


class RestaurantSettings(models.Model):
    """
    Singleton row holding the restaurant's reservation policy.

    Always obtained through ``RestaurantSettings.get_or_create_defaults()``.
    ``blocked_dates`` is a list of ISO dates, ``blocked_slots`` maps an ISO
    date to a list of "HH:MM" times and ``slot_capacity_overrides`` maps a
    ``"YYYY-MM-DD_HH:MM"`` key to a capacity.
    """
    SINGLETON_PK = 1

    business_name = models.CharField(max_length=200, default="Cafe")
    contact_email = models.EmailField(blank=True, default="")
    contact_phone = models.CharField(max_length=30, blank=True, default="")

    enable_reservations = models.BooleanField(default=True)
    max_capacity = models.PositiveIntegerField(
        default=50,
        validators=[MinValueValidator(1), MaxValueValidator(500)],
        help_text="Guests that may be seated at the same time (1-500)",
    )
    dining_duration = models.PositiveIntegerField(
        default=90,
        validators=[MinValueValidator(30), MaxValueValidator(180)],
        help_text="Minutes a booking occupies capacity (30-180)",
    )
    min_party_size = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    max_party_size = models.PositiveIntegerField(
        default=20, validators=[MinValueValidator(1), MaxValueValidator(20)]
    )
    max_advance_days = models.PositiveIntegerField(
        default=60,
        validators=[MinValueValidator(1), MaxValueValidator(365)],
        help_text="How many days ahead guests may book",
    )
    time_slots = models.JSONField(default=default_time_slots, blank=True)
    slot_capacity_overrides = models.JSONField(default=dict, blank=True)
    blocked_dates = models.JSONField(default=list, blank=True)
    blocked_slots = models.JSONField(default=dict, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Restaurant settings"
        verbose_name_plural = "Restaurant settings"

    def __str__(self):
        return f"Settings for {self.business_name}"

    @classmethod
    def get_or_create_defaults(cls, for_update: bool = False) -> "RestaurantSettings":
        """Return the settings row, creating it with defaults on first use.

        With ``for_update`` the row is locked until the surrounding
        transaction ends; booking writes use it to run one at a time.
        """
        qs = cls.objects.select_for_update() if for_update else cls.objects.all()
        obj = qs.filter(pk=cls.SINGLETON_PK).first()
        if obj is None:
            obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
            if for_update:
                obj = cls.objects.select_for_update().get(pk=cls.SINGLETON_PK)
        return obj

    def clean(self):
        super().clean()
        if self.min_party_size > self.max_party_size:
            raise ValidationError({"min_party_size": "Must not exceed the maximum party size."})

        bad_slots = [t for t in (self.time_slots or []) if not is_valid_time(t)]
        if bad_slots:
            raise ValidationError({"time_slots": f"Invalid times: {', '.join(map(str, bad_slots))}"})
        self.time_slots = sorted({normalize_time(t) for t in self.time_slots or []})

        overrides = {}
        for key, capacity in (self.slot_capacity_overrides or {}).items():
            day, _, time = str(key).partition("_")
            if not is_valid_time(time):
                raise ValidationError({"slot_capacity_overrides": f"Invalid slot key '{key}'."})
            if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity < 0:
                raise ValidationError({"slot_capacity_overrides": f"Capacity for '{key}' must be a non-negative integer."})
            overrides[slot_key(day, time)] = capacity
        self.slot_capacity_overrides = overrides

        self.blocked_dates = sorted({iso_date(d) for d in self.blocked_dates or []})

        blocked = {}
        for day, times in (self.blocked_slots or {}).items():
            bad = [t for t in times if not is_valid_time(t)]
            if bad:
                raise ValidationError({"blocked_slots": f"Invalid times for {day}: {', '.join(map(str, bad))}"})
            if times:
                blocked[iso_date(day)] = sorted({normalize_time(t) for t in times})
        self.blocked_slots = blocked

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        self.full_clean()
        super().save(*args, **kwargs)

    # ----- capacity administration -----

    def block_date(self, date) -> None:
        day = iso_date(date)
        if day not in self.blocked_dates:
            self.blocked_dates = [*self.blocked_dates, day]

    def unblock_date(self, date) -> None:
        day = iso_date(date)
        self.blocked_dates = [d for d in self.blocked_dates if d != day]

    def block_slot(self, date, time) -> None:
        day, hhmm = iso_date(date), normalize_time(time)
        times = list(self.blocked_slots.get(day, []))
        if hhmm not in times:
            times.append(hhmm)
        self.blocked_slots = {**self.blocked_slots, day: times}

    def unblock_slot(self, date, time) -> None:
        day, hhmm = iso_date(date), normalize_time(time)
        times = [t for t in self.blocked_slots.get(day, []) if t != hhmm]
        blocked = {**self.blocked_slots, day: times}
        if not times:
            blocked.pop(day)
        self.blocked_slots = blocked

    def set_slot_override(self, date, time, capacity: int) -> None:
        if int(capacity) < 0:
            raise ValidationError({"capacity": "Capacity must be zero or more."})
        self.slot_capacity_overrides = {
            **self.slot_capacity_overrides,
            slot_key(date, time): int(capacity),
        }

    def clear_slot_override(self, date, time) -> None:
        key = slot_key(date, time)
        self.slot_capacity_overrides = {
            k: v for k, v in self.slot_capacity_overrides.items() if k != key
        }
