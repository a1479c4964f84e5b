from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Callable, Iterable

from core.exceptions import CapacityExceeded, SlotBlocked
from core.intervals import Window, normalize_time
from core.models import RestaurantSettings

from .capacity import CapacitySettings, resolve_capacity
from .models import Reservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    remaining_capacity: int
    reserved_capacity: int
    max_capacity: int
    conflicting_count: int
    blocked: bool
    reason: str = ""

    def as_dict(self) -> dict:
        return asdict(self)


def compute_availability(
    capacity_settings: CapacitySettings,
    date,
    time,
    party_size: int,
    bookings: Iterable[tuple[str, int]],
) -> AvailabilityResult:
    """Forecast whether ``party_size`` guests fit at ``(date, time)``.

    ``bookings`` are ``(time, party_size)`` pairs of the *active*
    reservations on ``date``. Every booking, the requested one included,
    occupies ``dining_duration`` minutes from its start.
    """
    party_size = int(party_size)
    if party_size < 1:
        raise ValueError("party_size must be at least 1")

    effective = resolve_capacity(capacity_settings, date, time)
    if effective.blocked:
        return AvailabilityResult(
            available=False,
            remaining_capacity=0,
            reserved_capacity=0,
            max_capacity=0,
            conflicting_count=0,
            blocked=True,
            reason=effective.reason,
        )

    duration = capacity_settings.dining_duration
    requested = Window.starting_at(time, duration)
    reserved = 0
    conflicting = 0
    for other_time, other_party in bookings:
        if requested.overlaps(Window.starting_at(other_time, duration)):
            reserved += other_party
            conflicting += 1

    return AvailabilityResult(
        available=reserved + party_size <= effective.capacity,
        remaining_capacity=max(effective.capacity - reserved, 0),
        reserved_capacity=reserved,
        max_capacity=effective.capacity,
        conflicting_count=conflicting,
        blocked=False,
    )


class AvailabilityChecker:
    """
    Availability against the reservations stored for a date.

    ``settings_provider`` returns the ``RestaurantSettings`` row; it is the
    only place capacity configuration is read from.
    """

    def __init__(self, settings_provider: Callable[[], RestaurantSettings] = RestaurantSettings.get_or_create_defaults):
        self.settings_provider = settings_provider

    def capacity_settings(self) -> CapacitySettings:
        return CapacitySettings.from_model(self.settings_provider())

    def _bookings(self, date, exclude_id=None):
        qs = Reservation.objects.active().on_date(date)
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return list(qs.values_list("time", "party_size"))

    def check(self, date, time, party_size: int, exclude_id=None, capacity_settings: CapacitySettings | None = None) -> AvailabilityResult:
        capacity_settings = capacity_settings or self.capacity_settings()
        return compute_availability(
            capacity_settings, date, time, party_size, self._bookings(date, exclude_id)
        )

    def ensure_available(self, date, time, party_size: int, exclude_id=None, capacity_settings: CapacitySettings | None = None) -> AvailabilityResult:
        result = self.check(date, time, party_size, exclude_id=exclude_id, capacity_settings=capacity_settings)
        if result.blocked:
            logger.warning(f"Booking refused for {date} {time}: {result.reason}")
            raise SlotBlocked(result.reason, result)
        if not result.available:
            logger.warning(
                f"Booking refused for {date} {time}: party of {party_size} exceeds "
                f"remaining capacity {result.remaining_capacity}"
            )
            raise CapacityExceeded(result)
        return result

    def available_slots(self, date, party_size: int) -> list[dict]:
        """Availability of every configured time slot on ``date``."""
        row = self.settings_provider()
        capacity_settings = CapacitySettings.from_model(row)
        bookings = self._bookings(date)
        slots = []
        for slot in row.time_slots or []:
            hhmm = normalize_time(slot)
            result = compute_availability(capacity_settings, date, hhmm, party_size, bookings)
            slots.append({"time": hhmm, **result.as_dict()})
        return slots
