"""
Effective capacity of a reservation slot.

Rules, first match wins:
  1. the date is blocked            -> 0, "date blocked"
  2. the time is blocked that day   -> 0, "slot blocked"
  3. a "YYYY-MM-DD_HH:MM" override  -> the override value
  4. otherwise                      -> the global maximum
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from core.models import RestaurantSettings, iso_date, slot_key
from core.intervals import normalize_time

DATE_BLOCKED = "date blocked"
SLOT_BLOCKED = "slot blocked"


@dataclass(frozen=True)
class CapacitySettings:
    """Read-only snapshot of the capacity part of ``RestaurantSettings``."""
    max_capacity: int = 50
    dining_duration: int = 90
    slot_capacity_overrides: Mapping[str, int] = field(default_factory=dict)
    blocked_dates: frozenset = frozenset()
    blocked_slots: Mapping[str, frozenset] = field(default_factory=dict)

    @classmethod
    def from_model(cls, row: RestaurantSettings) -> "CapacitySettings":
        return cls(
            max_capacity=row.max_capacity,
            dining_duration=row.dining_duration,
            slot_capacity_overrides={
                slot_key(*key.split("_", 1)): int(value)
                for key, value in (row.slot_capacity_overrides or {}).items()
            },
            blocked_dates=frozenset(iso_date(d) for d in row.blocked_dates or []),
            blocked_slots={
                iso_date(day): frozenset(normalize_time(t) for t in times)
                for day, times in (row.blocked_slots or {}).items()
            },
        )


@dataclass(frozen=True)
class EffectiveCapacity:
    capacity: int
    blocked: bool = False
    reason: str = ""


def resolve_capacity(capacity_settings: CapacitySettings, date, time) -> EffectiveCapacity:
    day = iso_date(date)
    hhmm = normalize_time(time)

    if day in capacity_settings.blocked_dates:
        return EffectiveCapacity(0, blocked=True, reason=DATE_BLOCKED)
    if hhmm in capacity_settings.blocked_slots.get(day, ()):
        return EffectiveCapacity(0, blocked=True, reason=SLOT_BLOCKED)

    override = capacity_settings.slot_capacity_overrides.get(f"{day}_{hhmm}")
    if override is not None:
        return EffectiveCapacity(max(int(override), 0))
    return EffectiveCapacity(capacity_settings.max_capacity)
