from datetime import date

import pytest

from reservations.availability import compute_availability
from reservations.capacity import DATE_BLOCKED, SLOT_BLOCKED, CapacitySettings, resolve_capacity

DAY = date(2030, 5, 17)


def _settings(**kwargs):
    base = {"max_capacity": 50, "dining_duration": 90}
    base.update(kwargs)
    return CapacitySettings(**base)


def test_capacity_rules_apply_in_order():
    cfg = _settings(
        slot_capacity_overrides={"2030-05-17_18:00": 10, "2030-05-17_19:00": 12},
        blocked_dates=frozenset({"2030-05-18"}),
        blocked_slots={"2030-05-17": frozenset({"19:00"})},
    )
    # Blocked slot wins over its override
    blocked = resolve_capacity(cfg, DAY, "19:00")
    assert (blocked.capacity, blocked.blocked, blocked.reason) == (0, True, SLOT_BLOCKED)

    assert resolve_capacity(cfg, DAY, "18:00").capacity == 10
    assert resolve_capacity(cfg, DAY, "20:00").capacity == 50

    whole_day = resolve_capacity(cfg, date(2030, 5, 18), "18:00")
    assert whole_day.blocked and whole_day.reason == DATE_BLOCKED


def test_example_capacity_with_one_overlapping_booking():
    cfg = _settings()
    bookings = [("12:00", 10)]

    fits = compute_availability(cfg, DAY, "12:30", 40, bookings)
    assert fits.available is True
    assert fits.reserved_capacity == 10
    assert fits.remaining_capacity == 40
    assert fits.conflicting_count == 1
    assert fits.max_capacity == 50

    one_over = compute_availability(cfg, DAY, "12:30", 41, bookings)
    assert one_over.available is False
    assert one_over.remaining_capacity == 40


def test_example_blocked_slot_is_unavailable():
    cfg = _settings(blocked_slots={"2030-05-17": frozenset({"18:00"})})
    result = compute_availability(cfg, DAY, "18:00", 1, [])
    assert result.available is False
    assert result.blocked is True
    assert result.reason == SLOT_BLOCKED


def test_blocked_date_dominates_every_time_and_override():
    cfg = _settings(
        blocked_dates=frozenset({"2030-05-17"}),
        slot_capacity_overrides={"2030-05-17_12:00": 500},
    )
    for hhmm in ("00:00", "12:00", "18:30", "23:59"):
        for party in (1, 5, 50):
            result = compute_availability(cfg, DAY, hhmm, party, [])
            assert result.available is False
            assert result.blocked is True


def test_availability_is_monotonic_in_party_size():
    cfg = _settings(max_capacity=30)
    bookings = [("18:00", 8), ("19:00", 6), ("21:00", 10)]
    for hhmm in ("17:00", "18:30", "19:30", "20:45"):
        answers = [compute_availability(cfg, DAY, hhmm, p, bookings).available for p in range(1, 40)]
        # once unavailable, never available again for a larger party
        first_no = answers.index(False) if False in answers else len(answers)
        assert all(answers[:first_no])
        assert not any(answers[first_no:])


def test_override_of_zero_closes_slot_without_blocking():
    cfg = _settings(slot_capacity_overrides={"2030-05-17_18:00": 0})
    result = compute_availability(cfg, DAY, "18:00", 1, [])
    assert result.available is False
    assert result.blocked is False
    assert result.max_capacity == 0


def test_non_overlapping_bookings_are_not_counted():
    cfg = _settings()
    result = compute_availability(cfg, DAY, "18:00", 2, [("16:30", 20), ("19:30", 20), ("17:00", 4)])
    assert result.reserved_capacity == 4
    assert result.conflicting_count == 1


def test_party_size_must_be_positive():
    with pytest.raises(ValueError):
        compute_availability(_settings(), DAY, "18:00", 0, [])
