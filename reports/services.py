"""
Read-side scheduling statistics over reservations and shifts.

The report functions take an optional inclusive ``date_from``/``date_to``
range. Nothing here writes.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from django.db.models import Avg, Count, Sum

from reservations.models import Reservation
from staff.models import Shift


def _in_range(qs, date_from: date | None, date_to: date | None):
    if date_from:
        qs = qs.filter(date__gte=date_from)
    if date_to:
        qs = qs.filter(date__lte=date_to)
    return qs


def _hours(minutes) -> float:
    return round(float(minutes or 0) / 60, 2)


def _percent(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


def reservation_stats(date_from: date | None = None, date_to: date | None = None) -> dict:
    qs = _in_range(Reservation.objects.all(), date_from, date_to)

    counts = {row["status"]: row["n"] for row in qs.values("status").annotate(n=Count("id")).order_by()}
    by_status = {value: counts.get(value, 0) for value, _ in Reservation.STATUS_CHOICES}
    agg = qs.aggregate(total_guests=Sum("party_size"), average_party_size=Avg("party_size"))

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "total_guests": agg["total_guests"] or 0,
        "average_party_size": round(float(agg["average_party_size"] or 0), 2),
    }


def summarize_shifts(shifts: Iterable[Shift]) -> dict:
    """
    Shift counts by status and type plus hour totals.

    Scheduled hours cover every shift; actual hours only completed ones.
    Durations are derived per row (overnight-aware, net of break) so the
    sums run in Python.
    """
    by_status = {value: 0 for value, _ in Shift.STATUS_CHOICES}
    by_type = {value: 0 for value, _ in Shift.SHIFT_TYPE_CHOICES}
    scheduled_minutes = 0
    actual_minutes = 0
    overtime = Decimal("0.00")

    for shift in shifts:
        by_status[shift.status] = by_status.get(shift.status, 0) + 1
        if shift.shift_type:
            by_type[shift.shift_type] = by_type.get(shift.shift_type, 0) + 1
        scheduled_minutes += shift.scheduled_duration
        if shift.status == Shift.STATUS_COMPLETED:
            actual_minutes += shift.actual_duration or 0
        overtime += shift.overtime_hours or Decimal("0.00")

    total = sum(by_status.values())
    return {
        "total": total,
        "by_status": by_status,
        "by_type": by_type,
        "total_scheduled_hours": _hours(scheduled_minutes),
        "total_actual_hours": _hours(actual_minutes),
        "total_overtime_hours": round(float(overtime), 2),
        "average_hours_per_shift": _hours(scheduled_minutes / total) if total else 0.0,
        "completion_rate": _percent(by_status[Shift.STATUS_COMPLETED], total),
    }


def shift_summary(date_from: date | None = None, date_to: date | None = None, employee=None) -> dict:
    qs = _in_range(Shift.objects.all(), date_from, date_to)
    if employee is not None:
        qs = qs.filter(employee_id=getattr(employee, "pk", employee))
    return summarize_shifts(qs.only(
        "status", "shift_type", "start_time", "end_time",
        "actual_start_time", "actual_end_time", "break_duration", "overtime_hours",
    ))


def schedule_statistics(date_from: date | None = None, date_to: date | None = None) -> dict:
    return {
        "date_from": date_from.isoformat() if date_from else None,
        "date_to": date_to.isoformat() if date_to else None,
        "reservations": reservation_stats(date_from, date_to),
        "shifts": shift_summary(date_from, date_to),
    }
