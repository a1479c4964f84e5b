from __future__ import annotations

import logging
from typing import Iterable

from core.exceptions import ConflictDetected
from core.intervals import Window

from .models import Shift

logger = logging.getLogger(__name__)


def find_conflicts(window: Window, candidates: Iterable[Shift]) -> list[Shift]:
    """Candidates whose scheduled window overlaps ``window``."""
    return [shift for shift in candidates if window.overlaps(shift.window)]


class ShiftConflictChecker:
    """Double-booking check for one employee on one date."""

    def candidates(self, employee_id, date, exclude_shift_id=None):
        qs = Shift.objects.filter(
            employee_id=employee_id,
            date=date,
            status__in=Shift.BLOCKING_STATUSES,
        )
        if exclude_shift_id is not None:
            qs = qs.exclude(pk=exclude_shift_id)
        return qs.order_by("start_time", "id")

    def check(self, employee_id, date, start_time, end_time, exclude_shift_id=None) -> list[Shift]:
        window = Window.between(start_time, end_time)
        return find_conflicts(window, self.candidates(employee_id, date, exclude_shift_id))

    def ensure_no_conflicts(self, employee_id, date, start_time, end_time, exclude_shift_id=None) -> None:
        conflicts = self.check(employee_id, date, start_time, end_time, exclude_shift_id)
        if conflicts:
            logger.warning(
                f"Shift {start_time}-{end_time} on {date} for employee {employee_id} "
                f"conflicts with {[c.pk for c in conflicts]}"
            )
            raise ConflictDetected(conflicts)
