"""
Shift scheduling: creation and edits guarded by the conflict checker,
and the clock-in/clock-out lifecycle.

Writes for one employee are serialized by locking the employee row.
"""
from __future__ import annotations

import logging
from typing import Callable

from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidTransition, NotFound, NotPermitted
from core.intervals import normalize_time
from core.transitions import apply_transition, lock_status

from .conflicts import ShiftConflictChecker
from .models import Employee, Shift

logger = logging.getLogger(__name__)

# Fields whose change re-runs the conflict check
WINDOW_FIELDS = ("employee", "date", "start_time", "end_time")

EDITABLE_FIELDS = (
    "employee", "date", "start_time", "end_time", "shift_type", "position", "notes", "break_duration",
)


def _lock_employee(employee_id) -> Employee:
    try:
        return Employee.objects.select_for_update().get(pk=employee_id)
    except Employee.DoesNotExist:
        raise NotFound(f"Employee {employee_id} does not exist.")


class ShiftScheduler:
    def __init__(self, checker: ShiftConflictChecker | None = None, now: Callable | None = None):
        self.checker = checker or ShiftConflictChecker()
        self.now = now or timezone.now

    def _clock(self, at=None) -> str:
        if at:
            return normalize_time(at)
        return timezone.localtime(self.now()).strftime("%H:%M")

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    def create(self, *, employee, date, start_time, end_time, created_by=None, **fields) -> Shift:
        employee_id = getattr(employee, "pk", employee)
        with transaction.atomic():
            locked = _lock_employee(employee_id)
            if not locked.is_active:
                raise NotPermitted(f"Employee {locked.employee_code} is {locked.status.lower()}.")
            shift = Shift(
                employee=locked, date=date, start_time=start_time, end_time=end_time,
                created_by=created_by, **fields,
            )
            shift.full_clean()
            self.checker.ensure_no_conflicts(locked.pk, shift.date, shift.start_time, shift.end_time)
            shift.save()

        logger.info(f"Scheduled shift {shift.pk} for {locked.employee_code} on {shift.date} {shift.start_time}-{shift.end_time}")
        return shift

    def update(self, shift: Shift, **changes) -> Shift:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            employee = changes.get("employee", shift.employee)
            locked = _lock_employee(getattr(employee, "pk", employee))
            lock_status(shift)
            if shift.status not in Shift.BLOCKING_STATUSES:
                raise InvalidTransition(
                    shift.status, "update", message=f"A {shift.status} shift cannot be changed.",
                )

            snapshot = {name: getattr(shift, name) for name in changes}
            for name, value in changes.items():
                setattr(shift, name, value)
            try:
                shift.full_clean()
                if any(name in changes for name in WINDOW_FIELDS):
                    self.checker.ensure_no_conflicts(
                        locked.pk, shift.date, shift.start_time, shift.end_time, exclude_shift_id=shift.pk,
                    )
                shift.save()
            except Exception:
                for name, value in snapshot.items():
                    setattr(shift, name, value)
                raise

        logger.info(f"Updated shift {shift.pk}: {', '.join(sorted(changes))}")
        return shift

    def delete(self, shift: Shift) -> None:
        with transaction.atomic():
            lock_status(shift)
            if shift.status in (Shift.STATUS_IN_PROGRESS, Shift.STATUS_COMPLETED):
                raise InvalidTransition(
                    shift.status, "delete",
                    message="Shifts that are in progress or completed cannot be deleted.",
                )
            pk = shift.pk
            shift.delete()
        logger.info(f"Deleted shift {pk}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clock_in(self, shift: Shift, at=None) -> Shift:
        return self._transition(shift, Shift.STATUS_IN_PROGRESS, actual_start_time=self._clock(at))

    def clock_out(self, shift: Shift, at=None) -> Shift:
        return self._transition(shift, Shift.STATUS_COMPLETED, actual_end_time=self._clock(at))

    def cancel(self, shift: Shift) -> Shift:
        return self._transition(shift, Shift.STATUS_CANCELLED)

    def mark_no_show(self, shift: Shift) -> Shift:
        return self._transition(shift, Shift.STATUS_NO_SHOW)

    def _transition(self, shift: Shift, target: str, **changes) -> Shift:
        previous = apply_transition(shift, Shift.TRANSITIONS, target, **changes)
        logger.info(f"Shift {shift.pk}: {previous} -> {target}")
        return shift
