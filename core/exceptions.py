"""
Scheduling errors raised by the reservation and shift services.

Every error is an expected, recoverable condition. The DRF exception
handler in ``core.exception_handler`` maps them onto HTTP responses.
"""
from __future__ import annotations


class SchedulingError(Exception):
    """Base class for scheduling rule violations."""

    status_code = 400
    code = "scheduling_error"
    default_message = "The request violates a scheduling rule."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def extra(self) -> dict:
        return {}


class InvalidTransition(SchedulingError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, current: str, requested: str, message: str | None = None):
        self.current = current
        self.requested = requested
        super().__init__(message or f"Cannot move from '{current}' to '{requested}'.")

    def extra(self) -> dict:
        return {"current": self.current, "requested": self.requested}


class TooLateToCancel(SchedulingError):
    code = "too_late_to_cancel"
    default_message = "Reservations can only be cancelled more than 2 hours in advance."


class TooLateToModify(SchedulingError):
    code = "too_late_to_modify"
    default_message = "Reservations can only be changed more than 2 hours in advance."


class SlotBlocked(SchedulingError):
    status_code = 409
    code = "slot_blocked"

    def __init__(self, reason: str, result=None):
        self.reason = reason
        self.result = result
        super().__init__(f"This time is not available: {reason}.")

    def extra(self) -> dict:
        data = {"reason": self.reason}
        if self.result is not None:
            data["availability"] = self.result.as_dict()
        return data


class CapacityExceeded(SchedulingError):
    status_code = 409
    code = "capacity_exceeded"
    default_message = "Not enough capacity for the requested party size."

    def __init__(self, result, message: str | None = None):
        self.result = result
        super().__init__(message)

    def extra(self) -> dict:
        return {"availability": self.result.as_dict()}


class ConflictDetected(SchedulingError):
    status_code = 409
    code = "conflict_detected"
    default_message = "The employee already has a shift during this time."

    def __init__(self, conflicts, message: str | None = None):
        self.conflicts = list(conflicts)
        super().__init__(message)

    def extra(self) -> dict:
        return {"conflicts": [c.as_summary() for c in self.conflicts]}


class NotFound(SchedulingError):
    status_code = 404
    code = "not_found"
    default_message = "The requested record does not exist."


class NotPermitted(SchedulingError):
    status_code = 403
    code = "not_permitted"
    default_message = "You are not allowed to perform this action."


class ReservationsDisabled(SchedulingError):
    code = "reservations_disabled"
    default_message = "Online reservations are currently disabled."


class BookingWindowError(SchedulingError):
    code = "booking_window"
    default_message = "The requested booking is outside the allowed window."
