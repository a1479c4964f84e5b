from .accounts import UserFactory, StaffUserFactory
from .reservations import ReservationFactory
from .staff import EmployeeFactory, ShiftFactory

__all__ = [
    "UserFactory",
    "StaffUserFactory",
    "ReservationFactory",
    "EmployeeFactory",
    "ShiftFactory",
]
