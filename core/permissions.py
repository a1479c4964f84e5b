from __future__ import annotations

from rest_framework.permissions import BasePermission, SAFE_METHODS


ROLE_MANAGER = "Manager"
ROLE_STAFF = "Staff"

STAFF_ROLES = (ROLE_MANAGER, ROLE_STAFF)


def user_in_group(user, group_name: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return user.groups.filter(name=group_name).exists()


def is_staff_member(user) -> bool:
    """Django staff, superusers, and members of the Manager/Staff groups."""
    if not user or not getattr(user, "is_authenticated", False):
        return False
    if user.is_staff or user.is_superuser:
        return True
    return user.groups.filter(name__in=STAFF_ROLES).exists()


class IsStaffMember(BasePermission):
    """Access only for restaurant staff."""

    def has_permission(self, request, view):
        return is_staff_member(request.user)


class IsStaffOrReadOnly(BasePermission):
    """Write access only for staff; read allowed to everyone."""

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_staff_member(request.user)


class IsOwnerOrStaff(BasePermission):
    """Object access for the owning user or staff."""

    def has_object_permission(self, request, view, obj):
        if is_staff_member(request.user):
            return True
        owner_id = getattr(obj, "user_id", None)
        return owner_id is not None and owner_id == getattr(request.user, "id", None)
