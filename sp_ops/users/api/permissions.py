"""Role checks shared by the attendance and payroll APIs."""

from collections.abc import Iterable

from rest_framework.permissions import BasePermission

ROLE_ADMIN = "Admin"
ROLE_EMPLOYEE = "Employee"


def _user_in_groups(user, names: Iterable[str]) -> bool:
    groups = getattr(user, "groups", None)
    names_list = list(names)
    if not groups or not names_list:
        return False
    return groups.filter(name__in=names_list).exists()


def is_admin(user) -> bool:
    """Staff users and members of the Admin group act as admins."""
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    return bool(getattr(user, "is_staff", False)) or _user_in_groups(
        user, [ROLE_ADMIN]
    )


def employee_for(user):
    """Return the caller's Employee profile, or None."""
    return getattr(user, "employee", None) if user else None


class _RolePermission(BasePermission):
    """Base helper to gate access by role names."""

    allowed_roles: tuple[str, ...] = ()
    allow_staff: bool = True

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if self.allow_staff and getattr(user, "is_staff", False):
            return True
        return _user_in_groups(user, self.allowed_roles)


class IsAdmin(_RolePermission):
    """Allow access only to Admin group members and staff."""

    allowed_roles = (ROLE_ADMIN,)


class HasEmployeeProfile(BasePermission):
    """Self-service endpoints need an Employee profile bound to the caller."""

    message = "No employee profile is linked to this account."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        return employee_for(user) is not None
