"""
Role based permission classes.

Roles are read from the authenticated user's ``role`` field only.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from clinical.models import User


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == User.ROLE_ADMIN


class IsStaff(BasePermission):
    """Any active hospital account (admin, doctor or nurse)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in {User.ROLE_ADMIN, User.ROLE_DOCTOR, User.ROLE_NURSE}


class IsDoctorOrAdmin(BasePermission):
    def has_permission(self, request, view) -> bool:
        return _role(request) in {User.ROLE_DOCTOR, User.ROLE_ADMIN}


class IsClinicalStaff(BasePermission):
    """Doctors and nurses."""
    def has_permission(self, request, view) -> bool:
        return _role(request) in User.CLINICAL_ROLES


class ReadOnlyOrAdmin(BasePermission):
    """Reads for any staff member, writes for administrators."""
    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return _role(request) is not None
        return _role(request) == User.ROLE_ADMIN
