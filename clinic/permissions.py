"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsStudentRole(BasePermission):
    """Allow access only to users with the student role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "student"


class IsDoctorRole(BasePermission):
    """Allow access only to doctors and nurses."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "doctor"


class IsAdminRole(BasePermission):
    """Allow access only to users with an administrative role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin"


class IsChatParticipant(BasePermission):
    """Students and doctors may chat; administrators may not."""
    def has_permission(self, request, view) -> bool:
        return _role(request) in {"student", "doctor"}
