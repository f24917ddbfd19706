# staff/permissions.py
#
# Purpose:
# - DRF permission classes shared by every app.
#
# Design:
# - HasStaffRole reads the role(s) a view requires from `view.staff_role`
#   (a string or tuple). A view can vary roles per action through
#   `view.staff_roles_by_action`.
# - Demo mode (settings.DEMO_MODE) lets anonymous visitors browse read-only
#   endpoints that would normally require sign-in or a staff role.
#
from django.conf import settings
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .roles import has_role


def _demo_read(request) -> bool:
    return bool(getattr(settings, "DEMO_MODE", False)) and request.method in SAFE_METHODS


class IsAuthenticatedOrDemo(BasePermission):
    """
    Default permission: signed-in users only, unless demo mode allows a read.
    """
    def has_permission(self, request, view):
        if request.user and request.user.is_authenticated:
            return True
        return _demo_read(request)


class IsAuthenticatedOrReadOnly(BasePermission):
    """
    Read: anyone
    Write: signed-in users
    """
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)


def _required_roles(view):
    by_action = getattr(view, "staff_roles_by_action", None) or {}
    action = getattr(view, "action", None)
    roles = by_action.get(action, getattr(view, "staff_role", None))
    if roles is None:
        return ()
    if isinstance(roles, str):
        return (roles,)
    return tuple(roles)


class HasStaffRole(BasePermission):
    """
    Staff only: the user must hold one of the roles the view requires.
    """
    def has_permission(self, request, view):
        if _demo_read(request):
            return True
        user = request.user
        if not (user and user.is_authenticated):
            return False
        roles = _required_roles(view)
        if not roles:
            return user.is_superuser
        return has_role(user, *roles)


class StaffRoleOrReadOnly(HasStaffRole):
    """
    Read: anyone
    Write: staff holding the view's role
    """
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)


class IsSuperuser(BasePermission):
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser)
