"""
roles.py
--------
Helpers for reading staff roles off a user.

A user is "staff" when they hold at least one StaffRole (or are a superuser).
Capability flags mirror the staff panels of the venue app.
"""

from .models import StaffRole

ALL_ROLES = frozenset(code for code, _label in StaffRole.ROLE_CHOICES)


def get_roles(user) -> set:
    if user is None or not user.is_authenticated:
        return set()
    if user.is_superuser:
        return set(ALL_ROLES)
    return set(StaffRole.objects.filter(user=user).values_list("role", flat=True))


def has_role(user, *roles) -> bool:
    """True when the user holds any of the given roles."""
    held = get_roles(user)
    return any(r in held for r in roles)


def is_staff_member(user) -> bool:
    return bool(get_roles(user))


def capabilities(user) -> dict:
    roles = get_roles(user)
    return {
        "is_staff": bool(roles),
        "roles": sorted(roles),
        "can_manage_rooms": StaffRole.BOOKING in roles,
        "can_manage_events": StaffRole.EVENTS_PROGRAMS in roles,
        "can_manage_snacks": StaffRole.SNACKS in roles,
        "can_moderate_gallery": bool(roles & {StaffRole.GALLERY_MODERATOR, StaffRole.GALLERY}),
        "can_manage_guides": StaffRole.GUIDES in roles,
        "can_manage_support": StaffRole.SUPPORT in roles,
        "can_manage_announcements": StaffRole.ANNOUNCEMENTS in roles,
    }


def grant_role(user, role):
    if role not in ALL_ROLES:
        raise ValueError(f"Unknown staff role: {role}")
    obj, _created = StaffRole.objects.get_or_create(user=user, role=role)
    return obj


def revoke_role(user, role) -> bool:
    deleted, _ = StaffRole.objects.filter(user=user, role=role).delete()
    return bool(deleted)
