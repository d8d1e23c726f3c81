# review_core/permissions.py
from __future__ import annotations

from rest_framework.permissions import BasePermission

from .models import PortalRole
from .review import REVIEWER_ROLES, ROLE_ADMIN, ROLE_SUBMITTER, normalize_role


# ------------------------------------------------------------------
# Role resolution
# ------------------------------------------------------------------
def resolve_role(user) -> str:
    """
    Coarse portal role for a user.

    Superusers are treated as admin. Users without a PortalRole row
    are submitters.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return ROLE_SUBMITTER

    if getattr(user, "is_superuser", False):
        return ROLE_ADMIN

    raw = (
        PortalRole.objects.filter(user=user)
        .values_list("role", flat=True)
        .first()
    )
    return normalize_role(raw)


def is_reviewer(role: str) -> bool:
    return normalize_role(role) in REVIEWER_ROLES


# ------------------------------------------------------------------
# Permission classes
# ------------------------------------------------------------------
class IsPortalAdmin(BasePermission):
    message = "Forbidden: admin role required"

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return resolve_role(user) == ROLE_ADMIN


class IsReviewer(BasePermission):
    """
    Admin or evaluator.
    """

    message = "Forbidden: admin or evaluator role required"

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return is_reviewer(resolve_role(user))
