from rest_framework.permissions import BasePermission

from .models import ROLE_ADMIN, ROLE_GUIDE, ROLE_STUDENT


class RoleBasedPermission(BasePermission):
    """
    Generic role-based permission.
    Views must define: allowed_roles = ["ROLE1", "ROLE2"]
    """

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        allowed_roles = getattr(view, "allowed_roles", [])
        user_role = str(user.role).upper()

        return user_role in allowed_roles


class IsAdmin(BasePermission):
    """
    Allows access only to the ADMIN role.
    """

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        return str(user.role).upper() == ROLE_ADMIN


class IsGuide(BasePermission):
    """
    Allows access only to guides that still have an active guide profile.
    """
    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated and str(user.role).upper() == ROLE_GUIDE):
            return False

        profile = getattr(user, "guide_profile", None)
        return profile is not None and not profile.is_deleted


class IsStudent(BasePermission):
    def has_permission(self, request, view):
        return (
            request.user
            and request.user.is_authenticated
            and str(request.user.role).upper() == ROLE_STUDENT
        )
