from rest_framework import permissions

from .security import ADMIN


class HasAdminAuthority(permissions.BasePermission):
    """
    Permission: Only accounts holding ROLE_ADMIN may manage other users.
    """

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.has_authority(ADMIN))


class HasAdminAuthorityOrReadOnly(permissions.BasePermission):
    """
    Permission: Any authenticated account can read.
    Only ROLE_ADMIN can modify.
    """

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False

        # Read permissions are allowed for any authenticated request
        if request.method in permissions.SAFE_METHODS:
            return True

        return user.has_authority(ADMIN)
