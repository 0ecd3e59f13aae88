"""
Role-based permission classes shared by the lending apps.
"""
from rest_framework.permissions import BasePermission


class IsLendingAdmin(BasePermission):
    """
    Permission: user must be a lending administrator.

    Administrators approve or reject requests, inspect returns and
    issue penalties.
    """

    message = 'Only lending administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_lending_admin)


class IsOwnerOrLendingAdmin(BasePermission):
    """
    Permission: object belongs to the user, or user is an administrator.

    The owning account is read from ``requested_by`` or ``account``.
    """

    message = 'You do not have permission to access this record.'

    def has_object_permission(self, request, view, obj):
        if request.user.is_lending_admin:
            return True
        owner_id = getattr(obj, 'requested_by_id', None) or getattr(obj, 'account_id', None)
        return owner_id == request.user.id
