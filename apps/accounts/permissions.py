from rest_framework import permissions


class IsAccountMember(permissions.BasePermission):
    """
    Permission: User must be an accepted member (or the owner) of the account.
    """

    def has_object_permission(self, request, view, obj):
        # obj is an Account instance
        return obj.has_member(request.user)


class IsAccountOwner(permissions.BasePermission):
    """
    Permission: User must be the account owner.
    """

    def has_object_permission(self, request, view, obj):
        # obj is an Account instance
        return obj.is_owner(request.user)
