from rest_framework import permissions


class IsExpenseAccountMember(permissions.BasePermission):
    """
    Permission: User must be an accepted member of the expense's account.
    """

    def has_object_permission(self, request, view, obj):
        # obj is an Expense instance
        return obj.account.has_member(request.user)
