from rest_framework import permissions


class IsProjectOwner(permissions.BasePermission):
    """
    Only the superuser who created a project may act on it.
    """
    message = "Forbidden: You do not have permission to update this project."

    def has_object_permission(self, request, view, obj):
        if request.user and request.user.is_authenticated:
            return obj.is_owned_by(request.user)
        return False
