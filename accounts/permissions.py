from rest_framework import permissions


class IsSuperuserRole(permissions.BasePermission):
    message = "Forbidden: Superuser access required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser_role)


class IsAdminRole(permissions.BasePermission):
    message = "Forbidden: Admin access required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin_role)


class CanUploadSOH(permissions.BasePermission):
    message = "Forbidden: You do not have permission to upload SOH data."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.can_upload_soh)
