# in projects/serializers.py

from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.models import ADMIN_ROLES
from .models import STOProject


class AssignableAdminField(serializers.PrimaryKeyRelatedField):
    """Accepts only active admins managed by the requesting superuser."""

    def get_queryset(self):
        request = self.context.get('request')
        if request is None:
            return get_user_model().objects.none()
        return get_user_model().objects.filter(
            managed_by_id=request.user.id,
            role__in=ADMIN_ROLES,
            is_active=True,
        )


class STOProjectSerializer(serializers.ModelSerializer):
    """
    Full representation of a project, as returned to its owning superuser.
    Field names are camelCase to match what the dashboard consumes.
    """
    clientName = serializers.CharField(source='client_name', required=False, allow_blank=True)
    departmentName = serializers.CharField(source='department_name', required=False, allow_blank=True)
    settingsNotes = serializers.CharField(source='settings_notes', required=False, allow_blank=True)
    createdBy = serializers.EmailField(source='created_by.email', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)
    assignedAdminUserIds = AssignableAdminField(source='assigned_admins', many=True, required=False)

    class Meta:
        model = STOProject
        fields = [
            'id', 'name', 'description', 'status', 'clientName', 'departmentName',
            'settingsNotes', 'createdBy', 'createdAt', 'updatedAt', 'assignedAdminUserIds',
        ]
        read_only_fields = ['id', 'createdBy', 'createdAt', 'updatedAt']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Project name is required and must be a non-empty string.")
        return value


class STOProjectCreateSerializer(STOProjectSerializer):
    """New projects always start in Planning, so status is not writable here."""

    class Meta(STOProjectSerializer.Meta):
        read_only_fields = STOProjectSerializer.Meta.read_only_fields + ['status']


class AssignedProjectSerializer(serializers.ModelSerializer):
    """The slimmed-down view an admin sees when picking a project to work in."""
    clientName = serializers.CharField(source='client_name', read_only=True)
    departmentName = serializers.CharField(source='department_name', read_only=True)

    class Meta:
        model = STOProject
        fields = ['id', 'name', 'status', 'clientName', 'departmentName']
        read_only_fields = fields
