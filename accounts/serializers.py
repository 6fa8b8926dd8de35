# accounts/serializers.py
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from django.contrib.auth import get_user_model

from .models import ADMIN_ROLES, UserRole

User = get_user_model()


class StockflowTokenObtainPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)

        # The dashboard gates navigation on these claims without another round trip.
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CurrentUserSerializer(serializers.Serializer):
    """Serializes the request's AuthContext (not a User model instance)."""
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()
    selectedProjectId = serializers.CharField(source='selected_project_id', allow_null=True)


class AdminUserCreateSerializer(serializers.Serializer):
    """Input for a superuser creating one of their admin accounts."""
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(max_length=255)
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})
    role = serializers.CharField()

    def validate_role(self, value):
        if value == UserRole.SUPERUSER:
            raise serializers.ValidationError("Cannot create a superuser through this route.")
        if value not in ADMIN_ROLES:
            raise serializers.ValidationError("Invalid admin role specified.")
        return value

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            name=validated_data['name'],
            role=validated_data['role'],
            managed_by=self.context['managed_by'],
        )


class AssignableUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role']
        read_only_fields = fields
