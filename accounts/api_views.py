import logging

from rest_framework import generics, permissions, status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .models import ADMIN_ROLES, User
from .permissions import IsSuperuserRole
from .serializers import (
    AdminUserCreateSerializer,
    AssignableUserSerializer,
    CurrentUserSerializer,
    StockflowTokenObtainPairSerializer,
)

logger = logging.getLogger(__name__)


class StockflowTokenObtainPairView(TokenObtainPairView):
    """
    Email/password login. The access token carries the role claims the
    dashboard needs.
    """
    serializer_class = StockflowTokenObtainPairSerializer


class CurrentUserView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        """Retrieve the authenticated user and their selected project."""
        serializer = CurrentUserSerializer(request.user)
        return Response(serializer.data)


class AdminUserCreateView(APIView):
    """
    Superusers create the admin accounts that work on their projects. The
    account is active immediately and managed by the creating superuser.
    """
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole]

    def post(self, request):
        serializer = AdminUserCreateSerializer(data=request.data, context={'managed_by': request.user.user})
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data['email']
        if User.objects.filter(email__iexact=email).exists():
            return Response(
                {"message": "Admin user with this email already exists."},
                status=status.HTTP_409_CONFLICT,
            )

        user = serializer.save()
        logger.info(f"Admin user {user.email} ({user.role}) created by {request.user.email}.")
        return Response(
            {"message": f"Admin user {user.email} created successfully and is active.", "userId": str(user.id)},
            status=status.HTTP_201_CREATED,
        )


class AssignableUserListView(generics.ListAPIView):
    """Active admins the requesting superuser may assign to their projects."""
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole]
    serializer_class = AssignableUserSerializer

    def get_queryset(self):
        return User.objects.filter(
            managed_by_id=self.request.user.id,
            role__in=ADMIN_ROLES,
            is_active=True,
        ).order_by('name', 'email')
