import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response

from accounts.permissions import IsSuperuserRole, IsAdminRole
from .models import STOProject
from .serializers import STOProjectSerializer, STOProjectCreateSerializer, AssignedProjectSerializer
from .permissions import IsProjectOwner

logger = logging.getLogger(__name__)


class ProjectListCreateAPIView(generics.ListCreateAPIView):
    """
    * GET: Returns the projects created by the authenticated superuser.
    * POST: Creates a new project (status Planning) owned by the superuser.
    """
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return STOProjectCreateSerializer
        return STOProjectSerializer

    def get_queryset(self):
        return (
            STOProject.objects
            .filter(created_by_id=self.request.user.id)
            .select_related('created_by')
            .prefetch_related('assigned_admins')
        )

    def create(self, request, *args, **kwargs):
        write_serializer = self.get_serializer(data=request.data)
        write_serializer.is_valid(raise_exception=True)
        instance = write_serializer.save(created_by=request.user.user)
        logger.info(f"Project {instance.id} created by {request.user.email}.")

        read_serializer = STOProjectSerializer(instance)
        return Response(
            {
                "message": "STO Project created successfully.",
                "projectId": str(instance.id),
                "project": read_serializer.data,
            },
            status=status.HTTP_201_CREATED,
        )


class ProjectDetailAPIView(generics.RetrieveUpdateAPIView):
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole, IsProjectOwner]
    serializer_class = STOProjectSerializer
    queryset = STOProject.objects.select_related('created_by').prefetch_related('assigned_admins')
    http_method_names = ['get', 'patch', 'head', 'options']

    def partial_update(self, request, *args, **kwargs):
        if not request.data:
            return Response({"message": "No update data provided."}, status=status.HTTP_400_BAD_REQUEST)
        response = super().partial_update(request, *args, **kwargs)
        return Response(
            {"message": "STO Project updated successfully.", "projectId": str(kwargs['pk']), "project": response.data},
            status=status.HTTP_200_OK,
        )


class AssignedProjectListAPIView(generics.ListAPIView):
    """Projects the requesting admin has been assigned to, for project selection."""
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]
    serializer_class = AssignedProjectSerializer

    def get_queryset(self):
        return STOProject.objects.filter(assigned_admins__id=self.request.user.id)
