# in projects/urls.py

from django.urls import path
from .views import ProjectListCreateAPIView, ProjectDetailAPIView, AssignedProjectListAPIView

urlpatterns = [
    path('projects/', ProjectListCreateAPIView.as_view(), name='project-list-create'),
    path('projects/assigned/', AssignedProjectListAPIView.as_view(), name='project-assigned'),
    path('projects/<uuid:pk>/', ProjectDetailAPIView.as_view(), name='project-detail'),
]
