from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .api_views import (
    StockflowTokenObtainPairView,
    CurrentUserView,
    AdminUserCreateView,
    AssignableUserListView,
)

urlpatterns = [
    path('token/', StockflowTokenObtainPairView.as_view(), name='token-create'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token-refresh'),
    path('me/', CurrentUserView.as_view(), name='current-user'),
    path('users/', AdminUserCreateView.as_view(), name='admin-user-create'),
    path('assignable-users/', AssignableUserListView.as_view(), name='assignable-users'),
]
