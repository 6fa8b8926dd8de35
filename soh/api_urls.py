from django.urls import path
from .views import (
    SOHUploadProcessAPIView,
    SOHReferenceListAPIView,
    SOHReferenceDetailAPIView,
    SOHReferenceDeleteRequestAPIView,
    SOHReferenceConfirmDeleteView,
)

urlpatterns = [
    path('upload-process/', SOHUploadProcessAPIView.as_view(), name='soh-upload-process'),
    path('references/', SOHReferenceListAPIView.as_view(), name='soh-reference-list'),
    path('references/<uuid:pk>/', SOHReferenceDetailAPIView.as_view(), name='soh-reference-detail'),
    path('references/<uuid:pk>/delete-request/', SOHReferenceDeleteRequestAPIView.as_view(), name='soh-reference-delete-request'),
    path(
        'references/<str:pk>/confirm-delete/<str:token>/',
        SOHReferenceConfirmDeleteView.as_view(),
        name='soh-reference-confirm-delete',
    ),
]
