from rest_framework import serializers
from .models import SOHDataReference


class SOHDataReferenceSerializer(serializers.ModelSerializer):
    """
    Reference document as the dashboard consumes it. The deletion token itself
    is never exposed; only whether and until when a request is pending.
    """
    originalFilename = serializers.CharField(source='original_filename')
    uploadedBy = serializers.EmailField(source='uploaded_by')
    uploadedAt = serializers.DateTimeField(source='uploaded_at')
    rowCount = serializers.IntegerField(source='row_count')
    stoProjectId = serializers.UUIDField(source='project_id')
    contentType = serializers.CharField(source='content_type')
    errorMessage = serializers.CharField(source='error_message', allow_null=True)
    processedAt = serializers.DateTimeField(source='processed_at', allow_null=True)
    isLocked = serializers.BooleanField(source='is_locked')
    deleteApprovalTokenExpires = serializers.DateTimeField(source='delete_approval_token_expires', allow_null=True)

    class Meta:
        model = SOHDataReference
        fields = [
            'id', 'filename', 'originalFilename', 'uploadedBy', 'uploadedAt', 'rowCount', 'status',
            'stoProjectId', 'contentType', 'size', 'errorMessage', 'processedAt', 'isLocked',
            'deleteApprovalTokenExpires',
        ]
        read_only_fields = fields


class SOHUploadSerializer(serializers.Serializer):
    # Both optional here so the ingestion service can answer with its own messages.
    file = serializers.FileField(write_only=True, required=False, allow_empty_file=True)
    stoProjectId = serializers.CharField(required=False, allow_blank=True)

