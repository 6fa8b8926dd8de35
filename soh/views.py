# soh/views.py
import logging
from urllib.parse import urlencode

from django.http import HttpResponseRedirect
from rest_framework import permissions, status
from rest_framework.views import APIView
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.exceptions import PermissionDenied, NotFound

from accounts.permissions import CanUploadSOH, IsSuperuserRole
from .exceptions import IngestionRejected, DeletionConflict, InvalidDeletionLink
from .notifications import build_absolute_url
from .serializers import SOHDataReferenceSerializer, SOHUploadSerializer
from .services import SOHIngestionService, SOHReferenceService, SOHDeletionService

logger = logging.getLogger(__name__)


class SOHUploadProcessAPIView(APIView):
    parser_classes = [MultiPartParser, FormParser]
    permission_classes = [permissions.IsAuthenticated, CanUploadSOH]

    def post(self, request):
        serializer = SOHUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = SOHIngestionService()
        try:
            outcome = service.ingest(
                context=request.user,
                project_id=serializer.validated_data.get('stoProjectId'),
                file_obj=serializer.validated_data.get('file'),
            )
        except IngestionRejected as e:
            return Response({"message": e.message}, status=status.HTTP_400_BAD_REQUEST)
        except (PermissionDenied, NotFound) as e:
            return Response({"message": str(e)}, status=e.status_code)
        except Exception as e:
            # The service has already logged the failure and marked the reference.
            return Response(
                {"message": "Failed to process SOH file.", "error": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        body = {
            "message": outcome.message,
            "sohDataReferenceId": str(outcome.reference.id),
            "itemsProcessed": outcome.items_processed,
        }
        if outcome.errors:
            body["errors"] = outcome.errors
        return Response(body, status=status.HTTP_200_OK)


class SOHReferenceListAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        references = SOHReferenceService().list_for_project(
            context=request.user,
            project_id=request.query_params.get('stoProjectId'),
        )
        serializer = SOHDataReferenceSerializer(references, many=True)
        return Response(serializer.data)


class SOHReferenceDetailAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole]

    def patch(self, request, pk):
        """Lock or unlock a reference. Locked references cannot be deleted."""
        is_locked = request.data.get('isLocked') if hasattr(request.data, 'get') else None
        if not isinstance(is_locked, bool):
            return Response(
                {"message": "Invalid request body: isLocked (boolean) is required."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        reference = SOHReferenceService().set_lock(context=request.user, reference_id=pk, is_locked=is_locked)
        return Response(
            {
                "message": f"SOH Data Reference {'locked' if is_locked else 'unlocked'} successfully.",
                "reference": SOHDataReferenceSerializer(reference).data,
            },
            status=status.HTTP_200_OK,
        )


class SOHReferenceDeleteRequestAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsSuperuserRole]

    def post(self, request, pk):
        try:
            outcome = SOHDeletionService().request_deletion(context=request.user, reference_id=pk)
        except DeletionConflict as e:
            return Response({"message": e.message}, status=status.HTTP_409_CONFLICT)
        return Response({"message": outcome.message}, status=status.HTTP_200_OK)


class SOHReferenceConfirmDeleteView(APIView):
    """
    Target of the emailed approval link. No session is involved: the token is
    the credential. Always answers with a redirect to a front-end status page.
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def get(self, request, pk, token):
        try:
            confirmation = SOHDeletionService().confirm_deletion(reference_id=pk, token=token)
        except InvalidDeletionLink as e:
            return self._redirect('invalid', message=e.reason)
        except Exception:
            logger.exception(f"Error confirming deletion of SOH reference {pk}.")
            return self._redirect('error')

        return self._redirect(
            'success',
            filename=confirmation.filename,
            items_deleted=confirmation.items_deleted,
        )

    def _redirect(self, outcome, **query):
        path = f"/soh/delete-status/{outcome}"
        if query:
            path = f"{path}?{urlencode(query)}"
        return HttpResponseRedirect(build_absolute_url(path))
