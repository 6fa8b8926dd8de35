"""
Tests for POST /api/v1/soh/upload-process/.
"""
from unittest import mock

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status

from soh.models import SOHDataReference, SOHStatus, StockItem
from tests.factories import XLSX_CONTENT_TYPE, stock_rows

pytestmark = [pytest.mark.api, pytest.mark.django_db]

UPLOAD_URL = reverse('soh-upload-process')


def _post(client, upload, project_id):
    data = {}
    if upload is not None:
        data['file'] = upload
    if project_id is not None:
        data['stoProjectId'] = str(project_id)
    return client.post(UPLOAD_URL, data, format='multipart')


class TestSuccessfulUpload:
    def test_valid_and_invalid_rows(self, client_for, superuser, project, xlsx_upload, published_events):
        upload = xlsx_upload([['A1', 'Widget', 10, 'Bay 1'], ['', 'Orphan', 5, None]], name='week1.xlsx')

        response = _post(client_for(superuser), upload, project.id)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['itemsProcessed'] == 1
        assert response.data['errors'] == ["Row 3: SKU is missing or invalid."]
        assert "1 rows had issues" in response.data['message']

        reference = SOHDataReference.objects.get(pk=response.data['sohDataReferenceId'])
        assert reference.status == SOHStatus.COMPLETED
        assert reference.row_count == 1
        assert reference.original_filename == 'week1.xlsx'
        assert reference.uploaded_by == superuser.email
        assert reference.processed_at is not None
        assert reference.error_message.startswith("Completed with 1 row error(s). First few: Row 3:")

        item = reference.stock_items.get()
        assert (item.sku, item.description, item.location) == ('A1', 'Widget', 'Bay 1')
        assert item.project_id == project.id

        published_events.assert_called_once()
        assert published_events.call_args.kwargs['routing_key'] == 'soh.reference.completed'
        assert published_events.call_args.kwargs['body']['row_count'] == 1

    def test_all_rows_valid_has_no_errors_key(self, client_for, superuser, project, xlsx_upload):
        response = _post(client_for(superuser), xlsx_upload(stock_rows(25)), project.id)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['itemsProcessed'] == 25
        assert 'errors' not in response.data
        reference = SOHDataReference.objects.get(pk=response.data['sohDataReferenceId'])
        assert reference.error_message is None
        assert reference.stock_items.count() == 25

    def test_rows_are_written_in_batches(self, client_for, superuser, project, xlsx_upload, stockflow_settings):
        stockflow_settings.SOH_BATCH_SIZE = 2
        upload = xlsx_upload(stock_rows(5))

        with mock.patch.object(StockItem.objects, 'bulk_create', wraps=StockItem.objects.bulk_create) as spy:
            response = _post(client_for(superuser), upload, project.id)

        assert response.status_code == status.HTTP_200_OK
        assert [len(call.args[0]) for call in spy.call_args_list] == [2, 2, 1]
        assert StockItem.objects.filter(soh_data_reference_id=response.data['sohDataReferenceId']).count() == 5

    def test_admin_may_upload_to_selected_project(self, client_for, doc_control_admin, project, xlsx_upload):
        response = _post(client_for(doc_control_admin, selected_project=project), xlsx_upload(stock_rows(3)), project.id)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['itemsProcessed'] == 3

    def test_selection_may_come_from_the_cookie(self, client_for, doc_control_admin, project, xlsx_upload):
        client = client_for(doc_control_admin)
        client.cookies['stockflow-selected-project'] = str(project.id)

        response = _post(client, xlsx_upload(stock_rows(1)), project.id)

        assert response.status_code == status.HTTP_200_OK

    def test_publish_failure_does_not_fail_upload(self, client_for, superuser, project, xlsx_upload, published_events):
        published_events.side_effect = ConnectionError("broker down")

        response = _post(client_for(superuser), xlsx_upload(stock_rows(2)), project.id)

        assert response.status_code == status.HTTP_200_OK


class TestRejectedUpload:
    def test_missing_required_header(self, client_for, superuser, project, xlsx_upload):
        upload = xlsx_upload([['A1', 'Widget']], headers=['SKU', 'Description'])

        response = _post(client_for(superuser), upload, project.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'].startswith("Missing required header: SOH Quantity.")
        reference = SOHDataReference.objects.get()
        assert reference.status == SOHStatus.VALIDATION_ERROR
        assert reference.row_count == 0
        assert not StockItem.objects.exists()

    def test_header_only_file_is_empty(self, client_for, superuser, project, xlsx_upload):
        response = _post(client_for(superuser), xlsx_upload([]), project.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == "File is empty or has no data."
        reference = SOHDataReference.objects.get()
        assert reference.status == SOHStatus.VALIDATION_ERROR
        assert reference.error_message == "File is empty or has no data in the first sheet."

    def test_no_valid_rows(self, client_for, superuser, project, xlsx_upload):
        upload = xlsx_upload([['A1', 'Widget', -3, None], ['B2', '', 4, None]])

        response = _post(client_for(superuser), upload, project.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == (
            "Upload failed: No valid data found. "
            "Row 2: SOH Quantity is missing or invalid.; Row 3: Description is missing or invalid."
        )
        reference = SOHDataReference.objects.get()
        assert reference.status == SOHStatus.VALIDATION_ERROR
        assert reference.error_message.startswith("No valid data found. 2 rows had issues. First few errors: Row 2:")

    def test_unreadable_file_is_a_system_error(self, client_for, superuser, project):
        upload = SimpleUploadedFile('broken.xlsx', b'this is not a workbook', content_type=XLSX_CONTENT_TYPE)

        response = _post(client_for(superuser), upload, project.id)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['message'] == "Failed to process SOH file."
        reference = SOHDataReference.objects.get()
        assert reference.status == SOHStatus.SYSTEM_ERROR
        assert reference.error_message.startswith("System error during processing:")

    def test_missing_file(self, client_for, superuser, project):
        response = _post(client_for(superuser), None, project.id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == "No file provided."
        assert not SOHDataReference.objects.exists()

    def test_missing_project_id(self, client_for, superuser, xlsx_upload):
        response = _post(client_for(superuser), xlsx_upload(stock_rows(1)), None)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == "STO Project ID is required."
        assert not SOHDataReference.objects.exists()

    def test_unknown_project(self, client_for, superuser, xlsx_upload):
        response = _post(client_for(superuser), xlsx_upload(stock_rows(1)), '00000000-0000-0000-0000-000000000000')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert not SOHDataReference.objects.exists()


class TestUploadAccess:
    def test_unauthenticated(self, api_client, project, xlsx_upload):
        response = _post(api_client, xlsx_upload(stock_rows(1)), project.id)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_role_without_upload_rights(self, client_for, input_admin, project, xlsx_upload):
        response = _post(client_for(input_admin, selected_project=project), xlsx_upload(stock_rows(1)), project.id)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not SOHDataReference.objects.exists()

    def test_admin_uploading_outside_selected_project(self, client_for, doc_control_admin, project, other_project, xlsx_upload):
        client = client_for(doc_control_admin, selected_project=project)

        response = _post(client, xlsx_upload(stock_rows(1)), other_project.id)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['message'] == "Forbidden: Admins can only upload to their selected project."
        assert not SOHDataReference.objects.exists()

    def test_admin_without_selection(self, client_for, doc_control_admin, project, xlsx_upload):
        response = _post(client_for(doc_control_admin), xlsx_upload(stock_rows(1)), project.id)

        assert response.status_code == status.HTTP_403_FORBIDDEN
