"""
Pytest configuration and fixtures for the StockFlow test-suite.

Users are authenticated with real access tokens so every request goes through
the same authentication class as production traffic.
"""
from unittest import mock

import pytest
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import User, UserRole
from projects.models import STOProject
from soh.models import SOHDataReference, SOHStatus, StockItem

from tests.factories import DEFAULT_HEADERS, XLSX_CONTENT_TYPE, build_workbook_bytes


# =======================
# ENVIRONMENT
# =======================

@pytest.fixture(autouse=True)
def stockflow_settings(settings):
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    settings.APP_URL = 'http://stockflow.test'
    settings.ADMINISTRATOR_EMAIL = 'sysadmin@stockflow.test'
    settings.SOH_BATCH_SIZE = 490
    settings.SOH_DELETE_TOKEN_TTL_HOURS = 48
    return settings


@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def published_events():
    """Keeps tests off the broker; yields the mock standing in for publish()."""
    with mock.patch('messaging.event_publisher.rabbitmq_client.publish') as publish:
        yield publish


# =======================
# USERS AND PROJECTS
# =======================

@pytest.fixture
def superuser(db):
    return User.objects.create_user(
        email='owner@stockflow.test', password='s3cret-pass', name='Olivia Owner', role=UserRole.SUPERUSER,
    )


@pytest.fixture
def other_superuser(db):
    return User.objects.create_user(
        email='other@stockflow.test', password='s3cret-pass', name='Sam Other', role=UserRole.SUPERUSER,
    )


@pytest.fixture
def doc_control_admin(superuser):
    return User.objects.create_user(
        email='doccontrol@stockflow.test', password='s3cret-pass', name='Dana Docs', role=UserRole.ADMIN_DOC_CONTROL,
        managed_by=superuser,
    )


@pytest.fixture
def input_admin(superuser):
    return User.objects.create_user(
        email='input@stockflow.test', password='s3cret-pass', name='Ivan Input', role=UserRole.ADMIN_INPUT,
        managed_by=superuser,
    )


@pytest.fixture
def project(superuser, doc_control_admin):
    project = STOProject.objects.create(name='Warehouse A Stock Take', created_by=superuser, client_name='Acme')
    project.assigned_admins.add(doc_control_admin)
    return project


@pytest.fixture
def other_project(other_superuser):
    return STOProject.objects.create(name='Other Stock Take', created_by=other_superuser)


# =======================
# CLIENTS
# =======================

@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    """
    Returns a factory building an APIClient authenticated as `user`, with an
    optional selected project sent in the X-Selected-Project header.
    """
    def _client_for(user, selected_project=None):
        token = RefreshToken.for_user(user).access_token
        headers = {'HTTP_AUTHORIZATION': f'Bearer {token}'}
        if selected_project is not None:
            headers['HTTP_X_SELECTED_PROJECT'] = str(selected_project.id)

        client = APIClient()
        client.credentials(**headers)
        return client

    return _client_for


@pytest.fixture
def xlsx_upload():
    def _xlsx_upload(rows, headers=DEFAULT_HEADERS, name='soh.xlsx', **kwargs):
        return SimpleUploadedFile(name, build_workbook_bytes(rows, headers=headers, **kwargs), content_type=XLSX_CONTENT_TYPE)

    return _xlsx_upload


@pytest.fixture
def completed_reference(project, superuser):
    """A finished upload of three stock items in `project`."""
    reference = SOHDataReference.objects.create(
        project=project,
        filename='count-week-1.xlsx',
        original_filename='count-week-1.xlsx',
        uploaded_by=superuser.email,
        status=SOHStatus.COMPLETED,
        row_count=3,
    )
    StockItem.objects.bulk_create([
        StockItem(project=project, soh_data_reference=reference, sku=f'SKU-{n}', description=f'Item {n}', qty_on_hand=n)
        for n in range(1, 4)
    ])
    return reference
