# accounts/authentication.py
import json
import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from .models import User, UserRole, SOH_UPLOAD_ROLES, ADMIN_ROLES

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """
    The per-request identity handed to every view as `request.user`.

    Built once by `AuthContextJWTAuthentication`, so handlers never parse
    tokens or cookies themselves.
    """
    user: User
    selected_project_id: Optional[str] = None

    is_authenticated = True
    is_anonymous = False

    @property
    def id(self):
        return self.user.id

    @property
    def pk(self):
        return self.user.pk

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def name(self) -> str:
        return self.user.name

    @property
    def role(self) -> str:
        return self.user.role

    @property
    def is_superuser_role(self) -> bool:
        return self.user.role == UserRole.SUPERUSER

    @property
    def is_admin_role(self) -> bool:
        return self.user.role in ADMIN_ROLES

    @property
    def can_upload_soh(self) -> bool:
        return self.user.role in SOH_UPLOAD_ROLES

    def has_selected_project(self, project_id) -> bool:
        return self.selected_project_id is not None and str(self.selected_project_id) == str(project_id)


def parse_selected_project(raw: Optional[str]) -> Optional[str]:
    """
    The selection token is either a bare project id or the JSON object the
    dashboard stores (`{"id": ..., "name": ...}`).
    """
    if not raw:
        return None
    raw = raw.strip()
    if raw.startswith('{'):
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed selected-project token.")
            return None
        project_id = payload.get('id') if isinstance(payload, dict) else None
        return str(project_id) if project_id else None
    return raw


class AuthContextJWTAuthentication(JWTAuthentication):
    def authenticate(self, request):
        result = super().authenticate(request)
        if result is None:
            return None

        user, validated_token = result
        raw_selection = (
            request.META.get(settings.SELECTED_PROJECT_HEADER_NAME)
            or request.COOKIES.get(settings.SELECTED_PROJECT_COOKIE_NAME)
        )
        context = AuthContext(user=user, selected_project_id=parse_selected_project(raw_selection))
        return context, validated_token
