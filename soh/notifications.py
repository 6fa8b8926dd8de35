# soh/notifications.py
import logging
import smtplib

from django.conf import settings
from django.core.mail import send_mail
from django.urls import reverse

logger = logging.getLogger(__name__)


def build_absolute_url(path: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}{path}"


def build_confirmation_link(reference_id, token: str) -> str:
    path = reverse('soh-reference-confirm-delete', kwargs={'pk': reference_id, 'token': token})
    return build_absolute_url(path)


def send_deletion_approval_email(*, reference, project, requested_by, token: str) -> bool:
    """
    Email the system administrator a single-use link approving the deletion.

    Returns False (after logging) when email is not configured or the send
    fails; the deletion request itself stays pending either way.
    """
    if not settings.ADMINISTRATOR_EMAIL or not settings.APP_URL:
        logger.error("ADMINISTRATOR_EMAIL or APP_URL is not configured; SOH deletion approval email not sent.")
        return False

    link = build_confirmation_link(reference.id, token)
    expires = reference.delete_approval_token_expires.strftime('%Y-%m-%d %H:%M UTC')
    filename = reference.display_filename
    requester = f"{requested_by.name} ({requested_by.email})" if requested_by.name else requested_by.email

    subject = 'StockFlow: SOH Data Reference Deletion Approval Required'
    message = (
        "Dear System Administrator,\n\n"
        f"Superuser {requester} has requested deletion of an SOH Data Reference:\n\n"
        f"  Filename:    {filename}\n"
        f"  Project:     {project.name} (ID: {project.id})\n"
        f"  Uploaded At: {reference.uploaded_at.strftime('%Y-%m-%d %H:%M UTC')}\n"
        f"  Item Count:  {reference.row_count}\n\n"
        f"This will permanently delete the reference and all {reference.row_count} associated stock items. "
        "This cannot be undone.\n\n"
        f"To approve, open this link (no login required):\n{link}\n\n"
        f"The link expires at {expires}. If you do not approve, no action is needed; "
        "the reference returns to its previous status once the link expires.\n\n"
        "The StockFlow System\n"
    )

    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, [settings.ADMINISTRATOR_EMAIL])
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send SOH deletion approval email for reference {reference.id}: {e}", exc_info=True)
        return False

    logger.info(f"Deletion approval email for reference {reference.id} sent to {settings.ADMINISTRATOR_EMAIL}.")
    return True
