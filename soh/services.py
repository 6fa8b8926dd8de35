# soh/services.py
import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare
from rest_framework.exceptions import PermissionDenied, NotFound, ValidationError

from messaging.event_publisher import soh_event_publisher
from projects.models import STOProject
from .batching import StockItemBatch
from .exceptions import IngestionRejected, DeletionConflict, InvalidDeletionLink
from .models import SOHDataReference, SOHStatus, StockItem, can_transition
from .notifications import send_deletion_approval_email
from .spreadsheet import (
    FIRST_DATA_ROW_NUMBER,
    REQUIRED_HEADERS,
    InvalidRow,
    missing_headers,
    parse_stock_row,
    read_first_sheet,
)

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = 'File is empty or has no data in the first sheet.'
SYSTEM_ERROR_DETAIL_LIMIT = 1000


def _get_project(project_id) -> STOProject:
    try:
        return STOProject.objects.select_related('created_by').get(pk=project_id)
    except (STOProject.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("STO Project not found.")


def _get_reference(reference_id) -> SOHDataReference:
    try:
        return SOHDataReference.objects.select_related('project', 'project__created_by').get(pk=reference_id)
    except (SOHDataReference.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound("SOH Data Reference not found.")


def _require_project_owner(project: STOProject, context) -> None:
    if not project.is_owned_by(context):
        raise PermissionDenied("Forbidden: You do not own the project associated with this SOH reference.")


@dataclass
class IngestionOutcome:
    reference: SOHDataReference
    items_processed: int
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        message = f"File processed. {self.items_processed} items stored for project {self.reference.project_id}."
        if self.errors:
            message += f" {len(self.errors)} rows had issues."
        return message


class SOHIngestionService:
    """
    Turns an uploaded SOH workbook into StockItems under a new
    SOHDataReference, whose final status always records the outcome.
    """

    def ingest(self, *, context, project_id: Optional[str], file_obj) -> IngestionOutcome:
        # Nothing is persisted until every precondition holds.
        if file_obj is None:
            raise IngestionRejected("No file provided.")
        if not project_id:
            raise IngestionRejected("STO Project ID is required.")
        if not context.is_superuser_role and not context.has_selected_project(project_id):
            raise PermissionDenied("Forbidden: Admins can only upload to their selected project.")
        project = _get_project(project_id)

        reference = SOHDataReference.objects.create(
            project=project,
            filename=file_obj.name,
            original_filename=file_obj.name,
            uploaded_by=context.email,
            uploaded_at=timezone.now(),
            content_type=getattr(file_obj, 'content_type', None) or '',
            size=file_obj.size or 0,
            status=SOHStatus.PROCESSING,
        )
        logger.info(f"SOH upload '{file_obj.name}' by {context.email} started as reference {reference.id}.")

        try:
            outcome = self._process(reference, project, file_obj)
        except IngestionRejected:
            raise
        except Exception as e:
            logger.exception(f"Error processing SOH upload for reference {reference.id}.")
            self._mark_system_error(reference, e)
            raise

        self._announce_completion(outcome)
        return outcome

    def _process(self, reference: SOHDataReference, project: STOProject, file_obj) -> IngestionOutcome:
        sheet = read_first_sheet(file_obj)

        if not sheet.rows:
            self._reject(reference, EMPTY_FILE_MESSAGE, response_message='File is empty or has no data.')

        missing = missing_headers(sheet.headers)
        if missing:
            message = (
                f"Missing required header: {missing[0]}. Please ensure your Excel file includes columns: "
                f"{', '.join(REQUIRED_HEADERS)}. Check for exact spelling and case."
            )
            self._reject(reference, message)

        reference.transition_to(SOHStatus.STORING)

        batch = StockItemBatch(capacity=settings.SOH_BATCH_SIZE)
        errors = []
        for index, row in enumerate(sheet.rows):
            try:
                stock_row = parse_stock_row(row, index + FIRST_DATA_ROW_NUMBER)
            except InvalidRow as e:
                errors.append(str(e))
                continue

            batch.add(StockItem(
                project=project,
                soh_data_reference=reference,
                sku=stock_row.sku,
                description=stock_row.description,
                qty_on_hand=stock_row.qty_on_hand,
                location=stock_row.location,
            ))
        batch.flush()

        valid_count = batch.items_written
        logger.info(
            f"Reference {reference.id}: {valid_count} rows stored in {batch.batches_committed} batch(es), "
            f"{len(errors)} rows skipped."
        )

        if valid_count == 0:
            reference.transition_to(
                SOHStatus.VALIDATION_ERROR,
                error_message=(
                    f"No valid data found. {len(errors)} rows had issues. "
                    f"First few errors: {'; '.join(errors[:5])}"
                ),
                row_count=0,
                processed_at=timezone.now(),
            )
            raise IngestionRejected(f"Upload failed: No valid data found. {'; '.join(errors)}")

        warning = None
        if errors:
            warning = f"Completed with {len(errors)} row error(s). First few: {'; '.join(errors[:3])}"

        reference.transition_to(
            SOHStatus.COMPLETED,
            row_count=valid_count,
            processed_at=timezone.now(),
            error_message=warning,
        )
        return IngestionOutcome(reference=reference, items_processed=valid_count, errors=errors)

    def _reject(self, reference: SOHDataReference, message: str, response_message: Optional[str] = None):
        reference.transition_to(
            SOHStatus.VALIDATION_ERROR,
            error_message=message,
            row_count=0,
            processed_at=timezone.now(),
        )
        logger.info(f"Reference {reference.id} rejected: {message}")
        raise IngestionRejected(response_message or message)

    def _mark_system_error(self, reference: SOHDataReference, error: Exception) -> None:
        detail = str(error)[:SYSTEM_ERROR_DETAIL_LIMIT]
        try:
            reference.refresh_from_db(fields=['status'])
            reference.transition_to(
                SOHStatus.SYSTEM_ERROR,
                error_message=f"System error during processing: {detail}",
                row_count=0,
                processed_at=timezone.now(),
            )
        except Exception:
            # The original error is what the caller sees; this one is only logged.
            logger.exception(f"Failed to update SOH reference {reference.id} on error.")

    def _announce_completion(self, outcome: IngestionOutcome) -> None:
        reference = outcome.reference
        try:
            soh_event_publisher.publish_reference_completed(
                reference_id=reference.id,
                project_id=reference.project_id,
                filename=reference.display_filename,
                row_count=outcome.items_processed,
                uploaded_by=reference.uploaded_by,
            )
        except Exception as e:
            logger.warning(f"Could not publish completion event for reference {reference.id}: {e}")


class SOHReferenceService:
    def list_for_project(self, *, context, project_id: Optional[str]):
        if not project_id:
            raise ValidationError("STO Project ID is required as a query parameter.")
        if not context.is_superuser_role and not context.has_selected_project(project_id):
            raise PermissionDenied("Forbidden: Admins can only fetch references for their currently selected project.")
        try:
            project_uuid = uuid.UUID(str(project_id))
        except ValueError:
            raise NotFound("STO Project not found.")
        return SOHDataReference.objects.filter(project_id=project_uuid).order_by('-uploaded_at')

    def set_lock(self, *, context, reference_id, is_locked: bool) -> SOHDataReference:
        reference = _get_reference(reference_id)
        _require_project_owner(reference.project, context)

        reference.is_locked = is_locked
        reference.save(update_fields=['is_locked', 'updated_at'])
        logger.info(f"Reference {reference.id} {'locked' if is_locked else 'unlocked'} by {context.email}.")
        return reference


@dataclass
class DeletionRequestOutcome:
    reference: SOHDataReference
    email_sent: bool

    @property
    def message(self) -> str:
        filename = self.reference.display_filename
        if self.email_sent:
            return (
                f"SOH deletion request initiated for {filename}. "
                "An approval email has been sent to the System Administrator."
            )
        return (
            f"SOH deletion request initiated for {filename}. "
            "Administrator approval email could not be sent due to server misconfiguration."
        )


@dataclass
class DeletionConfirmation:
    reference_id: uuid.UUID
    project_id: uuid.UUID
    filename: str
    items_deleted: int


class SOHDeletionService:
    """
    Two-step deletion: a superuser requests it, the system administrator
    approves it through a single-use emailed link.
    """

    def request_deletion(self, *, context, reference_id) -> DeletionRequestOutcome:
        with transaction.atomic():
            reference = _get_reference(reference_id)
            reference = SOHDataReference.objects.select_for_update().select_related('project').get(pk=reference.pk)
            project = reference.project
            _require_project_owner(project, context)

            if reference.is_locked:
                raise PermissionDenied("Forbidden: Cannot request deletion for a locked SOH reference. Please unlock it first.")

            if reference.has_pending_deletion():
                raise DeletionConflict("A deletion request for this reference is already pending administrator approval.")

            if reference.status == SOHStatus.PENDING_DELETION:
                # Left over from an approval link that expired unused.
                reference.revert_pending_deletion()

            if not can_transition(reference.status, SOHStatus.PENDING_DELETION):
                raise DeletionConflict(
                    f"SOH reference is still '{reference.status}' and cannot be deleted until processing finishes."
                )

            token = secrets.token_hex(32)
            reference.transition_to(
                SOHStatus.PENDING_DELETION,
                status_before_deletion=reference.status,
                delete_approval_token=token,
                delete_approval_token_expires=timezone.now() + timedelta(hours=settings.SOH_DELETE_TOKEN_TTL_HOURS),
            )
        logger.info(f"Deletion of reference {reference.id} requested by {context.email}.")

        email_sent = send_deletion_approval_email(
            reference=reference,
            project=project,
            requested_by=context,
            token=token,
        )
        return DeletionRequestOutcome(reference=reference, email_sent=email_sent)

    def confirm_deletion(self, *, reference_id, token: str) -> DeletionConfirmation:
        """
        Consume a confirmation token. The reference and its stock items are
        deleted in one transaction; an expired token is cleared instead.
        Raises InvalidDeletionLink with the reason code on any refusal.
        """
        failure = None
        confirmation = None

        with transaction.atomic():
            try:
                reference = SOHDataReference.objects.select_for_update().get(pk=reference_id)
            except (SOHDataReference.DoesNotExist, DjangoValidationError, ValueError):
                raise InvalidDeletionLink("Reference_not_found")

            if not reference.delete_approval_token or not constant_time_compare(reference.delete_approval_token, token):
                failure = "Token_mismatch"
            elif reference.deletion_token_expired():
                # Committed before the refusal is raised below.
                reference.revert_pending_deletion()
                failure = "Token_expired"
            elif reference.is_locked:
                failure = "Reference_locked"
            elif reference.status != SOHStatus.PENDING_DELETION:
                failure = "Not_pending_deletion"
            else:
                items_deleted, _ = StockItem.objects.filter(soh_data_reference=reference).delete()
                confirmation = DeletionConfirmation(
                    reference_id=reference.id,
                    project_id=reference.project_id,
                    filename=reference.display_filename,
                    items_deleted=items_deleted,
                )
                reference.delete()

        if failure:
            logger.warning(f"Rejected deletion confirmation for reference {reference_id}: {failure}")
            raise InvalidDeletionLink(failure)

        logger.info(
            f"Reference {confirmation.reference_id} and {confirmation.items_deleted} stock items deleted."
        )
        self._announce_deletion(confirmation)
        return confirmation

    def expire_stale_requests(self, now=None) -> int:
        """Revert every pending deletion whose approval link has expired."""
        now = now or timezone.now()
        expired_ids = SOHDataReference.objects.filter(
            status=SOHStatus.PENDING_DELETION,
            delete_approval_token_expires__lt=now,
        ).values_list('pk', flat=True)
        reverted = 0
        for reference_id in list(expired_ids):
            with transaction.atomic():
                # Re-read under lock: a confirmation may have deleted or settled it meanwhile.
                reference = SOHDataReference.objects.select_for_update().filter(pk=reference_id).first()
                if reference is None or reference.status != SOHStatus.PENDING_DELETION:
                    continue
                if not reference.deletion_token_expired(now):
                    continue
                reference.revert_pending_deletion()
            reverted += 1
            logger.info(f"Deletion request for reference {reference.id} expired; status reverted to {reference.status}.")
        return reverted

    def _announce_deletion(self, confirmation: DeletionConfirmation) -> None:
        try:
            soh_event_publisher.publish_reference_deleted(
                reference_id=confirmation.reference_id,
                project_id=confirmation.project_id,
                filename=confirmation.filename,
                items_deleted=confirmation.items_deleted,
            )
        except Exception as e:
            logger.warning(f"Could not publish deletion event for reference {confirmation.reference_id}: {e}")
