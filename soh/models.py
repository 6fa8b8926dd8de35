import uuid
from datetime import datetime
from typing import Optional

from django.db import models
from django.utils import timezone

from .exceptions import InvalidStatusTransition


class SOHStatus(models.TextChoices):
    PROCESSING = 'Processing', 'Processing'
    STORING = 'Storing', 'Storing'
    COMPLETED = 'Completed', 'Completed'
    VALIDATION_ERROR = 'ValidationError', 'Validation Error'
    SYSTEM_ERROR = 'SystemError', 'System Error'
    PENDING_DELETION = 'Pending Deletion', 'Pending Deletion'


TERMINAL_STATUSES = frozenset({SOHStatus.COMPLETED, SOHStatus.VALIDATION_ERROR, SOHStatus.SYSTEM_ERROR})

# Every status change goes through SOHDataReference.transition_to(), which consults this table.
ALLOWED_TRANSITIONS = {
    SOHStatus.PROCESSING: frozenset({SOHStatus.STORING, SOHStatus.VALIDATION_ERROR, SOHStatus.SYSTEM_ERROR}),
    SOHStatus.STORING: frozenset({SOHStatus.COMPLETED, SOHStatus.VALIDATION_ERROR, SOHStatus.SYSTEM_ERROR}),
    SOHStatus.COMPLETED: frozenset({SOHStatus.PENDING_DELETION}),
    SOHStatus.VALIDATION_ERROR: frozenset({SOHStatus.PENDING_DELETION}),
    SOHStatus.SYSTEM_ERROR: frozenset({SOHStatus.PENDING_DELETION}),
    SOHStatus.PENDING_DELETION: TERMINAL_STATUSES,
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class SOHDataReference(models.Model):
    """
    One upload attempt of a stock-on-hand spreadsheet, and its outcome.

    The row is created as soon as an upload starts so that every attempt,
    including failed ones, is auditable. `row_count` is only meaningful once
    the status is terminal.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    project = models.ForeignKey(
        'projects.STOProject',
        on_delete=models.PROTECT,
        related_name='soh_references',
    )

    filename = models.CharField(max_length=255)
    original_filename = models.CharField(max_length=255)
    uploaded_by = models.EmailField(max_length=255, help_text="Email of the uploading user.")
    uploaded_at = models.DateTimeField(default=timezone.now)
    content_type = models.CharField(max_length=255, blank=True, default='')
    size = models.BigIntegerField(default=0)

    row_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=32, choices=SOHStatus.choices, default=SOHStatus.PROCESSING, db_index=True)
    error_message = models.TextField(null=True, blank=True)
    processed_at = models.DateTimeField(null=True, blank=True)

    is_locked = models.BooleanField(default=False)

    delete_approval_token = models.CharField(max_length=128, null=True, blank=True, db_index=True)
    delete_approval_token_expires = models.DateTimeField(null=True, blank=True)
    status_before_deletion = models.CharField(max_length=32, choices=SOHStatus.choices, null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-uploaded_at']
        verbose_name = "SOH Data Reference"
        verbose_name_plural = "SOH Data References"

    def __str__(self):
        return f"{self.original_filename} [{self.status}] (ID: {self.id})"

    @property
    def display_filename(self) -> str:
        return self.original_filename or self.filename

    def transition_to(self, new_status: str, **changes) -> None:
        """Move to `new_status`, saving it together with any extra field changes."""
        if not can_transition(self.status, new_status):
            raise InvalidStatusTransition(self.status, new_status)

        self.status = new_status
        for field_name, value in changes.items():
            setattr(self, field_name, value)
        self.save(update_fields=['status', 'updated_at', *changes])

    def has_pending_deletion(self, now: Optional[datetime] = None) -> bool:
        """True while a deletion token exists and has not expired yet."""
        if not self.delete_approval_token or not self.delete_approval_token_expires:
            return False
        return self.delete_approval_token_expires > (now or timezone.now())

    def deletion_token_expired(self, now: Optional[datetime] = None) -> bool:
        if not self.delete_approval_token_expires:
            return False
        return self.delete_approval_token_expires < (now or timezone.now())

    def revert_pending_deletion(self) -> None:
        """Clear the deletion token and restore the status held before the request."""
        self.transition_to(
            self.status_before_deletion or SOHStatus.COMPLETED,
            delete_approval_token=None,
            delete_approval_token_expires=None,
            status_before_deletion=None,
        )


class StockItem(models.Model):
    """One normalized stock-on-hand row. Created in bulk, deleted with its reference."""
    project = models.ForeignKey(
        'projects.STOProject',
        on_delete=models.PROTECT,
        related_name='stock_items',
    )
    soh_data_reference = models.ForeignKey(
        SOHDataReference,
        on_delete=models.CASCADE,
        related_name='stock_items',
    )

    sku = models.CharField(max_length=255, db_index=True)
    description = models.TextField()
    qty_on_hand = models.DecimalField(max_digits=18, decimal_places=4)
    location = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.sku} x {self.qty_on_hand}"
