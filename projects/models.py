from django.conf import settings
from django.db import models
import uuid


class STOProject(models.Model):
    """A stock-take (STO) audit project: the tenant-scoping unit for SOH data."""

    class Status(models.TextChoices):
        PLANNING = 'Planning', 'Planning'
        ACTIVE = 'Active', 'Active'
        COUNTING = 'Counting', 'Counting'
        VERIFICATION = 'Verification', 'Verification'
        COMPLETED = 'Completed', 'Completed'
        ARCHIVED = 'Archived', 'Archived'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    status = models.CharField(max_length=32, choices=Status.choices, default=Status.PLANNING)

    client_name = models.CharField(max_length=255, blank=True, default='')
    department_name = models.CharField(max_length=255, blank=True, default='')
    settings_notes = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='created_projects',
        help_text="The superuser who created, and therefore owns, this project."
    )
    assigned_admins = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name='assigned_projects',
    )

    created_at = models.DateTimeField(auto_now_add=True, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "STO Project"
        verbose_name_plural = "STO Projects"

    def __str__(self):
        return f"{self.name} (ID: {self.id})"

    def is_owned_by(self, user) -> bool:
        return str(self.created_by_id) == str(user.id)
