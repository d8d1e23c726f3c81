from django.conf import settings
from django.db import models
from django.utils import timezone

from review_core.review import ROLE_CHOICES, ROLE_SUBMITTER


# ---------------------------------------------------------------------
# Base: adds created_at / updated_at
# ---------------------------------------------------------------------
class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


# ---------------------------------------------------------------------
# Idea (the item under review)
# ---------------------------------------------------------------------
class Idea(TimeStampedModel):
    """
    A submitted idea. The review engine only relies on its existence,
    its owner and its status field.
    """

    class Status(models.TextChoices):
        SUBMITTED = "submitted", "Submitted"
        UNDER_REVIEW = "under_review", "Under review"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="ideas",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SUBMITTED,
        db_index=True,
    )

    def __str__(self):
        return self.title

    class Meta:
        ordering = ["-created_at"]


# ---------------------------------------------------------------------
# Portal role (coarse, global)
# ---------------------------------------------------------------------
class PortalRole(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="portal_role",
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_SUBMITTER)

    def __str__(self):
        return f"{self.user} → {self.role}"


# ---------------------------------------------------------------------
# Portal settings (key/value)
# ---------------------------------------------------------------------
class PortalSetting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(default=dict, blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="portal_settings_updated",
    )
    updated_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.key
