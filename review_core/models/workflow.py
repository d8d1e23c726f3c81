from django.conf import settings
from django.db import models
from django.db.models import Q
from django.db.models.functions import Lower

from review_core.review.guards import ConditionalWriteGuardMixin


class ReviewWorkflow(models.Model):
    """
    A versioned, ordered list of review stages.

    At most one workflow is active at any time. Configuration changes always
    create a new version; existing versions are never edited.
    """

    version = models.PositiveIntegerField(unique=True)
    is_active = models.BooleanField(default=False, db_index=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="review_workflows_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    activated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-version"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_active"],
                condition=Q(is_active=True),
                name="review_workflow_single_active",
            ),
        ]

    def __str__(self):
        flag = " (active)" if self.is_active else ""
        return f"Workflow v{self.version}{flag}"


class ReviewStage(ConditionalWriteGuardMixin):
    GUARD_MESSAGE = "Review stages are immutable. Create a new workflow version instead."

    workflow = models.ForeignKey(
        ReviewWorkflow,
        on_delete=models.CASCADE,
        related_name="stages",
    )
    name = models.CharField(max_length=80)
    position = models.PositiveSmallIntegerField()
    is_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["workflow", "position"]
        constraints = [
            models.UniqueConstraint(
                fields=["workflow", "position"],
                name="review_stage_unique_position",
            ),
            models.UniqueConstraint(
                Lower("name"),
                "workflow",
                name="review_stage_unique_name_ci",
            ),
            models.CheckConstraint(
                condition=Q(position__gte=1),
                name="review_stage_position_positive",
            ),
        ]

    def __str__(self):
        return f"{self.position}. {self.name} (v{self.workflow.version})"
