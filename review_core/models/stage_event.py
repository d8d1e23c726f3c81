from django.conf import settings
from django.db import models
from django.utils import timezone

from review_core.review import ACTION_CHOICES
from review_core.review.guards import AppendOnlyMixin

from .core import Idea
from .workflow import ReviewStage, ReviewWorkflow


class ReviewStageEvent(AppendOnlyMixin):
    """
    Immutable audit log for review transitions.
    """

    idea = models.ForeignKey(
        Idea,
        on_delete=models.PROTECT,
        related_name="stage_events",
    )
    workflow = models.ForeignKey(
        ReviewWorkflow,
        on_delete=models.PROTECT,
        related_name="stage_events",
    )
    from_stage = models.ForeignKey(
        ReviewStage,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    to_stage = models.ForeignKey(
        ReviewStage,
        on_delete=models.PROTECT,
        related_name="+",
    )
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    evaluator_comment = models.TextField(null=True, blank=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="review_stage_events",
    )
    occurred_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["occurred_at", "id"]
        indexes = [
            models.Index(fields=["idea", "occurred_at"], name="review_event_idea_time_idx"),
        ]

    def __str__(self):
        return (
            f"Idea {self.idea_id}: "
            f"{self.from_stage_id} → {self.to_stage_id} "
            f"({self.action}) by {self.actor_id}"
        )
