from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from review_core.review import OUTCOME_CHOICES
from review_core.review.guards import ConditionalWriteGuardMixin

from .core import Idea
from .workflow import ReviewStage, ReviewWorkflow


class IdeaStageState(ConditionalWriteGuardMixin):
    """
    Current review position of one idea.

    `workflow` is the version the idea was bound to at submission and never
    changes. Updates go through the versioned conditional write only.
    """

    GUARD_MESSAGE = (
        "Direct modification of review stage state is forbidden. "
        "Use review transition APIs."
    )

    idea = models.OneToOneField(
        Idea,
        on_delete=models.PROTECT,
        primary_key=True,
        related_name="stage_state",
    )
    workflow = models.ForeignKey(
        ReviewWorkflow,
        on_delete=models.PROTECT,
        related_name="bound_states",
    )
    current_stage = models.ForeignKey(
        ReviewStage,
        on_delete=models.PROTECT,
        related_name="current_states",
    )
    state_version = models.PositiveIntegerField(default=1)
    terminal_outcome = models.CharField(
        max_length=16,
        choices=OUTCOME_CHOICES,
        null=True,
        blank=True,
        db_index=True,
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="review_states_updated",
    )
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(state_version__gte=1),
                name="idea_stage_state_version_positive",
            ),
        ]

    def __str__(self):
        outcome = f" [{self.terminal_outcome}]" if self.terminal_outcome else ""
        return f"Idea {self.idea_id} @ stage {self.current_stage_id} v{self.state_version}{outcome}"
