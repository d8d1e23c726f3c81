# review_core/review/state_store.py
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from review_core.models import IdeaStageState
from review_core.review.errors import (
    AlreadyBound,
    ConcurrencyConflict,
    InvalidTransition,
    StageStateNotFound,
)

logger = logging.getLogger(__name__)


class StageStateStore:
    """
    Per-idea review position with a version counter.

    write() is the only way an existing row changes: a single conditional
    UPDATE matched on state_version. There are no other locks.
    """

    def bind(self, *, idea, workflow, first_stage, actor=None) -> IdeaStageState:
        """
        Create version-1 state for an idea. Raises AlreadyBound when the idea
        already has state; the existing row is left untouched.
        """
        if IdeaStageState.objects.filter(idea_id=idea.pk).exists():
            raise AlreadyBound(idea.pk)

        try:
            with transaction.atomic():
                return IdeaStageState.objects.create(
                    idea=idea,
                    workflow=workflow,
                    current_stage=first_stage,
                    state_version=1,
                    terminal_outcome=None,
                    updated_by=actor,
                    updated_at=timezone.now(),
                )
        except IntegrityError:
            # Lost a race with another binder for the same idea.
            if IdeaStageState.objects.filter(idea_id=idea.pk).exists():
                raise AlreadyBound(idea.pk)
            raise

    def get(self, idea_id) -> Optional[IdeaStageState]:
        return (
            IdeaStageState.objects.select_related("current_stage", "workflow")
            .filter(idea_id=idea_id)
            .first()
        )

    def write(
        self,
        idea_id,
        expected_version: int,
        *,
        current_stage_id,
        terminal_outcome: Optional[str],
        updated_by=None,
    ) -> IdeaStageState:
        """
        Apply a patch only if the stored version equals expected_version,
        bumping it by exactly one.

        Raises ConcurrencyConflict when the row exists at another version,
        StageStateNotFound when there is no row at all.
        """
        updated = IdeaStageState.objects.filter(
            idea_id=idea_id,
            state_version=expected_version,
            terminal_outcome__isnull=True,
        ).update(
            current_stage_id=current_stage_id,
            terminal_outcome=terminal_outcome,
            updated_by=updated_by,
            state_version=F("state_version") + 1,
            updated_at=timezone.now(),
        )

        if updated == 0:
            row = (
                IdeaStageState.objects.filter(idea_id=idea_id)
                .values_list("state_version", "terminal_outcome")
                .first()
            )
            if row is None:
                raise StageStateNotFound(f"Idea {idea_id} has no review stage state")
            actual, outcome = row
            if outcome and actual == expected_version:
                raise InvalidTransition("Idea has already reached a terminal outcome")
            logger.info(
                "Conditional write rejected for idea %s: expected v%s, stored v%s",
                idea_id,
                expected_version,
                actual,
            )
            raise ConcurrencyConflict(expected_version=expected_version, actual_version=actual)

        return self.get(idea_id)
