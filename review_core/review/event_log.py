# review_core/review/event_log.py
from __future__ import annotations

import logging
from typing import List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from review_core.models import ReviewStageEvent
from review_core.review import review_setting
from review_core.review.errors import EventLogWriteFailure

logger = logging.getLogger(__name__)


class EventLog:
    """
    Append-only audit trail of review transitions.

    append() runs after the state write has committed its UPDATE. A failure
    here is logged and reported as None; it never undoes the transition.
    """

    def append(
        self,
        *,
        idea_id,
        workflow_id,
        from_stage_id,
        to_stage_id,
        action: str,
        actor,
        comment: Optional[str] = None,
    ) -> Optional[ReviewStageEvent]:
        comment = (comment or "").strip() or None
        if comment is not None:
            comment = comment[: review_setting("COMMENT_MAX_LENGTH")]

        try:
            with transaction.atomic():
                return ReviewStageEvent.objects.create(
                    idea_id=idea_id,
                    workflow_id=workflow_id,
                    from_stage_id=from_stage_id,
                    to_stage_id=to_stage_id,
                    action=action,
                    evaluator_comment=comment,
                    actor=actor,
                    occurred_at=timezone.now(),
                )
        except DatabaseError:
            failure = EventLogWriteFailure(
                f"could not record {action} event for idea {idea_id} ({from_stage_id} -> {to_stage_id})"
            )
            logger.exception("%s [%s]: %s", type(failure).__name__, failure.code, failure.message)
            return None

    def list(self, idea_id) -> List[ReviewStageEvent]:
        return list(
            ReviewStageEvent.objects.filter(idea_id=idea_id).order_by("occurred_at", "id")
        )
