# review_core/review/binding.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from django.db import transaction

from review_core.models import IdeaStageState, ReviewStageEvent
from review_core.review import ACTION_ADVANCE
from review_core.review.catalog import WorkflowCatalog, ordered_stages
from review_core.review.errors import WorkflowNotFound, ReviewValidationError
from review_core.review.event_log import EventLog
from review_core.review.state_store import StageStateStore

logger = logging.getLogger(__name__)


@transaction.atomic
def bind_idea_to_active_workflow(
    idea,
    actor=None,
    *,
    catalog: Optional[WorkflowCatalog] = None,
    store: Optional[StageStateStore] = None,
    event_log: Optional[EventLog] = None,
) -> Tuple[IdeaStageState, Optional[ReviewStageEvent]]:
    """
    Bind a newly submitted idea to the first stage of the active workflow
    and record the initial entry event (from_stage=None).

    The binding is permanent: later activations never move this idea to
    another workflow version.
    """
    catalog = catalog or WorkflowCatalog()
    store = store or StageStateStore()
    event_log = event_log or EventLog()
    actor = actor or idea.owner

    workflow = catalog.get_active()
    if workflow is None:
        raise WorkflowNotFound("No active review workflow configured")

    stages = ordered_stages(workflow)
    if not stages:
        raise ReviewValidationError("Active workflow has no stages")

    first_stage = stages[0]

    state = store.bind(
        idea=idea,
        workflow=workflow,
        first_stage=first_stage,
        actor=actor,
    )

    event = event_log.append(
        idea_id=idea.pk,
        workflow_id=workflow.pk,
        from_stage_id=None,
        to_stage_id=first_stage.pk,
        action=ACTION_ADVANCE,
        actor=actor,
    )

    logger.info(
        "Idea %s bound to review workflow v%s at stage '%s'",
        idea.pk,
        workflow.version,
        first_stage.name,
    )

    return state, event
