# review_core/review/engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from review_core.models import Idea, IdeaStageState, ReviewStage, ReviewStageEvent, ReviewWorkflow
from review_core.review import (
    ACTION_ADVANCE,
    ACTION_HOLD,
    ACTION_RETURN,
    TERMINAL_ACTION_OUTCOMES,
    TRANSITION_ACTIONS,
    is_terminal,
    normalize_action,
    review_setting,
)
from review_core.review.catalog import WorkflowCatalog, ordered_stages
from review_core.review.errors import (
    IdeaNotFound,
    ConcurrencyConflict,
    InvalidTransition,
    ReviewValidationError,
    StageStateNotFound,
)
from review_core.review.event_log import EventLog
from review_core.review.state_store import StageStateStore
from review_core.review.status_sync import sync_terminal_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    idea_id: Any
    workflow_id: Any
    current_stage_id: Any
    current_stage_name: str
    state_version: int
    terminal_outcome: Optional[str]
    updated_at: datetime
    event: Optional[ReviewStageEvent] = None
    status_synced: Optional[bool] = None

    def as_payload(self) -> Dict[str, Any]:
        return {
            "ideaId": self.idea_id,
            "workflowId": self.workflow_id,
            "currentStageId": self.current_stage_id,
            "currentStageName": self.current_stage_name,
            "stateVersion": self.state_version,
            "terminalOutcome": self.terminal_outcome,
            "updatedAt": self.updated_at,
        }


def _locate(stages: List[ReviewStage], stage_id) -> int:
    for index, stage in enumerate(stages):
        if stage.pk == stage_id:
            return index
    return -1


def resolve_target(
    action: str,
    stages: List[ReviewStage],
    current_index: int,
) -> Tuple[ReviewStage, Optional[str]]:
    """
    Apply one action rule to a position in a linear workflow.

    Returns (target stage, terminal outcome or None) or raises
    InvalidTransition naming the precondition that failed.
    """
    last_index = len(stages) - 1
    current = stages[current_index]

    if action == ACTION_ADVANCE:
        if current_index >= last_index:
            raise InvalidTransition("Already at last stage; use terminal action")
        return stages[current_index + 1], None

    if action == ACTION_RETURN:
        if current_index <= 0:
            raise InvalidTransition("Cannot return from first stage")
        return stages[current_index - 1], None

    if action == ACTION_HOLD:
        return current, None

    if action in TERMINAL_ACTION_OUTCOMES:
        if current_index != last_index:
            raise InvalidTransition("Terminal action only allowed at last stage")
        return current, TERMINAL_ACTION_OUTCOMES[action]

    raise InvalidTransition(f"Unknown action '{action}'")


def allowed_actions(state: IdeaStageState, workflow: ReviewWorkflow) -> List[str]:
    """
    Actions that would pass the structural checks from the current position.
    """
    if is_terminal(state.terminal_outcome):
        return []

    stages = ordered_stages(workflow)
    index = _locate(stages, state.current_stage_id)
    if index < 0:
        return []

    out: List[str] = []
    for action in TRANSITION_ACTIONS:
        try:
            resolve_target(action, stages, index)
        except InvalidTransition:
            continue
        out.append(action)
    return out


class TransitionEngine:
    """
    The review state machine.

    Every action is checked against the workflow version the idea was bound
    to, then committed through StageStateStore.write(). The audit event and
    the idea status sync follow as separate best-effort writes.
    """

    def __init__(
        self,
        *,
        catalog: Optional[WorkflowCatalog] = None,
        store: Optional[StageStateStore] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self.catalog = catalog or WorkflowCatalog()
        self.store = store or StageStateStore()
        self.event_log = event_log or EventLog()

    def _validate_request(self, action: str, expected_version: Any, comment: Optional[str]) -> Tuple[str, int, Optional[str]]:
        details: List[Dict[str, Any]] = []

        action = normalize_action(action)
        if action not in TRANSITION_ACTIONS:
            details.append({
                "path": ["action"],
                "message": f"action must be one of: {', '.join(TRANSITION_ACTIONS)}",
            })

        if isinstance(expected_version, bool) or not isinstance(expected_version, int):
            details.append({"path": ["expectedStateVersion"], "message": "expectedStateVersion must be an integer"})
        elif expected_version <= 0:
            details.append({"path": ["expectedStateVersion"], "message": "expectedStateVersion must be greater than 0"})

        if comment is not None:
            comment = str(comment).strip()
            max_len = review_setting("COMMENT_MAX_LENGTH")
            if len(comment) > max_len:
                details.append({
                    "path": ["comment"],
                    "message": f"Comment must not exceed {max_len} characters",
                })
            comment = comment or None

        if details:
            raise ReviewValidationError(details[0]["message"], details=details)

        return action, expected_version, comment

    def execute(
        self,
        *,
        idea_id,
        action: str,
        expected_version: int,
        actor,
        comment: Optional[str] = None,
    ) -> TransitionResult:
        action, expected_version, comment = self._validate_request(action, expected_version, comment)

        # 1) Load state
        state = self.store.get(idea_id)
        if state is None:
            if not Idea.objects.filter(pk=idea_id).exists():
                raise IdeaNotFound(f"Idea {idea_id} does not exist")
            raise StageStateNotFound(f"Idea {idea_id} has not entered review")

        # 2) Optimistic concurrency check, ahead of the terminal check
        if state.state_version != expected_version:
            raise ConcurrencyConflict(expected_version=expected_version, actual_version=state.state_version)

        # 3) Terminal states are absorbing
        if is_terminal(state.terminal_outcome):
            raise InvalidTransition("Idea has already reached a terminal outcome")

        # 4) Bound workflow, never the active one
        workflow = self.catalog.get_by_id(state.workflow_id)
        if workflow is None:
            raise InvalidTransition("Bound workflow not found")

        stages = ordered_stages(workflow)
        current_index = _locate(stages, state.current_stage_id)
        if current_index < 0:
            raise InvalidTransition("Current stage not found in workflow")

        # 5) Structural rule
        target, outcome = resolve_target(action, stages, current_index)

        # 6) Conditional write; a race since step 3 surfaces as ConcurrencyConflict
        updated = self.store.write(
            idea_id,
            expected_version,
            current_stage_id=target.pk,
            terminal_outcome=outcome,
            updated_by=actor,
        )

        logger.info(
            "Idea %s: %s '%s' -> '%s' (v%s -> v%s) by %s",
            idea_id,
            action,
            stages[current_index].name,
            target.name,
            expected_version,
            updated.state_version,
            getattr(actor, "pk", actor),
        )

        # 7) Audit event (best-effort)
        event = self.event_log.append(
            idea_id=idea_id,
            workflow_id=state.workflow_id,
            from_stage_id=state.current_stage_id,
            to_stage_id=target.pk,
            action=action,
            actor=actor,
            comment=comment,
        )

        # 8) Idea status sync (best-effort)
        synced = None
        if outcome:
            synced = sync_terminal_status(idea_id=idea_id, outcome=outcome)

        return TransitionResult(
            idea_id=updated.idea_id,
            workflow_id=updated.workflow_id,
            current_stage_id=updated.current_stage_id,
            current_stage_name=target.name,
            state_version=updated.state_version,
            terminal_outcome=updated.terminal_outcome,
            updated_at=updated.updated_at,
            event=event,
            status_synced=synced,
        )
