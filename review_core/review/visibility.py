# review_core/review/visibility.py
"""
Role-aware projections of an idea's review progress.

One canonical snapshot is built from the stage state, the event list and the
bound workflow's stage names; small pure functions project it per viewer.
Terminal outcome wins over role: once decided, submitters see everything.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from review_core.review import ROLE_ADMIN, ROLE_EVALUATOR, is_terminal, normalize_role
from review_core.review.catalog import stage_names as workflow_stage_names

UNKNOWN_STAGE = "Unknown"


@dataclass(frozen=True)
class EventSnapshot:
    id: Any
    from_stage_id: Any
    to_stage_id: Any
    action: str
    evaluator_comment: Optional[str]
    actor_id: Any
    occurred_at: datetime


@dataclass(frozen=True)
class ProgressSnapshot:
    idea_id: Any
    current_stage_id: Any
    updated_at: datetime
    terminal_outcome: Optional[str]
    state_version: int
    events: Sequence[EventSnapshot] = ()
    stage_names: Dict[Any, str] = field(default_factory=dict)

    def name_of(self, stage_id) -> str:
        return self.stage_names.get(stage_id, UNKNOWN_STAGE)

    @property
    def current_stage_name(self) -> str:
        return self.name_of(self.current_stage_id)


def build_snapshot(state, events, workflow) -> ProgressSnapshot:
    """
    `workflow` must be the version the idea is bound to.
    """
    return ProgressSnapshot(
        idea_id=state.idea_id,
        current_stage_id=state.current_stage_id,
        updated_at=state.updated_at,
        terminal_outcome=state.terminal_outcome,
        state_version=state.state_version,
        events=tuple(
            EventSnapshot(
                id=e.pk,
                from_stage_id=e.from_stage_id,
                to_stage_id=e.to_stage_id,
                action=e.action,
                evaluator_comment=e.evaluator_comment,
                actor_id=e.actor_id,
                occurred_at=e.occurred_at,
            )
            for e in events
        ),
        stage_names=workflow_stage_names(workflow),
    )


def full_event(snapshot: ProgressSnapshot, event: EventSnapshot) -> Dict[str, Any]:
    return {
        "id": event.id,
        "fromStage": snapshot.name_of(event.from_stage_id) if event.from_stage_id else None,
        "toStage": snapshot.name_of(event.to_stage_id),
        "action": event.action,
        "evaluatorComment": event.evaluator_comment,
        "actorId": event.actor_id,
        "occurredAt": event.occurred_at,
    }


def submitter_event(snapshot: ProgressSnapshot, event: EventSnapshot) -> Dict[str, Any]:
    return {
        "toStage": snapshot.name_of(event.to_stage_id),
        "occurredAt": event.occurred_at,
    }


def shape_full_progress(snapshot: ProgressSnapshot) -> Dict[str, Any]:
    return {
        "ideaId": snapshot.idea_id,
        "currentStage": snapshot.current_stage_name,
        "currentStageUpdatedAt": snapshot.updated_at,
        "terminalOutcome": snapshot.terminal_outcome,
        "stateVersion": snapshot.state_version,
        "events": [full_event(snapshot, e) for e in snapshot.events],
    }


def shape_submitter_progress(snapshot: ProgressSnapshot) -> Dict[str, Any]:
    """Stage and timestamps only: no actor, action, comment or origin stage."""
    return {
        "ideaId": snapshot.idea_id,
        "currentStage": snapshot.current_stage_name,
        "currentStageUpdatedAt": snapshot.updated_at,
        "events": [submitter_event(snapshot, e) for e in snapshot.events],
    }


def shape_progress(role: str, snapshot: ProgressSnapshot) -> Dict[str, Any]:
    """
    admin/evaluator: full. submitter: full once terminal, reduced before.
    """
    r = normalize_role(role)

    if r in {ROLE_ADMIN, ROLE_EVALUATOR}:
        return shape_full_progress(snapshot)

    if is_terminal(snapshot.terminal_outcome):
        return shape_full_progress(snapshot)

    return shape_submitter_progress(snapshot)


def shape_events(snapshot: ProgressSnapshot) -> List[Dict[str, Any]]:
    return [full_event(snapshot, e) for e in snapshot.events]
