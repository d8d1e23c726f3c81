# review_core/tests/test_visibility.py

from datetime import datetime, timezone

import pytest

from review_core.review import ACTION_ADVANCE, ACTION_HOLD
from review_core.review.visibility import (
    EventSnapshot,
    ProgressSnapshot,
    shape_progress,
)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
T1 = datetime(2025, 3, 2, 9, 0, tzinfo=timezone.utc)


def _snapshot(terminal_outcome=None):
    return ProgressSnapshot(
        idea_id=7,
        current_stage_id=2,
        updated_at=T1,
        terminal_outcome=terminal_outcome,
        state_version=3,
        events=(
            EventSnapshot(1, None, 1, ACTION_ADVANCE, None, 10, T0),
            EventSnapshot(2, 1, 2, ACTION_ADVANCE, "Strong market fit", 11, T1),
        ),
        stage_names={1: "Screening", 2: "Technical"},
    )


@pytest.mark.parametrize("role", ["admin", "evaluator", "REVIEWER"])
def test_reviewers_see_full_history(role):
    data = shape_progress(role, _snapshot())

    assert data["stateVersion"] == 3
    assert data["terminalOutcome"] is None
    assert data["events"][1] == {
        "id": 2,
        "fromStage": "Screening",
        "toStage": "Technical",
        "action": ACTION_ADVANCE,
        "evaluatorComment": "Strong market fit",
        "actorId": 11,
        "occurredAt": T1,
    }
    assert data["events"][0]["fromStage"] is None


def test_submitter_sees_redacted_timeline_before_decision():
    data = shape_progress("submitter", _snapshot())

    assert data == {
        "ideaId": 7,
        "currentStage": "Technical",
        "currentStageUpdatedAt": T1,
        "events": [
            {"toStage": "Screening", "occurredAt": T0},
            {"toStage": "Technical", "occurredAt": T1},
        ],
    }


def test_submitter_sees_everything_after_decision():
    data = shape_progress("submitter", _snapshot(terminal_outcome="accepted"))

    assert data["terminalOutcome"] == "accepted"
    assert data["events"][1]["evaluatorComment"] == "Strong market fit"
    assert data["events"][1]["actorId"] == 11


def test_unknown_role_is_treated_as_submitter():
    data = shape_progress("guest", _snapshot())
    assert "stateVersion" not in data
    assert all(set(e) == {"toStage", "occurredAt"} for e in data["events"])


def test_missing_stage_name_falls_back_to_unknown():
    snap = ProgressSnapshot(
        idea_id=1,
        current_stage_id=99,
        updated_at=T0,
        terminal_outcome=None,
        state_version=1,
        events=(EventSnapshot(1, None, 99, ACTION_HOLD, None, 1, T0),),
        stage_names={},
    )
    data = shape_progress("admin", snap)
    assert data["currentStage"] == "Unknown"
    assert data["events"][0]["toStage"] == "Unknown"
