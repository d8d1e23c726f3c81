# review_core/tests/test_transition_engine.py

import pytest
from django.db import DatabaseError

from review_core.models import Idea, IdeaStageState, ReviewStageEvent
from review_core.review import (
    ACTION_ADVANCE,
    ACTION_HOLD,
    ACTION_RETURN,
    ACTION_TERMINAL_ACCEPT,
    ACTION_TERMINAL_REJECT,
)
from review_core.review.catalog import ordered_stages
from review_core.review.engine import TransitionEngine, allowed_actions
from review_core.review.errors import (
    ConcurrencyConflict,
    IdeaNotFound,
    InvalidTransition,
    ReviewValidationError,
    StageStateNotFound,
)
from review_core.review.state_store import StageStateStore


def _run(idea, action, version, actor, comment=None):
    return TransitionEngine().execute(
        idea_id=idea.pk,
        action=action,
        expected_version=version,
        actor=actor,
        comment=comment,
    )


@pytest.mark.django_db
def test_full_review_path_to_acceptance(idea, user_evaluator):
    r1 = _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    assert (r1.current_stage_name, r1.state_version) == ("Technical", 2)

    r2 = _run(idea, ACTION_ADVANCE, 2, user_evaluator, comment="Solid feasibility")
    assert (r2.current_stage_name, r2.state_version) == ("Final", 3)

    r3 = _run(idea, ACTION_TERMINAL_ACCEPT, 3, user_evaluator)
    assert r3.terminal_outcome == "accepted"
    assert r3.current_stage_name == "Final"
    assert r3.state_version == 4
    assert r3.status_synced is True

    idea.refresh_from_db()
    assert idea.status == Idea.Status.ACCEPTED

    actions = list(
        ReviewStageEvent.objects.filter(idea=idea).values_list("action", flat=True)
    )
    assert actions == [ACTION_ADVANCE, ACTION_ADVANCE, ACTION_ADVANCE, ACTION_TERMINAL_ACCEPT]

    commented = ReviewStageEvent.objects.get(idea=idea, evaluator_comment__isnull=False)
    assert commented.evaluator_comment == "Solid feasibility"


@pytest.mark.django_db
def test_reject_at_last_stage_sets_rejected(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    _run(idea, ACTION_ADVANCE, 2, user_evaluator)
    result = _run(idea, ACTION_TERMINAL_REJECT, 3, user_evaluator)

    assert result.terminal_outcome == "rejected"
    idea.refresh_from_db()
    assert idea.status == Idea.Status.REJECTED


@pytest.mark.django_db
def test_return_from_first_stage_is_invalid(idea, user_evaluator):
    with pytest.raises(InvalidTransition) as exc:
        _run(idea, ACTION_RETURN, 1, user_evaluator)

    assert "first stage" in exc.value.message
    assert StageStateStore().get(idea.pk).state_version == 1


@pytest.mark.django_db
def test_advance_from_last_stage_is_invalid(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    _run(idea, ACTION_ADVANCE, 2, user_evaluator)

    with pytest.raises(InvalidTransition) as exc:
        _run(idea, ACTION_ADVANCE, 3, user_evaluator)

    assert "last stage" in exc.value.message


@pytest.mark.django_db
def test_terminal_action_before_last_stage_is_invalid(idea, user_evaluator):
    with pytest.raises(InvalidTransition) as exc:
        _run(idea, ACTION_TERMINAL_ACCEPT, 1, user_evaluator)

    assert "last stage" in exc.value.message
    assert StageStateStore().get(idea.pk).terminal_outcome is None


@pytest.mark.django_db
def test_return_moves_back_one_stage(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    result = _run(idea, ACTION_RETURN, 2, user_evaluator)

    assert result.current_stage_name == "Screening"
    assert result.state_version == 3


@pytest.mark.django_db
def test_hold_keeps_stage_but_bumps_version_and_logs(idea, user_evaluator):
    result = _run(idea, ACTION_HOLD, 1, user_evaluator, comment="Waiting on budget")

    assert result.current_stage_name == "Screening"
    assert result.state_version == 2

    event = ReviewStageEvent.objects.filter(idea=idea).last()
    assert event.action == ACTION_HOLD
    assert event.from_stage_id == event.to_stage_id


@pytest.mark.django_db
def test_terminal_outcome_is_absorbing(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    _run(idea, ACTION_ADVANCE, 2, user_evaluator)
    _run(idea, ACTION_TERMINAL_ACCEPT, 3, user_evaluator)

    for action in (ACTION_ADVANCE, ACTION_RETURN, ACTION_HOLD, ACTION_TERMINAL_REJECT):
        with pytest.raises(InvalidTransition):
            _run(idea, action, 4, user_evaluator)

    state = StageStateStore().get(idea.pk)
    assert state.state_version == 4
    assert state.terminal_outcome == "accepted"


@pytest.mark.django_db
def test_late_advance_after_acceptance_conflicts(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    _run(idea, ACTION_ADVANCE, 2, user_evaluator)
    _run(idea, ACTION_TERMINAL_ACCEPT, 3, user_evaluator)

    with pytest.raises(ConcurrencyConflict) as exc:
        _run(idea, ACTION_ADVANCE, 3, user_evaluator)

    assert exc.value.actual_version == 4
    assert StageStateStore().get(idea.pk).terminal_outcome == "accepted"


@pytest.mark.django_db
def test_stale_version_conflicts_without_side_effects(idea, user_evaluator):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    events_before = ReviewStageEvent.objects.filter(idea=idea).count()

    with pytest.raises(ConcurrencyConflict) as exc:
        _run(idea, ACTION_ADVANCE, 1, user_evaluator)

    assert exc.value.actual_version == 2
    assert ReviewStageEvent.objects.filter(idea=idea).count() == events_before
    assert StageStateStore().get(idea.pk).current_stage.name == "Technical"


@pytest.mark.django_db
def test_two_reviewers_same_version_only_one_wins(idea, user_evaluator, user_admin):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)

    with pytest.raises(ConcurrencyConflict):
        _run(idea, ACTION_RETURN, 1, user_admin)

    assert StageStateStore().get(idea.pk).state_version == 2


@pytest.mark.django_db
def test_bound_version_is_pinned_across_activation(workflow_factory, idea_factory, user_evaluator):
    workflow_factory(["Screening", "Technical", "Final"])
    early = idea_factory()

    v2 = workflow_factory(["Intake", "Final"])
    late = idea_factory()

    # Early idea still walks three stages of v1
    assert _run(early, ACTION_ADVANCE, 1, user_evaluator).current_stage_name == "Technical"
    assert _run(early, ACTION_ADVANCE, 2, user_evaluator).current_stage_name == "Final"
    with pytest.raises(InvalidTransition):
        _run(early, ACTION_ADVANCE, 3, user_evaluator)

    late_state = StageStateStore().get(late.pk)
    assert late_state.workflow_id == v2.pk
    assert late_state.current_stage.name == "Intake"
    assert _run(late, ACTION_ADVANCE, 1, user_evaluator).current_stage_name == "Final"


@pytest.mark.django_db
def test_unknown_idea_and_unbound_idea(idea_factory, user_evaluator):
    with pytest.raises(IdeaNotFound):
        TransitionEngine().execute(idea_id=9999, action=ACTION_HOLD, expected_version=1, actor=user_evaluator)

    unbound = idea_factory()
    with pytest.raises(StageStateNotFound):
        _run(unbound, ACTION_HOLD, 1, user_evaluator)


@pytest.mark.django_db
@pytest.mark.parametrize(
    "action, version",
    [("jump", 1), (ACTION_ADVANCE, 0), (ACTION_ADVANCE, "1"), (ACTION_ADVANCE, True)],
)
def test_malformed_requests_are_rejected(idea, user_evaluator, action, version):
    with pytest.raises(ReviewValidationError):
        _run(idea, action, version, user_evaluator)

    assert StageStateStore().get(idea.pk).state_version == 1


@pytest.mark.django_db
def test_comment_over_limit_is_rejected(idea, user_evaluator, settings):
    settings.REVIEW_WORKFLOW = {"COMMENT_MAX_LENGTH": 10}
    with pytest.raises(ReviewValidationError):
        _run(idea, ACTION_HOLD, 1, user_evaluator, comment="x" * 11)


@pytest.mark.django_db
def test_event_log_failure_does_not_undo_transition(idea, user_evaluator, monkeypatch, caplog):
    def _boom(*args, **kwargs):
        raise DatabaseError("event table unavailable")

    monkeypatch.setattr(ReviewStageEvent.objects, "create", _boom)

    result = _run(idea, ACTION_ADVANCE, 1, user_evaluator)

    assert result.event is None
    assert result.state_version == 2
    assert StageStateStore().get(idea.pk).current_stage.name == "Technical"
    assert "EventLogWriteFailure [event_log_write_failure]" in caplog.text


@pytest.mark.django_db
def test_status_sync_failure_does_not_undo_transition(idea, user_evaluator, monkeypatch, caplog):
    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    _run(idea, ACTION_ADVANCE, 2, user_evaluator)

    class _LockedIdeas:
        def update(self, **kwargs):
            raise DatabaseError("ideas table locked")

    monkeypatch.setattr(Idea.objects, "filter", lambda *a, **k: _LockedIdeas())

    result = _run(idea, ACTION_TERMINAL_ACCEPT, 3, user_evaluator)

    assert result.terminal_outcome == "accepted"
    assert result.status_synced is False
    assert IdeaStageState.objects.get(pk=idea.pk).terminal_outcome == "accepted"
    assert "UpstreamWriteFailure [upstream_write_failure]" in caplog.text
    assert "ideas table locked" in caplog.text


@pytest.mark.django_db
def test_allowed_actions_follow_position(idea, workflow, user_evaluator):
    store = StageStateStore()

    assert allowed_actions(store.get(idea.pk), workflow) == [ACTION_ADVANCE, ACTION_HOLD]

    _run(idea, ACTION_ADVANCE, 1, user_evaluator)
    assert allowed_actions(store.get(idea.pk), workflow) == [ACTION_ADVANCE, ACTION_RETURN, ACTION_HOLD]

    _run(idea, ACTION_ADVANCE, 2, user_evaluator)
    assert allowed_actions(store.get(idea.pk), workflow) == [
        ACTION_RETURN,
        ACTION_HOLD,
        ACTION_TERMINAL_ACCEPT,
        ACTION_TERMINAL_REJECT,
    ]

    _run(idea, ACTION_TERMINAL_REJECT, 3, user_evaluator)
    assert allowed_actions(store.get(idea.pk), workflow) == []
