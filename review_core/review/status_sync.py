# review_core/review/status_sync.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from django.db import DatabaseError, transaction

from review_core.models import Idea, IdeaStageState
from review_core.review.errors import UpstreamWriteFailure

logger = logging.getLogger(__name__)


OUTCOME_STATUS = {
    "accepted": Idea.Status.ACCEPTED,
    "rejected": Idea.Status.REJECTED,
}


def _write_status(idea_id, outcome: str) -> None:
    status = OUTCOME_STATUS.get(outcome)
    if status is None:
        raise UpstreamWriteFailure(f"unknown terminal outcome {outcome!r} for idea {idea_id}")

    try:
        with transaction.atomic():
            updated = Idea.objects.filter(pk=idea_id).update(status=status)
    except DatabaseError as exc:
        raise UpstreamWriteFailure(f"could not sync status {status} to idea {idea_id}") from exc

    if not updated:
        raise UpstreamWriteFailure(f"idea {idea_id} vanished before status sync")


def sync_terminal_status(*, idea_id, outcome: str) -> bool:
    """
    Best-effort copy of a terminal outcome onto Idea.status.

    Runs after the transition is committed. An UpstreamWriteFailure is
    logged with its code so reconcile() can pick the idea up later; it is
    never raised to the caller.
    """
    try:
        _write_status(idea_id, outcome)
    except UpstreamWriteFailure as failure:
        logger.error(
            "%s [%s]: %s",
            type(failure).__name__,
            failure.code,
            failure.message,
            exc_info=failure.__cause__ is not None,
        )
        return False

    return True


def find_unsynced() -> List[Dict[str, Any]]:
    """
    Terminal stage states whose idea status disagrees with the outcome.
    """
    rows = (
        IdeaStageState.objects.filter(terminal_outcome__isnull=False)
        .select_related("idea")
        .order_by("idea_id")
    )

    out: List[Dict[str, Any]] = []
    for state in rows.iterator():
        expected = OUTCOME_STATUS.get(state.terminal_outcome)
        if expected and state.idea.status != expected:
            out.append({
                "idea_id": state.idea_id,
                "terminal_outcome": state.terminal_outcome,
                "idea_status": state.idea.status,
                "expected_status": str(expected),
            })
    return out


def reconcile(*, apply: bool = False) -> Dict[str, Any]:
    """
    Report (and optionally repair) ideas left behind by failed status syncs.
    """
    mismatches = find_unsynced()
    fixed = 0

    if apply:
        for row in mismatches:
            if sync_terminal_status(idea_id=row["idea_id"], outcome=row["terminal_outcome"]):
                fixed += 1

    if mismatches:
        logger.warning(
            "Review status reconciliation: %d mismatched ideas, %d repaired",
            len(mismatches),
            fixed,
        )

    return {"mismatched": mismatches, "fixed": fixed}
