# review_core/review/blind_review.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from review_core.review import ROLE_ADMIN, is_terminal, normalize_role

ANONYMOUS_USER_ID = "anonymous"
ANONYMOUS_DISPLAY_NAME = "Anonymous Submitter"

OWNER_FIELD = "owner"
DISPLAY_NAME_FIELD = "submitter_display_name"


def should_anonymize(
    *,
    blind_review_enabled: bool,
    viewer_role: str,
    viewer_id,
    owner_id,
    terminal_outcome: Optional[str],
) -> bool:
    """
    Hide the owner when blind review is on, the viewer is neither an admin
    nor the owner, and the idea has not reached a terminal outcome.
    """
    if not blind_review_enabled:
        return False
    if normalize_role(viewer_role) == ROLE_ADMIN:
        return False
    if viewer_id is not None and str(viewer_id) == str(owner_id):
        return False
    if is_terminal(terminal_outcome):
        return False
    return True


def anonymize_idea(data: Dict[str, Any], mask: bool) -> Dict[str, Any]:
    if not mask:
        return data

    out = dict(data)
    out[OWNER_FIELD] = ANONYMOUS_USER_ID
    out[DISPLAY_NAME_FIELD] = ANONYMOUS_DISPLAY_NAME
    return out


def anonymize_idea_list(
    ideas: Iterable[Dict[str, Any]],
    *,
    viewer_role: str,
    viewer_id,
    blind_review_enabled: bool,
    terminal_outcomes: Optional[Mapping[Any, Optional[str]]] = None,
) -> List[Dict[str, Any]]:
    """
    Evaluate masking per idea: one page can mix masked and revealed entries.

    terminal_outcomes maps idea id to its stage state's terminal outcome.
    Ideas missing from the map count as non-terminal.
    """
    terminal_outcomes = terminal_outcomes or {}
    out: List[Dict[str, Any]] = []

    for idea in ideas:
        mask = should_anonymize(
            blind_review_enabled=blind_review_enabled,
            viewer_role=viewer_role,
            viewer_id=viewer_id,
            owner_id=idea.get(OWNER_FIELD),
            terminal_outcome=terminal_outcomes.get(idea.get("id")),
        )
        out.append(anonymize_idea(idea, mask))

    return out
