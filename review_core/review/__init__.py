# review_core/review/__init__.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings


# ===============================================================
# Canonical review vocabulary
# ===============================================================

ACTION_ADVANCE = "advance"
ACTION_RETURN = "return"
ACTION_HOLD = "hold"
ACTION_TERMINAL_ACCEPT = "terminal_accept"
ACTION_TERMINAL_REJECT = "terminal_reject"

TRANSITION_ACTIONS: Tuple[str, ...] = (
    ACTION_ADVANCE,
    ACTION_RETURN,
    ACTION_HOLD,
    ACTION_TERMINAL_ACCEPT,
    ACTION_TERMINAL_REJECT,
)

ACTION_CHOICES = (
    (ACTION_ADVANCE, "Advance"),
    (ACTION_RETURN, "Return"),
    (ACTION_HOLD, "Hold"),
    (ACTION_TERMINAL_ACCEPT, "Accept (terminal)"),
    (ACTION_TERMINAL_REJECT, "Reject (terminal)"),
)

OUTCOME_ACCEPTED = "accepted"
OUTCOME_REJECTED = "rejected"

TERMINAL_OUTCOMES: Tuple[str, ...] = (OUTCOME_ACCEPTED, OUTCOME_REJECTED)

OUTCOME_CHOICES = (
    (OUTCOME_ACCEPTED, "Accepted"),
    (OUTCOME_REJECTED, "Rejected"),
)

TERMINAL_ACTION_OUTCOMES: Dict[str, str] = {
    ACTION_TERMINAL_ACCEPT: OUTCOME_ACCEPTED,
    ACTION_TERMINAL_REJECT: OUTCOME_REJECTED,
}


# ===============================================================
# Roles
# ===============================================================

ROLE_ADMIN = "admin"
ROLE_EVALUATOR = "evaluator"
ROLE_SUBMITTER = "submitter"

ROLE_CHOICES = (
    (ROLE_ADMIN, "Admin"),
    (ROLE_EVALUATOR, "Evaluator"),
    (ROLE_SUBMITTER, "Submitter"),
)

REVIEWER_ROLES = frozenset({ROLE_ADMIN, ROLE_EVALUATOR})

ROLE_ALIASES: Dict[str, str] = {
    "ADMIN": ROLE_ADMIN,
    "SUPERUSER": ROLE_ADMIN,
    "EVALUATOR": ROLE_EVALUATOR,
    "REVIEWER": ROLE_EVALUATOR,
    "SUBMITTER": ROLE_SUBMITTER,
}


def normalize_role(value: Optional[str]) -> str:
    raw = str(value or "").strip().upper()
    return ROLE_ALIASES.get(raw, ROLE_SUBMITTER)


def normalize_action(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def is_terminal(outcome: Optional[str]) -> bool:
    return outcome is not None and outcome != ""


# ===============================================================
# Tunables
# ===============================================================

_DEFAULTS: Dict[str, Any] = {
    "MIN_STAGES": 2,
    "MAX_STAGES": 10,
    "STAGE_NAME_MAX_LENGTH": 80,
    "COMMENT_MAX_LENGTH": 1000,
}


def review_setting(name: str) -> Any:
    """
    Read a review tunable from settings.REVIEW_WORKFLOW, falling back to
    the built-in default.
    """
    overrides = getattr(settings, "REVIEW_WORKFLOW", None) or {}
    if name in overrides:
        return overrides[name]
    return _DEFAULTS[name]


def action_definition() -> List[Dict[str, Any]]:
    """
    Stable JSON-serializable description of the action vocabulary.
    """
    return [
        {
            "action": ACTION_ADVANCE,
            "moves_to": "next stage",
            "requires": "non-terminal, not at last stage",
        },
        {
            "action": ACTION_RETURN,
            "moves_to": "previous stage",
            "requires": "non-terminal, not at first stage",
        },
        {
            "action": ACTION_HOLD,
            "moves_to": "current stage",
            "requires": "non-terminal",
        },
        {
            "action": ACTION_TERMINAL_ACCEPT,
            "moves_to": "current stage (outcome accepted)",
            "requires": "non-terminal, at last stage",
        },
        {
            "action": ACTION_TERMINAL_REJECT,
            "moves_to": "current stage (outcome rejected)",
            "requires": "non-terminal, at last stage",
        },
    ]


__all__ = [
    "ACTION_ADVANCE",
    "ACTION_RETURN",
    "ACTION_HOLD",
    "ACTION_TERMINAL_ACCEPT",
    "ACTION_TERMINAL_REJECT",
    "TRANSITION_ACTIONS",
    "ACTION_CHOICES",
    "OUTCOME_ACCEPTED",
    "OUTCOME_REJECTED",
    "TERMINAL_OUTCOMES",
    "OUTCOME_CHOICES",
    "TERMINAL_ACTION_OUTCOMES",
    "ROLE_ADMIN",
    "ROLE_EVALUATOR",
    "ROLE_SUBMITTER",
    "ROLE_CHOICES",
    "REVIEWER_ROLES",
    "normalize_role",
    "normalize_action",
    "is_terminal",
    "review_setting",
    "action_definition",
]
