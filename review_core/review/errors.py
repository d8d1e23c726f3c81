"""Review engine error hierarchy.

Every error a caller can act on derives from ReviewError and carries an HTTP
status plus a stable code, so views and the DRF exception handler can render
it without inspecting the message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ReviewError(Exception):
    """Base exception for all review workflow errors."""

    status_code = 500
    error = "Review error"
    code = "review_error"

    def __init__(self, message: str = "", *, details: Optional[List[Dict[str, Any]]] = None) -> None:
        self.message = message or self.error
        self.details = details or []
        super().__init__(self.message)

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": self.error,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class ReviewValidationError(ReviewError):
    """Malformed payload or an invalid stage-name set."""

    status_code = 400
    error = "Validation failed"
    code = "validation_error"


class InvalidTransitionRequest(ReviewValidationError):
    """The transition payload itself is malformed."""

    error = "Invalid transition"


class AlreadyBound(ReviewValidationError):
    """The idea already has review stage state."""

    code = "already_bound"

    def __init__(self, idea_id: Any) -> None:
        self.idea_id = idea_id
        super().__init__(f"Idea {idea_id} is already bound to a review workflow")


class NotFoundError(ReviewError):
    status_code = 404
    error = "Not found"
    code = "not_found"


class IdeaNotFound(NotFoundError):
    error = "Idea not found"
    code = "idea_not_found"


class StageStateNotFound(NotFoundError):
    """The idea exists but has never entered review."""

    error = "Idea not found"
    code = "stage_state_not_found"


class WorkflowNotFound(NotFoundError):
    error = "No active workflow"
    code = "workflow_not_found"


class ConcurrencyConflict(ReviewError):
    """The expected state version no longer matches the stored one."""

    status_code = 409
    error = "Conflict"
    code = "conflict"

    def __init__(self, expected_version: Optional[int] = None, actual_version: Optional[int] = None) -> None:
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__("State changed, refresh and retry")


class InvalidTransition(ReviewError):
    """A structurally disallowed move. The message names the failed precondition."""

    status_code = 400
    error = "Invalid transition"
    code = "invalid_transition"


class UpstreamWriteFailure(ReviewError):
    """Secondary idea status sync failed. Logged, never raised to API callers."""

    code = "upstream_write_failure"


class EventLogWriteFailure(ReviewError):
    """Audit event append failed after the state write. Logged, never raised to API callers."""

    code = "event_log_write_failure"
