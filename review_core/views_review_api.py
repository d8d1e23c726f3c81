# review_core/views_review_api.py

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from review_core.models import Idea
from review_core.permissions import IsReviewer
from review_core.review.catalog import WorkflowCatalog
from review_core.review.engine import TransitionEngine, allowed_actions
from review_core.review.errors import IdeaNotFound, InvalidTransitionRequest, ReviewError, StageStateNotFound
from review_core.review.event_log import EventLog
from review_core.review.state_store import StageStateStore
from review_core.review.visibility import build_snapshot, shape_events
from review_core.serializers_review import TransitionRequestSerializer, raise_for_serializer


# ===============================================================
# OpenAPI response schemas (contract lock)
# ===============================================================

TRANSITION_RESPONSE_SCHEMA = {
    "ideaId": int,
    "workflowId": int,
    "currentStageId": int,
    "currentStageName": str,
    "stateVersion": int,
    "terminalOutcome": (str, type(None)),
    "updatedAt": str,
}

STAGE_RESPONSE_SCHEMA = {
    **TRANSITION_RESPONSE_SCHEMA,
    "allowedActions": list,
    "events": list,
}


def _require_idea(pk) -> None:
    if not Idea.objects.filter(pk=pk).exists():
        raise IdeaNotFound()


# =============================================================
# API: Execute review transition (AUTHORITATIVE)
# =============================================================

class ReviewTransitionView(APIView):
    """
    POST /api/admin/review/ideas/<pk>/transition/

    Body:
        { "action": "advance", "expectedStateVersion": 3, "comment": "..." }

    This endpoint is the ONLY API-level entry point
    that mutates review stage state.
    """

    permission_classes = [IsReviewer]

    @extend_schema(
        request=TransitionRequestSerializer,
        responses={
            200: OpenApiResponse(description="Transition applied", response=TRANSITION_RESPONSE_SCHEMA),
            400: OpenApiResponse(description="Invalid payload or structurally disallowed transition"),
            404: OpenApiResponse(description="Idea not found or not under review"),
            409: OpenApiResponse(description="State changed, refresh and retry"),
        }
    )
    def post(self, request, pk: int):
        serializer = TransitionRequestSerializer(data=request.data)
        if not serializer.is_valid():
            raise_for_serializer(serializer, InvalidTransitionRequest)

        _require_idea(pk)

        data = serializer.validated_data
        result = TransitionEngine().execute(
            idea_id=pk,
            action=data["action"],
            expected_version=data["expectedStateVersion"],
            actor=request.user,
            comment=data.get("comment"),
        )

        return Response(result.as_payload())


# =============================================================
# API: Full stage state for review tooling (READ-ONLY)
# =============================================================

class ReviewStageView(APIView):
    """
    GET /api/admin/review/ideas/<pk>/stage/
    """

    permission_classes = [IsReviewer]

    @extend_schema(
        responses={
            200: OpenApiResponse(description="Stage state with full event history", response=STAGE_RESPONSE_SCHEMA),
            404: OpenApiResponse(description="Idea not found or not under review"),
        }
    )
    def get(self, request, pk: int):
        _require_idea(pk)

        state = StageStateStore().get(pk)
        if state is None:
            raise StageStateNotFound()

        workflow = WorkflowCatalog().get_by_id(state.workflow_id)
        if workflow is None:
            raise ReviewError("Bound workflow not found")

        snapshot = build_snapshot(state, EventLog().list(pk), workflow)

        return Response(
            {
                "ideaId": state.idea_id,
                "workflowId": state.workflow_id,
                "workflowVersion": workflow.version,
                "currentStageId": state.current_stage_id,
                "currentStageName": snapshot.current_stage_name,
                "stateVersion": state.state_version,
                "terminalOutcome": state.terminal_outcome,
                "updatedAt": state.updated_at,
                "allowedActions": allowed_actions(state, workflow),
                "events": shape_events(snapshot),
            }
        )
