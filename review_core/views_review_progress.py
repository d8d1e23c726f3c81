# review_core/views_review_progress.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from review_core.models import Idea
from review_core.permissions import is_reviewer, resolve_role
from review_core.review import ROLE_SUBMITTER
from review_core.review.catalog import WorkflowCatalog
from review_core.review.errors import IdeaNotFound, ReviewError, StageStateNotFound
from review_core.review.event_log import EventLog
from review_core.review.state_store import StageStateStore
from review_core.review.visibility import build_snapshot, shape_progress


class ReviewProgressView(APIView):
    """
    GET /api/ideas/<pk>/review-progress/

    Visible to the idea owner, admins and evaluators. The owner sees a
    redacted timeline until the idea reaches a terminal outcome.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        responses={
            200: OpenApiResponse(description="Review progress shaped for the viewer"),
            403: OpenApiResponse(description="Not the owner and not a reviewer"),
            404: OpenApiResponse(description="Idea not found or not under review"),
        }
    )
    def get(self, request, pk: int):
        user = request.user
        role = resolve_role(user)

        idea = Idea.objects.filter(pk=pk).only("id", "owner_id").first()
        if idea is None:
            raise IdeaNotFound()

        is_owner = idea.owner_id == user.pk
        if not is_owner and not is_reviewer(role):
            raise PermissionDenied("Forbidden")

        state = StageStateStore().get(pk)
        if state is None:
            raise StageStateNotFound()

        # Names always come from the bound version
        workflow = WorkflowCatalog().get_by_id(state.workflow_id)
        if workflow is None:
            raise ReviewError("Workflow not found")

        snapshot = build_snapshot(state, EventLog().list(pk), workflow)
        effective_role = role if is_reviewer(role) else ROLE_SUBMITTER

        return Response(shape_progress(effective_role, snapshot))
