# review_core/views_review_workflow.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from review_core.permissions import IsPortalAdmin
from review_core.review import action_definition
from review_core.review.catalog import WorkflowCatalog, workflow_payload
from review_core.review.errors import ReviewValidationError, WorkflowNotFound
from review_core.serializers_review import WorkflowInputSerializer, raise_for_serializer


WORKFLOW_SCHEMA = {
    "id": int,
    "version": int,
    "is_active": bool,
    "created_by": (int, type(None)),
    "created_at": str,
    "activated_at": (str, type(None)),
    "stages": list,
}


class ReviewWorkflowView(APIView):
    """
    GET /api/admin/review/workflow/  -> active workflow with ordered stages
    PUT /api/admin/review/workflow/  -> create and activate a new version

    PUT body: { "stages": [{"name": "Screening"}, {"name": "Technical"}, ...] }
    """

    permission_classes = [IsPortalAdmin]

    @extend_schema(
        responses={
            200: OpenApiResponse(description="Active workflow", response=WORKFLOW_SCHEMA),
            404: OpenApiResponse(description="No active workflow"),
        }
    )
    def get(self, request):
        workflow = WorkflowCatalog().get_active()
        if workflow is None:
            raise WorkflowNotFound()
        return Response(workflow_payload(workflow))

    @extend_schema(
        request=WorkflowInputSerializer,
        responses={
            200: OpenApiResponse(description="Newly activated workflow", response=WORKFLOW_SCHEMA),
            400: OpenApiResponse(description="Validation failed"),
        }
    )
    def put(self, request):
        serializer = WorkflowInputSerializer(data=request.data)
        if not serializer.is_valid():
            raise_for_serializer(serializer, ReviewValidationError)

        names = [s["name"] for s in serializer.validated_data["stages"]]
        workflow = WorkflowCatalog().create_and_activate(names, actor=request.user)
        return Response(workflow_payload(workflow))


class ReviewWorkflowVersionsView(APIView):
    """
    GET /api/admin/review/workflow/versions/

    Every workflow version, newest first, plus the action vocabulary.
    """

    permission_classes = [IsPortalAdmin]

    def get(self, request):
        return Response(
            {
                "actions": action_definition(),
                "versions": [workflow_payload(w) for w in WorkflowCatalog().list_versions()],
            }
        )
