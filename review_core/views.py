# review_core/views.py
from __future__ import annotations

from typing import Any, Dict, List

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import IdeaFilter
from .models import Idea, IdeaStageState
from .permissions import is_reviewer, resolve_role
from .review.blind_review import anonymize_idea_list
from .review.settings_store import is_blind_review_enabled
from .serializers import IdeaSerializer


# ===============================================================
# Health
# ===============================================================
class HealthCheckView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(responses={200: dict})
    def get(self, request):
        return Response({"status": "ok"})


# ===============================================================
# Ideas
# ===============================================================
def _terminal_outcomes(idea_ids: List[Any]) -> Dict[Any, Any]:
    return dict(
        IdeaStageState.objects.filter(idea_id__in=idea_ids)
        .values_list("idea_id", "terminal_outcome")
    )


class IdeaViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Ideas as seen by the review portal.

    - list: reviewers see every idea, submitters their own
    - retrieve: any authenticated user
    - create: the request user becomes the owner; binding to the active
      review workflow happens on save

    Owner identity is masked per idea while blind review is on.
    """

    serializer_class = IdeaSerializer
    filterset_class = IdeaFilter

    def get_queryset(self):
        qs = Idea.objects.select_related("stage_state").order_by("-created_at", "-id")
        if self.action == "list" and not is_reviewer(resolve_role(self.request.user)):
            qs = qs.filter(owner=self.request.user)
        return qs

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user, status=Idea.Status.SUBMITTED)

    def _mask(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        user = self.request.user
        return anonymize_idea_list(
            rows,
            viewer_role=resolve_role(user),
            viewer_id=user.pk,
            blind_review_enabled=is_blind_review_enabled(),
            terminal_outcomes=_terminal_outcomes([r["id"] for r in rows]),
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())

        page = self.paginate_queryset(queryset)
        if page is not None:
            rows = self.get_serializer(page, many=True).data
            return self.get_paginated_response(self._mask(list(rows)))

        rows = self.get_serializer(queryset, many=True).data
        return Response(self._mask(list(rows)))

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        data = self.get_serializer(instance).data
        return Response(self._mask([data])[0])
