# review_core/views_settings.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from review_core.permissions import IsPortalAdmin
from review_core.review.errors import ReviewValidationError
from review_core.review.settings_store import get_blind_review, set_blind_review
from review_core.serializers_review import BlindReviewSettingSerializer, raise_for_serializer


BLIND_REVIEW_SCHEMA = {
    "enabled": bool,
    "updatedBy": (int, type(None)),
    "updatedAt": (str, type(None)),
}


class BlindReviewSettingView(APIView):
    """
    GET/PUT /api/admin/settings/blind-review/
    """

    permission_classes = [IsPortalAdmin]

    @extend_schema(responses={200: OpenApiResponse(response=BLIND_REVIEW_SCHEMA)})
    def get(self, request):
        return Response(get_blind_review())

    @extend_schema(
        request=BlindReviewSettingSerializer,
        responses={
            200: OpenApiResponse(response=BLIND_REVIEW_SCHEMA),
            400: OpenApiResponse(description="Validation failed"),
        },
    )
    def put(self, request):
        serializer = BlindReviewSettingSerializer(data=request.data)
        if not serializer.is_valid():
            raise_for_serializer(serializer, ReviewValidationError)

        return Response(set_blind_review(serializer.validated_data["enabled"], actor=request.user))
