from __future__ import annotations

from typing import Any, Dict

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers

from .models import Idea


def _stage_state_or_none(instance):
    try:
        return instance.stage_state
    except ObjectDoesNotExist:
        return None


class IdeaSerializer(serializers.ModelSerializer):
    """
    Owner and status are server-controlled: owner comes from the request
    user, status changes only through the review engine.
    """

    owner = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = Idea
        fields = (
            "id",
            "owner",
            "title",
            "description",
            "status",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "owner", "status", "created_at", "updated_at")

    def validate_title(self, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def to_representation(self, instance) -> Dict[str, Any]:
        data = super().to_representation(instance)
        state = _stage_state_or_none(instance)
        data["review"] = (
            {
                "currentStageId": state.current_stage_id,
                "terminalOutcome": state.terminal_outcome,
            }
            if state is not None
            else None
        )
        return data
