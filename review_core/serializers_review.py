# review_core/serializers_review.py
from __future__ import annotations

from typing import Any, Dict, List, Type

from rest_framework import serializers

from review_core.review import TRANSITION_ACTIONS, review_setting
from review_core.review.errors import ReviewValidationError


def raise_for_serializer(serializer: serializers.Serializer, error_cls: Type[ReviewValidationError]) -> None:
    """
    Convert DRF field errors into a typed ReviewValidationError with
    {path, message} details.
    """
    details: List[Dict[str, Any]] = []

    def _walk(prefix: List[Any], errors: Any) -> None:
        if isinstance(errors, dict):
            for key, value in errors.items():
                path = prefix if key == "non_field_errors" else prefix + [key]
                _walk(path, value)
        elif isinstance(errors, list):
            for index, item in enumerate(errors):
                if isinstance(item, (dict, list)):
                    _walk(prefix + [index], item)
                else:
                    details.append({"path": prefix, "message": str(item)})
        else:
            details.append({"path": prefix, "message": str(errors)})

    _walk([], serializer.errors)
    message = details[0]["message"] if details else "Invalid payload"
    raise error_cls(message, details=details)


class TransitionRequestSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=TRANSITION_ACTIONS)
    expectedStateVersion = serializers.IntegerField(min_value=1)
    comment = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        trim_whitespace=True,
    )

    def validate_expectedStateVersion(self, value):
        raw = self.initial_data.get("expectedStateVersion")
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise serializers.ValidationError("expectedStateVersion must be an integer")
        return value

    def validate_comment(self, value):
        if value is None:
            return None
        max_len = review_setting("COMMENT_MAX_LENGTH")
        if len(value) > max_len:
            raise serializers.ValidationError(f"Comment must not exceed {max_len} characters")
        return value or None


class StageInputSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, trim_whitespace=True)


class WorkflowInputSerializer(serializers.Serializer):
    stages = StageInputSerializer(many=True)


class BlindReviewSettingSerializer(serializers.Serializer):
    enabled = serializers.BooleanField()

    def validate_enabled(self, value):
        if not isinstance(self.initial_data.get("enabled"), bool):
            raise serializers.ValidationError("enabled must be a boolean")
        return value
