# review_core/review/settings_store.py
from __future__ import annotations

from typing import Any, Dict

from django.utils import timezone

from review_core.models import PortalSetting

BLIND_REVIEW_KEY = "blind_review_enabled"


def _payload(row) -> Dict[str, Any]:
    if row is None:
        return {"enabled": False, "updatedBy": None, "updatedAt": None}
    return {
        "enabled": row.value is True,
        "updatedBy": row.updated_by_id,
        "updatedAt": row.updated_at,
    }


def get_blind_review() -> Dict[str, Any]:
    """Current blind review setting. Off when never configured."""
    return _payload(PortalSetting.objects.filter(key=BLIND_REVIEW_KEY).first())


def is_blind_review_enabled() -> bool:
    return get_blind_review()["enabled"]


def set_blind_review(enabled: bool, actor=None) -> Dict[str, Any]:
    row, _created = PortalSetting.objects.update_or_create(
        key=BLIND_REVIEW_KEY,
        defaults={
            "value": bool(enabled),
            "updated_by": actor,
            "updated_at": timezone.now(),
        },
    )
    return _payload(row)
