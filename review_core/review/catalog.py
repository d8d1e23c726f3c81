# review_core/review/catalog.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Max, Prefetch
from django.utils import timezone

from review_core.models import ReviewStage, ReviewWorkflow
from review_core.review import review_setting
from review_core.review.errors import ReviewValidationError

logger = logging.getLogger(__name__)


def _stages_prefetch() -> Prefetch:
    return Prefetch("stages", queryset=ReviewStage.objects.order_by("position"))


def _coerce_name(raw: Any) -> str:
    if isinstance(raw, dict):
        raw = raw.get("name")
    if raw is None:
        return ""
    return str(raw).strip()


def validate_stage_names(stage_names: Iterable[Any]) -> List[str]:
    """
    Normalize and validate an ordered list of stage names.

    Accepts plain strings or {"name": ...} dicts. Returns trimmed names in the
    given order, or raises ReviewValidationError listing every problem found.
    """
    names = [_coerce_name(n) for n in (stage_names or [])]

    min_stages = review_setting("MIN_STAGES")
    max_stages = review_setting("MAX_STAGES")
    max_len = review_setting("STAGE_NAME_MAX_LENGTH")

    details: List[Dict[str, Any]] = []

    if len(names) < min_stages:
        details.append({
            "path": ["stages"],
            "message": f"Workflow must contain at least {min_stages} stages",
        })
    if len(names) > max_stages:
        details.append({
            "path": ["stages"],
            "message": f"Workflow must contain at most {max_stages} stages",
        })

    seen = set()
    for index, name in enumerate(names):
        if not name:
            details.append({"path": ["stages", index, "name"], "message": "Stage name is required"})
            continue
        if len(name) > max_len:
            details.append({
                "path": ["stages", index, "name"],
                "message": f"Stage name must not exceed {max_len} characters",
            })
        folded = name.casefold()
        if folded in seen:
            details.append({
                "path": ["stages", index, "name"],
                "message": "Stage names must be unique within the workflow",
            })
        seen.add(folded)

    if details:
        raise ReviewValidationError(details[0]["message"], details=details)

    return names


class WorkflowCatalog:
    """
    Versioned review workflow definitions.

    get_active() is for binding new ideas only. Anything that concerns an
    idea already in review resolves its workflow through get_by_id().
    """

    @transaction.atomic
    def create_and_activate(self, stage_names: Iterable[Any], actor=None) -> ReviewWorkflow:
        names = validate_stage_names(stage_names)

        # Serialize concurrent activations on the currently active row.
        list(ReviewWorkflow.objects.select_for_update().filter(is_active=True))

        current_max = ReviewWorkflow.objects.aggregate(v=Max("version"))["v"] or 0
        version = current_max + 1

        deactivated = ReviewWorkflow.objects.filter(is_active=True).update(is_active=False)

        workflow = ReviewWorkflow.objects.create(
            version=version,
            is_active=True,
            created_by=actor,
            activated_at=timezone.now(),
        )

        ReviewStage.objects.bulk_create([
            ReviewStage(workflow=workflow, name=name, position=index)
            for index, name in enumerate(names, start=1)
        ])

        logger.info(
            "Activated review workflow v%s with %d stages (deactivated %d)",
            version,
            len(names),
            deactivated,
        )

        return self.get_by_id(workflow.pk)

    def get_active(self) -> Optional[ReviewWorkflow]:
        return (
            ReviewWorkflow.objects.filter(is_active=True)
            .prefetch_related(_stages_prefetch())
            .first()
        )

    def get_by_id(self, workflow_id) -> Optional[ReviewWorkflow]:
        if workflow_id is None:
            return None
        return (
            ReviewWorkflow.objects.filter(pk=workflow_id)
            .prefetch_related(_stages_prefetch())
            .first()
        )

    def list_versions(self) -> List[ReviewWorkflow]:
        return list(
            ReviewWorkflow.objects.order_by("-version").prefetch_related(_stages_prefetch())
        )


def ordered_stages(workflow: ReviewWorkflow) -> List[ReviewStage]:
    return sorted(workflow.stages.all(), key=lambda s: s.position)


def stage_names(workflow: Optional[ReviewWorkflow]) -> Dict[Any, str]:
    """
    Map stage id → name for one workflow version.
    """
    if workflow is None:
        return {}
    return {stage.pk: stage.name for stage in workflow.stages.all()}


def workflow_payload(workflow: ReviewWorkflow) -> Dict[str, Any]:
    return {
        "id": workflow.pk,
        "version": workflow.version,
        "is_active": workflow.is_active,
        "created_by": workflow.created_by_id,
        "created_at": workflow.created_at,
        "activated_at": workflow.activated_at,
        "stages": [
            {
                "id": stage.pk,
                "name": stage.name,
                "position": stage.position,
                "is_enabled": stage.is_enabled,
            }
            for stage in ordered_stages(workflow)
        ],
    }
