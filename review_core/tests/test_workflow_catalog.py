# review_core/tests/test_workflow_catalog.py

import pytest
from django.core.exceptions import PermissionDenied

from review_core.models import ReviewStage, ReviewWorkflow
from review_core.review.catalog import (
    WorkflowCatalog,
    ordered_stages,
    stage_names,
    validate_stage_names,
    workflow_payload,
)
from review_core.review.errors import ReviewValidationError


def test_validate_trims_and_keeps_order():
    assert validate_stage_names(["  Screening ", {"name": "Final"}]) == ["Screening", "Final"]


@pytest.mark.parametrize(
    "names, fragment",
    [
        (["Only"], "at least 2"),
        ([f"S{i}" for i in range(11)], "at most 10"),
        (["Screening", "   "], "required"),
        (["Screening", "x" * 81], "must not exceed 80"),
        (["Review", "REVIEW"], "unique"),
    ],
)
def test_validate_rejects_bad_sets(names, fragment):
    with pytest.raises(ReviewValidationError) as exc:
        validate_stage_names(names)
    assert fragment in exc.value.message


def test_validate_reports_index_path_for_duplicates():
    with pytest.raises(ReviewValidationError) as exc:
        validate_stage_names(["Review", "Final", "review"])
    assert exc.value.details == [
        {"path": ["stages", 2, "name"], "message": "Stage names must be unique within the workflow"}
    ]


@pytest.mark.django_db
def test_limits_follow_settings(settings):
    settings.REVIEW_WORKFLOW = {"MIN_STAGES": 1, "MAX_STAGES": 2}
    assert validate_stage_names(["Solo"]) == ["Solo"]
    with pytest.raises(ReviewValidationError):
        validate_stage_names(["A", "B", "C"])


@pytest.mark.django_db
def test_create_and_activate_builds_first_version(user_admin):
    wf = WorkflowCatalog().create_and_activate(["Screening", "Technical", "Final"], actor=user_admin)

    assert wf.version == 1
    assert wf.is_active is True
    assert wf.created_by == user_admin
    assert [(s.position, s.name) for s in ordered_stages(wf)] == [
        (1, "Screening"),
        (2, "Technical"),
        (3, "Final"),
    ]


@pytest.mark.django_db
def test_activation_increments_version_and_keeps_single_active(workflow_factory):
    v1 = workflow_factory(["A", "B"])
    v2 = workflow_factory(["A", "B", "C"])
    v3 = workflow_factory(["X", "Y"])

    assert (v1.version, v2.version, v3.version) == (1, 2, 3)
    assert ReviewWorkflow.objects.filter(is_active=True).count() == 1

    catalog = WorkflowCatalog()
    assert catalog.get_active().pk == v3.pk
    assert [w.version for w in catalog.list_versions()] == [3, 2, 1]


@pytest.mark.django_db
def test_old_versions_remain_readable(workflow_factory):
    v1 = workflow_factory(["Screening", "Final"])
    workflow_factory(["Intake", "Panel", "Decision"])

    old = WorkflowCatalog().get_by_id(v1.pk)
    assert old.is_active is False
    assert sorted(stage_names(old).values()) == ["Final", "Screening"]


@pytest.mark.django_db
def test_failed_validation_leaves_active_workflow_untouched(workflow):
    with pytest.raises(ReviewValidationError):
        WorkflowCatalog().create_and_activate(["Only"])

    assert WorkflowCatalog().get_active().pk == workflow.pk
    assert ReviewWorkflow.objects.count() == 1


@pytest.mark.django_db
def test_get_active_and_get_by_id_return_none():
    catalog = WorkflowCatalog()
    assert catalog.get_active() is None
    assert catalog.get_by_id(999) is None
    assert catalog.get_by_id(None) is None


@pytest.mark.django_db
def test_stages_cannot_be_edited_in_place(workflow):
    stage = ordered_stages(workflow)[0]
    stage.name = "Renamed"
    with pytest.raises(PermissionDenied):
        stage.save()

    assert ReviewStage.objects.get(pk=stage.pk).name == "Screening"


@pytest.mark.django_db
def test_workflow_payload_shape(workflow):
    payload = workflow_payload(workflow)
    assert payload["version"] == 1
    assert payload["is_active"] is True
    assert [s["name"] for s in payload["stages"]] == ["Screening", "Technical", "Final"]
    assert [s["position"] for s in payload["stages"]] == [1, 2, 3]
