# review_core/tests/test_settings_api.py

import pytest

URL = "/api/admin/settings/blind-review/"


@pytest.mark.django_db
def test_admin_toggles_blind_review(api_client, user_admin):
    api_client.force_authenticate(user=user_admin)

    assert api_client.get(URL).json()["enabled"] is False

    resp = api_client.put(URL, {"enabled": True}, format="json")
    assert resp.status_code == 200
    assert resp.json()["enabled"] is True
    assert resp.json()["updatedBy"] == user_admin.pk

    assert api_client.get(URL).json()["enabled"] is True


@pytest.mark.django_db
@pytest.mark.parametrize("value", ["yes", 1, None])
def test_enabled_must_be_boolean(api_client, user_admin, value):
    api_client.force_authenticate(user=user_admin)

    resp = api_client.put(URL, {"enabled": value}, format="json")

    assert resp.status_code == 400
    assert api_client.get(URL).json()["enabled"] is False


@pytest.mark.django_db
def test_evaluator_cannot_change_setting(api_client, user_evaluator):
    api_client.force_authenticate(user=user_evaluator)

    assert api_client.put(URL, {"enabled": True}, format="json").status_code == 403
