# review_core/tests/conftest.py

from __future__ import annotations

import uuid
from typing import Any, Callable, List, Optional

import pytest
from django.contrib.auth import authenticate, get_user_model
from rest_framework.test import APIClient

from review_core.models import Idea, PortalRole, ReviewWorkflow
from review_core.review import ROLE_ADMIN, ROLE_EVALUATOR, ROLE_SUBMITTER
from review_core.review.catalog import WorkflowCatalog


DEFAULT_STAGES = ["Screening", "Technical", "Final"]


def _rand(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class AuthAPIClient(APIClient):
    """
    Test client that uses force_authenticate for predictable DRF auth.
    """

    _user = None

    def login(self, username: str, password: str, **kwargs) -> bool:  # type: ignore[override]
        user = authenticate(username=username, password=password)
        if not user:
            return False
        self.force_authenticate(user=user)
        self._user = user
        return True

    def logout(self) -> None:  # type: ignore[override]
        super().logout()
        self.handler._force_user = None
        self.handler._force_token = None
        self._user = None


@pytest.fixture(autouse=True)
def _disable_security_redirects(settings):
    settings.SECURE_SSL_REDIRECT = False
    settings.SESSION_COOKIE_SECURE = False
    settings.CSRF_COOKIE_SECURE = False
    settings.SECURE_HSTS_SECONDS = 0


@pytest.fixture
def api_client() -> AuthAPIClient:
    return AuthAPIClient()


def _user_with_role(username: str, role: Optional[str]):
    User = get_user_model()
    user, _created = User.objects.get_or_create(username=username)
    user.set_password("pass123")
    user.save(update_fields=["password"])
    if role is not None:
        PortalRole.objects.update_or_create(user=user, defaults={"role": role})
    return user


@pytest.fixture
def user_admin(db):
    return _user_with_role("admin", ROLE_ADMIN)


@pytest.fixture
def user_evaluator(db):
    return _user_with_role("evaluator", ROLE_EVALUATOR)


@pytest.fixture
def user_submitter(db):
    return _user_with_role("submitter", ROLE_SUBMITTER)


@pytest.fixture
def user_other(db):
    # No PortalRole row: resolves to submitter
    return _user_with_role("other", None)


@pytest.fixture
def workflow_factory(db) -> Callable[..., ReviewWorkflow]:
    def _factory(stage_names: Optional[List[Any]] = None, actor=None) -> ReviewWorkflow:
        return WorkflowCatalog().create_and_activate(
            stage_names if stage_names is not None else DEFAULT_STAGES,
            actor=actor,
        )

    return _factory


@pytest.fixture
def workflow(workflow_factory) -> ReviewWorkflow:
    return workflow_factory()


@pytest.fixture
def idea_factory(db, user_submitter) -> Callable[..., Idea]:
    """
    Creating an idea binds it to the active workflow through post_save.
    """

    def _factory(*, owner=None, title: Optional[str] = None, **extra: Any) -> Idea:
        return Idea.objects.create(
            owner=owner or user_submitter,
            title=title or _rand("Idea"),
            description=extra.pop("description", "An idea worth reviewing"),
            **extra,
        )

    return _factory


@pytest.fixture
def idea(workflow, idea_factory) -> Idea:
    return idea_factory()
