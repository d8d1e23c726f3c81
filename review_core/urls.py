# review_core/urls.py

from django.urls import path, include
from rest_framework.routers import DefaultRouter

# -------------------------------------------------
# Core API
# -------------------------------------------------
from .views import HealthCheckView, IdeaViewSet

# -------------------------------------------------
# Review engine
# -------------------------------------------------
from .views_review_api import ReviewTransitionView, ReviewStageView
from .views_review_workflow import ReviewWorkflowView, ReviewWorkflowVersionsView
from .views_review_progress import ReviewProgressView
from .views_settings import BlindReviewSettingView


router = DefaultRouter()
router.register(r"ideas", IdeaViewSet, basename="idea")


urlpatterns = [
    path("health/", HealthCheckView.as_view(), name="health"),

    # Progress (owner / reviewers)
    path(
        "ideas/<int:pk>/review-progress/",
        ReviewProgressView.as_view(),
        name="idea-review-progress",
    ),

    # Reviewer tooling
    path(
        "admin/review/ideas/<int:pk>/transition/",
        ReviewTransitionView.as_view(),
        name="review-transition",
    ),
    path(
        "admin/review/ideas/<int:pk>/stage/",
        ReviewStageView.as_view(),
        name="review-stage",
    ),

    # Admin configuration
    path("admin/review/workflow/", ReviewWorkflowView.as_view(), name="review-workflow"),
    path(
        "admin/review/workflow/versions/",
        ReviewWorkflowVersionsView.as_view(),
        name="review-workflow-versions",
    ),
    path(
        "admin/settings/blind-review/",
        BlindReviewSettingView.as_view(),
        name="blind-review-setting",
    ),

    path("", include(router.urls)),
]
