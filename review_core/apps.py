# review_core/apps.py

from django.apps import AppConfig


class ReviewCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "review_core"
    verbose_name = "Idea review"

    def ready(self):
        # Always safe
        from . import signals  # noqa
