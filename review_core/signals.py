# review_core/signals.py
from __future__ import annotations

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from review_core.models import Idea
from review_core.review.binding import bind_idea_to_active_workflow
from review_core.review.errors import AlreadyBound, ReviewValidationError, WorkflowNotFound

logger = logging.getLogger(__name__)


# ===============================================================
# Bind newly submitted ideas to the active review workflow
# ===============================================================
@receiver(post_save, sender=Idea)
def bind_submitted_idea(sender, instance, created, raw=False, **kwargs):
    if raw or not created:
        return
    if instance.status != Idea.Status.SUBMITTED:
        return

    try:
        bind_idea_to_active_workflow(instance, actor=instance.owner)
    except WorkflowNotFound:
        logger.warning(
            "Idea %s submitted with no active review workflow; left unbound",
            instance.pk,
        )
    except AlreadyBound:
        logger.info("Idea %s already bound; skipping", instance.pk)
    except ReviewValidationError as exc:
        logger.warning("Idea %s could not be bound: %s", instance.pk, exc)
