# review_core/tasks.py
from __future__ import annotations

from celery import shared_task

from review_core.review.status_sync import reconcile


@shared_task
def scan_unsynced_review_status(apply: bool = False) -> int:
    """
    Periodic scan for terminal ideas whose status sync failed.
    Returns the number of mismatched ideas found.
    """
    report = reconcile(apply=apply)
    return len(report["mismatched"])
