# review_core/exceptions.py
from __future__ import annotations

from rest_framework.response import Response
from rest_framework.views import exception_handler

from review_core.review.errors import ConcurrencyConflict, ReviewError


def review_exception_handler(exc, context):
    """
    Render ReviewError subclasses as typed JSON bodies; defer everything
    else to DRF's default handler.
    """
    if isinstance(exc, ReviewError):
        payload = exc.as_payload()
        if isinstance(exc, ConcurrencyConflict) and exc.actual_version is not None:
            payload["currentStateVersion"] = exc.actual_version
        return Response(payload, status=exc.status_code)

    return exception_handler(exc, context)
