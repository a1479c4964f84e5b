from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import SchedulingError

logger = logging.getLogger(__name__)


def _validation_details(exc: DjangoValidationError):
    if hasattr(exc, "error_dict"):
        return exc.message_dict
    return {"non_field_errors": exc.messages}


def scheduling_exception_handler(exc, context):
    """DRF exception handler that renders scheduling errors and model validation errors."""
    request = context.get("request")
    path = request.get_full_path() if request is not None else ""

    if isinstance(exc, SchedulingError):
        logger.warning(f"{exc.code} on {path}: {exc.message}")
        payload = {
            "error": exc.code,
            "message": exc.message,
            "status_code": exc.status_code,
        }
        payload.update(exc.extra())
        return Response(payload, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        logger.warning(f"validation_error on {path}: {exc.messages}")
        return Response(
            {
                "error": "validation_error",
                "message": "Invalid input data.",
                "status_code": status.HTTP_400_BAD_REQUEST,
                "details": _validation_details(exc),
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    return exception_handler(exc, context)
