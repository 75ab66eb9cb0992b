# he_core/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    ErrorDetail,
    NotAuthenticated,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    RequestIdMiddleware normally sets it first; this covers RequestFactory calls.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when workflow rules block an action (e.g. mutating a closed care transition).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


def _coerce_error_detail(value):
    if isinstance(value, ErrorDetail):
        return str(value)

    if isinstance(value, dict):
        return {k: _coerce_error_detail(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [_coerce_error_detail(v) for v in value]

    return value


def validation_payload(exc) -> dict:
    """
    Normalizes DRF and Django ValidationErrors into a {"detail": ...} style dict.
    """
    detail = getattr(exc, "detail", None)

    if isinstance(detail, dict):
        return _coerce_error_detail(detail)
    if isinstance(detail, list):
        if len(detail) == 1:
            return {"detail": _coerce_error_detail(detail[0])}
        return {"detail": _coerce_error_detail(detail)}
    if detail is not None:
        return {"detail": _coerce_error_detail(detail)}

    message_dict = getattr(exc, "message_dict", None) if hasattr(exc, "error_dict") else None
    if isinstance(message_dict, dict):
        return message_dict

    messages = getattr(exc, "messages", None)
    if messages:
        if isinstance(messages, (list, tuple)) and len(messages) == 1:
            return {"detail": messages[0]}
        return {"detail": list(messages)}

    return {"detail": str(exc)}


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    # Model-level validation escaping a view is a client error, not a 500.
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(validation_payload(exc))

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception(
            "Unhandled API error (request_id=%s)",
            ensure_request_id(request),
            exc_info=exc,
        )
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # DRF standardizes errors into response.data
    data = response.data

    # Message + details rules:
    # 1) {"detail": "..."} only -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) list of messages -> message=first, details=list
    # 4) otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and data:
        message = str(data[0])

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
