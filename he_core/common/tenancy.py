# he_core/common/tenancy.py
from __future__ import annotations

from typing import Optional

from rest_framework.exceptions import PermissionDenied, ValidationError

HDR_TENANT = "X-Tenant-Id"
TENANT_CLAIM = "tenant_id"
TENANT_QUERY_PARAM = "tenantKey"

MISSING_TENANT_MSG = "Tenant not specified. Provide X-Tenant-Id header or tenantKey query parameter."
INVALID_TENANT_MSG = "Invalid tenant key. Provide a positive integer for X-Tenant-Id / tenantKey."
TENANT_MISMATCH_MSG = "Tenant in the request does not match the resolved tenant."


def parse_tenant_key(value, *, field: str = HDR_TENANT) -> int:
    try:
        key = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError({field: INVALID_TENANT_MSG})
    if key <= 0:
        raise ValidationError({field: INVALID_TENANT_MSG})
    return key


def _claim_value(request) -> Optional[str]:
    token = getattr(request, "auth", None)
    if token is None:
        return None
    try:
        value = token.get(TENANT_CLAIM)
    except AttributeError:
        return None
    return value if value not in (None, "") else None


def resolve_tenant_id(request) -> Optional[int]:
    """
    Resolve the caller's tenant, in precedence order:
      1) X-Tenant-Id header
      2) tenant_id claim on the access token
      3) tenantKey query parameter
    Returns None when nothing is present; raises 400 when a value is malformed.
    """
    raw = request.headers.get(HDR_TENANT)
    if raw:
        return parse_tenant_key(raw, field=HDR_TENANT)

    raw = _claim_value(request)
    if raw is not None:
        return parse_tenant_key(raw, field=TENANT_CLAIM)

    query_params = getattr(request, "query_params", request.GET)
    raw = query_params.get(TENANT_QUERY_PARAM)
    if raw:
        return parse_tenant_key(raw, field=TENANT_QUERY_PARAM)

    return None


def resolve_view_tenant_id(request, view) -> int:
    """
    Tenant for a tenant-scoped API call.

    The header/claim/query chain wins. Routes that carry the tenant explicitly
    (`tenant/<tenant_key>/` paths, upsert bodies with `tenant_key`) are used as a fallback,
    and must agree with the resolved tenant when both are present.
    """
    resolved = resolve_tenant_id(request)

    explicit = None
    kwargs = getattr(view, "kwargs", None) or {}
    if kwargs.get("tenant_key") is not None:
        explicit = parse_tenant_key(kwargs["tenant_key"], field="tenant_key")
    elif request.method not in ("GET", "HEAD", "OPTIONS"):
        data = getattr(request, "data", None)
        if isinstance(data, dict) and data.get("tenant_key") not in (None, ""):
            explicit = parse_tenant_key(data["tenant_key"], field="tenant_key")

    if resolved is None and explicit is None:
        raise ValidationError({"detail": MISSING_TENANT_MSG})

    if resolved is not None and explicit is not None and resolved != explicit:
        raise PermissionDenied(TENANT_MISMATCH_MSG)

    return resolved if resolved is not None else explicit


def require_request_tenant_id(request) -> int:
    """
    For views: the tenant attached by the permission layer.
    """
    tenant_id = getattr(request, "tenant_id", None)
    if not tenant_id:
        raise ValidationError({"detail": MISSING_TENANT_MSG})
    return int(tenant_id)
