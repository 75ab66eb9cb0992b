# he_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from he_core.audit.api.filters import Hl7MessageAuditFilter
from he_core.audit.api.serializers import (
    AuditWriteResponseSerializer,
    AuditWriteSerializer,
    Hl7MessageAuditSerializer,
)
from he_core.audit.models import Hl7MessageAudit
from he_core.audit.selectors import audits_for_tenant
from he_core.audit.services import AuditService
from he_core.common.api.pagination import paginate
from he_core.common.permissions import TenantDataPermission
from he_core.common.tenancy import require_request_tenant_id

AUDIT_FILTER_PARAMS = Hl7MessageAuditFilter.Meta.fields


class AuditViewSet(viewsets.ViewSet):
    permission_classes = [TenantDataPermission]
    serializer_class = Hl7MessageAuditSerializer
    queryset = Hl7MessageAudit.objects.none()

    @extend_schema(
        tags=["Audit"],
        request=AuditWriteSerializer,
        responses={200: AuditWriteResponseSerializer, 400: AuditWriteResponseSerializer},
    )
    def create(self, request):
        tenant_id = require_request_tenant_id(request)

        s = AuditWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = AuditService.write(tenant_id=tenant_id, **s.to_service_kwargs())
        if not result.success:
            return Response({"success": False, "message": result.message}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"success": True, "message": result.message, "audit_key": result.key})

    @extend_schema(
        tags=["Audit"],
        parameters=[OpenApiParameter(name, OpenApiTypes.STR, OpenApiParameter.QUERY) for name in AUDIT_FILTER_PARAMS],
        responses=Hl7MessageAuditSerializer(many=True),
    )
    @action(detail=False, methods=["get"], url_path=r"tenant/(?P<tenant_key>[0-9]+)")
    def by_tenant(self, request, tenant_key=None):
        tenant_id = require_request_tenant_id(request)
        f = Hl7MessageAuditFilter(request.query_params, queryset=audits_for_tenant(tenant_id=tenant_id))
        if not f.is_valid():
            raise ValidationError(f.errors)
        qs = f.qs
        return paginate(request, qs, Hl7MessageAuditSerializer)
