# he_core/tenants/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from he_core.common.api.pagination import paginate
from he_core.tenants.api.serializers import (
    TenantActiveUpdateSerializer,
    TenantCreateSerializer,
    TenantSerializer,
)
from he_core.tenants.models import Tenant
from he_core.tenants.selectors import get_tenant_or_none, tenant_qs
from he_core.tenants.services import TenantService


@extend_schema_view(
    list=extend_schema(tags=["Tenants"], responses={200: TenantSerializer(many=True)}),
    retrieve=extend_schema(tags=["Tenants"], responses={200: TenantSerializer}),
    create=extend_schema(tags=["Tenants"], request=TenantCreateSerializer, responses={201: TenantSerializer}),
    set_active=extend_schema(tags=["Tenants"], request=TenantActiveUpdateSerializer, responses={200: TenantSerializer}),
)
class TenantViewSet(viewsets.ViewSet):
    """
    Staff-only tenant management.
    Routing is centralized in he_core/api/urls.py.
    """

    permission_classes = [IsAdminUser]
    lookup_value_regex = r"[0-9]+"

    serializer_class = TenantSerializer
    queryset = Tenant.objects.none()

    def _get(self, pk) -> Tenant:
        obj = get_tenant_or_none(tenant_id=int(pk))
        if obj is None:
            raise NotFound("Tenant not found.")
        return obj

    def list(self, request):
        return paginate(request, tenant_qs().order_by("-created_utc"), TenantSerializer)

    def retrieve(self, request, pk=None):
        return Response(TenantSerializer(self._get(pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = TenantCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        t = TenantService.create(
            name=ser.validated_data["tenant_name"],
            code=ser.validated_data.get("tenant_code") or "",
        )
        return Response(TenantSerializer(t).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="set-active")
    def set_active(self, request, pk=None):
        ser = TenantActiveUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        t = TenantService.set_active(tenant_id=self._get(pk).id, is_active=ser.validated_data["is_active"])
        return Response(TenantSerializer(t).data, status=status.HTTP_200_OK)
