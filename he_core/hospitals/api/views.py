# he_core/hospitals/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from he_core.common.api.pagination import paginate
from he_core.common.tenancy import require_request_tenant_id
from he_core.hospitals.api.permissions import HospitalPermission
from he_core.hospitals.api.serializers import (
    Hl7SourceRegisterSerializer,
    Hl7SourceSerializer,
    HospitalCreateSerializer,
    HospitalSerializer,
    HospitalUpdateSerializer,
)
from he_core.hospitals.models import Hospital
from he_core.hospitals.selectors import hospital_by_id, hospitals_for_tenant, sources_for_tenant
from he_core.hospitals.services import Hl7SourceService, HospitalService, HospitalUpdate

_TRUTHY = {"1", "true", "yes", "y", "on"}


@extend_schema_view(
    list=extend_schema(tags=["Hospitals"], responses=HospitalSerializer(many=True)),
    retrieve=extend_schema(tags=["Hospitals"], responses=HospitalSerializer),
    create=extend_schema(tags=["Hospitals"], request=HospitalCreateSerializer, responses=HospitalSerializer),
    partial_update=extend_schema(tags=["Hospitals"], request=HospitalUpdateSerializer, responses=HospitalSerializer),
)
class HospitalViewSet(viewsets.ViewSet):
    permission_classes = [HospitalPermission]
    serializer_class = HospitalSerializer
    queryset = Hospital.objects.none()
    lookup_value_regex = r"[0-9]+"

    def _get_object(self, request, pk) -> Hospital:
        tenant_id = require_request_tenant_id(request)
        try:
            return hospital_by_id(tenant_id=tenant_id, hospital_id=int(pk))
        except (Hospital.DoesNotExist, TypeError, ValueError):
            raise NotFound("Hospital not found in this tenant.")

    def list(self, request):
        tenant_id = require_request_tenant_id(request)
        active_only = request.query_params.get("active_only", "1").strip().lower() in _TRUTHY
        return paginate(request, hospitals_for_tenant(tenant_id=tenant_id, active_only=active_only), HospitalSerializer)

    def retrieve(self, request, pk=None):
        return Response(HospitalSerializer(self._get_object(request, pk)).data)

    @extend_schema(tags=["Hospitals"], responses=HospitalSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"tenant/(?P<tenant_key>[0-9]+)")
    def by_tenant(self, request, tenant_key=None):
        tenant_id = require_request_tenant_id(request)
        return paginate(request, hospitals_for_tenant(tenant_id=tenant_id), HospitalSerializer)

    def create(self, request):
        tenant_id = require_request_tenant_id(request)

        s = HospitalCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        obj = HospitalService.create(tenant_id=tenant_id, **d)
        return Response(HospitalSerializer(obj).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        hospital = self._get_object(request, pk)

        s = HospitalUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        obj = HospitalService.update(
            tenant_id=tenant_id,
            hospital_id=hospital.id,
            patch=HospitalUpdate(**s.validated_data),
        )
        return Response(HospitalSerializer(obj).data)

    @extend_schema(tags=["Hospitals"], request=None, responses=HospitalSerializer)
    @action(detail=True, methods=["post"], url_path="deactivate")
    def deactivate(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        hospital = self._get_object(request, pk)
        obj = HospitalService.deactivate(tenant_id=tenant_id, hospital_id=hospital.id)
        return Response(HospitalSerializer(obj).data)

    @extend_schema(tags=["Hospitals"], responses=Hl7SourceSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="sources")
    def sources(self, request):
        tenant_id = require_request_tenant_id(request)
        return paginate(request, sources_for_tenant(tenant_id=tenant_id), Hl7SourceSerializer)

    @extend_schema(tags=["Hospitals"], request=Hl7SourceRegisterSerializer, responses=Hl7SourceSerializer)
    @sources.mapping.post
    def register_source(self, request):
        tenant_id = require_request_tenant_id(request)

        s = Hl7SourceRegisterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        obj = Hl7SourceService.register(
            tenant_id=tenant_id,
            source_code=d["source_code"],
            description=d.get("description") or "",
            hospital_id=d.get("hospital_key"),
        )
        return Response(Hl7SourceSerializer(obj).data, status=status.HTTP_201_CREATED)
