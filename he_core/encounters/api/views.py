# he_core/encounters/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from he_core.common.api.pagination import paginate
from he_core.common.permissions import TenantDataPermission
from he_core.common.tenancy import require_request_tenant_id
from he_core.encounters.api.filters import EncounterFilter
from he_core.encounters.api.serializers import (
    EncounterSerializer,
    EncounterUpsertResponseSerializer,
    EncounterUpsertSerializer,
)
from he_core.encounters.models import Encounter
from he_core.encounters.selectors import encounters_for_patient, encounters_for_tenant, get_encounter
from he_core.encounters.services import EncounterService


@extend_schema_view(
    retrieve=extend_schema(tags=["Encounters"], responses=EncounterSerializer),
)
class EncounterViewSet(viewsets.ViewSet):
    """
    Thin API layer over the ADT feed:
    - upsert writes through EncounterService
    - reads go through selectors, always filtered by the resolved tenant
    """

    permission_classes = [TenantDataPermission]
    serializer_class = EncounterSerializer
    queryset = Encounter.objects.none()
    lookup_value_regex = r"[0-9]+"

    def retrieve(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        try:
            enc = get_encounter(tenant_id=tenant_id, encounter_id=int(pk))
        except Encounter.DoesNotExist:
            raise NotFound("Encounter not found in this tenant.")
        return Response(EncounterSerializer(enc).data)

    @extend_schema(
        tags=["Encounters"],
        parameters=[
            OpenApiParameter("visit_status", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("hospital", OpenApiTypes.INT, OpenApiParameter.QUERY),
            OpenApiParameter("hospital_code", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("discharge_from", OpenApiTypes.DATE, OpenApiParameter.QUERY),
            OpenApiParameter("discharge_to", OpenApiTypes.DATE, OpenApiParameter.QUERY),
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses=EncounterSerializer(many=True),
    )
    @action(detail=False, methods=["get"], url_path=r"tenant/(?P<tenant_key>[0-9]+)")
    def by_tenant(self, request, tenant_key=None):
        tenant_id = require_request_tenant_id(request)
        f = EncounterFilter(request.query_params, queryset=encounters_for_tenant(tenant_id=tenant_id))
        if not f.is_valid():
            raise ValidationError(f.errors)
        return paginate(request, f.qs, EncounterSerializer)

    @extend_schema(tags=["Encounters"], responses=EncounterSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"patient/(?P<patient_key>[0-9]+)")
    def by_patient(self, request, patient_key=None):
        tenant_id = require_request_tenant_id(request)
        qs = encounters_for_patient(tenant_id=tenant_id, patient_id=int(patient_key))
        return Response(EncounterSerializer(qs, many=True).data)

    @extend_schema(
        tags=["Encounters"],
        request=EncounterUpsertSerializer,
        responses={200: EncounterUpsertResponseSerializer, 400: EncounterUpsertResponseSerializer},
    )
    @action(detail=False, methods=["post"], url_path="upsert")
    def upsert(self, request):
        tenant_id = require_request_tenant_id(request)

        s = EncounterUpsertSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = EncounterService.upsert(tenant_id=tenant_id, **s.to_service_kwargs())
        if not result.success:
            return Response({"success": False, "message": result.message}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"success": True, "message": result.message, "encounter_key": result.key},
            status=status.HTTP_200_OK,
        )
