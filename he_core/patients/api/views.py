# he_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from he_core.common.api.pagination import paginate
from he_core.common.permissions import TenantDataPermission
from he_core.common.tenancy import require_request_tenant_id
from he_core.patients.api.serializers import PatientSerializer, PatientUpsertSerializer, UpsertResponseSerializer
from he_core.patients.models import Patient
from he_core.patients.selectors import get_patient, patients_for_tenant
from he_core.patients.services import PatientService


@extend_schema_view(
    list=extend_schema(tags=["Patients"], responses=PatientSerializer(many=True)),
    retrieve=extend_schema(tags=["Patients"], responses=PatientSerializer),
)
class PatientViewSet(viewsets.ViewSet):
    permission_classes = [TenantDataPermission]

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()
    lookup_value_regex = r"[0-9]+"

    def list(self, request):
        tenant_id = require_request_tenant_id(request)
        qs = patients_for_tenant(tenant_id=tenant_id, q=request.query_params.get("q"))
        return paginate(request, qs, PatientSerializer)

    def retrieve(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        try:
            patient = get_patient(tenant_id=tenant_id, patient_id=int(pk))
        except Patient.DoesNotExist:
            raise NotFound("Patient not found in this tenant.")
        return Response(PatientSerializer(patient).data)

    @extend_schema(tags=["Patients"], responses=PatientSerializer(many=True))
    @action(detail=False, methods=["get"], url_path=r"tenant/(?P<tenant_key>[0-9]+)")
    def by_tenant(self, request, tenant_key=None):
        tenant_id = require_request_tenant_id(request)
        qs = patients_for_tenant(tenant_id=tenant_id, q=request.query_params.get("q"))
        return paginate(request, qs, PatientSerializer)

    @extend_schema(
        tags=["Patients"],
        request=PatientUpsertSerializer,
        responses={200: UpsertResponseSerializer, 400: UpsertResponseSerializer},
    )
    @action(detail=False, methods=["post"], url_path="upsert")
    def upsert(self, request):
        tenant_id = require_request_tenant_id(request)

        s = PatientUpsertSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = PatientService.upsert(tenant_id=tenant_id, **s.to_service_kwargs())
        if not result.success:
            return Response({"success": False, "message": result.message}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"success": True, "message": result.message, "patient_key": result.key},
            status=status.HTTP_200_OK,
        )
