# he_core/care_transitions/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError
from rest_framework.response import Response

from he_core.care_transitions.api.serializers import (
    AssignSerializer,
    CareTransitionDetailSerializer,
    CareTransitionSerializer,
    CloseSerializer,
    ExecutiveSummarySerializer,
    LogOutreachSerializer,
    ScheduleOutreachSerializer,
    TCMMetricsSerializer,
    UpdatePrioritySerializer,
)
from he_core.care_transitions.models import CareTransition
from he_core.care_transitions.selectors import CareTransitionSelector
from he_core.care_transitions.services import CareTransitionClosedError, CareTransitionService
from he_core.common.api.exceptions import ConflictError, validation_payload
from he_core.common.api.pagination import SkipTakePagination
from he_core.common.permissions import CareTransitionPermission
from he_core.common.tenancy import require_request_tenant_id
from he_core.encounters.selectors import encounters_for_metrics
from he_core.tcm.metrics import aggregate, compliance_rate, executive_summary, follow_up_rate, readmission_rate


def _run(fn, **kwargs) -> CareTransition:
    """
    Calls a CareTransitionService write and maps domain errors:
      closed record -> 409, other validation -> 400, missing row -> 404.
    """
    try:
        return fn(**kwargs)
    except CareTransitionClosedError as e:
        raise ConflictError(e.messages[0])
    except CareTransition.DoesNotExist:
        raise NotFound("Care transition not found in this tenant.")
    except DjangoValidationError as e:
        raise DRFValidationError(validation_payload(e))


@extend_schema_view(
    list=extend_schema(
        tags=["Care Transitions"],
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("priority", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("risk_tier", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("assigned_to", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("search", OpenApiTypes.STR, OpenApiParameter.QUERY),
            OpenApiParameter("ordering", OpenApiTypes.STR, OpenApiParameter.QUERY),
        ],
        responses=CareTransitionSerializer(many=True),
    ),
    retrieve=extend_schema(tags=["Care Transitions"], responses=CareTransitionDetailSerializer),
)
class CareTransitionViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - tenant comes from the permission layer
    - reads through CareTransitionSelector
    - writes through CareTransitionService (Closed -> 409)
    """

    permission_classes = [CareTransitionPermission]
    serializer_class = CareTransitionSerializer
    queryset = CareTransition.objects.none()
    lookup_value_regex = r"[0-9]+"

    def _detail(self, request, care_transition_id: int) -> Response:
        tenant_id = require_request_tenant_id(request)
        try:
            ct = CareTransitionSelector.get(tenant_id=tenant_id, care_transition_id=care_transition_id)
        except CareTransitionSelector.NotFound:
            raise NotFound("Care transition not found in this tenant.")
        return Response(CareTransitionDetailSerializer(ct, context={"now": timezone.now()}).data)

    # ----------------------------
    # Reads
    # ----------------------------
    def list(self, request):
        tenant_id = require_request_tenant_id(request)

        try:
            qs = CareTransitionSelector.list(tenant_id=tenant_id, params=request.query_params)
        except DjangoValidationError as e:
            raise DRFValidationError(validation_payload(e))

        paginator = SkipTakePagination()
        page = paginator.paginate_queryset(qs, request)
        data = CareTransitionSerializer(page, many=True, context={"now": timezone.now()}).data
        return paginator.get_paginated_response(data)

    def retrieve(self, request, pk=None):
        return self._detail(request, int(pk))

    @extend_schema(tags=["Care Transitions"], responses=TCMMetricsSerializer)
    @action(detail=False, methods=["get"])
    def metrics(self, request):
        tenant_id = require_request_tenant_id(request)
        now = timezone.now()

        encounters = list(encounters_for_metrics(tenant_id=tenant_id))
        m = aggregate(CareTransitionSelector.for_metrics(tenant_id=tenant_id), encounters, now)

        payload = m.as_dict()
        payload.update(
            compliance_rate=compliance_rate(m),
            follow_up_rate=follow_up_rate(m),
            readmission_rate=readmission_rate(encounters, now),
        )
        return Response(TCMMetricsSerializer(payload).data)

    # ----------------------------
    # Workflow actions
    # ----------------------------
    @extend_schema(tags=["Care Transitions"], request=LogOutreachSerializer, responses=CareTransitionDetailSerializer)
    @action(detail=True, methods=["post"], url_path="log-outreach")
    def log_outreach(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        s = LogOutreachSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        d = s.validated_data

        _run(
            CareTransitionService.log_outreach,
            tenant_id=tenant_id,
            care_transition_id=int(pk),
            method=d["method"],
            outcome=d["outcome"],
            outreach_at=d.get("outreach_at"),
            next_outreach_date=d.get("next_outreach_date"),
            notes=d.get("notes") or "",
            author_id=request.user.id,
        )
        return self._detail(request, int(pk))

    @extend_schema(tags=["Care Transitions"], request=AssignSerializer, responses=CareTransitionDetailSerializer)
    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        s = AssignSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        _run(
            CareTransitionService.assign,
            tenant_id=tenant_id,
            care_transition_id=int(pk),
            membership_id=s.validated_data["assigned_to_key"],
        )
        return self._detail(request, int(pk))

    @extend_schema(tags=["Care Transitions"], request=UpdatePrioritySerializer, responses=CareTransitionDetailSerializer)
    @action(detail=True, methods=["post"], url_path="update-priority")
    def update_priority(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        s = UpdatePrioritySerializer(data=request.data)
        s.is_valid(raise_exception=True)

        _run(
            CareTransitionService.update_priority,
            tenant_id=tenant_id,
            care_transition_id=int(pk),
            priority=s.validated_data.get("priority"),
            risk_tier=s.validated_data.get("risk_tier"),
        )
        return self._detail(request, int(pk))

    @extend_schema(tags=["Care Transitions"], request=ScheduleOutreachSerializer, responses=CareTransitionDetailSerializer)
    @action(detail=True, methods=["post"], url_path="schedule-outreach")
    def schedule_outreach(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        s = ScheduleOutreachSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        _run(
            CareTransitionService.schedule_outreach,
            tenant_id=tenant_id,
            care_transition_id=int(pk),
            next_outreach_date=s.validated_data["next_outreach_date"],
            follow_up_appt_datetime=s.validated_data.get("follow_up_appt_datetime"),
        )
        return self._detail(request, int(pk))

    @extend_schema(tags=["Care Transitions"], request=CloseSerializer, responses=CareTransitionDetailSerializer)
    @action(detail=True, methods=["post"])
    def close(self, request, pk=None):
        tenant_id = require_request_tenant_id(request)
        s = CloseSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        _run(
            CareTransitionService.close,
            tenant_id=tenant_id,
            care_transition_id=int(pk),
            close_reason=s.validated_data["close_reason"],
            notes=s.validated_data.get("notes") or "",
            closed_by_id=request.user.id,
        )
        return self._detail(request, int(pk))


class DashboardViewSet(viewsets.ViewSet):
    permission_classes = [CareTransitionPermission]
    serializer_class = ExecutiveSummarySerializer

    @extend_schema(tags=["Dashboard"], responses=ExecutiveSummarySerializer)
    @action(detail=False, methods=["get"])
    def summary(self, request):
        tenant_id = require_request_tenant_id(request)
        now = timezone.now()

        s = executive_summary(
            encounters_for_metrics(tenant_id=tenant_id),
            CareTransitionSelector.for_metrics(tenant_id=tenant_id),
            now,
        )
        return Response(ExecutiveSummarySerializer(s.as_dict()).data)
