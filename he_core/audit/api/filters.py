# he_core/audit/api/filters.py
from __future__ import annotations

from django_filters import rest_framework as filters

from he_core.audit.models import Hl7MessageAudit


class Hl7MessageAuditFilter(filters.FilterSet):
    """
    Query filters for the audit trail listing.
    """
    message_type = filters.CharFilter(field_name="message_type", lookup_expr="iexact")
    status = filters.CharFilter(field_name="status", lookup_expr="iexact")
    message_control_id = filters.CharFilter(field_name="message_control_id", lookup_expr="exact")
    hospital_code = filters.CharFilter(field_name="hospital_code", lookup_expr="exact")
    source_code = filters.CharFilter(field_name="source_code", lookup_expr="exact")

    processed_after = filters.IsoDateTimeFilter(field_name="processed_utc", lookup_expr="gte")
    processed_before = filters.IsoDateTimeFilter(field_name="processed_utc", lookup_expr="lte")

    class Meta:
        model = Hl7MessageAudit
        fields = [
            "message_type",
            "status",
            "message_control_id",
            "hospital_code",
            "source_code",
            "processed_after",
            "processed_before",
        ]
