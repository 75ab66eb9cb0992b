# he_core/audit/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from he_core.audit.models import Hl7MessageAudit
from he_core.common.hl7 import HL7TimestampField


class AuditWriteSerializer(serializers.Serializer):
    tenant_key = serializers.IntegerField(required=False, min_value=1)
    message_control_id = serializers.CharField(max_length=256)
    message_type = serializers.CharField(max_length=16)
    event_timestamp_ts = HL7TimestampField()
    source_code = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    hospital_code = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    raw_message = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)
    status = serializers.CharField(max_length=32)
    error_text = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_service_kwargs(self) -> dict:
        d = dict(self.validated_data)
        d.pop("tenant_key", None)
        d["event_timestamp"] = d.pop("event_timestamp_ts", None)
        return d


class AuditWriteResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    audit_key = serializers.IntegerField(required=False)


class Hl7MessageAuditSerializer(serializers.ModelSerializer):
    audit_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)
    source_key = serializers.IntegerField(source="source_id", read_only=True, allow_null=True)
    hospital_key = serializers.IntegerField(source="hospital_id", read_only=True, allow_null=True)

    class Meta:
        model = Hl7MessageAudit
        fields = [
            "audit_key",
            "tenant_key",
            "message_control_id",
            "message_type",
            "event_timestamp",
            "source_key",
            "source_code",
            "hospital_key",
            "hospital_code",
            "raw_message",
            "processed_utc",
            "status",
            "error_text",
        ]
        read_only_fields = fields
