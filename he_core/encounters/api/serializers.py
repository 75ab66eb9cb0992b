# he_core/encounters/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from he_core.common.hl7 import HL7TimestampField
from he_core.encounters.models import Encounter


def _optional(max_length: int | None = None) -> serializers.CharField:
    kwargs = {"required": False, "allow_blank": True, "allow_null": True}
    if max_length:
        kwargs["max_length"] = max_length
    return serializers.CharField(**kwargs)


class EncounterUpsertSerializer(serializers.Serializer):
    """
    ADT upsert. `admit_ts` / `discharge_ts` are HL7 TS strings (PV1-44 / PV1-45).
    """
    tenant_key = serializers.IntegerField(required=False, min_value=1)
    hospital_code = serializers.CharField(max_length=64)
    visit_number = serializers.CharField(max_length=64)
    patient_key = serializers.IntegerField(min_value=1)
    admit_ts = HL7TimestampField()
    discharge_ts = HL7TimestampField()
    patient_class = _optional(16)
    location = _optional(128)
    attending_doctor = _optional(128)
    primary_doctor = _optional(128)
    admitting_doctor = _optional(128)
    admit_source = _optional(64)
    visit_status = _optional(32)
    notes = _optional()
    admit_message_id = _optional(256)
    discharge_message_id = _optional(256)

    def validate(self, attrs):
        admit, discharge = attrs.get("admit_ts"), attrs.get("discharge_ts")
        if admit and discharge and discharge < admit:
            raise serializers.ValidationError({"discharge_ts": "Discharge cannot be before admission."})
        return attrs

    def to_service_kwargs(self) -> dict:
        d = dict(self.validated_data)
        d.pop("tenant_key", None)
        d["patient_id"] = d.pop("patient_key")
        d["admit_datetime"] = d.pop("admit_ts", None)
        d["discharge_datetime"] = d.pop("discharge_ts", None)
        return d


class EncounterUpsertResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    encounter_key = serializers.IntegerField(required=False)


class EncounterSerializer(serializers.ModelSerializer):
    encounter_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)
    hospital_key = serializers.IntegerField(source="hospital_id", read_only=True)
    patient_key = serializers.IntegerField(source="patient_id", read_only=True)

    class Meta:
        model = Encounter
        fields = [
            "encounter_key",
            "tenant_key",
            "hospital_key",
            "patient_key",
            "visit_number",
            "admit_datetime",
            "discharge_datetime",
            "patient_class",
            "location",
            "attending_doctor",
            "primary_doctor",
            "admitting_doctor",
            "admit_source",
            "visit_status",
            "notes",
            "admit_message_id",
            "discharge_message_id",
            "last_updated_utc",
        ]
        read_only_fields = fields
