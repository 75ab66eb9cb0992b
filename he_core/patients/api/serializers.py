# he_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from he_core.common.hl7 import HL7TimestampField
from he_core.patients.models import Patient


def _optional(max_length: int) -> serializers.CharField:
    return serializers.CharField(max_length=max_length, required=False, allow_blank=True, allow_null=True)


class PatientUpsertSerializer(serializers.Serializer):
    """
    Upsert contract used by the HL7 feed (one call per PID segment).
    `dob_ts` is an HL7 TS; only its date part is kept.
    """
    tenant_key = serializers.IntegerField(required=False, min_value=1)
    patient_id_external = serializers.CharField(max_length=128)
    assigning_authority = _optional(128)
    mrn = _optional(64)
    family_name = _optional(128)
    given_name = _optional(128)
    dob_ts = HL7TimestampField()
    sex = _optional(1)
    phone = _optional(32)
    address_line1 = _optional(255)
    city = _optional(128)
    state = _optional(64)
    postal_code = _optional(16)
    country = _optional(64)
    first_seen_hospital_code = _optional(64)

    def to_service_kwargs(self) -> dict:
        d = dict(self.validated_data)
        d.pop("tenant_key", None)
        dob_ts = d.pop("dob_ts", None)
        d["dob"] = dob_ts.date() if dob_ts is not None else None
        return d


class UpsertResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    patient_key = serializers.IntegerField(required=False)


class PatientSerializer(serializers.ModelSerializer):
    patient_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)
    first_seen_hospital_key = serializers.IntegerField(source="first_seen_hospital_id", read_only=True, allow_null=True)

    class Meta:
        model = Patient
        fields = [
            "patient_key",
            "tenant_key",
            "patient_id_external",
            "assigning_authority",
            "mrn",
            "family_name",
            "given_name",
            "dob",
            "sex",
            "phone",
            "address_line1",
            "city",
            "state",
            "postal_code",
            "country",
            "first_seen_hospital_key",
            "last_updated_utc",
        ]
        read_only_fields = fields
