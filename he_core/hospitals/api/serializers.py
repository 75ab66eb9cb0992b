# he_core/hospitals/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from he_core.hospitals.models import Hl7Source, Hospital


class HospitalSerializer(serializers.ModelSerializer):
    hospital_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)

    class Meta:
        model = Hospital
        fields = [
            "hospital_key",
            "tenant_key",
            "hospital_code",
            "hospital_name",
            "assigning_authority",
            "address",
            "city",
            "state",
            "phone_number",
            "is_active",
            "created_utc",
            "last_updated_utc",
        ]
        read_only_fields = fields


class HospitalCreateSerializer(serializers.Serializer):
    hospital_code = serializers.CharField(max_length=64)
    hospital_name = serializers.CharField(max_length=200)
    assigning_authority = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    state = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class HospitalUpdateSerializer(serializers.Serializer):
    hospital_name = serializers.CharField(max_length=200, required=False)
    assigning_authority = serializers.CharField(max_length=64, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=128, required=False, allow_blank=True)
    state = serializers.CharField(max_length=64, required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


class Hl7SourceSerializer(serializers.ModelSerializer):
    hospital_key = serializers.IntegerField(source="hospital_id", read_only=True, allow_null=True)

    class Meta:
        model = Hl7Source
        fields = ["id", "source_code", "description", "hospital_key", "is_active"]
        read_only_fields = fields


class Hl7SourceRegisterSerializer(serializers.Serializer):
    source_code = serializers.CharField(max_length=64)
    description = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    hospital_key = serializers.IntegerField(required=False, allow_null=True, min_value=1)
