# he_core/tenants/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from he_core.tenants.models import Tenant


class TenantSerializer(serializers.ModelSerializer):
    tenant_key = serializers.IntegerField(source="id", read_only=True)

    class Meta:
        model = Tenant
        fields = [
            "tenant_key",
            "tenant_code",
            "tenant_name",
            "is_active",
            "created_utc",
            "last_updated_utc",
        ]
        read_only_fields = fields


class TenantCreateSerializer(serializers.Serializer):
    tenant_name = serializers.CharField(max_length=200)
    tenant_code = serializers.SlugField(max_length=64, required=False, allow_blank=True, default="")


class TenantActiveUpdateSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()
