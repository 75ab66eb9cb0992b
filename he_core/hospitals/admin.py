# he_core/hospitals/admin.py
from __future__ import annotations

from django.contrib import admin

from he_core.hospitals.models import Hl7Source, Hospital


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = (
        "hospital_name",
        "hospital_code",
        "tenant",
        "assigning_authority",
        "is_active",
        "city",
        "state",
        "last_updated_utc",
    )
    list_filter = ("is_active", "state", "tenant")
    search_fields = ("hospital_name", "hospital_code", "tenant__tenant_code", "city")
    readonly_fields = ("id", "created_utc", "last_updated_utc")
    ordering = ("tenant", "hospital_name")


@admin.register(Hl7Source)
class Hl7SourceAdmin(admin.ModelAdmin):
    list_display = ("source_code", "tenant", "hospital", "is_active")
    list_filter = ("is_active", "tenant")
    search_fields = ("source_code", "description")
