# he_core/audit/admin.py
from django.contrib import admin

from he_core.audit.models import Hl7MessageAudit


@admin.register(Hl7MessageAudit)
class Hl7MessageAuditAdmin(admin.ModelAdmin):
    list_display = (
        "message_control_id",
        "message_type",
        "status",
        "tenant",
        "source_code",
        "hospital_code",
        "processed_utc",
    )
    list_filter = ("tenant", "message_type", "status")
    search_fields = ("message_control_id", "source_code", "hospital_code")
    readonly_fields = ("processed_utc", "created_utc", "last_updated_utc")
    ordering = ("-processed_utc",)
