# he_core/care_transitions/admin.py
from django.contrib import admin

from he_core.care_transitions.models import CareTransition, OutreachLog


class OutreachLogInline(admin.TabularInline):
    model = OutreachLog
    extra = 0
    readonly_fields = ("method", "outcome", "outreach_at", "next_outreach_date", "notes", "author", "created_utc")
    can_delete = False


@admin.register(CareTransition)
class CareTransitionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "tenant",
        "encounter",
        "status",
        "priority",
        "risk_tier",
        "next_outreach_date",
        "outreach_attempts",
        "assigned_to",
        "last_updated_utc",
    )
    list_filter = ("tenant", "status", "priority", "risk_tier")
    raw_id_fields = ("encounter", "assigned_to")
    readonly_fields = ("tcm_schedule1", "tcm_schedule2", "created_utc", "last_updated_utc")
    inlines = [OutreachLogInline]
    ordering = ("-last_updated_utc",)
