# he_core/encounters/admin.py
from django.contrib import admin

from he_core.encounters.models import Encounter


@admin.register(Encounter)
class EncounterAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "visit_number",
        "tenant",
        "hospital",
        "patient",
        "admit_datetime",
        "discharge_datetime",
        "visit_status",
        "last_updated_utc",
    )
    list_filter = ("tenant", "hospital", "patient_class", "visit_status")
    search_fields = ("visit_number", "admit_message_id", "discharge_message_id")
    raw_id_fields = ("patient", "hospital")
    readonly_fields = ("created_utc", "last_updated_utc")
    ordering = ("-last_updated_utc",)
