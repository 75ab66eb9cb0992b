# he_core/patients/admin.py
from django.contrib import admin

from he_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient_id_external",
        "assigning_authority",
        "mrn",
        "family_name",
        "given_name",
        "tenant",
        "last_updated_utc",
    )
    list_filter = ("tenant",)
    search_fields = ("patient_id_external", "mrn", "family_name", "given_name", "phone")
    readonly_fields = ("created_utc", "last_updated_utc")
    ordering = ("-last_updated_utc",)
