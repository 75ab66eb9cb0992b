# he_core/encounters/models.py
from django.db import models

from he_core.common.models import TenantScopedModel

# PV1-45 is empty until the patient leaves; visit status codes we treat as a readmission.
READMISSION_STATUSES = ("READMITTED", "R")


class Encounter(TenantScopedModel):
    """
    One hospital visit (PV1), keyed by visit number within the tenant.
    Admission/discharge are filled in as ADT messages arrive; the first recorded discharge opens a care transition.
    """
    hospital = models.ForeignKey("hospitals.Hospital", on_delete=models.PROTECT, related_name="encounters")
    patient = models.ForeignKey("patients.Patient", on_delete=models.PROTECT, related_name="encounters")

    visit_number = models.CharField(max_length=64)

    admit_datetime = models.DateTimeField(null=True, blank=True, db_index=True)
    discharge_datetime = models.DateTimeField(null=True, blank=True, db_index=True)

    patient_class = models.CharField(max_length=16, blank=True, default="")
    location = models.CharField(max_length=128, blank=True, default="")
    attending_doctor = models.CharField(max_length=128, blank=True, default="")
    primary_doctor = models.CharField(max_length=128, blank=True, default="")
    admitting_doctor = models.CharField(max_length=128, blank=True, default="")
    admit_source = models.CharField(max_length=64, blank=True, default="")
    visit_status = models.CharField(max_length=32, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    # MSH-10 control ids of the ADT messages that carried admit/discharge
    admit_message_id = models.CharField(max_length=256, blank=True, default="")
    discharge_message_id = models.CharField(max_length=256, blank=True, default="")

    class Meta:
        db_table = "encounters_encounter"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "visit_number"], name="uq_encounter_tenant_visit"),
        ]
        indexes = [
            models.Index(fields=["tenant", "patient"]),
            models.Index(fields=["tenant", "last_updated_utc"]),
        ]

    @property
    def encounter_key(self) -> int:
        return self.pk

    @property
    def is_readmission(self) -> bool:
        return (self.visit_status or "").strip().upper() in READMISSION_STATUSES

    def __str__(self) -> str:
        return f"Encounter({self.visit_number}, patient={self.patient_id})"
