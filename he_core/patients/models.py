# he_core/patients/models.py
from django.db import models

from he_core.common.models import TenantScopedModel


class Patient(TenantScopedModel):
    """
    Tenant-level patient identity as received from HL7 PID segments.
    Matched on (tenant, patient_id_external, assigning_authority); a missing authority is stored as "".
    """
    patient_id_external = models.CharField(max_length=128)
    assigning_authority = models.CharField(max_length=128, blank=True, default="")

    mrn = models.CharField(max_length=64, blank=True, default="")
    family_name = models.CharField(max_length=128, blank=True, default="")
    given_name = models.CharField(max_length=128, blank=True, default="")
    dob = models.DateField(null=True, blank=True)
    sex = models.CharField(max_length=1, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    address_line1 = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    postal_code = models.CharField(max_length=16, blank=True, default="")
    country = models.CharField(max_length=64, blank=True, default="")

    first_seen_hospital = models.ForeignKey(
        "hospitals.Hospital",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        db_table = "patients_patient"
        constraints = [
            models.UniqueConstraint(
                fields=["tenant", "patient_id_external", "assigning_authority"],
                name="uq_patient_tenant_external_id",
            ),
        ]
        indexes = [
            models.Index(fields=["tenant", "mrn"]),
            models.Index(fields=["tenant", "family_name", "given_name"]),
            models.Index(fields=["tenant", "last_updated_utc"]),
        ]

    @property
    def patient_key(self) -> int:
        return self.pk

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.given_name, self.family_name) if p]
        return " ".join(parts) or self.patient_id_external

    def __str__(self) -> str:
        return f"{self.display_name} ({self.patient_id_external})"
