# he_core/hospitals/models.py
from __future__ import annotations

from django.db import models

from he_core.common.models import TenantScopedModel


class Hospital(TenantScopedModel):
    """
    A sending facility under a Tenant.
    Encounters reference it by `hospital_code`, unique per tenant.
    """

    hospital_code = models.CharField(max_length=64)
    hospital_name = models.CharField(max_length=200)

    # HL7 assigning authority for MRNs issued by this hospital (PID-3.4)
    assigning_authority = models.CharField(max_length=64, blank=True, default="")

    # Contact / address (optional)
    address = models.CharField(max_length=255, blank=True, default="")
    city = models.CharField(max_length=128, blank=True, default="")
    state = models.CharField(max_length=64, blank=True, default="")
    phone_number = models.CharField(max_length=32, blank=True, default="")

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "hospitals_hospital"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "hospital_code"], name="uq_hospital_tenant_code"),
        ]
        indexes = [
            models.Index(fields=["tenant", "is_active"]),
        ]

    @property
    def hospital_key(self) -> int:
        return self.pk

    def __str__(self) -> str:
        return f"{self.hospital_name} ({self.hospital_code})"


class Hl7Source(TenantScopedModel):
    """
    A registered HL7 feed (interface engine channel) delivering messages for a tenant.
    """

    source_code = models.CharField(max_length=64)
    description = models.CharField(max_length=200, blank=True, default="")
    hospital = models.ForeignKey(
        Hospital,
        on_delete=models.PROTECT,
        related_name="hl7_sources",
        null=True,
        blank=True,
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "hospitals_hl7_source"
        constraints = [
            models.UniqueConstraint(fields=["tenant", "source_code"], name="uq_hl7source_tenant_code"),
        ]

    def __str__(self) -> str:
        return self.source_code
