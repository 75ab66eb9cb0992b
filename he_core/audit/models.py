# he_core/audit/models.py
from django.db import models
from django.utils import timezone

from he_core.common.models import TenantScopedModel


class Hl7MessageAudit(TenantScopedModel):
    """
    Immutable record of one HL7 message as processed by the interface engine.
    Source and hospital are linked when their codes are known to the tenant; the raw codes are always kept.
    """
    message_control_id = models.CharField(max_length=256, db_index=True)  # MSH-10
    message_type = models.CharField(max_length=16, db_index=True)  # e.g. "ADT^A03"
    event_timestamp = models.DateTimeField(null=True, blank=True)

    source_code = models.CharField(max_length=64, blank=True, default="")
    source = models.ForeignKey(
        "hospitals.Hl7Source",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    hospital_code = models.CharField(max_length=64, blank=True, default="")
    hospital = models.ForeignKey(
        "hospitals.Hospital",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    raw_message = models.TextField(blank=True, default="")
    status = models.CharField(max_length=32, db_index=True)
    error_text = models.TextField(blank=True, default="")

    processed_utc = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "audit_hl7_message_audit"
        indexes = [
            models.Index(fields=["tenant", "processed_utc"]),
            models.Index(fields=["tenant", "message_control_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.message_type} {self.message_control_id} ({self.status})"
