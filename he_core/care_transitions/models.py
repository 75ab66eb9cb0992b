# he_core/care_transitions/models.py
from django.conf import settings
from django.db import models

from he_core.common.models import TenantScopedModel
from he_core.tcm import constants as tcm


class CareTransitionStatus(models.TextChoices):
    OPEN = tcm.STATUS_OPEN, "Open"
    IN_PROGRESS = tcm.STATUS_IN_PROGRESS, "In Progress"
    CLOSED = tcm.STATUS_CLOSED, "Closed"


class Level(models.TextChoices):
    LOW = tcm.LEVEL_LOW, "Low"
    MEDIUM = tcm.LEVEL_MEDIUM, "Medium"
    HIGH = tcm.LEVEL_HIGH, "High"


class OutreachMethod(models.TextChoices):
    PHONE = "Phone", "Phone"
    TEXT = "Text", "Text"
    EMAIL = "Email", "Email"
    IN_PERSON = "In Person", "In Person"
    VIDEO = "Video", "Video"
    LETTER = "Letter", "Letter"


class OutreachOutcome(models.TextChoices):
    LEFT_VM = "Left VM", "Left VM"
    REACHED = "Reached", "Reached"
    NO_ANSWER = "No Answer", "No Answer"
    WRONG_NUMBER = "Wrong Number", "Wrong Number"
    DECLINED = "Declined", "Declined"
    SCHEDULED_FOLLOW_UP = "Scheduled Follow-up", "Scheduled Follow-up"


class CloseReason(models.TextChoices):
    COMPLETED = "Completed Successfully", "Completed Successfully"
    DISCHARGED = "Patient Discharged", "Patient Discharged"
    DECLINED = "Patient Declined Services", "Patient Declined Services"
    UNABLE_TO_CONTACT = "Unable to Contact", "Unable to Contact"
    TRANSFERRED = "Transferred to Another Facility", "Transferred to Another Facility"
    NO_LONGER_NEEDED = "No Longer Needed", "No Longer Needed"
    OTHER = "Other", "Other"


class CareTransition(TenantScopedModel):
    """
    Post-discharge follow-up obligation for one encounter.
    Created when the discharge is first recorded; closed, never deleted.
    """
    encounter = models.OneToOneField(
        "encounters.Encounter",
        on_delete=models.PROTECT,
        related_name="care_transition",
    )

    status = models.CharField(
        max_length=16,
        choices=CareTransitionStatus.choices,
        default=CareTransitionStatus.OPEN,
        db_index=True,
    )
    priority = models.CharField(max_length=8, choices=Level.choices, default=Level.MEDIUM, db_index=True)
    risk_tier = models.CharField(max_length=8, choices=Level.choices, default=Level.MEDIUM, db_index=True)

    # discharge + 2d / + 14d, fixed at creation
    tcm_schedule1 = models.DateTimeField(null=True, blank=True)
    tcm_schedule2 = models.DateTimeField(null=True, blank=True)

    outreach_attempts = models.PositiveIntegerField(default=0)
    outreach_date = models.DateTimeField(null=True, blank=True)
    outreach_method = models.CharField(max_length=16, choices=OutreachMethod.choices, blank=True, default="")
    last_outreach_date = models.DateTimeField(null=True, blank=True)
    next_outreach_date = models.DateTimeField(null=True, blank=True, db_index=True)
    follow_up_appt_datetime = models.DateTimeField(null=True, blank=True)

    assigned_to = models.ForeignKey(
        "iam.Membership",
        on_delete=models.SET_NULL,
        related_name="assigned_care_transitions",
        null=True,
        blank=True,
    )

    close_reason = models.CharField(max_length=64, choices=CloseReason.choices, blank=True, default="")
    closed_at_utc = models.DateTimeField(null=True, blank=True)
    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )

    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "care_transitions_care_transition"
        indexes = [
            models.Index(fields=["tenant", "status", "next_outreach_date"]),
            models.Index(fields=["tenant", "assigned_to", "status"]),
            models.Index(fields=["tenant", "last_updated_utc"]),
        ]

    @property
    def is_closed(self) -> bool:
        return self.status == CareTransitionStatus.CLOSED

    def __str__(self) -> str:
        return f"CareTransition({self.encounter_id}, {self.status})"


class OutreachLog(models.Model):
    """
    Append-only history of outreach attempts for a care transition.
    """
    care_transition = models.ForeignKey(CareTransition, on_delete=models.CASCADE, related_name="outreach_logs")

    method = models.CharField(max_length=16, choices=OutreachMethod.choices, default=OutreachMethod.PHONE)
    outcome = models.CharField(max_length=32, choices=OutreachOutcome.choices, default=OutreachOutcome.LEFT_VM)
    outreach_at = models.DateTimeField()
    next_outreach_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    created_utc = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "care_transitions_outreach_log"
        ordering = ["-outreach_at", "-id"]
        indexes = [
            models.Index(fields=["care_transition", "outreach_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.method} {self.outcome} @ {self.outreach_at:%Y-%m-%d %H:%M}"
