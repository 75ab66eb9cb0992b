# he_core/care_transitions/services.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils.timezone import now

from he_core.care_transitions.models import (
    CareTransition,
    CareTransitionStatus,
    CloseReason,
    Level,
    OutreachLog,
    OutreachMethod,
    OutreachOutcome,
)
from he_core.tcm.windows import derive_schedule

logger = logging.getLogger(__name__)


class CareTransitionClosedError(ValidationError):
    """Raised for any mutation attempted on a Closed care transition."""

    def __init__(self, care_transition_id: int):
        super().__init__(f"Care transition {care_transition_id} is closed and cannot be modified.")


class CareTransitionService:
    """
    Care transition write-model.

    Notes:
    - Workflow: Open -> InProgress (first logged outreach) -> Closed; Open -> Closed directly.
    - Closed is terminal: every mutation re-reads the row under lock and rejects Closed.
    - tcm_schedule1/2 are written once, in create_for_discharge.
    """

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _get_for_update(*, tenant_id: int, care_transition_id: int) -> CareTransition:
        ct = CareTransition.objects.select_for_update().get(id=care_transition_id, tenant_id=tenant_id)
        if ct.is_closed:
            raise CareTransitionClosedError(ct.id)
        return ct

    @staticmethod
    def _check_choice(value: str, choices, field: str) -> None:
        if value not in choices.values:
            raise ValidationError({field: f"'{value}' is not a valid choice."})

    # -------------------------
    # Create (idempotent per encounter)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def create_for_discharge(*, tenant_id: int, encounter_id: int, discharge_datetime: Optional[datetime]) -> CareTransition:
        schedule = derive_schedule(discharge_datetime)
        ct, created = CareTransition.objects.get_or_create(
            encounter_id=encounter_id,
            defaults={
                "tenant_id": tenant_id,
                "status": CareTransitionStatus.OPEN,
                "priority": Level.MEDIUM,
                "risk_tier": Level.MEDIUM,
                "tcm_schedule1": schedule.contact_by,
                "tcm_schedule2": schedule.follow_up_by,
            },
        )
        if created:
            logger.info("Care transition opened tenant=%s key=%s encounter=%s", tenant_id, ct.id, encounter_id)
        return ct

    # -------------------------
    # Outreach
    # -------------------------
    @staticmethod
    @transaction.atomic
    def log_outreach(
        *,
        tenant_id: int,
        care_transition_id: int,
        method: str = OutreachMethod.PHONE,
        outcome: str = OutreachOutcome.LEFT_VM,
        outreach_at: Optional[datetime] = None,
        next_outreach_date: Optional[datetime] = None,
        notes: str = "",
        author_id: Optional[int] = None,
    ) -> CareTransition:
        CareTransitionService._check_choice(method, OutreachMethod, "method")
        CareTransitionService._check_choice(outcome, OutreachOutcome, "outcome")

        ct = CareTransitionService._get_for_update(tenant_id=tenant_id, care_transition_id=care_transition_id)
        ts = outreach_at or now()

        OutreachLog.objects.create(
            care_transition=ct,
            method=method,
            outcome=outcome,
            outreach_at=ts,
            next_outreach_date=next_outreach_date,
            notes=notes or "",
            author_id=author_id,
        )

        ct.outreach_attempts += 1
        ct.last_outreach_date = ts
        ct.outreach_method = method
        if ct.outreach_date is None:
            ct.outreach_date = ts
        if next_outreach_date is not None:
            ct.next_outreach_date = next_outreach_date
        if ct.status == CareTransitionStatus.OPEN:
            ct.status = CareTransitionStatus.IN_PROGRESS

        ct.save(
            update_fields=[
                "outreach_attempts",
                "last_outreach_date",
                "outreach_method",
                "outreach_date",
                "next_outreach_date",
                "status",
                "last_updated_utc",
            ]
        )
        logger.info(
            "Outreach logged tenant=%s key=%s attempt=%s outcome=%s",
            tenant_id,
            ct.id,
            ct.outreach_attempts,
            outcome,
        )
        return ct

    @staticmethod
    @transaction.atomic
    def schedule_outreach(
        *,
        tenant_id: int,
        care_transition_id: int,
        next_outreach_date: Optional[datetime],
        follow_up_appt_datetime: Optional[datetime] = None,
    ) -> CareTransition:
        ct = CareTransitionService._get_for_update(tenant_id=tenant_id, care_transition_id=care_transition_id)

        ct.next_outreach_date = next_outreach_date
        update_fields = ["next_outreach_date", "last_updated_utc"]
        if follow_up_appt_datetime is not None:
            ct.follow_up_appt_datetime = follow_up_appt_datetime
            update_fields.append("follow_up_appt_datetime")

        ct.save(update_fields=update_fields)
        return ct

    # -------------------------
    # Assignment / triage
    # -------------------------
    @staticmethod
    @transaction.atomic
    def assign(*, tenant_id: int, care_transition_id: int, membership_id: Optional[int]) -> CareTransition:
        from he_core.iam.models import Membership

        ct = CareTransitionService._get_for_update(tenant_id=tenant_id, care_transition_id=care_transition_id)

        if membership_id is not None:
            exists = Membership.objects.filter(id=membership_id, tenant_id=tenant_id, is_active=True).exists()
            if not exists:
                raise ValidationError({"assigned_to": "Assignee must be an active member of this tenant."})

        if ct.assigned_to_id == membership_id:
            return ct

        ct.assigned_to_id = membership_id
        ct.save(update_fields=["assigned_to", "last_updated_utc"])
        logger.info("Care transition assigned tenant=%s key=%s member=%s", tenant_id, ct.id, membership_id)
        return ct

    @staticmethod
    @transaction.atomic
    def update_priority(
        *,
        tenant_id: int,
        care_transition_id: int,
        priority: Optional[str] = None,
        risk_tier: Optional[str] = None,
    ) -> CareTransition:
        if priority is None and risk_tier is None:
            raise ValidationError("Provide priority and/or risk_tier.")
        if priority is not None:
            CareTransitionService._check_choice(priority, Level, "priority")
        if risk_tier is not None:
            CareTransitionService._check_choice(risk_tier, Level, "risk_tier")

        ct = CareTransitionService._get_for_update(tenant_id=tenant_id, care_transition_id=care_transition_id)

        update_fields = ["last_updated_utc"]
        if priority is not None:
            ct.priority = priority
            update_fields.append("priority")
        if risk_tier is not None:
            ct.risk_tier = risk_tier
            update_fields.append("risk_tier")

        ct.save(update_fields=update_fields)
        return ct

    # -------------------------
    # Close (terminal)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def close(
        *,
        tenant_id: int,
        care_transition_id: int,
        close_reason: str,
        notes: str = "",
        closed_by_id: Optional[int] = None,
    ) -> CareTransition:
        CareTransitionService._check_choice(close_reason, CloseReason, "close_reason")

        ct = CareTransitionService._get_for_update(tenant_id=tenant_id, care_transition_id=care_transition_id)

        prev_status = ct.status
        ct.status = CareTransitionStatus.CLOSED
        ct.close_reason = close_reason
        ct.closed_at_utc = now()
        ct.closed_by_id = closed_by_id
        if notes:
            ct.notes = f"{ct.notes}\n{notes}".strip() if ct.notes else notes

        ct.save(
            update_fields=[
                "status",
                "close_reason",
                "closed_at_utc",
                "closed_by",
                "notes",
                "last_updated_utc",
            ]
        )
        logger.info(
            "Care transition closed tenant=%s key=%s from=%s reason=%s",
            tenant_id,
            ct.id,
            prev_status,
            close_reason,
        )
        return ct
