# he_core/audit/services.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from he_core.audit.models import Hl7MessageAudit
from he_core.common.results import UpsertResult, run_upsert
from he_core.hospitals.models import Hl7Source
from he_core.hospitals.selectors import hospital_by_code_or_none
from he_core.tenants.selectors import get_tenant_or_none


class AuditService:
    """
    Central HL7 audit writer.
    Rows are append-only; nothing updates or deletes them.
    """

    @staticmethod
    def write(
        *,
        tenant_id: int,
        message_control_id: str,
        message_type: str,
        status: str,
        event_timestamp: Optional[datetime] = None,
        source_code: Optional[str] = None,
        hospital_code: Optional[str] = None,
        raw_message: Optional[str] = None,
        error_text: Optional[str] = None,
    ) -> UpsertResult:
        return run_upsert(
            "audit record",
            lambda: AuditService._write(
                tenant_id=tenant_id,
                message_control_id=message_control_id,
                message_type=message_type,
                status=status,
                event_timestamp=event_timestamp,
                source_code=(source_code or "").strip(),
                hospital_code=(hospital_code or "").strip(),
                raw_message=raw_message or "",
                error_text=error_text or "",
            ).id,
            success_message="Audit record written successfully",
        )

    @staticmethod
    @transaction.atomic
    def _write(
        *,
        tenant_id: int,
        message_control_id: str,
        message_type: str,
        status: str,
        event_timestamp: Optional[datetime],
        source_code: str,
        hospital_code: str,
        raw_message: str,
        error_text: str,
    ) -> Hl7MessageAudit:
        if get_tenant_or_none(tenant_id=tenant_id) is None:
            raise DjangoValidationError(f"Tenant {tenant_id} does not exist.")

        source = None
        if source_code:
            source = Hl7Source.objects.filter(tenant_id=tenant_id, source_code=source_code).first()

        record = Hl7MessageAudit(
            tenant_id=tenant_id,
            message_control_id=(message_control_id or "").strip(),
            message_type=(message_type or "").strip(),
            status=(status or "").strip(),
            event_timestamp=event_timestamp,
            source_code=source_code,
            source=source,
            hospital_code=hospital_code,
            hospital=hospital_by_code_or_none(tenant_id=tenant_id, code=hospital_code),
            raw_message=raw_message,
            error_text=error_text,
        )
        record.full_clean(exclude=["tenant", "source", "hospital"])
        record.save()
        return record
