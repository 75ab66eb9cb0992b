# he_core/audit/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from he_core.audit.models import Hl7MessageAudit


def audits_for_tenant(*, tenant_id: int) -> QuerySet[Hl7MessageAudit]:
    return Hl7MessageAudit.objects.filter(tenant_id=tenant_id).order_by("-processed_utc", "-id")
