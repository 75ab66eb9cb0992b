# he_core/hospitals/selectors.py
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from he_core.hospitals.models import Hl7Source, Hospital


def hospitals_for_tenant(*, tenant_id: int, active_only: bool = True) -> QuerySet[Hospital]:
    qs = Hospital.objects.filter(tenant_id=tenant_id)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("hospital_name", "id")


def hospital_by_id(*, tenant_id: int, hospital_id: int) -> Hospital:
    return Hospital.objects.get(id=hospital_id, tenant_id=tenant_id)


def hospital_by_code_or_none(*, tenant_id: int, code: str) -> Optional[Hospital]:
    code = (code or "").strip()
    if not code:
        return None
    return Hospital.objects.filter(tenant_id=tenant_id, hospital_code=code).first()


def sources_for_tenant(*, tenant_id: int, active_only: bool = True) -> QuerySet[Hl7Source]:
    qs = Hl7Source.objects.filter(tenant_id=tenant_id).select_related("hospital")
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("source_code")
