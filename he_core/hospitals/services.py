# he_core/hospitals/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from rest_framework.exceptions import ValidationError

from he_core.hospitals.models import Hl7Source, Hospital

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HospitalUpdate:
    hospital_name: Optional[str] = None
    assigning_authority: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: Optional[bool] = None


class HospitalService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        tenant_id: int,
        hospital_code: str,
        hospital_name: str,
        assigning_authority: str = "",
        address: str = "",
        city: str = "",
        state: str = "",
        phone_number: str = "",
    ) -> Hospital:
        code = (hospital_code or "").strip()
        if not code:
            raise ValidationError({"hospital_code": "This field is required."})
        if Hospital.objects.filter(tenant_id=tenant_id, hospital_code=code).exists():
            raise ValidationError({"hospital_code": "Hospital code already exists for this tenant."})

        h = Hospital.objects.create(
            tenant_id=tenant_id,
            hospital_code=code,
            hospital_name=(hospital_name or "").strip(),
            assigning_authority=assigning_authority or "",
            address=address or "",
            city=city or "",
            state=state or "",
            phone_number=phone_number or "",
            is_active=True,
        )
        logger.info("Hospital created tenant=%s code=%s key=%s", tenant_id, code, h.id)
        return h

    @staticmethod
    @transaction.atomic
    def update(*, tenant_id: int, hospital_id: int, patch: HospitalUpdate) -> Hospital:
        h = Hospital.objects.select_for_update().get(id=hospital_id, tenant_id=tenant_id)

        mapping = {
            "hospital_name": patch.hospital_name,
            "assigning_authority": patch.assigning_authority,
            "address": patch.address,
            "city": patch.city,
            "state": patch.state,
            "phone_number": patch.phone_number,
            "is_active": patch.is_active,
        }
        for field, value in mapping.items():
            if value is not None:
                setattr(h, field, value)

        h.save()
        return h

    @staticmethod
    @transaction.atomic
    def deactivate(*, tenant_id: int, hospital_id: int) -> Hospital:
        h = Hospital.objects.select_for_update().get(id=hospital_id, tenant_id=tenant_id)
        if not h.is_active:
            return h
        h.is_active = False
        h.save(update_fields=["is_active", "last_updated_utc"])
        logger.info("Hospital deactivated tenant=%s key=%s", tenant_id, h.id)
        return h


class Hl7SourceService:
    @staticmethod
    @transaction.atomic
    def register(
        *,
        tenant_id: int,
        source_code: str,
        description: str = "",
        hospital_id: int | None = None,
    ) -> Hl7Source:
        code = (source_code or "").strip()
        if not code:
            raise ValidationError({"source_code": "This field is required."})

        if hospital_id is not None and not Hospital.objects.filter(id=hospital_id, tenant_id=tenant_id).exists():
            raise ValidationError({"hospital_key": "Hospital not found in this tenant."})

        source, _ = Hl7Source.objects.update_or_create(
            tenant_id=tenant_id,
            source_code=code,
            defaults={
                "description": description or "",
                "hospital_id": hospital_id,
                "is_active": True,
            },
        )
        return source
