# he_core/encounters/services.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from he_core.common.events import publish
from he_core.common.results import UpsertResult, run_upsert
from he_core.encounters.models import Encounter
from he_core.hospitals.selectors import hospital_by_code_or_none
from he_core.patients.models import Patient

logger = logging.getLogger(__name__)

ENCOUNTER_DISCHARGED = "encounter.discharged"

_DETAIL_FIELDS = (
    "patient_class",
    "location",
    "attending_doctor",
    "primary_doctor",
    "admitting_doctor",
    "admit_source",
    "visit_status",
    "notes",
    "admit_message_id",
    "discharge_message_id",
)


class EncounterService:
    @staticmethod
    def upsert(
        *,
        tenant_id: int,
        hospital_code: str,
        visit_number: str,
        patient_id: int,
        admit_datetime: Optional[datetime] = None,
        discharge_datetime: Optional[datetime] = None,
        **details,
    ) -> UpsertResult:
        unknown = set(details) - set(_DETAIL_FIELDS)
        if unknown:
            raise TypeError(f"Unexpected encounter fields: {sorted(unknown)}")

        return run_upsert(
            "encounter",
            lambda: EncounterService._upsert(
                tenant_id=tenant_id,
                hospital_code=hospital_code,
                visit_number=visit_number,
                patient_id=patient_id,
                admit_datetime=admit_datetime,
                discharge_datetime=discharge_datetime,
                details=details,
            ).id,
            success_message="Encounter upserted successfully",
        )

    @staticmethod
    @transaction.atomic
    def _upsert(
        *,
        tenant_id: int,
        hospital_code: str,
        visit_number: str,
        patient_id: int,
        admit_datetime: Optional[datetime],
        discharge_datetime: Optional[datetime],
        details: dict,
    ) -> Encounter:
        visit = (visit_number or "").strip()
        if not visit:
            raise DjangoValidationError("VisitNumber is required.")

        hospital = hospital_by_code_or_none(tenant_id=tenant_id, code=hospital_code)
        if hospital is None:
            raise DjangoValidationError(f"Hospital '{hospital_code}' not found for tenant {tenant_id}.")

        if not Patient.objects.filter(id=patient_id, tenant_id=tenant_id).exists():
            raise DjangoValidationError(f"Patient {patient_id} not found for tenant {tenant_id}.")

        enc = Encounter.objects.select_for_update().filter(tenant_id=tenant_id, visit_number=visit).first()
        created = enc is None
        if created:
            enc = Encounter(tenant_id=tenant_id, visit_number=visit)

        was_discharged = enc.discharge_datetime is not None

        enc.hospital = hospital
        enc.patient_id = patient_id
        if admit_datetime is not None:
            enc.admit_datetime = admit_datetime
        if discharge_datetime is not None:
            enc.discharge_datetime = discharge_datetime

        for field in _DETAIL_FIELDS:
            value = details.get(field)
            if value is not None:
                setattr(enc, field, value.strip() if isinstance(value, str) else value)

        enc.full_clean(exclude=["tenant", "hospital", "patient"], validate_unique=False)
        enc.save()

        logger.info(
            "Encounter %s tenant=%s key=%s visit=%s",
            "created" if created else "updated",
            tenant_id,
            enc.id,
            visit,
        )

        if not was_discharged and enc.discharge_datetime is not None:
            publish(
                ENCOUNTER_DISCHARGED,
                {
                    "tenant_id": tenant_id,
                    "encounter_id": enc.id,
                    "patient_id": enc.patient_id,
                    "discharge_datetime": enc.discharge_datetime,
                },
            )

        return enc
