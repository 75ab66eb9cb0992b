# he_core/patients/services.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from he_core.common.results import UpsertResult, run_upsert
from he_core.hospitals.selectors import hospital_by_code_or_none
from he_core.patients.models import Patient
from he_core.tenants.selectors import get_tenant_or_none

logger = logging.getLogger(__name__)

# Demographics the feed may refresh on every message; identity fields are never overwritten.
_DEMOGRAPHIC_FIELDS = (
    "mrn",
    "family_name",
    "given_name",
    "dob",
    "sex",
    "phone",
    "address_line1",
    "city",
    "state",
    "postal_code",
    "country",
)


def normalize_authority(value: Optional[str]) -> str:
    return (value or "").strip()


class PatientService:
    @staticmethod
    def upsert(
        *,
        tenant_id: int,
        patient_id_external: str,
        assigning_authority: Optional[str] = None,
        first_seen_hospital_code: Optional[str] = None,
        mrn: Optional[str] = None,
        family_name: Optional[str] = None,
        given_name: Optional[str] = None,
        dob: Optional[date] = None,
        sex: Optional[str] = None,
        phone: Optional[str] = None,
        address_line1: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        postal_code: Optional[str] = None,
        country: Optional[str] = None,
    ) -> UpsertResult:
        demographics = {
            "mrn": mrn,
            "family_name": family_name,
            "given_name": given_name,
            "dob": dob,
            "sex": sex,
            "phone": phone,
            "address_line1": address_line1,
            "city": city,
            "state": state,
            "postal_code": postal_code,
            "country": country,
        }
        return run_upsert(
            "patient",
            lambda: PatientService._upsert(
                tenant_id=tenant_id,
                patient_id_external=patient_id_external,
                assigning_authority=assigning_authority,
                first_seen_hospital_code=first_seen_hospital_code,
                demographics=demographics,
            ).id,
            success_message="Patient upserted successfully",
        )

    @staticmethod
    @transaction.atomic
    def _upsert(
        *,
        tenant_id: int,
        patient_id_external: str,
        assigning_authority: Optional[str],
        first_seen_hospital_code: Optional[str],
        demographics: dict,
    ) -> Patient:
        if get_tenant_or_none(tenant_id=tenant_id) is None:
            raise DjangoValidationError(f"Tenant {tenant_id} does not exist.")

        external_id = (patient_id_external or "").strip()
        if not external_id:
            raise DjangoValidationError("PatientIdExternal is required.")
        authority = normalize_authority(assigning_authority)

        patient = (
            Patient.objects.select_for_update()
            .filter(tenant_id=tenant_id, patient_id_external=external_id, assigning_authority=authority)
            .first()
        )
        created = patient is None
        if created:
            patient = Patient(tenant_id=tenant_id, patient_id_external=external_id, assigning_authority=authority)

        # Absent values leave what we already know in place.
        for field in _DEMOGRAPHIC_FIELDS:
            value = demographics.get(field)
            if value is None:
                continue
            setattr(patient, field, value.strip() if isinstance(value, str) else value)

        if patient.first_seen_hospital_id is None and first_seen_hospital_code:
            hospital = hospital_by_code_or_none(tenant_id=tenant_id, code=first_seen_hospital_code)
            if hospital is not None:
                patient.first_seen_hospital = hospital

        patient.full_clean(exclude=["tenant", "first_seen_hospital"], validate_unique=False)
        patient.save()

        logger.info(
            "Patient %s tenant=%s key=%s external_id=%s",
            "created" if created else "updated",
            tenant_id,
            patient.id,
            external_id,
        )
        return patient
