# he_core/patients/selectors.py
from __future__ import annotations

from django.db.models import Q, QuerySet

from he_core.patients.models import Patient


def get_patient(*, tenant_id: int, patient_id: int) -> Patient:
    return Patient.objects.get(id=patient_id, tenant_id=tenant_id)


def patients_for_tenant(*, tenant_id: int, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.filter(tenant_id=tenant_id)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(family_name__icontains=qv)
            | Q(given_name__icontains=qv)
            | Q(mrn__icontains=qv)
            | Q(patient_id_external__icontains=qv)
        )

    return qs.order_by("-last_updated_utc", "-id")
