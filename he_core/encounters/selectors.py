# he_core/encounters/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from he_core.encounters.models import Encounter


def get_encounter(*, tenant_id: int, encounter_id: int) -> Encounter:
    return Encounter.objects.get(id=encounter_id, tenant_id=tenant_id)


def encounters_for_tenant(*, tenant_id: int) -> QuerySet[Encounter]:
    return Encounter.objects.filter(tenant_id=tenant_id).order_by("-last_updated_utc", "-id")


def encounters_for_patient(*, tenant_id: int, patient_id: int) -> QuerySet[Encounter]:
    return (
        Encounter.objects.filter(tenant_id=tenant_id, patient_id=patient_id)
        .order_by("-last_updated_utc", "-id")
    )


def encounters_for_metrics(*, tenant_id: int) -> QuerySet[Encounter]:
    return Encounter.objects.filter(tenant_id=tenant_id).only(
        "id",
        "patient",
        "admit_datetime",
        "discharge_datetime",
        "visit_status",
    )
