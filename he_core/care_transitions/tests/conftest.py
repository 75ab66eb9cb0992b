from datetime import timedelta

import pytest
from django.utils import timezone

from he_core.care_transitions.services import CareTransitionService
from he_core.encounters.models import Encounter


@pytest.fixture
def discharged_encounter(tenant, hospital, patient):
    now = timezone.now()
    return Encounter.objects.create(
        tenant=tenant,
        hospital=hospital,
        patient=patient,
        visit_number="V-CT-1",
        admit_datetime=now - timedelta(days=4),
        discharge_datetime=now - timedelta(days=1),
    )


@pytest.fixture
def care_transition(tenant, discharged_encounter):
    return CareTransitionService.create_for_discharge(
        tenant_id=tenant.id,
        encounter_id=discharged_encounter.id,
        discharge_datetime=discharged_encounter.discharge_datetime,
    )
