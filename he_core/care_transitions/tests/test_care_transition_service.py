from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from he_core.care_transitions.models import CareTransition, OutreachLog
from he_core.care_transitions.services import CareTransitionClosedError, CareTransitionService

pytestmark = pytest.mark.django_db


def test_create_for_discharge_is_idempotent(tenant, discharged_encounter, care_transition):
    again = CareTransitionService.create_for_discharge(
        tenant_id=tenant.id,
        encounter_id=discharged_encounter.id,
        discharge_datetime=discharged_encounter.discharge_datetime + timedelta(days=3),
    )

    assert again.id == care_transition.id
    assert CareTransition.objects.count() == 1
    assert again.tcm_schedule1 == discharged_encounter.discharge_datetime + timedelta(days=2)


def test_first_outreach_moves_open_to_in_progress(tenant, user, care_transition):
    first_at = timezone.now() - timedelta(hours=3)
    ct = CareTransitionService.log_outreach(
        tenant_id=tenant.id,
        care_transition_id=care_transition.id,
        outcome="No Answer",
        outreach_at=first_at,
        author_id=user.id,
    )
    assert ct.status == "InProgress"
    assert ct.outreach_attempts == 1
    assert ct.outreach_date == first_at

    second_at = timezone.now()
    ct = CareTransitionService.log_outreach(
        tenant_id=tenant.id,
        care_transition_id=care_transition.id,
        method="Text",
        outcome="Reached",
        outreach_at=second_at,
    )
    assert ct.outreach_attempts == 2
    # first outreach date is kept
    assert ct.outreach_date == first_at
    assert ct.last_outreach_date == second_at
    assert ct.outreach_method == "Text"
    assert OutreachLog.objects.filter(care_transition=ct).count() == 2


def test_log_outreach_updates_next_outreach_date(tenant, care_transition):
    nxt = timezone.now() + timedelta(days=2)
    ct = CareTransitionService.log_outreach(
        tenant_id=tenant.id,
        care_transition_id=care_transition.id,
        next_outreach_date=nxt,
    )

    assert ct.next_outreach_date == nxt


def test_invalid_outreach_method_is_rejected(tenant, care_transition):
    with pytest.raises(ValidationError):
        CareTransitionService.log_outreach(tenant_id=tenant.id, care_transition_id=care_transition.id, method="Pigeon")


def test_closed_transition_rejects_every_mutation(tenant, user, care_transition):
    CareTransitionService.close(
        tenant_id=tenant.id,
        care_transition_id=care_transition.id,
        close_reason="Completed Successfully",
        closed_by_id=user.id,
    )

    mutations = [
        lambda: CareTransitionService.log_outreach(tenant_id=tenant.id, care_transition_id=care_transition.id),
        lambda: CareTransitionService.assign(tenant_id=tenant.id, care_transition_id=care_transition.id, membership_id=None),
        lambda: CareTransitionService.update_priority(
            tenant_id=tenant.id, care_transition_id=care_transition.id, priority="High"
        ),
        lambda: CareTransitionService.schedule_outreach(
            tenant_id=tenant.id, care_transition_id=care_transition.id, next_outreach_date=None
        ),
        lambda: CareTransitionService.close(
            tenant_id=tenant.id, care_transition_id=care_transition.id, close_reason="Other"
        ),
    ]
    for mutate in mutations:
        with pytest.raises(CareTransitionClosedError):
            mutate()

    ct = CareTransition.objects.get(id=care_transition.id)
    assert ct.status == "Closed"
    assert ct.close_reason == "Completed Successfully"
    assert ct.closed_at_utc is not None


def test_assign_requires_active_member_of_same_tenant(tenant, other_tenant, care_transition):
    from he_core.iam.models import Membership

    foreign = Membership.objects.create(tenant=other_tenant, email="x@example.com", is_active=True)

    with pytest.raises(ValidationError):
        CareTransitionService.assign(tenant_id=tenant.id, care_transition_id=care_transition.id, membership_id=foreign.id)


def test_tcm_schedule_is_not_touched_by_updates(tenant, care_transition):
    s1, s2 = care_transition.tcm_schedule1, care_transition.tcm_schedule2

    CareTransitionService.update_priority(
        tenant_id=tenant.id, care_transition_id=care_transition.id, priority="High", risk_tier="Low"
    )
    CareTransitionService.schedule_outreach(
        tenant_id=tenant.id, care_transition_id=care_transition.id, next_outreach_date=timezone.now()
    )

    ct = CareTransition.objects.get(id=care_transition.id)
    assert (ct.tcm_schedule1, ct.tcm_schedule2) == (s1, s2)
    assert (ct.priority, ct.risk_tier) == ("High", "Low")
