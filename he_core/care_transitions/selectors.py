# he_core/care_transitions/selectors.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import Case, IntegerField, Q, QuerySet, Value, When

from he_core.care_transitions.models import CareTransition, CareTransitionStatus, Level
from he_core.tcm.constants import LEVEL_RANK


def _rank(field: str) -> Case:
    return Case(
        *[When(**{field: level}, then=Value(rank)) for level, rank in LEVEL_RANK.items()],
        default=Value(0),
        output_field=IntegerField(),
    )


# ordering param -> order_by expressions
_ORDERINGS = {
    "last_updated_utc": ("last_updated_utc",),
    "-last_updated_utc": ("-last_updated_utc",),
    "next_outreach_date": ("next_outreach_date",),
    "-next_outreach_date": ("-next_outreach_date",),
    "tcm_schedule1": ("tcm_schedule1",),
    "-tcm_schedule1": ("-tcm_schedule1",),
    "priority": ("priority_rank",),
    "-priority": ("-priority_rank",),
    "risk_tier": ("risk_rank",),
    "-risk_tier": ("-risk_rank",),
}


class CareTransitionSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def base_qs(*, tenant_id: int) -> QuerySet[CareTransition]:
        return CareTransition.objects.filter(tenant_id=tenant_id).select_related(
            "encounter",
            "encounter__patient",
            "encounter__hospital",
            "assigned_to",
        )

    @staticmethod
    def get(*, tenant_id: int, care_transition_id: int) -> CareTransition:
        try:
            return (
                CareTransitionSelector.base_qs(tenant_id=tenant_id)
                .prefetch_related("outreach_logs")
                .get(id=care_transition_id)
            )
        except CareTransition.DoesNotExist:
            raise CareTransitionSelector.NotFound()

    @staticmethod
    def list(*, tenant_id: int, params: Any) -> QuerySet[CareTransition]:
        """
        Query params:
          - status, priority, risk_tier (exact)
          - assigned_to (membership key) or assigned_to=none
          - search: patient name / MRN / external id / visit number
          - ordering in {priority, risk_tier, next_outreach_date, tcm_schedule1, last_updated_utc}, '-' prefix for desc
        """
        status_param = params.get("status")
        priority = params.get("priority")
        risk_tier = params.get("risk_tier")
        assigned_to = params.get("assigned_to")
        search = (params.get("search") or "").strip()
        ordering = params.get("ordering") or "-last_updated_utc"

        qs = CareTransitionSelector.base_qs(tenant_id=tenant_id)

        if status_param:
            if status_param not in CareTransitionStatus.values:
                raise ValidationError(f"status is invalid. Allowed: {CareTransitionStatus.values}")
            qs = qs.filter(status=status_param)

        if priority:
            if priority not in Level.values:
                raise ValidationError(f"priority is invalid. Allowed: {Level.values}")
            qs = qs.filter(priority=priority)

        if risk_tier:
            if risk_tier not in Level.values:
                raise ValidationError(f"risk_tier is invalid. Allowed: {Level.values}")
            qs = qs.filter(risk_tier=risk_tier)

        if assigned_to:
            if assigned_to.lower() == "none":
                qs = qs.filter(assigned_to__isnull=True)
            elif assigned_to.isdigit():
                qs = qs.filter(assigned_to_id=int(assigned_to))
            else:
                raise ValidationError("assigned_to is invalid. Use a member key or 'none'.")

        if search:
            qs = qs.filter(
                Q(encounter__patient__family_name__icontains=search)
                | Q(encounter__patient__given_name__icontains=search)
                | Q(encounter__patient__mrn__icontains=search)
                | Q(encounter__patient__patient_id_external__icontains=search)
                | Q(encounter__visit_number__icontains=search)
            )

        if ordering not in _ORDERINGS:
            raise ValidationError(f"ordering is invalid. Allowed: {sorted(_ORDERINGS)}")

        qs = qs.annotate(priority_rank=_rank("priority"), risk_rank=_rank("risk_tier"))
        return qs.order_by(*_ORDERINGS[ordering], "-id")

    @staticmethod
    def for_metrics(*, tenant_id: int) -> QuerySet[CareTransition]:
        return CareTransition.objects.filter(tenant_id=tenant_id).only(
            "id",
            "encounter",
            "status",
            "risk_tier",
            "next_outreach_date",
            "outreach_date",
            "follow_up_appt_datetime",
            "outreach_attempts",
        )
