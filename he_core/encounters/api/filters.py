# he_core/encounters/api/filters.py
from __future__ import annotations

from django.db.models import Q
from django_filters import rest_framework as filters

from he_core.encounters.models import Encounter


class EncounterFilter(filters.FilterSet):
    """
    Discharge worklist filters over a tenant's encounters.
    `search` matches the patient's name, MRN or external id.
    """
    visit_status = filters.CharFilter(field_name="visit_status", lookup_expr="iexact")
    hospital = filters.NumberFilter(field_name="hospital_id")
    hospital_code = filters.CharFilter(field_name="hospital__hospital_code", lookup_expr="exact")

    # calendar dates, inclusive on both ends
    discharge_from = filters.DateFilter(field_name="discharge_datetime", lookup_expr="date__gte")
    discharge_to = filters.DateFilter(field_name="discharge_datetime", lookup_expr="date__lte")

    search = filters.CharFilter(method="filter_search")

    class Meta:
        model = Encounter
        fields = [
            "visit_status",
            "hospital",
            "hospital_code",
            "discharge_from",
            "discharge_to",
            "search",
        ]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(patient__family_name__icontains=value)
            | Q(patient__given_name__icontains=value)
            | Q(patient__mrn__icontains=value)
            | Q(patient__patient_id_external__icontains=value)
        )
