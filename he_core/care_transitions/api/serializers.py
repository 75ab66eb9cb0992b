# he_core/care_transitions/api/serializers.py
from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from he_core.care_transitions.models import (
    CareTransition,
    CloseReason,
    Level,
    OutreachLog,
    OutreachMethod,
    OutreachOutcome,
)
from he_core.tcm.windows import classify_due_date, outreach_status, tcm_contact_status


class DueBadgeSerializer(serializers.Serializer):
    label = serializers.CharField()
    tier = serializers.CharField()
    days_until = serializers.IntegerField()


def _badge(value, now):
    b = classify_due_date(value, now)
    if b is None:
        return None
    return {"label": b.label, "tier": b.tier.value, "days_until": b.days_until}


class OutreachLogSerializer(serializers.ModelSerializer):
    author_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = OutreachLog
        fields = ["id", "method", "outcome", "outreach_at", "next_outreach_date", "notes", "author_id", "created_utc"]
        read_only_fields = fields


class CareTransitionSerializer(serializers.ModelSerializer):
    """
    List row: the care transition plus the patient/encounter fields the worklist shows,
    and badges computed against the request time.
    """
    care_transition_key = serializers.IntegerField(source="id", read_only=True)
    tenant_key = serializers.IntegerField(source="tenant_id", read_only=True)
    encounter_key = serializers.IntegerField(source="encounter_id", read_only=True)
    patient_key = serializers.IntegerField(source="encounter.patient_id", read_only=True)
    visit_number = serializers.CharField(source="encounter.visit_number", read_only=True)
    patient_name = serializers.CharField(source="encounter.patient.display_name", read_only=True)
    mrn = serializers.CharField(source="encounter.patient.mrn", read_only=True)
    hospital_name = serializers.CharField(source="encounter.hospital.hospital_name", read_only=True)
    admit_datetime = serializers.DateTimeField(source="encounter.admit_datetime", read_only=True)
    discharge_datetime = serializers.DateTimeField(source="encounter.discharge_datetime", read_only=True)
    assigned_to_key = serializers.IntegerField(source="assigned_to_id", read_only=True, allow_null=True)
    assigned_to_name = serializers.SerializerMethodField()

    due_badge = serializers.SerializerMethodField()
    outreach_status = serializers.SerializerMethodField()
    tcm_status = serializers.SerializerMethodField()

    class Meta:
        model = CareTransition
        fields = [
            "care_transition_key",
            "tenant_key",
            "encounter_key",
            "patient_key",
            "visit_number",
            "patient_name",
            "mrn",
            "hospital_name",
            "admit_datetime",
            "discharge_datetime",
            "status",
            "priority",
            "risk_tier",
            "tcm_schedule1",
            "tcm_schedule2",
            "next_outreach_date",
            "last_outreach_date",
            "outreach_date",
            "outreach_method",
            "outreach_attempts",
            "follow_up_appt_datetime",
            "assigned_to_key",
            "assigned_to_name",
            "close_reason",
            "closed_at_utc",
            "notes",
            "due_badge",
            "outreach_status",
            "tcm_status",
            "last_updated_utc",
        ]
        read_only_fields = fields

    def _now(self):
        return self.context.get("now") or timezone.now()

    def get_assigned_to_name(self, obj) -> str | None:
        m = obj.assigned_to
        return m.display_name if m is not None else None

    @extend_schema_field(DueBadgeSerializer(allow_null=True))
    def get_due_badge(self, obj):
        return _badge(obj.next_outreach_date, self._now())

    def get_outreach_status(self, obj) -> str | None:
        return outreach_status(obj.next_outreach_date, self._now())

    def get_tcm_status(self, obj) -> str | None:
        return tcm_contact_status(
            obj.encounter.discharge_datetime,
            obj.outreach_date,
            obj.tcm_schedule1,
            self._now(),
        )


class CareTransitionDetailSerializer(CareTransitionSerializer):
    outreach_logs = OutreachLogSerializer(many=True, read_only=True)
    tcm_schedule1_badge = serializers.SerializerMethodField()
    tcm_schedule2_badge = serializers.SerializerMethodField()

    class Meta(CareTransitionSerializer.Meta):
        fields = CareTransitionSerializer.Meta.fields + [
            "tcm_schedule1_badge",
            "tcm_schedule2_badge",
            "outreach_logs",
        ]
        read_only_fields = fields

    @extend_schema_field(DueBadgeSerializer(allow_null=True))
    def get_tcm_schedule1_badge(self, obj):
        return _badge(obj.tcm_schedule1, self._now())

    @extend_schema_field(DueBadgeSerializer(allow_null=True))
    def get_tcm_schedule2_badge(self, obj):
        return _badge(obj.tcm_schedule2, self._now())


# ---------------------------------------------------------------------
# Action payloads
# ---------------------------------------------------------------------
class LogOutreachSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=OutreachMethod.choices, default=OutreachMethod.PHONE)
    outcome = serializers.ChoiceField(choices=OutreachOutcome.choices, default=OutreachOutcome.LEFT_VM)
    outreach_at = serializers.DateTimeField(required=False, allow_null=True)
    next_outreach_date = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AssignSerializer(serializers.Serializer):
    # null unassigns
    assigned_to_key = serializers.IntegerField(allow_null=True, min_value=1)


class UpdatePrioritySerializer(serializers.Serializer):
    priority = serializers.ChoiceField(choices=Level.choices, required=False)
    risk_tier = serializers.ChoiceField(choices=Level.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide priority and/or risk_tier.")
        return attrs


class ScheduleOutreachSerializer(serializers.Serializer):
    next_outreach_date = serializers.DateTimeField(allow_null=True)
    follow_up_appt_datetime = serializers.DateTimeField(required=False, allow_null=True)


class CloseSerializer(serializers.Serializer):
    close_reason = serializers.ChoiceField(choices=CloseReason.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class TCMMetricsSerializer(serializers.Serializer):
    total_open = serializers.IntegerField()
    total_in_progress = serializers.IntegerField()
    total_closed = serializers.IntegerField()
    overdue = serializers.IntegerField()
    due_today = serializers.IntegerField()
    tcm_contact_within_2_days = serializers.IntegerField()
    follow_up_within_14_days = serializers.IntegerField()
    avg_outreach_attempts = serializers.FloatField()
    compliance_rate = serializers.IntegerField()
    follow_up_rate = serializers.IntegerField()
    readmission_rate = serializers.IntegerField()


class MonthlyTrendSerializer(serializers.Serializer):
    month = serializers.CharField()
    admissions = serializers.IntegerField()
    discharges = serializers.IntegerField()


class ExecutiveSummarySerializer(serializers.Serializer):
    active_encounters = serializers.IntegerField()
    admitted_this_month = serializers.IntegerField()
    discharged_this_month = serializers.IntegerField()
    avg_length_of_stay = serializers.FloatField()
    active_care_transitions = serializers.IntegerField()
    pending_follow_ups = serializers.IntegerField()
    readmission_rate = serializers.IntegerField()
    risk_distribution = serializers.DictField(child=serializers.IntegerField())
    monthly_trends = MonthlyTrendSerializer(many=True)
