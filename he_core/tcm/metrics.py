# he_core/tcm/metrics.py
"""
Dashboard aggregates over tenant-filtered care transitions and encounters.

Inputs are any objects exposing the model attribute names:
  care transition: status, encounter_id, next_outreach_date, outreach_date,
                   follow_up_appt_datetime, outreach_attempts, risk_tier
  encounter:       id, patient_id, admit_datetime, discharge_datetime, visit_status
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from he_core.tcm.constants import (
    LEVEL_HIGH,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    READMISSION_STATUSES,
    READMISSION_WINDOW,
    STATUS_CLOSED,
    STATUS_IN_PROGRESS,
    STATUS_OPEN,
    TCM_CONTACT_WINDOW,
    TCM_FOLLOW_UP_WINDOW,
    TREND_MONTHS,
)
from he_core.tcm.windows import days_until


@dataclass(frozen=True)
class TCMMetrics:
    total_open: int = 0
    total_in_progress: int = 0
    total_closed: int = 0
    overdue: int = 0
    due_today: int = 0
    tcm_contact_within_2_days: int = 0
    follow_up_within_14_days: int = 0
    avg_outreach_attempts: float = 0.0

    @property
    def total(self) -> int:
        return self.total_open + self.total_in_progress + self.total_closed

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyTrend:
    month: str
    admissions: int = 0
    discharges: int = 0


@dataclass(frozen=True)
class ExecutiveSummary:
    active_encounters: int = 0
    admitted_this_month: int = 0
    discharged_this_month: int = 0
    avg_length_of_stay: float = 0.0
    active_care_transitions: int = 0
    pending_follow_ups: int = 0
    readmission_rate: int = 0
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    monthly_trends: List[MonthlyTrend] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _percent(numerator: int, denominator: int) -> int:
    return _round_half_up(numerator / max(denominator, 1) * 100)


def _clamp(value: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, value))


def _discharge_index(encounters: Iterable) -> Dict[int, Optional[datetime]]:
    return {e.id: e.discharge_datetime for e in encounters}


def aggregate(care_transitions: Iterable, encounters: Iterable, now: datetime) -> TCMMetrics:
    """
    Status counts and window compliance for the metrics panel.

    The 2-day and 14-day checks compare exact elapsed time (`outreach - discharge <= 2 days`).
    The per-row "TCM ✓" badge (`windows.tcm_contact_status`) floors to whole days instead,
    so a contact at discharge + 2d20h shows the badge but is not counted here.
    """
    rows = list(care_transitions)
    discharges = _discharge_index(encounters)

    counts = {STATUS_OPEN: 0, STATUS_IN_PROGRESS: 0, STATUS_CLOSED: 0}
    overdue = due_today = contact_ok = follow_up_ok = 0
    attempts = 0

    for ct in rows:
        if ct.status in counts:
            counts[ct.status] += 1

        if ct.next_outreach_date is not None:
            n = days_until(ct.next_outreach_date, now)
            if n < 0 and ct.status != STATUS_CLOSED:
                overdue += 1
            if n == 0:
                due_today += 1

        discharge = discharges.get(ct.encounter_id)
        if discharge is not None:
            if ct.outreach_date is not None and ct.outreach_date - discharge <= TCM_CONTACT_WINDOW:
                contact_ok += 1
            if (
                ct.follow_up_appt_datetime is not None
                and ct.follow_up_appt_datetime - discharge <= TCM_FOLLOW_UP_WINDOW
            ):
                follow_up_ok += 1

        attempts += ct.outreach_attempts or 0

    return TCMMetrics(
        total_open=counts[STATUS_OPEN],
        total_in_progress=counts[STATUS_IN_PROGRESS],
        total_closed=counts[STATUS_CLOSED],
        overdue=overdue,
        due_today=due_today,
        tcm_contact_within_2_days=contact_ok,
        follow_up_within_14_days=follow_up_ok,
        avg_outreach_attempts=(attempts / len(rows)) if rows else 0.0,
    )


def compliance_rate(m: TCMMetrics) -> int:
    """Share of active transitions whose first contact landed inside the 2-day window."""
    return _clamp(_percent(m.tcm_contact_within_2_days, m.total_open + m.total_in_progress))


def follow_up_rate(m: TCMMetrics) -> int:
    return _clamp(_percent(m.follow_up_within_14_days, m.total_open + m.total_in_progress))


def _is_readmission(encounter) -> bool:
    return (encounter.visit_status or "").strip().upper() in READMISSION_STATUSES


def readmission_rate(encounters: Iterable, now: datetime, *, causal: bool = True) -> int:
    """
    30-day readmission rate as a whole percentage.

    The denominator is encounters discharged in [now - 30d, now]. With `causal=False`
    the numerator is every READMITTED/R encounter admitted in the same window. By
    default a readmission only counts when the same patient had an earlier encounter
    discharged inside the window before that admission.
    """
    rows = list(encounters)
    start = now - READMISSION_WINDOW

    discharged = [e for e in rows if e.discharge_datetime is not None and start <= e.discharge_datetime <= now]
    readmits = [
        e
        for e in rows
        if _is_readmission(e) and e.admit_datetime is not None and start <= e.admit_datetime <= now
    ]

    if causal:
        readmits = [
            e
            for e in readmits
            if any(
                d.patient_id == e.patient_id and d.id != e.id and d.discharge_datetime <= e.admit_datetime
                for d in discharged
            )
        ]

    return _percent(len(readmits), len(discharged))


def _month_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def _months_back(start: datetime, n: int) -> datetime:
    """First instant of the month `n` months before `start` (which is already a month start)."""
    index = start.year * 12 + (start.month - 1) - n
    return start.replace(year=index // 12, month=index % 12 + 1)


def monthly_trends(encounters: Iterable, now: datetime, *, months: int = TREND_MONTHS) -> List[MonthlyTrend]:
    """
    Admissions and discharges per calendar month, oldest first, ending with the month of `now`.
    """
    encs = list(encounters)
    current, _ = _month_bounds(now)

    trends = []
    for n in range(months - 1, -1, -1):
        start = _months_back(current, n)
        _, end = _month_bounds(start)
        trends.append(
            MonthlyTrend(
                month=start.strftime("%b %Y"),
                admissions=sum(1 for e in encs if e.admit_datetime is not None and start <= e.admit_datetime < end),
                discharges=sum(
                    1 for e in encs if e.discharge_datetime is not None and start <= e.discharge_datetime < end
                ),
            )
        )
    return trends


def executive_summary(encounters: Iterable, care_transitions: Iterable, now: datetime) -> ExecutiveSummary:
    """
    Dashboard header figures.

    `active_care_transitions` excludes Closed rows; `risk_distribution` counts every
    transition, Closed included, so the bars add up to the tenant's total.
    """
    encs = list(encounters)
    cts = list(care_transitions)
    month_start, month_end = _month_bounds(now)

    admitted = sum(1 for e in encs if e.admit_datetime is not None and month_start <= e.admit_datetime < month_end)
    discharged = sum(
        1 for e in encs if e.discharge_datetime is not None and month_start <= e.discharge_datetime < month_end
    )

    stays = [
        math.ceil((e.discharge_datetime - e.admit_datetime).total_seconds() / 86400)
        for e in encs
        if e.admit_datetime is not None and e.discharge_datetime is not None
    ]
    avg_los = round(sum(stays) / len(stays), 1) if stays else 0.0

    risk = {LEVEL_HIGH: 0, LEVEL_MEDIUM: 0, LEVEL_LOW: 0}
    for ct in cts:
        if ct.risk_tier in risk:
            risk[ct.risk_tier] += 1

    return ExecutiveSummary(
        active_encounters=sum(1 for e in encs if e.discharge_datetime is None),
        admitted_this_month=admitted,
        discharged_this_month=discharged,
        avg_length_of_stay=avg_los,
        active_care_transitions=sum(1 for ct in cts if ct.status != STATUS_CLOSED),
        pending_follow_ups=sum(1 for ct in cts if ct.next_outreach_date is not None and ct.next_outreach_date > now),
        readmission_rate=readmission_rate(encs, now),
        risk_distribution=risk,
        monthly_trends=monthly_trends(encs, now),
    )
