# he_core/tcm/windows.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from he_core.tcm.constants import TCM_CONTACT_WINDOW, TCM_FOLLOW_UP_WINDOW

DateLike = Union[date, datetime]

TCM_MET = "TCM ✓"
TCM_MISSED = "TCM Missed"
OUTREACH_OVERDUE = "Overdue"
OUTREACH_DUE_TODAY = "Due Today"


class SeverityTier(str, enum.Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    ELEVATED = "Elevated"
    MODERATE = "Moderate"
    NORMAL = "Normal"


@dataclass(frozen=True)
class DueBadge:
    label: str
    tier: SeverityTier
    days_until: int


@dataclass(frozen=True)
class TCMSchedule:
    contact_by: Optional[datetime]
    follow_up_by: Optional[datetime]


def calendar_day(value: DateLike, now: DateLike) -> date:
    """
    Truncate to a calendar day as seen from `now`'s timezone.
    Aware datetimes are converted first; naive ones and plain dates are taken as-is.
    """
    if isinstance(value, datetime):
        tz = now.tzinfo if isinstance(now, datetime) else None
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def days_until(target: DateLike, now: DateLike) -> int:
    return (calendar_day(target, now) - calendar_day(now, now)).days


def classify_due_date(target: Optional[DateLike], now: DateLike) -> Optional[DueBadge]:
    """
    Badge for a due date relative to today.

        < 0   "N days overdue"  Critical
        0     "Due today"       High
        1..3  "N days"          Elevated
        4..7  "N days"          Moderate
        > 7   "N days"          Normal
    """
    if target is None:
        return None

    n = days_until(target, now)
    if n < 0:
        return DueBadge(f"{abs(n)} days overdue", SeverityTier.CRITICAL, n)
    if n == 0:
        return DueBadge("Due today", SeverityTier.HIGH, n)
    if n <= 3:
        return DueBadge(f"{n} days", SeverityTier.ELEVATED, n)
    if n <= 7:
        return DueBadge(f"{n} days", SeverityTier.MODERATE, n)
    return DueBadge(f"{n} days", SeverityTier.NORMAL, n)


def derive_schedule(discharge: Optional[datetime]) -> TCMSchedule:
    """Interactive contact due at discharge + 2 days, face-to-face follow-up at + 14 days."""
    if discharge is None:
        return TCMSchedule(contact_by=None, follow_up_by=None)
    return TCMSchedule(
        contact_by=discharge + TCM_CONTACT_WINDOW,
        follow_up_by=discharge + TCM_FOLLOW_UP_WINDOW,
    )


def outreach_status(next_outreach_date: Optional[DateLike], now: DateLike) -> Optional[str]:
    if next_outreach_date is None:
        return None
    n = days_until(next_outreach_date, now)
    if n < 0:
        return OUTREACH_OVERDUE
    if n == 0:
        return OUTREACH_DUE_TODAY
    return None


def tcm_contact_status(
    discharge: Optional[datetime],
    outreach_date: Optional[datetime],
    tcm_schedule1: Optional[datetime],
    now: datetime,
) -> Optional[str]:
    """
    Row badge for the 2-day contact requirement.

    Elapsed time is floored to whole days, so any contact before discharge + 3d earns "TCM ✓".
    `metrics.aggregate` uses the exact 2-day timedelta and is stricter for the same row.
    """
    if tcm_schedule1 is None:
        return None

    if outreach_date is not None and discharge is not None:
        # whole days elapsed, floored
        if (outreach_date - discharge).days <= TCM_CONTACT_WINDOW.days:
            return TCM_MET

    if outreach_date is None and tcm_schedule1 < now:
        return TCM_MISSED

    return None
