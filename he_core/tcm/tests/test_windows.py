# he_core/tcm/tests/test_windows.py
from datetime import date, datetime, timedelta, timezone

from he_core.tcm.windows import (
    SeverityTier,
    TCM_MET,
    TCM_MISSED,
    classify_due_date,
    derive_schedule,
    outreach_status,
    tcm_contact_status,
)

NOW = datetime(2025, 3, 15, 14, 30, tzinfo=timezone.utc)


def test_classify_overdue_is_critical():
    badge = classify_due_date(NOW - timedelta(days=3), NOW)
    assert badge.label == "3 days overdue"
    assert badge.tier == SeverityTier.CRITICAL
    assert badge.days_until == -3


def test_classify_same_day_is_due_today_regardless_of_time():
    assert classify_due_date(NOW, NOW).label == "Due today"
    assert classify_due_date(NOW.replace(hour=0, minute=1), NOW).tier == SeverityTier.HIGH
    assert classify_due_date(NOW.replace(hour=23, minute=59), NOW).tier == SeverityTier.HIGH


def test_classify_tier_boundaries():
    expected = {
        1: SeverityTier.ELEVATED,
        3: SeverityTier.ELEVATED,
        4: SeverityTier.MODERATE,
        5: SeverityTier.MODERATE,
        7: SeverityTier.MODERATE,
        8: SeverityTier.NORMAL,
        30: SeverityTier.NORMAL,
    }
    for days, tier in expected.items():
        badge = classify_due_date(NOW + timedelta(days=days), NOW)
        assert badge.label == f"{days} days"
        assert badge.tier == tier, days


def test_classify_missing_target_is_none():
    assert classify_due_date(None, NOW) is None


def test_classify_converts_to_now_timezone_before_truncating():
    eastern = timezone(timedelta(hours=-5))
    now = datetime(2025, 3, 15, 9, 0, tzinfo=eastern)
    # 02:00 UTC on the 16th is still the 15th in UTC-5
    target = datetime(2025, 3, 16, 2, 0, tzinfo=timezone.utc)
    assert classify_due_date(target, now).label == "Due today"


def test_classify_accepts_plain_dates():
    assert classify_due_date(date(2025, 3, 17), NOW).label == "2 days"


def test_derive_schedule_adds_2_and_14_days():
    discharge = datetime(2025, 1, 10, tzinfo=timezone.utc)
    s = derive_schedule(discharge)
    assert s.contact_by == datetime(2025, 1, 12, tzinfo=timezone.utc)
    assert s.follow_up_by == datetime(2025, 1, 24, tzinfo=timezone.utc)


def test_derive_schedule_without_discharge_leaves_fields_unset():
    s = derive_schedule(None)
    assert s.contact_by is None
    assert s.follow_up_by is None


def test_outreach_status():
    assert outreach_status(NOW - timedelta(days=1), NOW) == "Overdue"
    assert outreach_status(NOW.replace(hour=1), NOW) == "Due Today"
    assert outreach_status(NOW + timedelta(days=1), NOW) is None
    assert outreach_status(None, NOW) is None


def test_tcm_contact_status_met_within_two_days():
    discharge = NOW - timedelta(days=5)
    sched = derive_schedule(discharge).contact_by
    contact = discharge + timedelta(days=2, hours=20)
    assert tcm_contact_status(discharge, contact, sched, NOW) == TCM_MET


def test_tcm_contact_status_missed_when_no_contact_and_window_past():
    discharge = NOW - timedelta(days=5)
    sched = derive_schedule(discharge).contact_by
    assert tcm_contact_status(discharge, None, sched, NOW) == TCM_MISSED


def test_tcm_contact_status_late_contact_is_neither():
    discharge = NOW - timedelta(days=10)
    sched = derive_schedule(discharge).contact_by
    assert tcm_contact_status(discharge, discharge + timedelta(days=4), sched, NOW) is None


def test_tcm_contact_status_pending_window():
    discharge = NOW - timedelta(hours=6)
    sched = derive_schedule(discharge).contact_by
    assert tcm_contact_status(discharge, None, sched, NOW) is None
    assert tcm_contact_status(discharge, None, None, NOW) is None
