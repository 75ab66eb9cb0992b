# he_core/tcm/constants.py
from datetime import timedelta

STATUS_OPEN = "Open"
STATUS_IN_PROGRESS = "InProgress"
STATUS_CLOSED = "Closed"

LEVEL_LOW = "Low"
LEVEL_MEDIUM = "Medium"
LEVEL_HIGH = "High"

# Sort rank for priority / risk tier (higher sorts first when descending)
LEVEL_RANK = {LEVEL_HIGH: 3, LEVEL_MEDIUM: 2, LEVEL_LOW: 1}

TCM_CONTACT_WINDOW = timedelta(days=2)
TCM_FOLLOW_UP_WINDOW = timedelta(days=14)
READMISSION_WINDOW = timedelta(days=30)

# dashboard admissions/discharges chart
TREND_MONTHS = 6

READMISSION_STATUSES = frozenset({"READMITTED", "R"})
