# he_core/common/hl7.py
"""
HL7 v2 `TS` (timestamp) parsing.

Format: YYYY[MM[DD[HH[MM[SS[.S[S[S[S]]]]]]]]][+/-ZZZZ]
Values without an offset are taken as UTC.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional

from rest_framework import serializers

_TS_RE = re.compile(
    r"^(?P<year>\d{4})"
    r"(?:(?P<month>\d{2})"
    r"(?:(?P<day>\d{2})"
    r"(?:(?P<hour>\d{2})"
    r"(?:(?P<minute>\d{2})"
    r"(?:(?P<second>\d{2})(?:\.(?P<fraction>\d{1,4}))?)?)?)?)?)?"
    r"(?P<offset>[+-]\d{4})?$"
)


class HL7TimestampError(ValueError):
    pass


def parse_hl7_ts(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an HL7 TS string into an aware datetime.
    Blank/None -> None. Malformed -> HL7TimestampError.
    """
    if value is None:
        return None
    raw = str(value).strip()
    if not raw:
        return None

    m = _TS_RE.match(raw)
    if not m:
        raise HL7TimestampError(f"Invalid HL7 timestamp: {raw!r}")

    parts = m.groupdict()
    fraction = parts["fraction"] or ""
    microsecond = int(fraction.ljust(6, "0")) if fraction else 0

    tz = dt_timezone.utc
    if parts["offset"]:
        sign = 1 if parts["offset"][0] == "+" else -1
        hours, minutes = int(parts["offset"][1:3]), int(parts["offset"][3:5])
        tz = dt_timezone(sign * timedelta(hours=hours, minutes=minutes))

    try:
        return datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            microsecond,
            tzinfo=tz,
        )
    except ValueError as e:
        raise HL7TimestampError(f"Invalid HL7 timestamp: {raw!r} ({e})")


class HL7TimestampField(serializers.Field):
    """
    Serializer field accepting an HL7 TS string and producing an aware datetime (or None).
    """
    default_error_messages = {
        "invalid": "Invalid HL7 timestamp. Expected YYYYMMDD[HHMM[SS]][+/-ZZZZ].",
    }

    def __init__(self, **kwargs):
        kwargs.setdefault("required", False)
        kwargs.setdefault("allow_null", True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if data is None or data == "":
            return None
        if not isinstance(data, (str, int)) or isinstance(data, bool):
            self.fail("invalid")
        try:
            return parse_hl7_ts(str(data))
        except HL7TimestampError:
            self.fail("invalid")

    def to_representation(self, value):
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.strftime("%Y%m%d%H%M%S")
        return str(value)
