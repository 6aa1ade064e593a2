from __future__ import annotations

import datetime
from typing import Optional

from dateutil import parser as dateutil_parser

_UTC = datetime.timezone.utc

# North American zone names still common in RSS dates; dateutil only
# knows UTC/GMT on its own and would otherwise return a naive value.
_ZONE_OFFSETS: dict[str, int] = {
    "UT": 0,
    "Z": 0,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
}


def parse_datetime(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parse a feed date (RFC-822, ISO-8601 or looser) into a UTC datetime.

    Dates without a zone are taken as UTC. Returns None for absent or
    unparseable input.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = dateutil_parser.parse(value, tzinfos=_ZONE_OFFSETS)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=_UTC)
    return parsed.astimezone(_UTC)
