"""Provider record -> canonical Event conversion.

Malformed records never raise; missing fields degrade to defaults.
"""
from __future__ import annotations
from datetime import datetime, date, timezone
from typing import Any, Dict, Optional

from ..domain.models import CalendarSource, Event

UNTITLED = "Untitled Event"


def _time_field(record: Dict[str, Any], name: str) -> tuple[str, bool]:
    """Return (value, has_datetime) for the record's ``start``/``end`` object."""
    obj = record.get(name)
    if not isinstance(obj, dict):
        return "", False
    dt = obj.get("dateTime")
    if dt:
        return str(dt), True
    return str(obj.get("date") or ""), False


def normalize(record: Dict[str, Any], source: CalendarSource) -> Event:
    start, start_has_time = _time_field(record, "start")
    end, _ = _time_field(record, "end")
    return Event(
        title=record.get("summary") or UNTITLED,
        start=start,
        end=end,
        description=record.get("description") or "",
        location=record.get("location") or "",
        source_id=source.id,
        source_name=source.display_name,
        color_tag=source.color_tag,
        all_day=not start_has_time,
    )


def parse_instant(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or date-time into an aware UTC-comparable datetime.

    Date-only values and naive date-times are read as UTC. Returns None when
    the value cannot be parsed.
    """
    if not value:
        return None
    try:
        if len(value) == 10:
            d = date.fromisoformat(value)
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
