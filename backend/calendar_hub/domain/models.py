from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class CalendarSource:
    id: str
    display_name: str
    color_tag: str

    @classmethod
    def from_config(cls, raw: Dict[str, Any]) -> "CalendarSource":
        """Accepts both the legacy ``{id, name, color}`` and ``{id, displayName, colorTag}`` shapes."""
        return cls(
            id=str(raw["id"]),
            display_name=str(raw.get("displayName") or raw.get("name") or raw["id"]),
            color_tag=str(raw.get("colorTag") or raw.get("color") or ""),
        )


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)``."""
    start: datetime
    end: datetime

    def iso_bounds(self) -> Tuple[str, str]:
        return self.start.isoformat(), self.end.isoformat()


@dataclass(frozen=True)
class Event:
    title: str
    start: str
    end: str
    description: str
    location: str
    source_id: str
    source_name: str
    color_tag: str
    all_day: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "start": self.start,
            "end": self.end,
            "description": self.description,
            "location": self.location,
            "sourceId": self.source_id,
            "sourceName": self.source_name,
            "colorTag": self.color_tag,
            "allDay": self.all_day,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            title=data["title"],
            start=data["start"],
            end=data["end"],
            description=data["description"],
            location=data["location"],
            source_id=data["sourceId"],
            source_name=data["sourceName"],
            color_tag=data["colorTag"],
            all_day=bool(data["allDay"]),
        )


@dataclass(frozen=True)
class AggregationResult:
    events: Tuple[Event, ...]
    total_events: int
    total_sources: int
    computed_at: datetime
    failed_sources: Tuple[str, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events": [e.to_dict() for e in self.events],
            "totalEvents": self.total_events,
            "totalSources": self.total_sources,
            "computedAt": self.computed_at.isoformat(),
            "failedSources": list(self.failed_sources),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregationResult":
        return cls(
            events=tuple(Event.from_dict(e) for e in data.get("events", [])),
            total_events=int(data["totalEvents"]),
            total_sources=int(data["totalSources"]),
            computed_at=datetime.fromisoformat(data["computedAt"]),
            failed_sources=tuple(data.get("failedSources", [])),
        )
