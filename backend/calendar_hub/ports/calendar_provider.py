from __future__ import annotations
from typing import Protocol, Dict, Any, List


class CalendarProvider(Protocol):
    """Abstracts the remote calendar service for testability."""

    def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
        max_results: int,
    ) -> List[Dict[str, Any]]:
        """Return provider-native event records starting in ``[time_min, time_max)``.

        Records follow the Google Calendar v3 shape:
        ``{summary, description, location, start: {dateTime|date}, end: {dateTime|date}}``.
        Implementations may raise on any transport/provider error.
        """
        ...
