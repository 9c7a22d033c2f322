import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..domain.models import Event
from ..errors import BaseAppException, EventsUnavailableError
from ..usecases.query_events import QueryEventsUseCase
from .deps import get_events_usecase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


class EventOut(BaseModel):
    title: str
    start: str
    end: str
    description: str
    location: str
    sourceId: str
    sourceName: str
    colorTag: str
    allDay: bool

    @classmethod
    def from_event(cls, e: Event) -> "EventOut":
        return cls(
            title=e.title,
            start=e.start,
            end=e.end,
            description=e.description,
            location=e.location,
            sourceId=e.source_id,
            sourceName=e.source_name,
            colorTag=e.color_tag,
            allDay=e.all_day,
        )


class EventsResponse(BaseModel):
    events: List[EventOut]
    totalEvents: int
    totalCalendars: int
    cached: bool
    timestamp: datetime


@router.get("", response_model=EventsResponse)
async def list_events(
    person: Optional[str] = None,
    date: Optional[str] = None,
    days: Optional[str] = None,
    usecase: QueryEventsUseCase = Depends(get_events_usecase),
):
    try:
        out = await usecase.execute(person=person, date=date, days=days)
    except BaseAppException:
        raise
    except Exception as e:
        logger.exception("Error fetching events")
        raise EventsUnavailableError(str(e)) from e
    res = out.result
    return EventsResponse(
        events=[EventOut.from_event(e) for e in res.events],
        totalEvents=res.total_events,
        totalCalendars=res.total_sources,
        cached=out.cached,
        timestamp=res.computed_at,
    )
