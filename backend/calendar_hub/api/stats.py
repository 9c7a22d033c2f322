import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..errors import BaseAppException, StatsUnavailableError
from ..usecases.query_events import StatsUseCase
from .deps import get_stats_usecase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


class StatsResponse(BaseModel):
    totalEvents: int
    totalPeople: int
    upcomingWeek: int
    timestamp: datetime


@router.get("", response_model=StatsResponse)
async def get_stats(usecase: StatsUseCase = Depends(get_stats_usecase)):
    try:
        stats = await usecase.execute()
    except BaseAppException:
        raise
    except Exception as e:
        logger.exception("Error fetching stats")
        raise StatsUnavailableError(str(e)) from e
    return StatsResponse(
        totalEvents=stats.total_events,
        totalPeople=stats.total_people,
        upcomingWeek=stats.upcoming_week,
        timestamp=stats.computed_at,
    )
