import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..services.cache import AggregationCache
from .deps import get_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cache", tags=["cache"])


class MessageOut(BaseModel):
    message: str


@router.post("/clear", response_model=MessageOut)
def clear_cache(cache: AggregationCache = Depends(get_cache)):
    cache.clear()
    logger.info("Aggregation cache cleared")
    return MessageOut(message="Cache cleared successfully")
