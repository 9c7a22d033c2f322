from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import Settings
from .deps import get_settings

router = APIRouter(prefix="/api/people", tags=["people"])


class PersonOut(BaseModel):
    id: str
    name: str
    color: str


class PeopleResponse(BaseModel):
    people: List[PersonOut]


@router.get("", response_model=PeopleResponse)
def list_people(settings: Settings = Depends(get_settings)):
    return PeopleResponse(
        people=[PersonOut(id=s.id, name=s.display_name, color=s.color_tag) for s in settings.sources]
    )
