"""
Zaiko event metadata endpoints.
"""

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from ..core.config import Settings
from ..core.deps import get_fetcher, get_settings
from ..core.fetcher import UpstreamFetcher
from ..services.event_owner import resolve_event_owner

router = APIRouter(prefix="/zaiko", tags=["zaiko"])


class Metadata(BaseModel):
    owner_name: str


@router.get("/events/{event_id}", response_model=Metadata)
async def event_metadata(
    event_id: int = Path(..., ge=1, description="Zaiko event id"),
    fetcher: UpstreamFetcher = Depends(get_fetcher),
    settings: Settings = Depends(get_settings),
):
    owner = await resolve_event_owner(event_id, fetcher, settings.BASE_URL)
    return Metadata(owner_name=owner.owner_name)
