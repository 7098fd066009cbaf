"""
Square thumbnail endpoint.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from ..core.canvas import CanvasSpec, render_square
from ..core.config import Settings
from ..core.deps import get_fetcher, get_settings
from ..core.fetcher import UpstreamFetcher
from ..core.image_proxy import ensure_allowed_image_url

router = APIRouter(tags=["images"])


@router.get("/square.png")
async def square_image(
    u: str = Query(..., description="Source image URL"),
    size: Optional[int] = Query(None, ge=1, description="Canvas edge in px"),
    fetcher: UpstreamFetcher = Depends(get_fetcher),
    settings: Settings = Depends(get_settings),
):
    url = ensure_allowed_image_url(u, settings.IMAGE_URL_PREFIX)
    edge = min(size or settings.SQUARE_SIZE, settings.MAX_SQUARE_SIZE)

    content = await fetcher.fetch(url)
    png = await asyncio.to_thread(render_square, content, CanvasSpec(edge, edge))
    return Response(content=png, media_type="image/png")
