from fastapi import APIRouter, Depends, status

from ..core.deps import get_response_cache
from ..core.response_cache import ResponseCache

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict:
    return {"status": "ok"}


@router.get("/health/cache", status_code=status.HTTP_200_OK)
async def cache_status(cache: ResponseCache = Depends(get_response_cache)) -> dict:
    """Get current response cache status for monitoring."""
    return cache.stats()
