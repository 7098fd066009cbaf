from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api.routes_health import router as health_router
from .api.events import router as events_router
from .api.images import router as images_router
from .core.config import Settings, settings as default_settings
from .core.errors import register_error_handlers
from .core.fetcher import UpstreamFetcher
from .core.middleware import install_middleware
from .core.response_cache import ResponseCache


def create_app(
    settings: Optional[Settings] = None,
    fetcher: Optional[UpstreamFetcher] = None,
    response_cache: Optional[ResponseCache] = None,
) -> FastAPI:
    """Build the edge app; tests pass their own fetcher and cache."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if getattr(app.state, "fetcher", None) is None:
            owned = UpstreamFetcher(timeout=settings.FETCH_TIMEOUT_SECONDS)
            app.state.fetcher = owned
        try:
            yield
        finally:
            if owned is not None:
                await owned.aclose()
                app.state.fetcher = None

    app = FastAPI(title="Zaiko Edge", description="Event owner lookup and square thumbnails", lifespan=lifespan)
    app.state.settings = settings
    app.state.fetcher = fetcher
    app.state.response_cache = response_cache or ResponseCache(
        ttl_seconds=settings.RESPONSE_CACHE_TTL_SECONDS,
        max_entries=settings.RESPONSE_CACHE_MAX_ENTRIES,
    )

    register_error_handlers(app)
    install_middleware(app, settings)

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(images_router)
    return app


app = create_app()
