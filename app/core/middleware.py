"""
HTTP middleware wiring the response cache and the Cache-Control policy.

Stack (outermost first): CORS -> response cache -> freshness -> routes.
Freshness runs inside the cache so the stored entry keeps the header computed
when it was produced.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .config import Settings
from .freshness import cache_control_for
from .response_cache import CachedResponse, ResponseCache, cache_key

UNCACHED_PATH_PREFIXES = ("/health",)


def _is_cacheable(request: Request) -> bool:
    if request.method != "GET":
        return False
    return not request.url.path.startswith(UNCACHED_PATH_PREFIXES)


def _to_response(cached: CachedResponse, cache_status: str) -> Response:
    response = Response(content=cached.body, status_code=cached.status_code)
    response.raw_headers[:] = list(cached.headers)
    response.headers["X-Cache"] = cache_status
    return response


def install_middleware(app: FastAPI, settings: Settings) -> None:
    @app.middleware("http")
    async def annotate_freshness(request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = cache_control_for(
            response.status_code,
            settings.SUCCESS_MAX_AGE_SECONDS,
            settings.FAILURE_MAX_AGE_SECONDS,
        )
        return response

    @app.middleware("http")
    async def serve_from_cache(request: Request, call_next):
        if not _is_cacheable(request):
            return await call_next(request)

        cache: ResponseCache = request.app.state.response_cache
        key = cache_key(request.method, request.url.path, request.url.query)

        async def compute() -> CachedResponse:
            response = await call_next(request)
            body = b""
            async for chunk in response.body_iterator:
                body += chunk
            return CachedResponse(response.status_code, tuple(response.raw_headers), body)

        cached, outcome = await cache.lookup_or_compute(key, compute)
        response = _to_response(cached, outcome)

        if settings.FRESHNESS_MODE == "remaining":
            entry = cache.get(key)
            if entry is not None:
                response.headers["Cache-Control"] = cache_control_for(
                    cached.status_code,
                    settings.SUCCESS_MAX_AGE_SECONDS,
                    settings.FAILURE_MAX_AGE_SECONDS,
                    remaining=entry.remaining(cache.now()),
                )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ALLOWED_ORIGIN],
        allow_methods=["GET"],
    )
