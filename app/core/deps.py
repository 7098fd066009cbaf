from fastapi import Request

from .config import Settings
from .fetcher import UpstreamFetcher
from .response_cache import ResponseCache


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_fetcher(request: Request) -> UpstreamFetcher:
    """Shared upstream client, opened in the app lifespan."""
    return request.app.state.fetcher


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache
