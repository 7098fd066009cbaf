"""
Shared fixtures: a counting fake upstream, a controllable clock and test images.
"""

import asyncio
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from app.core.config import Settings
from app.core.errors import UpstreamFetchError
from app.core.response_cache import ResponseCache
from app.main import create_app

EVENT_PAGE = (
    '<html><head><meta http-equiv="refresh" '
    "content=\"0;url='https://owner.zaiko.io/e/summer-fes'\" />"
    "</head></html>"
)
OWNER_PAGE = (
    '<html><head><meta property="og:site_name" content="Tom &amp; Jerry Records" />'
    "</head></html>"
)


def make_image_bytes(width, height, color=(255, 0, 0), fmt="PNG"):
    mode = "RGBA" if len(color) == 4 else "RGB"
    buffer = BytesIO()
    Image.new(mode, (width, height), color).save(buffer, fmt)
    return buffer.getvalue()


class FakeFetcher:
    """Upstream double: maps URL -> bytes/str/exception and records every call."""

    def __init__(self, responses=None, delay=0.0):
        self.responses = dict(responses or {})
        self.delay = delay
        self.calls = []

    async def _lookup(self, url):
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if url not in self.responses:
            raise UpstreamFetchError(url, "upstream returned HTTP 404", status_code=404)
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch(self, url):
        value = await self._lookup(url)
        return value.encode("utf-8") if isinstance(value, str) else value

    async def fetch_text(self, url):
        value = await self._lookup(url)
        return value.decode("utf-8") if isinstance(value, bytes) else value


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def fetcher():
    return FakeFetcher({
        "https://zaiko.io/event/123": EVENT_PAGE,
        "https://owner.zaiko.io/e/summer-fes": OWNER_PAGE,
        "https://media.zaiko.io/wide.png": make_image_bytes(800, 400),
        "https://media.zaiko.io/square.png": make_image_bytes(640, 640),
        "https://media.zaiko.io/broken.png": b"definitely not an image",
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def response_cache(settings, clock):
    return ResponseCache(ttl_seconds=settings.RESPONSE_CACHE_TTL_SECONDS, clock=clock)


@pytest.fixture
def app(settings, fetcher, response_cache):
    return create_app(settings, fetcher=fetcher, response_cache=response_cache)


@pytest.fixture
def client(app):
    """Fixture para el cliente de test"""
    return TestClient(app)
