"""
Error taxonomy for the edge service and its mapping to HTTP responses.

Core code raises these; the handlers registered by ``register_error_handlers``
are the only place that decides status codes and user-visible text.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)


class EdgeError(Exception):
    """Base class for errors raised while serving a request."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def public_message(self) -> str:
        return f"Something went wrong: {self}"


class UpstreamFetchError(EdgeError):
    """Network failure or non-2xx answer from an upstream server."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.upstream_status = status_code
        super().__init__(f"{reason} ({url})")


class ExtractionError(EdgeError):
    """Expected pattern not found in a fetched document."""

    def __init__(self, label: str, pattern: str):
        self.label = label
        self.pattern = pattern
        super().__init__(f"{label}: no match")


class ValidationError(EdgeError):
    """Client supplied input the service refuses to act on."""

    status_code = status.HTTP_400_BAD_REQUEST

    def public_message(self) -> str:
        return str(self)


class DecodeError(EdgeError):
    """Fetched bytes are not a decodable image."""


async def edge_error_handler(request: Request, exc: EdgeError) -> PlainTextResponse:
    logger.warning(
        "[errors] %s %s -> %s: %s",
        request.method,
        request.url.path,
        type(exc).__name__,
        exc,
    )
    return PlainTextResponse(exc.public_message(), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return PlainTextResponse(f"Invalid request: {details}", status_code=status.HTTP_400_BAD_REQUEST)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EdgeError, edge_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
