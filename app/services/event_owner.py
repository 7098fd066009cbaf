"""
Zaiko event owner lookup.

The event page carries a meta refresh to the organizer's own Zaiko site; the
organizer name is that site's og:site_name. Two hops, each one fetch plus one
extraction, run strictly in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urljoin

from ..core.extractor import REDIRECT_TARGET, SITE_NAME, extract_or_raise

logger = logging.getLogger(__name__)


class TextFetcher(Protocol):
    async def fetch_text(self, url: str) -> str: ...


@dataclass(frozen=True)
class EventOwner:
    owner_name: str


def event_page_url(base_url: str, event_id: int) -> str:
    return f"{base_url.rstrip('/')}/event/{event_id}"


async def resolve_event_owner(event_id: int, fetcher: TextFetcher, base_url: str) -> EventOwner:
    """Resolve an event id to the organization hosting it."""
    first_url = event_page_url(base_url, event_id)
    first = await fetcher.fetch_text(first_url)
    redirect = urljoin(first_url, extract_or_raise(first, REDIRECT_TARGET))

    logger.debug("[event_owner] event %s redirects to %s", event_id, redirect)
    second = await fetcher.fetch_text(redirect)
    owner_name = extract_or_raise(second, SITE_NAME)

    logger.info("[event_owner] event %s owned by %r", event_id, owner_name)
    return EventOwner(owner_name=owner_name)
