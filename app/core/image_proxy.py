"""Allow-list helpers for image URLs proxied through the square resizer."""

from typing import Optional

from .errors import ValidationError


def is_allowed_image_url(url: Optional[str], prefix: str) -> bool:
    return isinstance(url, str) and bool(prefix) and url.startswith(prefix)


def ensure_allowed_image_url(url: Optional[str], prefix: str) -> str:
    if not is_allowed_image_url(url, prefix):
        raise ValidationError("url not allowed")
    return url
