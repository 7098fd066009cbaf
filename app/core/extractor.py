"""
Single-field regex extraction from fetched HTML documents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from html import unescape
from typing import Union

from .errors import ExtractionError


@dataclass(frozen=True)
class ExtractionPattern:
    label: str
    regex: re.Pattern
    html_attribute: bool = False

    def __post_init__(self):
        if self.regex.groups != 1:
            raise ValueError(f"pattern {self.label!r} must have exactly one capture group")


@dataclass(frozen=True)
class Extracted:
    value: str


@dataclass(frozen=True)
class ExtractionFailure:
    label: str
    pattern: str

    def raise_error(self):
        raise ExtractionError(self.label, self.pattern)


ExtractionResult = Union[Extracted, ExtractionFailure]


# Meta-refresh on the event page pointing at the organizer's site.
REDIRECT_TARGET = ExtractionPattern(
    label="redirect target",
    regex=re.compile(r";url='(.+)'\" />"),
)
SITE_NAME = ExtractionPattern(
    label="og:site_name",
    regex=re.compile(r'<meta property="og:site_name" content="(.+)" />'),
    html_attribute=True,
)


def extract(document: str, pattern: ExtractionPattern) -> ExtractionResult:
    match = pattern.regex.search(document or "")
    if not match:
        return ExtractionFailure(pattern.label, pattern.regex.pattern)
    value = match.group(1)
    if pattern.html_attribute:
        value = unescape(value)
    return Extracted(value)


def extract_or_raise(document: str, pattern: ExtractionPattern) -> str:
    result = extract(document, pattern)
    if isinstance(result, ExtractionFailure):
        result.raise_error()
    return result.value
