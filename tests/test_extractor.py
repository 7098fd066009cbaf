"""
Tests for single-field extraction and the two-hop event owner lookup.
"""

import asyncio
import re

import pytest

from app.core.errors import ExtractionError, UpstreamFetchError
from app.core.extractor import (
    REDIRECT_TARGET,
    SITE_NAME,
    Extracted,
    ExtractionFailure,
    ExtractionPattern,
    extract,
    extract_or_raise,
)
from app.services.event_owner import event_page_url, resolve_event_owner
from tests.conftest import EVENT_PAGE, OWNER_PAGE, FakeFetcher

FIRST_URL = "https://zaiko.io/event/123"
SECOND_URL = "https://owner.zaiko.io/e/summer-fes"


class TestExtract:
    def test_redirect_target(self):
        assert extract(EVENT_PAGE, REDIRECT_TARGET) == Extracted(SECOND_URL)

    def test_site_name_is_entity_decoded(self):
        assert extract(OWNER_PAGE, SITE_NAME) == Extracted("Tom & Jerry Records")

    def test_redirect_target_is_not_entity_decoded(self):
        page = "<meta content=\"0;url='https://a.zaiko.io/?x=1&amp;y=2'\" />"
        assert extract(page, REDIRECT_TARGET) == Extracted("https://a.zaiko.io/?x=1&amp;y=2")

    def test_first_match_wins(self):
        page = (
            '<meta property="og:site_name" content="First" />\n'
            '<meta property="og:site_name" content="Second" />\n'
        )
        assert extract(page, SITE_NAME) == Extracted("First")

    def test_missing_marker_is_tagged_failure(self):
        result = extract("<html></html>", REDIRECT_TARGET)
        assert isinstance(result, ExtractionFailure)
        assert result.label == "redirect target"
        assert result.pattern == REDIRECT_TARGET.regex.pattern

    def test_empty_document(self):
        assert isinstance(extract("", SITE_NAME), ExtractionFailure)

    def test_extract_or_raise_carries_label(self):
        with pytest.raises(ExtractionError) as excinfo:
            extract_or_raise(EVENT_PAGE, SITE_NAME)
        assert excinfo.value.label == "og:site_name"
        assert "og:site_name" in str(excinfo.value)

    def test_pattern_needs_one_capture_group(self):
        with pytest.raises(ValueError):
            ExtractionPattern("broken", re.compile(r"(a)(b)"))
        with pytest.raises(ValueError):
            ExtractionPattern("broken", re.compile(r"ab"))


class TestResolveEventOwner:
    def _run(self, fetcher, event_id=123, base_url="https://zaiko.io"):
        return asyncio.run(resolve_event_owner(event_id, fetcher, base_url))

    def test_two_hops_in_order(self):
        fetcher = FakeFetcher({FIRST_URL: EVENT_PAGE, SECOND_URL: OWNER_PAGE})
        owner = self._run(fetcher)
        assert owner.owner_name == "Tom & Jerry Records"
        assert fetcher.calls == [FIRST_URL, SECOND_URL]

    def test_first_hop_failure_skips_second_fetch(self):
        fetcher = FakeFetcher({FIRST_URL: "<html>no refresh here</html>", SECOND_URL: OWNER_PAGE})
        with pytest.raises(ExtractionError) as excinfo:
            self._run(fetcher)
        assert excinfo.value.label == "redirect target"
        assert fetcher.calls == [FIRST_URL]

    def test_second_hop_failure_is_distinguishable(self):
        fetcher = FakeFetcher({FIRST_URL: EVENT_PAGE, SECOND_URL: "<html></html>"})
        with pytest.raises(ExtractionError) as excinfo:
            self._run(fetcher)
        assert excinfo.value.label == "og:site_name"
        assert fetcher.calls == [FIRST_URL, SECOND_URL]

    def test_first_fetch_error_propagates(self):
        fetcher = FakeFetcher({})
        with pytest.raises(UpstreamFetchError) as excinfo:
            self._run(fetcher)
        assert excinfo.value.upstream_status == 404
        assert fetcher.calls == [FIRST_URL]

    def test_relative_redirect_resolved_against_event_page(self):
        page = "<meta content=\"0;url='/owner/page'\" />"
        fetcher = FakeFetcher({FIRST_URL: page, "https://zaiko.io/owner/page": OWNER_PAGE})
        assert self._run(fetcher).owner_name == "Tom & Jerry Records"

    def test_event_page_url_trims_slash(self):
        assert event_page_url("https://zaiko.io/", 5) == "https://zaiko.io/event/5"
