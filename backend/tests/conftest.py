"""
Part Images test configuration

Fixtures for exercising the fetcher and the HTTP API without touching the
real image host. Upstream traffic goes through httpx.MockTransport, backed
by an UpstreamStub that records every request.
"""

import asyncio
import sys
from pathlib import Path
from typing import Callable, Dict, List, Union

import httpx
import pytest

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from part_images.fetcher import FetchConfig, PartImageFetcher


# A fake JPEG comfortably above the placeholder threshold
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 4096
PLACEHOLDER_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 200


# ============================================
# Upstream stub
# ============================================

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class UpstreamStub:
    """
    Fake image host keyed by part number.

    The part number is taken from the last path segment of the requested
    URL ("<part>.jpg"). Unknown part numbers get a real-looking image.
    Replies may be a Response, an exception to raise, or an (async) callable.
    """

    def __init__(self):
        self.replies: Dict[str, Reply] = {}
        self.requests: List[httpx.Request] = []

    def reply(self, part_number: str, reply: Reply) -> None:
        self.replies[part_number] = reply

    @property
    def requested_parts(self) -> List[str]:
        return [self._part_number(r) for r in self.requests]

    @staticmethod
    def _part_number(request: httpx.Request) -> str:
        last = request.url.path.rsplit("/", 1)[-1]
        return last[:-len(".jpg")] if last.endswith(".jpg") else last

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get(self._part_number(request))

        if reply is None:
            return image_response()
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply

        result = reply(request)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def image_response(content: bytes = JPEG_BYTES, content_type: str = "image/jpeg", status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=content, headers={"content-type": content_type})


# ============================================
# Fixtures
# ============================================


@pytest.fixture
def upstream():
    """A fresh fake image host for each test."""
    return UpstreamStub()


@pytest.fixture
def fetch_config():
    """Short timeout so timeout tests stay fast."""
    return FetchConfig(timeout=0.5)


@pytest.fixture
async def fetcher(upstream, fetch_config):
    """PartImageFetcher wired to the fake image host."""
    fetcher = PartImageFetcher(fetch_config, transport=upstream.transport())
    yield fetcher
    await fetcher.close()


@pytest.fixture
def client(upstream, fetch_config):
    """
    TestClient for the full application, with the fetcher dependency
    replaced by one that talks to the fake image host.
    """
    from fastapi.testclient import TestClient

    from main import app
    from part_images.routes_fastapi import get_fetcher

    async def override_fetcher():
        fetcher = PartImageFetcher(fetch_config, transport=upstream.transport())
        try:
            yield fetcher
        finally:
            await fetcher.close()

    app.dependency_overrides[get_fetcher] = override_fetcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================
# Helper Functions
# ============================================


def assert_item_success(result, part_number=None):
    """Assert an item was fetched successfully."""
    assert result.success, f"Fetch failed: {result.error}"
    if part_number is not None:
        assert result.part_number == part_number


def assert_item_failure(result, error_contains=None):
    """Assert an item failed, optionally checking the reason."""
    assert not result.success, f"Fetch should have failed but succeeded: {result.part_number}"
    if error_contains:
        assert error_contains.lower() in result.error.lower(), \
            f"Error should contain '{error_contains}', got: {result.error}"
