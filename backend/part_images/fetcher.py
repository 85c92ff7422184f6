"""
Part Image Fetcher Core Logic

Handles:
- Resolving a part number to its upstream image URL
- Fetching and validating a single image
- Fanning out a whole batch and collecting per-item results

A failed item never fails the batch: every error is captured as a
FetchItemResult with success=False.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from .config import (
    BROWSER_HEADERS,
    FETCH_TIMEOUT_SECONDS,
    IMAGE_URL_TEMPLATE,
    MIN_IMAGE_BYTES,
)
from .validation import FetchRequest

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"


# ============================================
# Data Models
# ============================================


@dataclass
class FetchConfig:
    """Configuration for upstream image fetching."""
    url_template: str = IMAGE_URL_TEMPLATE
    timeout: float = FETCH_TIMEOUT_SECONDS      # Per-item timeout in seconds
    min_image_bytes: int = MIN_IMAGE_BYTES      # Smaller bodies are placeholders
    headers: Dict[str, str] = field(default_factory=lambda: dict(BROWSER_HEADERS))


@dataclass
class FetchItemResult:
    """Outcome of fetching one part number's image."""
    part_number: str
    success: bool
    data: Optional[str] = None            # Base64 encoded image body
    content_type: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, part_number: str, error: str) -> "FetchItemResult":
        return cls(part_number=part_number, success=False, error=error)


@dataclass
class FetchSummary:
    total: int
    successful: int
    failed: int


@dataclass
class FetchResponse:
    """Results for a whole batch, in the same order as the request."""
    results: List[FetchItemResult]
    summary: FetchSummary


# ============================================
# URL Resolution
# ============================================


def resolve_image_url(part_number: str, template: str = IMAGE_URL_TEMPLATE) -> str:
    """Build the upstream image URL for a trimmed part number. No escaping is applied."""
    return template.format(part_number=part_number)


class ImageRejected(Exception):
    """Upstream answered, but not with a usable image."""


# ============================================
# Fetcher
# ============================================


class PartImageFetcher:
    """
    Fetches part images from the upstream image host.

    Usage:
        fetcher = PartImageFetcher()
        response = await fetcher.fetch_batch(request)
        await fetcher.close()
    """

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or FetchConfig()

        self.http_client = httpx.AsyncClient(
            timeout=self.config.timeout,
            follow_redirects=True,
            headers=self.config.headers,
            transport=transport,
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def __aenter__(self) -> "PartImageFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _check_response(self, response: httpx.Response) -> str:
        """
        Validate an upstream response.

        Returns:
            The response content type

        Raises:
            ImageRejected: with the client-facing reason
        """
        if not response.is_success:
            raise ImageRejected(f"HTTP {response.status_code}: {response.reason_phrase}")

        content_type = response.headers.get("content-type")
        if not content_type or not content_type.startswith("image/"):
            raise ImageRejected("Response is not an image")

        if len(response.content) < self.config.min_image_bytes:
            raise ImageRejected("Image file too small (likely not found)")

        return content_type

    async def fetch_single(self, part_number: str, index: int = 0, total: int = 1) -> FetchItemResult:
        """
        Fetch and validate the image for a single part number.

        Args:
            part_number: Trimmed, non-empty part number
            index: Position in the batch, used for progress logging
            total: Batch size, used for progress logging

        Returns:
            FetchItemResult; never raises
        """
        url = resolve_image_url(part_number, self.config.url_template)

        try:
            logger.info(f"[PartImages] [{index + 1}/{total}] Fetching: {url}")

            # wait_for bounds the whole exchange; httpx timeouts are per phase
            response = await asyncio.wait_for(
                self.http_client.get(url),
                timeout=self.config.timeout,
            )
            content_type = self._check_response(response)

            image_data = response.content
            logger.info(
                f"[PartImages] Success: {part_number} ({len(image_data)} bytes)"
            )

            return FetchItemResult(
                part_number=part_number,
                success=True,
                data=base64.b64encode(image_data).decode("utf-8"),
                content_type=content_type,
                size=len(image_data),
            )

        except ImageRejected as e:
            error = str(e)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            error = f"Request timed out after {self.config.timeout:g} seconds"
        except httpx.HTTPError as e:
            error = str(e) or type(e).__name__
        except Exception as e:
            error = str(e) or UNKNOWN_ERROR

        logger.error(f"[PartImages] Failed: {part_number} - {error}")
        return FetchItemResult.failure(part_number, error)

    async def fetch_batch(self, request: FetchRequest) -> FetchResponse:
        """
        Fetch every image in the request concurrently.

        All fetches run to completion (success, failure or timeout) before
        this returns. One slow item delays the batch but never cancels its
        siblings.

        Args:
            request: Validated FetchRequest

        Returns:
            FetchResponse with results aligned to request.part_numbers
        """
        part_numbers = request.part_numbers
        total = len(part_numbers)

        logger.info(f"[PartImages] Fetching images for {total} part numbers: {list(part_numbers)}")

        tasks = [
            self.fetch_single(part_number, index, total)
            for index, part_number in enumerate(part_numbers)
        ]

        settled = await asyncio.gather(*tasks, return_exceptions=True)

        # fetch_single should never raise; anything that does still becomes a failure
        results = []
        for part_number, outcome in zip(part_numbers, settled):
            if isinstance(outcome, BaseException):
                logger.error(f"[PartImages] Fetch task crashed for {part_number}: {outcome!r}")
                results.append(FetchItemResult.failure(part_number, str(outcome) or UNKNOWN_ERROR))
            else:
                results.append(outcome)

        successful = sum(1 for r in results if r.success)
        summary = FetchSummary(total=len(results), successful=successful, failed=len(results) - successful)

        logger.info(
            f"[PartImages] Results: {summary.successful} successful, "
            f"{summary.failed} failed out of {summary.total} total"
        )

        return FetchResponse(results=results, summary=summary)
