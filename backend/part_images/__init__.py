"""
Part Images Module

Batch proxy for part number images hosted on a third-party CDN.

Features:
- Up to 6 part numbers per request, fetched in parallel
- Per-item failure reporting (HTTP errors, non-image responses,
  placeholder images, timeouts) without failing the batch
- Base64 output so images can be embedded directly by the client
"""

from .routes_fastapi import router
from .fetcher import PartImageFetcher, FetchConfig, resolve_image_url
from .validation import FetchRequest, validate_fetch_request

__all__ = [
    "router",
    "PartImageFetcher",
    "FetchConfig",
    "FetchRequest",
    "resolve_image_url",
    "validate_fetch_request",
]
