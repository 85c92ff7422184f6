"""
Part Images API Routes

Provides endpoints for:
- Batch fetching part images as Base64
- Health check
- Server capabilities
"""

import json
import logging
from typing import Any, AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import (
    FETCH_TIMEOUT_SECONDS,
    MAX_IMAGE_SIZE,
    MAX_PART_NUMBERS,
    SUPPORTED_IMAGE_FORMATS,
    VERSION,
    is_development,
)
from .fetcher import FetchResponse, PartImageFetcher
from .validation import PartNumberValidationError, validate_fetch_request

logger = logging.getLogger(__name__)

# Listed in 404 responses and in the startup banner
AVAILABLE_ENDPOINTS = [
    "GET /health - Health check",
    "GET /capabilities - Server capabilities",
    "POST /fetch-images - Fetch images by part numbers",
]

# ============================================
# Response Models
# ============================================


class ImageResultResponse(BaseModel):
    """One entry of the images array. Failures carry error, successes carry data."""
    model_config = ConfigDict(populate_by_name=True)

    part_number: str = Field(..., alias="partNumber")
    success: bool
    data: Optional[str] = Field(None, description="Base64 encoded image")
    content_type: Optional[str] = Field(None, alias="contentType")
    size: Optional[int] = Field(None, description="Image size in bytes")
    error: Optional[str] = None


class SummaryResponse(BaseModel):
    total: int
    successful: int
    failed: int


class FetchImagesResponse(BaseModel):
    """Response model for a batch fetch."""
    success: bool = True
    images: List[ImageResultResponse]
    summary: SummaryResponse

    @classmethod
    def from_fetch_response(cls, response: FetchResponse) -> "FetchImagesResponse":
        return cls(
            images=[
                ImageResultResponse(
                    part_number=r.part_number,
                    success=r.success,
                    data=r.data,
                    content_type=r.content_type,
                    size=r.size,
                    error=r.error,
                )
                for r in response.results
            ],
            summary=SummaryResponse(
                total=response.summary.total,
                successful=response.summary.successful,
                failed=response.summary.failed,
            ),
        )


# ============================================
# Request parsing
# ============================================


async def read_json_body(request: Request) -> Any:
    """Decode the body only when it is declared as JSON; anything else reads as {}."""
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() != "application/json":
        return {}
    return await request.json()


# ============================================
# Dependencies
# ============================================


async def get_fetcher() -> AsyncIterator[PartImageFetcher]:
    """One fetcher (and HTTP client) per request, closed after the response."""
    fetcher = PartImageFetcher()
    try:
        yield fetcher
    finally:
        await fetcher.close()


# ============================================
# Router
# ============================================

router = APIRouter(tags=["Part Images"])


# ============================================
# Endpoints
# ============================================


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(content={
        "status": "OK",
        "message": "Server is running",
    })


@router.get("/capabilities")
async def get_capabilities():
    """Describe the limits clients must respect."""
    return JSONResponse(content={
        "maxPartNumbers": MAX_PART_NUMBERS,
        "supportedImageFormats": SUPPORTED_IMAGE_FORMATS,
        "maxImageSize": MAX_IMAGE_SIZE,
        "timeout": f"{FETCH_TIMEOUT_SECONDS:g} seconds",
        "version": VERSION,
    })


@router.post("/fetch-images")
async def fetch_images(
    request: Request,
    fetcher: PartImageFetcher = Depends(get_fetcher),
):
    """
    Fetch the images for up to 6 part numbers.

    The response is 200 as long as the request itself is valid; individual
    images that could not be fetched are reported with success=false.
    Bodies not sent as application/json are treated as empty.

    Example:
        POST /fetch-images
        {
            "partNumbers": ["1234567", "7654321"]
        }
    """
    try:
        body = await read_json_body(request)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        fetch_request = validate_fetch_request(body)
        result = await fetcher.fetch_batch(fetch_request)
        response = FetchImagesResponse.from_fetch_response(result)
        return JSONResponse(content=response.model_dump(by_alias=True, exclude_none=True))

    except PartNumberValidationError as e:
        logger.warning(f"[PartImages] Rejected request: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})

    except Exception as e:
        logger.exception(f"[PartImages] Server error: {e}")
        content = {"error": "Internal server error"}
        if is_development():
            content["details"] = str(e)
        return JSONResponse(status_code=500, content=content)
