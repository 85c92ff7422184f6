"""
Part Image Proxy Server

FastAPI application wiring for the part_images module:
- CORS for browser clients
- Request logging
- JSON 404 and 500 handlers

Run:
    python main.py
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from part_images import router as part_images_router
from part_images.config import HOST, LOG_LEVEL, MAX_PART_NUMBERS, PORT
from part_images.routes_fastapi import AVAILABLE_ENDPOINTS

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log method, URL, status and duration of every request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        logger.info(
            f"Request: {request.method} {request.url} completed in "
            f"{process_time:.2f} seconds with status {response.status_code}"
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Server running on http://localhost:{PORT}")
    logger.info("Available endpoints:")
    for endpoint in AVAILABLE_ENDPOINTS:
        logger.info(f"  {endpoint}")
    logger.info(f"Maximum part numbers supported: {MAX_PART_NUMBERS}")
    yield


app = FastAPI(title="part-image-proxy", lifespan=lifespan)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(part_images_router)


# ============================================
# Error handlers
# ============================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Wrong method on a known path is reported like an unknown path
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Endpoint not found",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc!r}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
