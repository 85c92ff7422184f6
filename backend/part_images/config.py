"""
Part Images Configuration

Settings are read from the environment once, at import time.
"""

import os

# ============================================
# Server
# ============================================

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# "development" echoes internal error details back to the client
APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

VERSION = "2.0.0"

# ============================================
# Upstream image host
# ============================================

DEFAULT_URL_TEMPLATE = (
    "https://assets.rs-online.com/c_scale,w_200,f_auto,q_auto,d_no_image.png/"
    "{part_number}.jpg"
)

IMAGE_URL_TEMPLATE = os.getenv("PART_IMAGE_URL_TEMPLATE", DEFAULT_URL_TEMPLATE)
FETCH_TIMEOUT_SECONDS = float(os.getenv("PART_IMAGE_TIMEOUT_SECONDS", "10"))

# The upstream answers unknown part numbers with a tiny placeholder image and
# a 200 status, so anything below this size is treated as "not found".
MIN_IMAGE_BYTES = int(os.getenv("PART_IMAGE_MIN_BYTES", "1000"))

# Fixed system limit, not configurable
MAX_PART_NUMBERS = 6

# Browser-like headers; the upstream filters obvious bots
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36",
    "Accept": "image/*,*/*;q=0.8",
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# ============================================
# Capabilities
# ============================================

SUPPORTED_IMAGE_FORMATS = ["jpg", "jpeg", "png", "gif"]
MAX_IMAGE_SIZE = "10MB"


def is_development() -> bool:
    """Whether error details may be returned to clients."""
    return APP_ENV.lower() == "development"
