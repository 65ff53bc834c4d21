import os
import logging
import time
from typing import Optional
from fastapi import HTTPException, Request

from app.usage_db import get_window_count, increment_window, prune_windows

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."

def current_window(now: Optional[float] = None) -> int:
    if now is None:
        now = time.time()
    return int(now // RATE_LIMIT_WINDOW_SECONDS)

def get_client_ip(request: Request) -> str:
    # one trusted proxy in front; it appends the real peer last
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[-1].strip()
    return request.client.host if request.client else "unknown"

def enforce_rate_limit(request: Request):
    client_key = f"ip:{get_client_ip(request)}"
    window = current_window()

    count = get_window_count(client_key, window)
    if count >= RATE_LIMIT_MAX_REQUESTS:
        logger.warning("Rate limit reached for %s", client_key)
        raise HTTPException(status_code=429, detail=RATE_LIMIT_MESSAGE)

    increment_window(client_key, window)
    prune_windows(window - 1)
