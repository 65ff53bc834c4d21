import logging
import os

import requests

logger = logging.getLogger(__name__)

PLANTNET_API_KEY = os.getenv("PLANTNET_API_KEY")
PLANTNET_PROJECT = os.getenv("PLANTNET_PROJECT", "all")
PLANTNET_TIMEOUT = float(os.getenv("PLANTNET_TIMEOUT", "10"))

PLANTNET_URL = "https://my-api.plantnet.org/v2/identify/{project}"


class PlantNetError(RuntimeError):
    def __init__(self, status_code: int, details):
        super().__init__(f"Pl@ntNet error {status_code}")
        self.status_code = status_code
        self.details = details


def has_api_key() -> bool:
    return bool(PLANTNET_API_KEY)


def call_plantnet(image_bytes: bytes, filename: str = "image.jpg", organ: str = "leaf") -> dict:
    if not PLANTNET_API_KEY:
        raise RuntimeError("PLANTNET_API_KEY not set")

    url = PLANTNET_URL.format(project=PLANTNET_PROJECT)
    files = [("images", (filename, image_bytes, "image/jpeg"))]
    data = {"organs": organ}

    logger.info("Calling Pl@ntNet API (project=%s, %d bytes)", PLANTNET_PROJECT, len(image_bytes))
    r = requests.post(
        url,
        params={"api-key": PLANTNET_API_KEY},
        files=files,
        data=data,
        timeout=PLANTNET_TIMEOUT,
    )

    try:
        body = r.json()
    except ValueError:
        body = r.text

    if not r.ok:
        logger.warning("Pl@ntNet returned %s", r.status_code)
        raise PlantNetError(r.status_code, body)

    if not isinstance(body, dict):
        raise RuntimeError("Pl@ntNet returned a non-JSON response")

    return body
