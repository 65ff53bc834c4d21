import logging
from typing import Sequence

from fastapi import HTTPException, UploadFile
from PIL import UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from app.cache import get_cached_results, results_key, set_cached_results
from app.matcher import map_to_forengers_sapling
from app.media_utils import resize_image
from app.plantnet import PLANTNET_PROJECT, call_plantnet
from app.species import Sapling, sapling_payload

logger = logging.getLogger(__name__)


def _api_plant(top: dict) -> dict:
    species = top.get("species") or {}
    common_names = species.get("commonNames") or []
    sci_name = species.get("scientificNameWithoutAuthor")

    return {
        "commonName": (common_names[0] if common_names else None) or sci_name or "Unknown",
        "scientificName": sci_name or "Unknown",
        "confidence": top.get("score"),
    }


def build_identify_response(results, saplings: Sequence[Sapling], remaining_requests=None) -> dict:
    if not isinstance(results, list):
        results = []

    if not results:
        return {
            "success": True,
            "apiPlant": None,
            "forengersPlant": None,
            "message": "No plant identified",
        }

    mapped = map_to_forengers_sapling(results, saplings)
    if mapped:
        logger.info("Matched sapling %s (p=%s)", mapped.sapling.id, mapped.probability)

    return {
        "success": True,
        "apiPlant": _api_plant(results[0]),
        "forengersPlant": sapling_payload(mapped.sapling, mapped.probability) if mapped else None,
        "remainingRequests": remaining_requests,
    }


async def identify_from_photo(image: UploadFile, saplings: Sequence[Sapling]) -> dict:
    raw_bytes = await image.read()
    if not raw_bytes:
        raise HTTPException(status_code=400, detail="No image uploaded")

    try:
        prepared = await run_in_threadpool(resize_image, raw_bytes)
    except (UnidentifiedImageError, OSError):
        raise HTTPException(status_code=400, detail="Invalid image file.")

    key = results_key(PLANTNET_PROJECT, prepared)
    results = await run_in_threadpool(get_cached_results, key)
    cached = results is not None
    remaining_requests = None

    if not cached:
        api_json = await run_in_threadpool(
            call_plantnet, prepared, filename=image.filename or "image.jpg"
        )
        results = api_json.get("results")
        if not isinstance(results, list):
            results = []
        remaining_requests = api_json.get("remainingIdentificationRequests")
        await run_in_threadpool(set_cached_results, key, results)

    response = build_identify_response(results, saplings, remaining_requests)
    response["cached"] = cached
    return response
