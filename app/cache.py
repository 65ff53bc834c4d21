import os
import hashlib
import json
import logging
import tempfile

logger = logging.getLogger(__name__)

CACHE_DIR = os.getenv("CACHE_DIR", "./cache")

def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()

def results_key(project: str, image_bytes: bytes) -> str:
    return f"plantnet_{project}_{sha256_bytes(image_bytes)}"

def _cache_path(key: str) -> str:
    return os.path.join(CACHE_DIR, f"{key}.json")

def get_cached_results(key: str):
    """Return the cached Pl@ntNet results list for key, or None on a miss."""
    path = _cache_path(key)
    try:
        with open(path, "r", encoding="utf-8") as f:
            results = json.load(f)
    except FileNotFoundError:
        return None
    except (ValueError, OSError) as err:
        logger.warning("Ignoring unreadable cache entry %s: %s", key, err)
        return None

    if not isinstance(results, list):
        return None
    logger.debug("Cache hit for %s", key)
    return results

def set_cached_results(key: str, results: list):
    # quota counters change per call, so only the identification itself is kept
    os.makedirs(CACHE_DIR, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=CACHE_DIR, prefix=f".{key}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(results, f, ensure_ascii=False)
        os.replace(tmp_path, _cache_path(key))
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
