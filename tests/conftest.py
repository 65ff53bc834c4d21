# tests/conftest.py

import os
import tempfile

# app modules read their configuration at import time
_TMP_DIR = tempfile.mkdtemp(prefix="forengers-tests-")

os.environ["CACHE_DIR"] = os.path.join(_TMP_DIR, "cache")
os.environ["DB_PATH"] = os.path.join(_TMP_DIR, "usage.sqlite")
os.environ["FRONTEND_DIR"] = os.path.join(_TMP_DIR, "frontend")
os.environ["SAPLINGS_FILE"] = os.path.join(_TMP_DIR, "missing.csv")
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "1000"
os.environ.pop("PLANTNET_API_KEY", None)

import pytest

from app.species import Sapling


@pytest.fixture
def hibiscus() -> Sapling:
    return Sapling(
        id="1",
        display_name="Hibiscus",
        scientific_name="Hibiscus rosa-sinensis",
        aliases=("Chinese hibiscus",),
    )


@pytest.fixture
def mango() -> Sapling:
    return Sapling(
        id="2",
        display_name="Mango",
        scientific_name="Mangifera indica",
        aliases=(),
    )
