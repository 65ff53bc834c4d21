import csv
import logging
import os
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger(__name__)

SAPLINGS_FILE = os.getenv("SAPLINGS_FILE", "./data/forengers_saplings.csv")


@dataclass(frozen=True)
class Sapling:
    id: str
    display_name: str
    scientific_name: str
    aliases: Tuple[str, ...] = ()


def _split_aliases(raw: str) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(a.strip() for a in raw.split(";") if a.strip())


def load_saplings(path: str = SAPLINGS_FILE) -> Tuple[Sapling, ...]:
    """
    Load the Forengers sapling catalog from CSV, keeping file order.

    CSV must have headers: id,common_name,scientific_name,aliases
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        saplings = tuple(
            Sapling(
                id=row.get("id") or "",
                display_name=row.get("common_name") or "",
                scientific_name=row.get("scientific_name") or "",
                aliases=_split_aliases(row.get("aliases") or ""),
            )
            for row in reader
        )

    logger.info("Loaded %d saplings from %s", len(saplings), path)
    return saplings


def load_saplings_or_empty(path: str = SAPLINGS_FILE) -> Tuple[Sapling, ...]:
    try:
        return load_saplings(path)
    except (OSError, csv.Error) as err:
        logger.error("Failed to load saplings from %s: %s", path, err)
        return ()


def sapling_payload(sapling: Sapling, probability) -> dict:
    return {
        "id": sapling.id,
        "name": sapling.display_name,
        "scientificName": sapling.scientific_name,
        "matchConfidence": probability,
    }
