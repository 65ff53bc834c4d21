"""
Match Pl@ntNet results against the restricted Forengers sapling list.

Pl@ntNet result structure (simplified):

    results: [
        {
            "score": 0.99,
            "species": {
                "scientificNameWithoutAuthor": "Hibiscus rosa-sinensis",
                "commonNames": ["Hibiscus", ...]
            }
        },
        ...
    ]

Nothing in here touches the network or the filesystem; callers pass in the
results and an already loaded catalog.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence

from app.species import Sapling

_NON_LETTERS = re.compile(r"[^a-z]")

Scorer = Callable[[Any, Sapling], float]


@dataclass(frozen=True)
class MatchResult:
    sapling: Sapling
    result: Mapping[str, Any]
    score: float
    probability: float


def normalize(text) -> str:
    if not text or not isinstance(text, str):
        return ""
    return _NON_LETTERS.sub("", text.lower())


def _reference_names(sapling: Sapling) -> list:
    aliases = getattr(sapling, "aliases", None) or ()
    if isinstance(aliases, str):
        aliases = (aliases,)
    return [
        getattr(sapling, "display_name", ""),
        getattr(sapling, "scientific_name", ""),
        *aliases,
    ]


def score_candidate_name(candidate_name, sapling: Sapling) -> float:
    """
    Score one candidate name (from a Pl@ntNet result) against one sapling.

    Returns 1 as soon as the normalized candidate contains, or is contained
    in, any normalized sapling name (display, scientific, then aliases).
    Returns 0 otherwise.
    """
    c = normalize(candidate_name)
    if not c:
        return 0

    for name in _reference_names(sapling):
        n = normalize(name)
        if not n:
            continue
        if n in c or c in n:
            return 1  # simple binary score
    return 0


def _probability(result: Mapping[str, Any]) -> float:
    value = result.get("score")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _candidate_names(result: Mapping[str, Any]) -> list:
    species = result.get("species")
    if not isinstance(species, Mapping):
        species = {}

    sci_name = species.get("scientificNameWithoutAuthor") or ""
    common_names = species.get("commonNames") or []
    if not isinstance(common_names, (list, tuple)):
        common_names = []

    return [sci_name, *common_names]


def map_to_forengers_sapling(
    results: Sequence[Mapping[str, Any]],
    saplings: Sequence[Sapling],
    scorer: Scorer = score_candidate_name,
) -> Optional[MatchResult]:
    """
    Return the best (sapling, result) pair for the given Pl@ntNet results,
    or None when no candidate name matches any sapling.

    Pairs are ranked by score, then by the result's probability. On an exact
    tie the first pair seen wins, walking results, then candidate names
    (scientific name first), then saplings in catalog order.
    """
    if not isinstance(results, (list, tuple)) or len(results) == 0:
        return None
    if not isinstance(saplings, (list, tuple)) or len(saplings) == 0:
        return None

    best_sapling = None
    best_result = None
    best_score = 0
    best_probability = 0

    for r in results:
        if not isinstance(r, Mapping):
            continue
        prob = _probability(r)

        for candidate in _candidate_names(r):
            for sapling in saplings:
                match_score = scorer(candidate, sapling)

                if match_score > best_score or (
                    match_score == best_score and prob > best_probability
                ):
                    best_sapling = sapling
                    best_result = r
                    best_score = match_score
                    best_probability = prob

    if best_score == 0:
        return None

    return MatchResult(
        sapling=best_sapling,
        result=best_result,
        score=best_score,
        probability=best_probability,
    )
