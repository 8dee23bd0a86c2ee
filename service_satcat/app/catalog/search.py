"""
Fuzzy name scoring and ranking for the satellite catalog.

Scores are signed integers: higher is better and a negative score means the
name only matched by accident. ``None`` means the query characters do not
appear in the name in order at all.
"""

from __future__ import annotations

from typing import Collection, Iterable, List, Optional, Tuple

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from .models import ObjectType, TrackedObject


# partial_ratio at or below this value yields a non-positive score
PARTIAL_RATIO_FLOOR = 50
PREFIX_BONUS = 15
SUBSTRING_BONUS = 10
MAX_LENGTH_PENALTY = 20


def _normalize(text: str) -> str:
    # default_process maps each punctuation mark to a space; collapse the runs.
    return " ".join(default_process(text).split())


def _is_subsequence(needle: str, haystack: str) -> bool:
    remaining = iter(haystack)
    return all(char in remaining for char in needle)


def fuzzy_score(query: str, name: str) -> Optional[int]:
    """Score ``query`` against ``name``; deterministic for a given pair."""
    needle = _normalize(query)
    haystack = _normalize(name)
    if not needle or not _is_subsequence(needle, haystack):
        return None

    score = round(fuzz.partial_ratio(needle, haystack)) - PARTIAL_RATIO_FLOOR
    if haystack.startswith(needle):
        score += PREFIX_BONUS
    if needle in haystack:
        score += SUBSTRING_BONUS

    # Long names that only share a short fragment with the query rank lower.
    score -= min(MAX_LENGTH_PENALTY, (len(haystack) - len(needle)) // 4)
    return score


def rank_matches(
    query: str,
    objects: Iterable[TrackedObject],
    allowed_types: Collection[ObjectType],
    limit: int,
) -> List[TrackedObject]:
    """
    Fuzzy-match ``query`` against object names of the allowed types.

    Ordered by score descending, then object id descending so that more
    recently catalogued objects win ties. At most ``limit`` results.
    """
    scored: List[Tuple[int, TrackedObject]] = []
    for tracked in objects:
        if tracked.object_type not in allowed_types:
            continue
        score = fuzzy_score(query, tracked.name)
        if score is None or score < 0:
            continue
        scored.append((score, tracked))

    scored.sort(key=lambda item: (item[0], item[1].object_id), reverse=True)
    return [tracked for _, tracked in scored[:limit]]
