"""
Aggregation and ranking of per-token candidate matches.

Invariant:
Every entity present in the input appears exactly once in the output,
scored with the sum of its candidate scores. Output is sorted by score,
highest first; equal scores keep the order in which their group first
appeared in the input.
"""

from typing import Any, Callable, Dict, Hashable, Iterable, List, Tuple

Candidate = Tuple[float, Any]


def identity_key(entity: Any) -> Hashable:
    """Group by primary key."""
    return entity.id


def name_key(entity: Any) -> Hashable:
    """Group by display name. Distinct monuments sharing a name collapse."""
    return entity.name


GROUP_KEYS = {
    "id": identity_key,
    "name": name_key,
}


def rank(
    matches: Iterable[Candidate],
    key: Callable[[Any], Hashable] = identity_key,
) -> List[Candidate]:
    """
    Merge candidate matches into one ranked list.

    Args:
        matches: (score, entity) pairs, typically concatenated over all tokens
        key: Function mapping an entity to its grouping key

    Returns:
        List of (aggregate score, representative entity), descending by score
    """
    totals: Dict[Hashable, float] = {}
    representatives: Dict[Hashable, Any] = {}

    for match_score, entity in matches:
        k = key(entity)
        if k not in representatives:
            representatives[k] = entity
            totals[k] = 0.0
        totals[k] += match_score

    ranked = [(totals[k], representatives[k]) for k in representatives]
    # sorted() is stable, so ties stay in first-seen order
    return sorted(ranked, key=lambda pair: pair[0], reverse=True)
