"""Fuzzy grouping of similar column sets.

Clustering is greedy single-link over the input order: each unclaimed item
seeds a cluster and claims every later unclaimed item whose columns are
similar enough to the seed's own columns. Merges are never reconsidered, so
the result depends on input order.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from rapidfuzz.distance import JaroWinkler

from docaudit.models import FuzzySimilarityGroup

COLUMN_MATCH_THRESHOLD = 0.8

ColumnSet = Tuple[Sequence[str], str]


def _comparable(name: str) -> str:
    return name.strip().casefold()


def column_set_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Jaccard-style similarity with fuzzy column matching.

    Every column of ``first`` counts as matched when its best Jaro-Winkler
    score against the columns of ``second`` exceeds COLUMN_MATCH_THRESHOLD.
    Matches are counted from ``first`` only, so the result is not guaranteed
    to be symmetric.
    """
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0

    candidates = [_comparable(name) for name in second]
    matches = 0
    for name in first:
        target = _comparable(name)
        best = max(JaroWinkler.similarity(target, candidate) for candidate in candidates)
        if best > COLUMN_MATCH_THRESHOLD:
            matches += 1

    union_size = len(first) + len(second) - matches
    if union_size == 0:
        return 1.0
    return matches / union_size


def cluster_column_sets(
    items: Sequence[ColumnSet], threshold: float
) -> List[FuzzySimilarityGroup]:
    """Group column sets whose similarity to a cluster seed reaches ``threshold``."""
    if len(items) < 2:
        return []

    claimed = [False] * len(items)
    groups: List[FuzzySimilarityGroup] = []

    for seed_index, (seed_columns, seed_source) in enumerate(items):
        if claimed[seed_index]:
            continue
        claimed[seed_index] = True

        sources = [seed_source]
        representative = list(seed_columns)

        for other_index in range(seed_index + 1, len(items)):
            if claimed[other_index]:
                continue
            other_columns, other_source = items[other_index]
            if column_set_similarity(seed_columns, other_columns) < threshold:
                continue

            claimed[other_index] = True
            sources.append(other_source)
            for column in other_columns:
                if column not in representative:
                    representative.append(column)

        if len(sources) > 1:
            groups.append(
                FuzzySimilarityGroup(
                    group_id=len(groups),
                    similarity_score=threshold,
                    representative_columns=sorted(representative),
                    sources=sources,
                )
            )

    return groups
