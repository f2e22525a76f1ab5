"""Single-seed grouping of near-duplicate images."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

import numpy as np

from ..io.models import ImageRecord

T_GROUP: float = 0.75

SimilarityGroup = List[str]


def group_similar_images(
    images: Sequence[ImageRecord],
    matrix: np.ndarray,
    threshold: float = T_GROUP,
) -> list[SimilarityGroup]:
    """Group *images* whose similarity to a seed image exceeds *threshold*.

    Images are visited in input order. The first unvisited image seeds a new
    group and claims every other unvisited image that is more similar than
    *threshold* to the seed itself. Membership is never decided against
    non-seed members, so groups are not transitive closures.
    """
    size = len(images)
    visited = [False] * size
    groups: list[SimilarityGroup] = []

    for seed in range(size):
        if visited[seed]:
            continue
        visited[seed] = True
        group = [images[seed].url]
        for other in range(size):
            if visited[other]:
                continue
            if float(matrix[seed, other]) > threshold:
                group.append(images[other].url)
                visited[other] = True
        groups.append(group)

    return groups


def group_metrics(
    groups: Sequence[SimilarityGroup], total_images: int, threshold: float = T_GROUP
) -> Dict[str, Any]:
    """Return summary counts describing *groups*."""
    largest_group = max((len(group) for group in groups), default=0)
    duplicates = sum(len(group) - 1 for group in groups)
    return {
        "total": int(total_images),
        "groups": len(groups),
        "largest_group": int(largest_group),
        "singletons": sum(1 for group in groups if len(group) == 1),
        "duplicates": int(duplicates),
        "threshold": float(threshold),
    }
