"""Similarity scoring between analysed image records."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, Mapping, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..features.color import color_similarity
from ..features.tags import tag_overlap
from ..io.models import ImageRecord, Resolution


class SimilarityFactor(str, Enum):
    """Factors that can contribute to a pairwise similarity score."""

    CONTENT_TYPE = "content_type"
    SECTION = "section"
    TAGS = "tags"
    COLOR = "color"
    MAIN_OBJECT = "main_object"
    RESOLUTION = "resolution"


WEIGHTS: Dict[SimilarityFactor, float] = {
    SimilarityFactor.CONTENT_TYPE: 0.3,
    SimilarityFactor.SECTION: 0.25,
    SimilarityFactor.TAGS: 0.15,
    SimilarityFactor.COLOR: 0.2,
    SimilarityFactor.MAIN_OBJECT: 0.3,
    SimilarityFactor.RESOLUTION: 0.1,
}

RESOLUTION_RATIO_MIN: float = 0.8

Components = Dict[SimilarityFactor, float]


def pair_components(image_a: ImageRecord, image_b: ImageRecord) -> Components:
    """Return the sub-score of every factor applicable to the pair.

    Content factors apply only when both records carry a content analysis;
    the colour factor additionally requires both dominant colours to parse.
    The resolution factor applies when both records report a resolution.
    """
    components: Components = {}

    content_a, content_b = image_a.content, image_b.content
    if content_a is not None and content_b is not None:
        components[SimilarityFactor.CONTENT_TYPE] = _match(
            content_a.content_type.label, content_b.content_type.label
        )
        components[SimilarityFactor.SECTION] = _match(
            content_a.recommended_section, content_b.recommended_section
        )
        components[SimilarityFactor.TAGS] = tag_overlap(content_a.tags, content_b.tags)
        color = color_similarity(content_a.dominant_color, content_b.dominant_color)
        if color is not None:
            components[SimilarityFactor.COLOR] = color
        components[SimilarityFactor.MAIN_OBJECT] = _match(
            content_a.main_object, content_b.main_object
        )

    resolution_a = image_a.quality.resolution if image_a.quality else None
    resolution_b = image_b.quality.resolution if image_b.quality else None
    if resolution_a is not None and resolution_b is not None:
        ratio = resolution_ratio(resolution_a, resolution_b)
        components[SimilarityFactor.RESOLUTION] = 1.0 if ratio > RESOLUTION_RATIO_MIN else 0.0

    return components


def combine_components(components: Mapping[SimilarityFactor, float]) -> float:
    """Return the weighted mean of *components* over the applicable factors."""
    total_weight = sum(WEIGHTS[factor] for factor in components)
    if total_weight <= 0:
        return 0.0
    score = sum(WEIGHTS[factor] * float(value) for factor, value in components.items())
    return float(max(0.0, min(1.0, score / total_weight)))


def combined_similarity(image_a: ImageRecord, image_b: ImageRecord) -> float:
    """Return the similarity between two image records in [0, 1]."""
    return combine_components(pair_components(image_a, image_b))


def calculate_similarity_matrix(
    images: Sequence[ImageRecord], show_progress: bool = False
) -> np.ndarray:
    """Return the symmetric N×N similarity matrix for *images* with a unit diagonal."""
    size = len(images)
    matrix = np.eye(size, dtype=float)
    pairs = ((i, j) for i in range(size) for j in range(i + 1, size))
    for i, j in tqdm(
        pairs,
        total=size * (size - 1) // 2,
        desc="Scoring similarities",
        unit="pair",
        leave=False,
        disable=not show_progress,
    ):
        score = combined_similarity(images[i], images[j])
        matrix[i, j] = score
        matrix[j, i] = score
    return matrix


def pairwise_scores(
    images: Sequence[ImageRecord], matrix: np.ndarray
) -> Iterator[Tuple[str, str, float]]:
    """Yield ``(url_a, url_b, score)`` for every unordered pair in *matrix*."""
    size = len(images)
    for i in range(size):
        for j in range(i + 1, size):
            yield images[i].url, images[j].url, float(matrix[i, j])


def resolution_ratio(resolution_a: Resolution, resolution_b: Resolution) -> float:
    """Return the smaller pixel area divided by the larger one (0 for empty areas)."""
    area_a, area_b = resolution_a.area, resolution_b.area
    largest = max(area_a, area_b)
    if largest <= 0:
        return 0.0
    return min(area_a, area_b) / largest


def _match(left: str, right: str) -> float:
    return 1.0 if left == right else 0.0
