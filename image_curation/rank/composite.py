"""Composite ranking, categorisation and diverse selection of images."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Mapping, Sequence

from ..io.models import (
    CATEGORY_NAMES,
    DEFAULT_TARGET_CATEGORIES,
    DiverseImageSet,
    DiversityAnalysis,
    DiversityOptions,
    ImageRecord,
)

DIVERSITY_WEIGHT: float = 0.3
QUALITY_WEIGHT: float = 0.35
CONTENT_WEIGHT: float = 0.35
PRIORITIZED_WEIGHT: float = 0.5

PRODUCT_FOCUS_SHARE: float = 0.4
COMMERCIAL_VALUE_SHARE: float = 0.6

MAX_DIVERSE_PICKS: int = 5


def calculate_overall_score(
    image: ImageRecord, diversity_score: float, options: DiversityOptions
) -> float:
    """Blend diversity, quality and content relevance into one score in [0, 1]."""
    score = diversity_score * DIVERSITY_WEIGHT
    weight_sum = DIVERSITY_WEIGHT

    if image.quality is not None:
        quality_weight = PRIORITIZED_WEIGHT if options.prioritize_quality else QUALITY_WEIGHT
        score += image.quality.overall_score * quality_weight
        weight_sum += quality_weight

    if image.content is not None:
        content_weight = PRIORITIZED_WEIGHT if options.prioritize_content else CONTENT_WEIGHT
        content_score = (
            image.content.product_focus * PRODUCT_FOCUS_SHARE
            + image.content.commercial_value * COMMERCIAL_VALUE_SHARE
        )
        score += content_score * content_weight
        weight_sum += content_weight

    if weight_sum <= 0:
        return 0.0
    return float(max(0.0, min(1.0, score / weight_sum)))


def enrich_images(
    images: Sequence[ImageRecord],
    groups: Sequence[Sequence[str]],
    diversity_scores: Sequence[float],
    options: DiversityOptions,
) -> List[ImageRecord]:
    """Return copies of *images* with derived scores, sorted by overall score."""
    keys_by_url: Dict[str, List[str]] = {}
    for group in groups:
        key = ",".join(group)
        for url in group:
            keys = keys_by_url.setdefault(url, [])
            if key not in keys:
                keys.append(key)

    enriched = [
        replace(
            image,
            diversity_score=float(diversity),
            similarity_groups=list(keys_by_url.get(image.url, [])),
            overall_score=calculate_overall_score(image, float(diversity), options),
        )
        for image, diversity in zip(images, diversity_scores)
    ]
    return sort_by_overall(enriched)


def sort_by_overall(images: Sequence[ImageRecord]) -> List[ImageRecord]:
    """Return *images* ordered by descending overall score, keeping ties in order."""
    return sorted(images, key=lambda image: image.overall_score or 0.0, reverse=True)


def categorize_images(
    images: Sequence[ImageRecord], max_group_size: int = 3
) -> Dict[str, List[ImageRecord]]:
    """Bucket *images* by their recommended section into the known categories."""
    buckets: Dict[str, List[ImageRecord]] = {name: [] for name in CATEGORY_NAMES}
    for image in images:
        if image.content is None:
            continue
        bucket = buckets.get(image.content.recommended_section)
        if bucket is not None:
            bucket.append(image)

    limit = max(0, max_group_size)
    return {name: sort_by_overall(bucket)[:limit] for name, bucket in buckets.items()}


def select_diverse_images(
    images: Sequence[ImageRecord],
    min_diversity_score: float = 0.3,
    limit: int = MAX_DIVERSE_PICKS,
) -> List[ImageRecord]:
    """Pick at most *limit* images, one per similarity group, from a ranked list."""
    picks: List[ImageRecord] = []
    used_groups: set[str] = set()

    for image in images:
        if len(picks) >= limit:
            break
        if not image.similarity_groups:
            picks.append(image)
            continue
        group_key = image.similarity_groups[0]
        if group_key in used_groups:
            continue
        if (image.diversity_score or 0.0) < min_diversity_score:
            continue
        used_groups.add(group_key)
        picks.append(image)

    return picks


def build_diverse_image_set(
    analysis: DiversityAnalysis,
    target_categories: Mapping[str, int] | None = None,
    limit: int = MAX_DIVERSE_PICKS,
) -> DiverseImageSet:
    """Select per-category images and top them up with diverse picks up to *limit*."""
    targets = dict(DEFAULT_TARGET_CATEGORIES)
    if target_categories:
        targets.update(target_categories)

    def take(category: str) -> List[ImageRecord]:
        return list(analysis.by_category.get(category, []))[: max(0, targets[category])]

    image_set = DiverseImageSet(
        main_images=take("main"),
        detail_images=take("detail"),
        lifestyle_images=take("lifestyle"),
        specification_images=take("specification"),
    )
    selected = (
        image_set.main_images
        + image_set.detail_images
        + image_set.lifestyle_images
        + image_set.specification_images
    )

    if len(selected) < limit:
        chosen = {image.url for image in selected}
        extras = [image for image in analysis.diverse if image.url not in chosen]
        selected.extend(extras[: limit - len(selected)])

    image_set.all_images = selected
    return image_set
