"""End-to-end diversity analysis and section matching."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from .cache.results import ResultCache
from .group.clustering import T_GROUP, group_similar_images
from .group.diversity import calculate_diversity_scores
from .group.similarity import calculate_similarity_matrix
from .io.models import (
    DiverseImageSet,
    DiversityAnalysis,
    DiversityOptions,
    ImageRecord,
    SectionMatchingOptions,
    SectionMatchingOutcome,
)
from .rank.composite import (
    build_diverse_image_set,
    categorize_images,
    enrich_images,
    select_diverse_images,
)
from .sections.dedupe import remove_duplicate_images
from .sections.layout import recommend_section_layout
from .sections.matching import DEFAULT_SECTION_COUNTS, match_images_to_sections

logger = logging.getLogger(__name__)


def analyze_image_diversity(
    images: Sequence[ImageRecord] | None,
    options: DiversityOptions | None = None,
    cache: ResultCache | None = None,
    show_progress: bool = False,
) -> DiversityAnalysis:
    """Group near-duplicates, score diversity and rank *images*.

    Results are looked up in and stored to *cache* under a key derived from
    the set of image URLs, so the same set in any order hits the same entry.
    """
    options = options or DiversityOptions()
    records = list(images or [])
    if not records:
        return DiversityAnalysis()

    urls = [record.url for record in records]
    if cache is not None:
        cached = cache.load(urls)
        if cached is not None:
            logger.info("Using cached diversity analysis for %d images", len(records))
            return cached

    matrix = calculate_similarity_matrix(records, show_progress=show_progress)
    groups = group_similar_images(records, matrix, threshold=T_GROUP)
    diversity_scores = calculate_diversity_scores(matrix)
    ranked = enrich_images(records, groups, diversity_scores, options)

    analysis = DiversityAnalysis(
        images=ranked,
        similarity_groups=groups,
        diverse=select_diverse_images(ranked, options.min_diversity_score),
        by_category=categorize_images(ranked, options.max_group_size),
    )
    logger.info(
        "Analysed %d images into %d similarity groups", len(records), len(groups)
    )

    if cache is not None:
        cache.save(urls, analysis)
    return analysis


def recommend_diverse_image_set(
    images: Sequence[ImageRecord] | None,
    options: DiversityOptions | None = None,
    cache: ResultCache | None = None,
) -> DiverseImageSet:
    """Return per-category picks for *images*, topped up with diverse images."""
    options = options or DiversityOptions()
    analysis = analyze_image_diversity(images, options, cache=cache)
    return build_diverse_image_set(analysis, options.target_categories)


def merge_section_options(
    options: SectionMatchingOptions | None,
) -> SectionMatchingOptions:
    """Overlay the section counts of *options* on the default section counts."""
    options = options or SectionMatchingOptions()
    section_counts = dict(DEFAULT_SECTION_COUNTS)
    section_counts.update(options.section_counts)
    return replace(
        options,
        section_counts=section_counts,
        prefer_large_images=list(options.prefer_large_images),
    )


def process_section_matching(
    images: Sequence[ImageRecord] | None,
    options: SectionMatchingOptions | None = None,
) -> SectionMatchingOutcome:
    """Assign *images* to page sections without reuse and recommend layouts."""
    merged = merge_section_options(options)
    matched = match_images_to_sections(list(images or []), merged)
    deduped = remove_duplicate_images(matched)

    layouts = {
        section: recommend_section_layout(section_images, section)
        for section, section_images in deduped.items()
        if section_images
    }
    return SectionMatchingOutcome(matching_result=deduped, layout_recommendations=layouts)
