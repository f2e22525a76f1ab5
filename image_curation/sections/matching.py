"""Scoring images against detail-page sections."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from ..features.tags import contains_keyword, count_keyword_tags
from ..io.models import ContentAnalysis, ImageRecord, PageSection, SectionMatchingOptions

logger = logging.getLogger(__name__)

DEFAULT_SECTION_COUNTS: Dict[PageSection, int] = {
    PageSection.HERO: 1,
    PageSection.FEATURES: 3,
    PageSection.DETAILS: 4,
    PageSection.USAGE: 2,
    PageSection.SPECS: 1,
    PageSection.GALLERY: 6,
    PageSection.LIFESTYLE: 2,
}

# Substrings looked up in the classifier's recommended section.
SECTION_KEYWORDS: Dict[PageSection, Tuple[str, ...]] = {
    PageSection.HERO: ("main", "hero", "cover"),
    PageSection.FEATURES: ("feature", "highlight", "benefit"),
    PageSection.DETAILS: ("detail", "close", "zoom"),
    PageSection.USAGE: ("usage", "how to", "tutorial", "instruction"),
    PageSection.SPECS: ("spec", "technical", "dimension", "measurement"),
    PageSection.GALLERY: ("gallery", "additional", "more"),
    PageSection.LIFESTYLE: ("lifestyle", "context", "environment", "use case"),
    PageSection.ACCESSORIES: ("accessory", "add-on", "related", "bundle"),
    PageSection.COMPARISON: ("compare", "versus", "contrast", "difference"),
}

# Substrings looked up in each mood tag.
SECTION_TAGS: Dict[PageSection, Tuple[str, ...]] = {
    PageSection.HERO: ("main", "primary", "key", "hero", "cover", "showcase", "display"),
    PageSection.FEATURES: (
        "feature",
        "highlight",
        "benefit",
        "advantage",
        "selling point",
        "unique",
    ),
    PageSection.DETAILS: (
        "detail",
        "close-up",
        "zoom",
        "texture",
        "material",
        "part",
        "component",
    ),
    PageSection.USAGE: (
        "usage",
        "use",
        "demonstration",
        "tutorial",
        "how to",
        "step",
        "instruction",
    ),
    PageSection.SPECS: (
        "specification",
        "technical",
        "spec",
        "measurement",
        "dimension",
        "size",
        "weight",
    ),
    PageSection.GALLERY: ("gallery", "collection", "variety", "assortment", "angle", "view"),
    PageSection.LIFESTYLE: (
        "lifestyle",
        "context",
        "environment",
        "scenario",
        "real-world",
        "application",
    ),
    PageSection.ACCESSORIES: (
        "accessory",
        "complement",
        "add-on",
        "extra",
        "related",
        "companion",
    ),
    PageSection.COMPARISON: (
        "compare",
        "versus",
        "contrast",
        "comparison",
        "alternative",
        "option",
        "side-by-side",
    ),
}

KEYWORD_SCORE: float = 0.3
TAG_SCORE: float = 0.05
TAG_SCORE_MAX: float = 0.2
RELEVANCE_MAX: float = 0.5

LARGE_IMAGE_AREA: int = 1_000_000
SIZE_BONUS_SPAN: int = 10_000_000
SIZE_BONUS_MAX: float = 0.1

MIN_SECTION_SCORE: float = 0.3

ScoredImage = Tuple[ImageRecord, float]


def section_relevance(content: ContentAnalysis | None, section: PageSection) -> float:
    """Return how well *content* fits *section*, in [0, 0.5]."""
    if content is None:
        return 0.0

    score = 0.0
    if contains_keyword(content.recommended_section, SECTION_KEYWORDS[section]):
        score += KEYWORD_SCORE

    matches = count_keyword_tags(
        (tag.lower() for tag in content.tags), SECTION_TAGS[section]
    )
    score += min(TAG_SCORE_MAX, matches * TAG_SCORE)
    return float(max(0.0, min(RELEVANCE_MAX, score)))


def size_bonus(image: ImageRecord) -> float:
    """Return the large-image bonus for *image* (0 when its area is unknown or small)."""
    resolution = image.quality.resolution if image.quality else None
    if resolution is None or resolution.area <= LARGE_IMAGE_AREA:
        return 0.0
    excess = resolution.area - LARGE_IMAGE_AREA
    return min(SIZE_BONUS_MAX, excess / SIZE_BONUS_SPAN * SIZE_BONUS_MAX)


def calculate_section_score(
    image: ImageRecord, section: PageSection, options: SectionMatchingOptions
) -> float:
    """Return the fitness of *image* for *section* in [0, 1].

    Weights are used as given and need not sum to one; the weighted sum is
    clamped before and after the large-image bonus.
    """
    relevance = section_relevance(image.content, section)
    quality = image.quality.overall_score if image.quality else 0.0
    diversity = image.diversity_score or 0.0

    score = (
        relevance * options.relevance_weight
        + quality * options.quality_weight
        + diversity * options.diversity_weight
    )
    score = max(0.0, min(1.0, score))

    if section in options.prefer_large_images:
        score += size_bonus(image)

    return float(max(0.0, min(1.0, score)))


def rank_images_for_section(
    images: Sequence[ImageRecord], section: PageSection, options: SectionMatchingOptions
) -> List[ScoredImage]:
    """Return ``(image, score)`` pairs for *section*, best first."""
    scored = [(image, calculate_section_score(image, section, options)) for image in images]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def match_images_to_sections(
    images: Sequence[ImageRecord], options: SectionMatchingOptions
) -> Dict[PageSection, List[ImageRecord]]:
    """Pick the best-scoring images for every section configured in *options*.

    Each configured section keeps at most its requested count of images,
    and only images scoring above the minimum section score.
    """
    result: Dict[PageSection, List[ImageRecord]] = {}
    if not images:
        return result

    rankings = {
        section: rank_images_for_section(images, section, options) for section in PageSection
    }
    for section, count in options.section_counts.items():
        top = rankings[section][: max(0, count)]
        result[section] = [image for image, score in top if score > MIN_SECTION_SCORE]
        logger.debug("Section %s: %d of %d requested", section.value, len(result[section]), count)

    return result
