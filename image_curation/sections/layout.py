"""Layout hints for page sections."""

from __future__ import annotations

from typing import Sequence

from ..io.models import ImageRecord, LayoutRecommendation, PageSection

MAX_GRID_COLUMNS: int = 3


def recommend_section_layout(
    images: Sequence[ImageRecord], section: PageSection
) -> LayoutRecommendation:
    """Return the presentation layout for *section* holding *images*."""
    count = len(images) if images else 0
    if count <= 1:
        return LayoutRecommendation(layout="single")

    if section in (PageSection.HERO, PageSection.LIFESTYLE):
        return LayoutRecommendation(layout="slider")
    if section is PageSection.FEATURES:
        return LayoutRecommendation(layout="grid", columns=min(MAX_GRID_COLUMNS, count))
    if section is PageSection.DETAILS:
        return LayoutRecommendation(layout="mosaic")
    if section is PageSection.GALLERY:
        return LayoutRecommendation(layout="grid", columns=MAX_GRID_COLUMNS)
    if section is PageSection.COMPARISON:
        return LayoutRecommendation(layout="comparison")

    if count <= MAX_GRID_COLUMNS:
        return LayoutRecommendation(layout="grid", columns=count)
    return LayoutRecommendation(layout="slider")
