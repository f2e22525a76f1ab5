"""Priority-based removal of images reused across sections."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from ..io.models import ImageRecord, PageSection

DEFAULT_SECTION_PRIORITY: tuple[PageSection, ...] = (
    PageSection.HERO,
    PageSection.FEATURES,
    PageSection.DETAILS,
    PageSection.USAGE,
    PageSection.SPECS,
    PageSection.LIFESTYLE,
    PageSection.ACCESSORIES,
    PageSection.GALLERY,
    PageSection.COMPARISON,
)


def remove_duplicate_images(
    matching_result: Mapping[PageSection, Sequence[ImageRecord]],
    section_priority: Sequence[PageSection] = DEFAULT_SECTION_PRIORITY,
) -> Dict[PageSection, List[ImageRecord]]:
    """Keep every image URL only in the highest-priority section that selected it.

    Sections missing from *section_priority* are handled after the listed
    ones, in their original order. The input mapping is left untouched.
    """
    order = [section for section in section_priority if section in matching_result]
    order.extend(section for section in matching_result if section not in order)

    used_urls: set[str] = set()
    deduped: Dict[PageSection, List[ImageRecord]] = {}
    for section in order:
        kept: List[ImageRecord] = []
        for image in matching_result[section]:
            if image.url in used_urls:
                continue
            used_urls.add(image.url)
            kept.append(image)
        deduped[section] = kept

    return {section: deduped[section] for section in matching_result}
