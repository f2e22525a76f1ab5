"""Tag and keyword matching helpers."""

from __future__ import annotations

from typing import Iterable, Sequence


def tag_overlap(tags_a: Iterable[str], tags_b: Iterable[str]) -> float:
    """Return shared tags divided by the smaller tag set size (floored at one)."""
    set_a = set(tags_a)
    set_b = set(tags_b)
    common = len(set_a & set_b)
    return common / max(1, min(len(set_a), len(set_b)))


def contains_keyword(text: str | None, keywords: Sequence[str]) -> bool:
    """Return ``True`` when the lower-cased *text* contains any of *keywords*."""
    if not text:
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def count_keyword_tags(tags: Iterable[str], vocabulary: Sequence[str]) -> int:
    """Count tags that contain at least one entry of *vocabulary*."""
    return sum(1 for tag in tags if contains_keyword(tag, vocabulary))
