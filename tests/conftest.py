"""
Shared pytest fixtures.

`make_image` builds ImageRecord objects from the camelCase wire format so
tests exercise the same boundary parsing as real callers.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from image_curation.io.models import ImageRecord  # noqa: E402


def image_payload(
    url: str,
    *,
    content_type: str | None = "product",
    section: str = "main",
    tags: tuple[str, ...] = ("korean",),
    color: str | None = "#ffffff",
    main_object: str = "bag",
    product_focus: float = 0.8,
    commercial_value: float = 0.7,
    quality: float | None = None,
    width: int | None = None,
    height: int | None = None,
    diversity: float | None = None,
    with_content: bool = True,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"imageUrl": url}
    if with_content:
        payload["content"] = {
            "contentType": {
                "isProduct": content_type == "product",
                "isLifestyle": content_type == "lifestyle",
                "isInfographic": content_type == "infographic",
                "isPerson": content_type == "person",
            },
            "recommendedUse": {"section": section, "reason": "test"},
            "mood": {"description": "test", "tags": list(tags)},
            "colorScheme": {"primary": color, "secondary": [], "dominant": color},
            "objects": {"main": main_object, "others": []},
            "productFocus": {"score": product_focus},
            "commercialValue": {"score": commercial_value},
        }
    if quality is not None:
        payload["quality"] = {"overall": {"score": quality, "grade": "A"}}
        if width is not None and height is not None:
            payload["quality"]["resolution"] = {"width": width, "height": height}
    if diversity is not None:
        payload["diversityScore"] = diversity
    return payload


@pytest.fixture
def make_image():
    """Return a factory producing ImageRecord objects from keyword overrides."""

    def factory(url: str, **kwargs: Any) -> ImageRecord:
        return ImageRecord.from_dict(image_payload(url, **kwargs))

    return factory


@pytest.fixture
def scenario_images(make_image):
    """Two identical product shots (A, B) and one unrelated lifestyle shot (C)."""
    a = make_image("https://shop.example/a.jpg")
    b = make_image("https://shop.example/b.jpg")
    c = make_image(
        "https://shop.example/c.jpg",
        content_type="lifestyle",
        section="lifestyle",
        tags=("scene",),
        color="#000000",
        main_object="sofa",
    )
    return [a, b, c]
