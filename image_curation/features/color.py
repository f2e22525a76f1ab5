"""Colour parsing and comparison utilities."""

from __future__ import annotations

import logging
import re

import numpy as np
from PIL import ImageColor

logger = logging.getLogger(__name__)

MAX_RGB_DISTANCE = float(np.sqrt(3 * 255.0**2))

_BARE_HEX = re.compile(r"[0-9a-fA-F]{6}")

RGB = tuple[int, int, int]


def parse_color(value: str | None) -> RGB | None:
    """Return the RGB triple for *value*, or ``None`` if it cannot be parsed.

    Accepts ``#rrggbb`` (with or without the leading ``#``) as well as the
    other notations understood by :func:`PIL.ImageColor.getrgb`.
    """
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    if _BARE_HEX.fullmatch(cleaned):
        cleaned = f"#{cleaned}"
    try:
        rgb = ImageColor.getrgb(cleaned)
    except ValueError:
        logger.debug("Unparseable colour %r", value)
        return None
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))


def color_similarity(color_a: str | None, color_b: str | None) -> float | None:
    """Return RGB-distance similarity in [0, 1], or ``None`` if either colour is invalid."""
    rgb_a = parse_color(color_a)
    rgb_b = parse_color(color_b)
    if rgb_a is None or rgb_b is None:
        return None

    delta = np.asarray(rgb_a, dtype=float) - np.asarray(rgb_b, dtype=float)
    distance = float(np.sqrt(np.sum(delta**2)))
    score = 1.0 - (distance / MAX_RGB_DISTANCE)
    return float(max(0.0, min(1.0, score)))
