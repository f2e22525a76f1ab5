"""Output helpers for persisting pipeline results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from .models import ImageRecord


def write_json(path: Path, payload: Any) -> Path:
    """Write *payload* to *path* as indented JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def ranking_frame(images: Sequence[ImageRecord]) -> pd.DataFrame:
    """Return one row per ranked image with its scores and analysis summary."""
    rows: list[dict[str, Any]] = []
    for rank, image in enumerate(images, start=1):
        content = image.content
        quality = image.quality
        resolution = quality.resolution if quality else None
        rows.append(
            {
                "rank": rank,
                "url": image.url,
                "overall_score": image.overall_score,
                "diversity_score": image.diversity_score,
                "quality_score": quality.overall_score if quality else None,
                "width": resolution.width if resolution else None,
                "height": resolution.height if resolution else None,
                "content_type": content.content_type.label if content else None,
                "recommended_section": content.recommended_section if content else None,
                "dominant_color": content.dominant_color if content else None,
                "similarity_group": (image.similarity_groups or [None])[0],
            }
        )
    return pd.DataFrame(rows)


def write_ranking_table(path: Path, images: Sequence[ImageRecord]) -> Path | None:
    """Write the ranking of *images* to *path* as parquet; skip empty rankings."""
    if not images:
        return None
    frame = ranking_frame(images)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_parquet(path, index=False, engine="pyarrow")
    return path
