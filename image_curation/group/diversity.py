"""Per-image uniqueness scores derived from the similarity matrix."""

from __future__ import annotations

import numpy as np


def calculate_diversity_scores(matrix: np.ndarray) -> list[float]:
    """Return ``1 - mean similarity to every other image`` for each row of *matrix*.

    A lone image has nothing to differ from and scores 0.
    """
    values = np.asarray(matrix, dtype=float)
    size = values.shape[0] if values.ndim == 2 else 0
    if size < 2:
        return [0.0] * size

    others_total = values.sum(axis=1) - np.diagonal(values)
    scores = 1.0 - (others_total / (size - 1))
    return [float(score) for score in np.clip(scores, 0.0, 1.0)]
