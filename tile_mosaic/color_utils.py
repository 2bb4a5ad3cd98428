"""Weighted colour averaging and RGB distances."""

from __future__ import annotations

import numpy as np

from tile_mosaic.mask import WeightingMask


def weighted_average_color(
    pixels: np.ndarray,
    mask: WeightingMask,
) -> tuple[float, float, float]:
    """Mask-weighted mean of the R, G, B channels.

    Args:
        pixels: (H, W, C) array with C >= 3 and H == W == ``mask.size``.
            The shape is not checked; any alpha channel is ignored.
        mask:   Weights in the same row-major order as the pixels.

    Returns:
        ``(r, g, b)`` floats in [0, 255].
    """
    rgb = pixels[..., :3].reshape(-1, 3).astype(np.float64)
    r, g, b = (mask.weights @ rgb) / mask.total_weight
    return float(r), float(g), float(b)


def squared_distances(colors: np.ndarray, target: np.ndarray) -> np.ndarray:
    """Squared Euclidean RGB distance from each row of *colors* to *target*."""
    diff = colors.astype(np.float64) - np.asarray(target, dtype=np.float64)
    return np.sum(diff ** 2, axis=1)
