"""Pre-computed spatial weights for colour averaging."""

from __future__ import annotations

import numpy as np

from tile_mosaic.errors import ConfigError


class WeightingMask:
    """Square Gaussian (or uniform) weight grid.

    Weights are stored flat in row-major order (y outer, x inner), matching
    the order pixels come out of ``array.reshape(-1, C)``.

    Args:
        size:          Edge length in pixels.
        sigma_divisor: ``sigma = size / sigma_divisor``. Values ``<= 0`` give
                       every pixel weight 1 (plain average).
    """

    def __init__(self, size: int, sigma_divisor: float) -> None:
        if size <= 0:
            msg = f"Mask size must be positive, got {size}"
            raise ConfigError(msg)

        self.size = size
        self.sigma_divisor = sigma_divisor

        if sigma_divisor > 0:
            # Centre is size / 2.0, not (size - 1) / 2.0; changing it shifts
            # every extracted colour.
            center = size / 2.0
            sigma = size / sigma_divisor
            ys, xs = np.mgrid[0:size, 0:size].astype(np.float64)
            dist_sq = (xs - center) ** 2 + (ys - center) ** 2
            grid = np.exp(-dist_sq / (2.0 * sigma * sigma))
        else:
            grid = np.ones((size, size), dtype=np.float64)

        weights = grid.reshape(-1)
        weights.flags.writeable = False
        self._weights = weights
        self._total_weight = float(weights.sum())

    @property
    def weights(self) -> np.ndarray:
        """(size², ) float64, read-only."""
        return self._weights

    @property
    def grid(self) -> np.ndarray:
        """The weights viewed as (size, size)."""
        return self._weights.reshape(self.size, self.size)

    @property
    def total_weight(self) -> float:
        return self._total_weight

    def __repr__(self) -> str:
        return f"WeightingMask(size={self.size}, sigma_divisor={self.sigma_divisor})"
