"""Suggested tile size and penalty from the target size and tile count."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path

from tile_mosaic.image_io import load_image_with_orientation, scan_directory

TILES_PER_DIMENSION = 100.0
MIN_TILE_SIZE = 8
MAX_TILE_SIZE = 128
DEFAULT_PENALTY = 50.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class AdaptiveSettings:
    tile_size: int
    penalty_factor: float
    tile_count: int
    image_width: int
    image_height: int


def suggest_tile_size(width: int, height: int) -> int:
    """Aim for roughly 100 tiles along the shorter side, within [8, 128]."""
    suggested = _round_half_up(min(width, height) / TILES_PER_DIMENSION)
    return min(max(suggested, MIN_TILE_SIZE), MAX_TILE_SIZE)


def suggest_penalty(tile_count: int) -> float:
    """Few tiles must be reused, so penalise less; many tiles, more."""
    if tile_count == 0:
        penalty = DEFAULT_PENALTY
    elif tile_count < 50:
        penalty = 10.0 + tile_count / 50.0 * 20.0
    elif tile_count < 200:
        penalty = 30.0 + (tile_count - 50) / 150.0 * 40.0
    else:
        penalty = 70.0 + (min(tile_count, 1000) - 200) / 800.0 * 30.0
    return float(_round_half_up(penalty))


def suggest_settings(target_path: str | Path, tile_directory: str | Path) -> AdaptiveSettings:
    """Inspect the target image and count supported tiles.

    Only scans the directory; no tile is decoded.
    """
    img = load_image_with_orientation(target_path)
    width, height = img.size
    tile_count = len(scan_directory(tile_directory))
    return AdaptiveSettings(
        tile_size=suggest_tile_size(width, height),
        penalty_factor=suggest_penalty(tile_count),
        tile_count=tile_count,
        image_width=width,
        image_height=height,
    )
