"""Tile library: parallel loading, k-d tree colour index, mosaic generation."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
from PIL import Image
from scipy.spatial import cKDTree

from tile_mosaic.color_utils import squared_distances, weighted_average_color
from tile_mosaic.config import (
    KD_TREE_K_DIVISOR,
    KD_TREE_K_MAX,
    KD_TREE_K_MIN,
    PENALTY_MULTIPLIER,
    LibraryFingerprint,
    MosaicConfig,
)
from tile_mosaic.errors import ConfigError, ImageError
from tile_mosaic.image_io import (
    encode_png_data_uri,
    load_image_with_orientation,
    load_resized_image_with_orientation,
    scan_directory,
)
from tile_mosaic.mask import WeightingMask
from tile_mosaic.tile import Tile

logger = logging.getLogger(__name__)


def padded_size(width: int, height: int, tile_size: int) -> tuple[int, int]:
    """Smallest multiples of *tile_size* that are >= *width* and *height*."""
    pad_w = -(-width // tile_size) * tile_size
    pad_h = -(-height // tile_size) * tile_size
    return pad_w, pad_h


def grid_cells(width: int, height: int, tile_size: int) -> list[tuple[int, int]]:
    """Top-left ``(x, y)`` of every cell, row-major."""
    return [
        (x, y)
        for y in range(0, height, tile_size)
        for x in range(0, width, tile_size)
    ]


def _extract_tile(path: Path, tile_size: int, mask: WeightingMask) -> Tile | None:
    # Decoded pixels are dropped after colour extraction; the image is
    # decoded again on first use during generation.
    try:
        img = load_resized_image_with_orientation(path, tile_size)
    except ImageError as exc:
        logger.debug("Skipping %s: %s", path, exc)
        return None
    color = weighted_average_color(np.asarray(img), mask)
    return Tile(path=path, color=color, tile_size=tile_size)


class TileLibrary:
    """Ordered tiles plus a nearest-neighbour index over their colours.

    ``tiles[i]`` is point ``i`` of the index. Build one with :meth:`build`
    and keep it around while the fingerprint stays the same; tile images
    cached during one generation run are reused by the next.

    Not thread-safe: concurrent :meth:`generate_mosaic` calls on the same
    instance must be serialised by the caller (see
    :class:`tile_mosaic.session.LibrarySession`).
    """

    def __init__(
        self,
        tiles: Sequence[Tile],
        mask: WeightingMask,
        fingerprint: LibraryFingerprint,
    ) -> None:
        if not tiles:
            msg = f"No valid images found in directory {fingerprint.directory}"
            raise ConfigError(msg)

        self.tiles = list(tiles)
        self.mask = mask
        self.fingerprint = fingerprint
        self._colors = np.array([t.color for t in self.tiles], dtype=np.float64)
        self._index = cKDTree(self._colors)

    # -- construction --------------------------------------------------

    @classmethod
    def from_tiles(
        cls,
        tiles: Sequence[Tile],
        directory: str | Path,
        tile_size: int,
        sigma_divisor: float,
    ) -> TileLibrary:
        """Index already-extracted tiles under the given fingerprint."""
        mask = WeightingMask(tile_size, sigma_divisor)
        fingerprint = LibraryFingerprint(Path(directory), tile_size, sigma_divisor)
        return cls(tiles, mask, fingerprint)

    @classmethod
    def build(
        cls,
        directory: str | Path,
        tile_size: int,
        sigma_divisor: float,
        max_workers: int | None = None,
    ) -> TileLibrary:
        """Scan *directory* recursively and extract a colour per image.

        Files that cannot be decoded are left out. Raises
        :class:`ConfigError` when nothing usable remains.
        """
        if tile_size <= 0:
            msg = f"tile_size must be positive, got {tile_size}"
            raise ConfigError(msg)

        directory = Path(directory)
        mask = WeightingMask(tile_size, sigma_divisor)
        paths = scan_directory(directory)
        logger.info("Loading %d candidate tiles from %s …", len(paths), directory)

        t0 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(
                lambda p: _extract_tile(p, tile_size, mask), paths,
            ))
        tiles = [t for t in results if t is not None]
        logger.info(
            "Tiles ready  %d usable, %d skipped  (%.1f s)",
            len(tiles), len(paths) - len(tiles), time.perf_counter() - t0,
        )

        fingerprint = LibraryFingerprint(directory, tile_size, sigma_divisor)
        return cls(tiles, mask, fingerprint)

    # -- queries -------------------------------------------------------

    @property
    def tile_size(self) -> int:
        return self.fingerprint.tile_size

    def __len__(self) -> int:
        return len(self.tiles)

    def matches_config(
        self,
        directory: str | Path,
        tile_size: int,
        sigma_divisor: float,
    ) -> bool:
        """True iff all three fingerprint fields are exactly equal."""
        return self.fingerprint == LibraryFingerprint(
            Path(directory), tile_size, sigma_divisor,
        )

    def candidate_count(self) -> int:
        """How many nearest neighbours each cell considers."""
        n = len(self.tiles)
        k = min(max(n // KD_TREE_K_DIVISOR, KD_TREE_K_MIN), KD_TREE_K_MAX)
        return max(1, min(k, n))

    def find_best_tile(
        self,
        target_color: Sequence[float],
        usage_counts: np.ndarray,
        penalty_factor: float,
    ) -> int:
        """Index of the tile with the lowest colour-distance + usage score.

        Only the k nearest colours are scored. Ties go to the candidate the
        index returns first (nearest first).
        """
        k = self.candidate_count()
        _, indices = self._index.query(target_color, k=k)
        indices = np.atleast_1d(indices)

        color_dist = squared_distances(self._colors[indices], target_color)
        penalty = usage_counts[indices] * (penalty_factor * PENALTY_MULTIPLIER)
        scores = color_dist + penalty
        return int(indices[int(np.argmin(scores))])

    # -- generation ----------------------------------------------------

    def select_tiles(
        self,
        pixels: np.ndarray,
        cells: Sequence[tuple[int, int]],
        penalty_factor: float,
    ) -> list[int]:
        """Choose a tile per cell, in order, updating usage as it goes."""
        size = self.tile_size
        usage_counts = np.zeros(len(self.tiles), dtype=np.int64)
        matches: list[int] = []
        for x, y in cells:
            region = pixels[y:y + size, x:x + size]
            color = weighted_average_color(region, self.mask)
            best = self.find_best_tile(color, usage_counts, penalty_factor)
            usage_counts[best] += 1
            matches.append(best)
        return matches

    def render_mosaic(self, target_path: str | Path, config: MosaicConfig) -> Image.Image:
        """Build the mosaic for *target_path* as an RGBA image of the same size."""
        size = self.tile_size
        target = load_image_with_orientation(target_path)
        orig_w, orig_h = target.size
        pad_w, pad_h = padded_size(orig_w, orig_h, size)

        if (pad_w, pad_h) != (orig_w, orig_h):
            try:
                target = target.resize((pad_w, pad_h), Image.LANCZOS)
            except (OSError, ValueError) as exc:
                msg = f"Failed to resize target {target_path}: {exc}"
                raise ImageError(msg, path=target_path) from exc

        pixels = np.asarray(target)
        cells = grid_cells(pad_w, pad_h, size)
        logger.info(
            "Target: %dx%d → %d cells of %dpx  (penalty=%s)",
            orig_w, orig_h, len(cells), size, config.penalty_factor,
        )

        t0 = time.perf_counter()
        matches = self.select_tiles(pixels, cells, config.penalty_factor)
        logger.info(
            "Selection done  %d distinct tiles  (%.1f s)",
            len(set(matches)), time.perf_counter() - t0,
        )

        t0 = time.perf_counter()
        canvas = Image.new("RGBA", (pad_w, pad_h), (0, 0, 0, 0))
        for (x, y), idx in zip(cells, matches, strict=True):
            canvas.alpha_composite(self.tiles[idx].get_image(), dest=(x, y))
        logger.info("Compositing done  (%.1f s)", time.perf_counter() - t0)

        return canvas.crop((0, 0, orig_w, orig_h))

    def generate_mosaic(self, target_path: str | Path, config: MosaicConfig) -> str:
        """Render the mosaic and return it as a PNG data URI."""
        return encode_png_data_uri(self.render_mosaic(target_path, config))


def generate(library: TileLibrary, target_path: str | Path, penalty_factor: float) -> str:
    """Generate a mosaic data URI from an existing library."""
    return library.generate_mosaic(target_path, MosaicConfig(penalty_factor=penalty_factor))
