"""Long-lived, fingerprint-keyed tile library with exclusive access."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from PIL import Image

from tile_mosaic.config import LibraryFingerprint, MosaicConfig, MosaicParams
from tile_mosaic.image_io import encode_png_data_uri
from tile_mosaic.library import TileLibrary

logger = logging.getLogger(__name__)


class LibrarySession:
    """Holds at most one :class:`TileLibrary` and rebuilds it on demand.

    The library is rebuilt only when a request arrives with a different
    ``(directory, tile_size, sigma_divisor)``. Every public method holds the
    session lock, so generation runs against one library never overlap.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers
        self._library: TileLibrary | None = None
        self._lock = threading.Lock()

    @property
    def library(self) -> TileLibrary | None:
        return self._library

    def _ensure_library(self, fingerprint: LibraryFingerprint) -> TileLibrary:
        lib = self._library
        if lib is not None and lib.fingerprint == fingerprint:
            logger.debug("Reusing tile library for %s", fingerprint.directory)
            return lib

        logger.info(
            "Building tile library  dir=%s  size=%d  sigma_divisor=%s",
            fingerprint.directory, fingerprint.tile_size, fingerprint.sigma_divisor,
        )
        # Replace only on success so a failed build keeps the previous library.
        lib = TileLibrary.build(
            fingerprint.directory,
            fingerprint.tile_size,
            fingerprint.sigma_divisor,
            max_workers=self.max_workers,
        )
        self._library = lib
        return lib

    def build_or_reuse_library(
        self,
        directory: str | Path,
        tile_size: int,
        sigma_divisor: float,
    ) -> TileLibrary:
        """Return the held library, rebuilding it if the fingerprint changed."""
        fingerprint = LibraryFingerprint(Path(directory), tile_size, sigma_divisor)
        with self._lock:
            return self._ensure_library(fingerprint)

    def render(self, params: MosaicParams) -> Image.Image:
        """Rebuild if needed, then render the mosaic as an RGBA image."""
        config = MosaicConfig(penalty_factor=params.penalty_factor)
        with self._lock:
            lib = self._ensure_library(params.fingerprint)
            return lib.render_mosaic(params.target_image_path, config)

    def generate(self, params: MosaicParams) -> str:
        """Like :meth:`render`, but returns a PNG data URI."""
        return encode_png_data_uri(self.render(params))

    def invalidate(self) -> None:
        """Drop the held library and its cached tile images."""
        with self._lock:
            self._library = None
