"""A single source image with its pre-computed colour."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from tile_mosaic.errors import ImageError
from tile_mosaic.image_io import load_resized_image_with_orientation


@dataclass
class Tile:
    """Source image reference with its weighted average colour.

    The resized image is loaded lazily on first :meth:`get_image` call and
    kept for the lifetime of the tile. The returned image is shared between
    callers and must not be modified in place.
    """

    path: Path
    color: tuple[float, float, float]
    tile_size: int
    _image: Image.Image | None = field(default=None, repr=False, compare=False)

    @property
    def is_cached(self) -> bool:
        return self._image is not None

    def get_image(self) -> Image.Image:
        """Return the cached RGBA ``tile_size x tile_size`` image, loading it once."""
        if self._image is not None:
            return self._image

        try:
            self._image = load_resized_image_with_orientation(self.path, self.tile_size)
        except ImageError as exc:
            msg = f"Failed to load tile {self.path}: {exc.args[0]}"
            raise ImageError(msg, path=self.path) from exc
        return self._image
