"""Image loading, resizing, directory scanning and PNG data-URI encoding."""

from __future__ import annotations

import base64
import io
import os
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps

from tile_mosaic.config import SUPPORTED_EXTENSIONS
from tile_mosaic.errors import ImageError, MosaicIOError

DATA_URI_PREFIX = "data:image/png;base64,"

# Everything Pillow raises for unreadable, truncated or oversized files.
_DECODE_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def to_rgba8(img: Image.Image) -> Image.Image:
    """Convert to 8-bit RGBA, scaling 16/32-bit grayscale down instead of clipping."""
    if img.mode == "I" or img.mode.startswith("I;16"):
        wide = np.asarray(img).astype(np.int64) >> 8
        img = Image.fromarray(np.clip(wide, 0, 255).astype(np.uint8))
    return img.convert("RGBA")


def load_image_with_orientation(path: str | Path) -> Image.Image:
    """Load an image as RGBA with its EXIF orientation applied."""
    try:
        with Image.open(path) as img:
            img.load()
            oriented = ImageOps.exif_transpose(img)
            return to_rgba8(oriented)
    except _DECODE_ERRORS as exc:
        msg = f"Failed to load image {path}: {exc}"
        raise ImageError(msg, path=path) from exc


def resize_to_fill(img: Image.Image, size: int) -> Image.Image:
    """Scale to cover ``size x size`` and centre-crop the overflow."""
    return ImageOps.fit(img, (size, size), method=Image.LANCZOS, centering=(0.5, 0.5))


def load_resized_image_with_orientation(path: str | Path, size: int) -> Image.Image:
    """Load, orient and resize-to-fill in one go (the tile pipeline)."""
    img = load_image_with_orientation(path)
    try:
        return resize_to_fill(img, size)
    except _DECODE_ERRORS as exc:
        msg = f"Failed to resize image {path}: {exc}"
        raise ImageError(msg, path=path) from exc


def scan_directory(
    folder: str | Path,
    extensions: frozenset[str] = SUPPORTED_EXTENSIONS,
) -> list[Path]:
    """Recursively collect files whose suffix (lower-cased) is in *extensions*.

    A missing folder yields an empty list. Results are sorted so repeated
    scans of an unchanged tree produce the same tile order.
    """
    folder = Path(folder)
    if not folder.exists():
        return []
    if not folder.is_dir():
        msg = f"Not a directory: {folder}"
        raise MosaicIOError(msg)

    found: list[Path] = []
    for root, _dirs, files in os.walk(folder):
        for name in files:
            path = Path(root) / name
            if path.suffix.lower() in extensions and path.is_file():
                found.append(path)
    return sorted(found)


def encode_png_data_uri(img: Image.Image) -> str:
    """Encode as PNG and wrap in a ``data:image/png;base64,`` URI."""
    buffer = io.BytesIO()
    try:
        img.save(buffer, format="PNG")
    except _DECODE_ERRORS as exc:
        msg = f"Failed to encode image: {exc}"
        raise ImageError(msg) from exc
    return DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def decode_png_data_uri(uri: str) -> Image.Image:
    """Inverse of :func:`encode_png_data_uri`."""
    if not uri.startswith(DATA_URI_PREFIX):
        msg = "Not a PNG data URI"
        raise ImageError(msg)
    try:
        raw = base64.b64decode(uri[len(DATA_URI_PREFIX):], validate=True)
        img = Image.open(io.BytesIO(raw))
        img.load()
    except _DECODE_ERRORS as exc:
        msg = f"Failed to decode data URI: {exc}"
        raise ImageError(msg) from exc
    return img
