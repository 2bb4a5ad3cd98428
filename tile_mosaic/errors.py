"""Error taxonomy shared by the library, the session and the CLI."""

from __future__ import annotations

from pathlib import Path


class MosaicError(Exception):
    """Base class for every error raised by :mod:`tile_mosaic`."""

    label = "Mosaic Error"

    def __str__(self) -> str:
        return f"{self.label}: {super().__str__()}"


class MosaicIOError(MosaicError):
    """Filesystem read or write failure."""

    label = "IO Error"


class ImageError(MosaicError):
    """Decode, resize or encode failure.

    Tile-specific instances carry the offending file in :attr:`path`.
    """

    label = "Image Processing Error"

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ConfigError(MosaicError):
    """Invalid parameters, or a library build that found no usable tiles."""

    label = "Configuration Error"
