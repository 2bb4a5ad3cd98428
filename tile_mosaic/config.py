"""Centralised configuration via frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from tile_mosaic.errors import ConfigError

# Scales the usage penalty into the range of squared RGB distances.
PENALTY_MULTIPLIER = 50.0

# Adaptive k for the nearest-neighbour query: tile_count // divisor, clamped.
KD_TREE_K_MIN = 10
KD_TREE_K_MAX = 100
KD_TREE_K_DIVISOR = 10


@dataclass(frozen=True)
class AppConfig:
    """Defaults for a mosaic run.

    Attributes:
        tile_size:      Edge length of each square tile / grid cell in pixels.
        penalty_factor: Weight of the reuse penalty (0 = pure colour match).
        sigma_divisor:  Gaussian sigma is ``tile_size / sigma_divisor``;
                        ``<= 0`` switches to a plain average.
        max_workers:    Thread pool size for library loading (None = default).
        output_path:    Where the CLI writes the finished mosaic.
    """

    tile_size: int = 32
    penalty_factor: float = 50.0
    sigma_divisor: float = 4.0
    max_workers: int | None = None
    output_path: Path = field(default_factory=lambda: Path("mosaic.png"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".jpg", ".jpeg", ".png"})


@dataclass(frozen=True)
class MosaicConfig:
    """Per-generation parameters."""

    penalty_factor: float = 50.0

    def __post_init__(self) -> None:
        if self.penalty_factor < 0:
            msg = f"penalty_factor must be non-negative, got {self.penalty_factor}"
            raise ConfigError(msg)


@dataclass(frozen=True)
class LibraryFingerprint:
    """Identifies one library build. Compared field by field, exactly."""

    directory: Path
    tile_size: int
    sigma_divisor: float


@dataclass(frozen=True)
class MosaicParams:
    """A complete generation request from the command layer."""

    target_image_path: Path
    tile_directory: Path
    tile_size: int = 32
    penalty_factor: float = 50.0
    sigma_divisor: float = 4.0

    @property
    def fingerprint(self) -> LibraryFingerprint:
        return LibraryFingerprint(
            Path(self.tile_directory), self.tile_size, self.sigma_divisor,
        )


SUPPORTED_EXTENSIONS = AppConfig.SUPPORTED_EXTENSIONS
