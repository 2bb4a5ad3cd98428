"""
Tile Mosaic
===========

Rebuild a target photograph out of many small source images. Each grid
cell is matched to the tile whose Gaussian-weighted average colour is
closest, with a penalty that discourages reusing the same tile.

- **TileLibrary** - parallel tile loading, k-d tree colour index, generation
- **LibrarySession** - keeps a library alive across requests with the same settings
"""

__version__ = "1.0.0"

from tile_mosaic.adaptive import AdaptiveSettings, suggest_settings
from tile_mosaic.color_utils import weighted_average_color
from tile_mosaic.config import AppConfig, LibraryFingerprint, MosaicConfig, MosaicParams
from tile_mosaic.errors import ConfigError, ImageError, MosaicError, MosaicIOError
from tile_mosaic.library import TileLibrary, generate
from tile_mosaic.mask import WeightingMask
from tile_mosaic.session import LibrarySession
from tile_mosaic.tile import Tile

__all__ = [
    "AdaptiveSettings",
    "AppConfig",
    "ConfigError",
    "ImageError",
    "LibraryFingerprint",
    "LibrarySession",
    "MosaicConfig",
    "MosaicError",
    "MosaicIOError",
    "MosaicParams",
    "Tile",
    "TileLibrary",
    "WeightingMask",
    "generate",
    "suggest_settings",
    "weighted_average_color",
]
