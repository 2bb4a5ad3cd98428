#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py generate photo.jpg --tiles tiles/
    python main.py suggest photo.jpg --tiles tiles/

Or use the installed script:

    tile-mosaic generate --help
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
