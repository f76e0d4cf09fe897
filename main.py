#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py single photo.jpg photo_dithered.png

Or process a folder (drop images into ``images/``):

    python main.py batch
    python -m palette_dither.cli palettes
"""

from palette_dither.cli import app

if __name__ == "__main__":
    app()
