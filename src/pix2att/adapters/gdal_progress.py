# src/pix2att/adapters/gdal_progress.py
from __future__ import annotations

from osgeo import gdal


def term_progress(fraction: float) -> None:
    """Barra de progreso de terminal de GDAL (0...10...20...100 - done.)."""
    gdal.TermProgress_nocb(min(max(float(fraction), 0.0), 1.0))
