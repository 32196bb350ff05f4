# src/pix2att/ports/raster_read.py
from __future__ import annotations

from typing import Protocol, runtime_checkable
from ..contracts.core import FieldKind
from ..contracts.geo import GeoProfile, GeoTransform

@runtime_checkable
class RasterSamplerPort(Protocol):
    """
    Raster abierto en solo lectura, acotado a UNA banda.
    Reglas:
      - `inverse_transform()` devuelve geo -> pixel/line (falla si no es invertible).
      - `read_pixel()` lee una ventana 1x1 en el tipo de buffer que pide `kind`.
    """
    @property
    def profile(self) -> GeoProfile: ...
    def inverse_transform(self) -> GeoTransform: ...
    def read_pixel(self, pixel: int, line: int, kind: FieldKind) -> float | int: ...
    def close(self) -> None: ...

__all__ = ["RasterSamplerPort"]
