# src/pix2att/contracts/geo.py

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Literal, NamedTuple, Tuple, Optional

from .errors import GeoTransformError

GeoTransform = Tuple[float, float, float, float, float, float]
DTypeStr = Literal[
    "int8", "uint8", "int16", "uint16", "int32", "uint32", "int64", "uint64",
    "float16", "float32", "float64", "complex64", "complex128",
]

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

class PixelIndex(NamedTuple):
    pixel: int
    line: int

# ---------- CRS (puro dominio, sin GDAL) ----------
@dataclass(frozen=True)
class CRSRef:
    wkt: Optional[str] = None
    epsg: Optional[int] = None

    @staticmethod
    def from_epsg(code: int) -> "CRSRef":
        return CRSRef(epsg=int(code))

    @staticmethod
    def from_wkt(wkt: str) -> "CRSRef":
        return CRSRef(wkt=wkt)

    def is_empty(self) -> bool:
        return not self.wkt and self.epsg is None

    def to_wkt(self) -> str:
        """
        Representación textual del CRS.
        - WKT tal cual si existe.
        - 'EPSG:<code>' si solo hay EPSG.
        """
        if self.wkt:
            return self.wkt
        if self.epsg is not None:
            return f"EPSG:{int(self.epsg)}"
        raise ValueError("CRSRef vacío: no hay WKT ni EPSG.")

    @staticmethod
    def _normalize_wkt(wkt: str) -> str:
        # strip + upper + espacios colapsados; no reordena nodos
        s = " ".join(wkt.strip().upper().split())
        s = s.replace(" ,", ",").replace(", ", ",")
        s = s.replace("[ ", "[").replace(" ]", "]")
        return s

    def equals(self, other: "CRSRef") -> bool:
        """
        Comparación textual sin GDAL (útil para fakes y tests).
        La comparación real entre datasets la hace el adapter OSR (`IsSame`).
        """
        if self is other:
            return True
        if self.epsg is not None and other.epsg is not None:
            return int(self.epsg) == int(other.epsg)
        if self.wkt and other.wkt:
            return self._normalize_wkt(self.wkt) == self._normalize_wkt(other.wkt)
        return False

# ---------- Perfil de la banda muestreada ----------
@dataclass(frozen=True)
class GeoProfile:
    band: int
    count: int
    dtype: DTypeStr
    width: int
    height: int
    transform: GeoTransform
    crs: CRSRef
    nodata: Optional[float] = None

    @property
    def bounds(self) -> Bounds:
        return geotransform_bounds(self.transform, self.width, self.height)

    def contains(self, idx: PixelIndex) -> bool:
        return 0 <= idx.pixel < self.width and 0 <= idx.line < self.height

# ---------- GeoTransform helpers (afines a GDAL pero sin dependencia) ----------
def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

def pixel_to_world(col: float, row: float, gt: GeoTransform) -> Tuple[float, float]:
    x0, px, rx, y0, ry, py = gt
    x = x0 + col * px + row * rx
    y = y0 + col * ry + row * py
    return x, y

def pixel_center(pixel: int, line: int, gt: GeoTransform) -> Tuple[float, float]:
    return pixel_to_world(pixel + 0.5, line + 0.5, gt)

def invert_geotransform(gt: GeoTransform) -> GeoTransform:
    """Inversa pura de un geotransform (pixel/line -> geo pasa a geo -> pixel/line).

    Mismo resultado que `gdal.InvGeoTransform`; el adapter GDAL usa la
    librería, esta versión sirve a fakes y tests.
    """
    x0, px, rx, y0, ry, py = gt
    det = px * py - rx * ry
    if abs(det) < 1e-15:
        raise GeoTransformError("GeoTransform no invertible (det≈0).")
    inv_det = 1.0 / det
    i1 = py * inv_det
    i2 = -rx * inv_det
    i4 = -ry * inv_det
    i5 = px * inv_det
    i0 = (rx * y0 - x0 * py) * inv_det
    i3 = (-px * y0 + x0 * ry) * inv_det
    return (i0, i1, i2, i3, i4, i5)

def geo_to_pixel(inv_gt: GeoTransform, x: float, y: float) -> PixelIndex:
    """Mapa afín exacto con floor; sin chequeo de límites."""
    pixel = math.floor(inv_gt[0] + inv_gt[1] * x + inv_gt[2] * y)
    line = math.floor(inv_gt[3] + inv_gt[4] * x + inv_gt[5] * y)
    return PixelIndex(int(pixel), int(line))

def gt_close(a: GeoTransform, b: GeoTransform, tol: float = 1e-6) -> bool:
    return all(math.isclose(x, y, rel_tol=tol, abs_tol=tol) for x, y in zip(a, b))

def pretty_bounds(b: Bounds, ndigits: int = 3) -> str:
    return (f"Bounds(minx={b.minx:.{ndigits}f}, miny={b.miny:.{ndigits}f}, "
            f"maxx={b.maxx:.{ndigits}f}, maxy={b.maxy:.{ndigits}f})")

__all__ = [
    "GeoTransform", "Bounds", "PixelIndex", "CRSRef", "GeoProfile", "DTypeStr",
    "geotransform_bounds", "pixel_to_world", "pixel_center",
    "invert_geotransform", "geo_to_pixel", "gt_close", "pretty_bounds",
]
