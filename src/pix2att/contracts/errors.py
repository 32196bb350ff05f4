# src/pix2att/contracts/errors.py
from __future__ import annotations


class Pix2AttError(Exception):
    """Base de todos los errores del dominio."""


# --- precondiciones fatales (exit 1) ---
class DatasetOpenError(Pix2AttError):
    def __init__(self, uri: str, kind: str, detail: str | None = None):
        self.uri = uri
        self.kind = kind
        msg = f"No se pudo abrir el dataset {kind}: {uri}"
        super().__init__(f"{msg} ({detail})" if detail else msg)

class LayerNotFoundError(Pix2AttError):
    def __init__(self, layer: str, uri: str):
        self.layer = layer
        super().__init__(f"Capa '{layer}' no encontrada en {uri}")

class BandNotFoundError(Pix2AttError):
    def __init__(self, band: int, count: int):
        self.band = band
        super().__init__(f"Banda {band} fuera de rango (el raster tiene {count})")

class FieldCreationError(Pix2AttError):
    pass

class GeoTransformError(Pix2AttError):
    pass

class TransactionError(Pix2AttError):
    pass

class SpatialReferenceError(Pix2AttError):
    pass


# --- errores por feature (política on_error) ---
class FeatureError(Pix2AttError):
    """Fallo acotado a una feature. Los adapters no conocen el FID; el servicio lo asigna."""
    stage: str  # geometry | read | write (lo fija cada subclase)

    def __init__(self, message: str, fid: int | None = None):
        self.detail = message
        self.fid = fid
        super().__init__(message)

    def __str__(self) -> str:
        if self.fid is None:
            return self.detail
        return f"FID {self.fid}: {self.detail}"

class GeometryError(FeatureError):
    stage = "geometry"

class PixelReadError(FeatureError):
    stage = "read"

class PixelOutOfRangeError(PixelReadError):
    def __init__(self, pixel: int, line: int, width: int, height: int, fid: int | None = None):
        self.pixel = pixel
        self.line = line
        super().__init__(f"pixel/line ({pixel}, {line}) fuera de la grilla {width}x{height}", fid)

class FeatureWriteError(FeatureError):
    stage = "write"


__all__ = [
    "Pix2AttError", "DatasetOpenError", "LayerNotFoundError",
    "BandNotFoundError", "FieldCreationError", "GeoTransformError",
    "TransactionError", "SpatialReferenceError", "FeatureError", "GeometryError", "PixelReadError",
    "PixelOutOfRangeError", "FeatureWriteError",
]
