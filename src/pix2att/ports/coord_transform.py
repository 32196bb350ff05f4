# src/pix2att/ports/coord_transform.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Tuple
from ..contracts.geo import CRSRef

@runtime_checkable
class CoordinateTransformPort(Protocol):
    def transform(self, x: float, y: float) -> Tuple[float, float]: ...

@runtime_checkable
class TransformFactoryPort(Protocol):
    """
    Reconciliación de SRS: compara y, si difieren, construye UNA transformación
    (vector -> raster) que se reutiliza para todas las features.
    """
    def is_same(self, a: CRSRef, b: CRSRef) -> bool: ...
    def create(self, src: CRSRef, dst: CRSRef) -> CoordinateTransformPort: ...

__all__ = ["CoordinateTransformPort", "TransformFactoryPort"]
