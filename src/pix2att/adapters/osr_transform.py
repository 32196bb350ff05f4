# src/pix2att/adapters/osr_transform.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from osgeo import osr

from ..contracts.errors import GeometryError, SpatialReferenceError
from ..contracts.geo import CRSRef
from ..ports.coord_transform import CoordinateTransformPort, TransformFactoryPort

osr.UseExceptions()


def crs_to_srs(crs: CRSRef) -> osr.SpatialReference:
    """CRSRef -> osr.SpatialReference en orden de ejes GIS (x=este/lon, y=norte/lat)."""
    srs = osr.SpatialReference()
    try:
        if crs.epsg is not None:
            srs.ImportFromEPSG(int(crs.epsg))
        else:
            srs.SetFromUserInput(crs.to_wkt())
    except (RuntimeError, ValueError) as e:
        raise SpatialReferenceError(f"SRS inválido: {e}") from e
    srs.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)
    return srs


@dataclass
class OsrCoordinateTransform(CoordinateTransformPort):
    _ct: osr.CoordinateTransformation = field(repr=False)

    def transform(self, x: float, y: float) -> Tuple[float, float]:
        try:
            tx, ty, _ = self._ct.TransformPoint(float(x), float(y))
        except RuntimeError as e:
            raise GeometryError(f"reproyección de ({x}, {y}) falló: {e}") from e
        return float(tx), float(ty)


@dataclass(frozen=True)
class OsrTransformFactory(TransformFactoryPort):
    """Reconciliación de SRS delegada a OSR (`IsSame` + `CoordinateTransformation`)."""

    def is_same(self, a: CRSRef, b: CRSRef) -> bool:
        return bool(crs_to_srs(a).IsSame(crs_to_srs(b)))

    def create(self, src: CRSRef, dst: CRSRef) -> OsrCoordinateTransform:
        try:
            ct = osr.CoordinateTransformation(crs_to_srs(src), crs_to_srs(dst))
        except RuntimeError as e:
            raise SpatialReferenceError(f"No se pudo crear la transformación: {e}") from e
        return OsrCoordinateTransform(ct)
