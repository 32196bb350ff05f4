# src/pix2att/adapters/ogr_feature_store.py
from __future__ import annotations

from typing import Iterator, Optional, Tuple

from osgeo import gdal, ogr

from ..contracts.core import FieldKind
from ..contracts.errors import (
    DatasetOpenError, FeatureWriteError, FieldCreationError, GeometryError,
    LayerNotFoundError, TransactionError,
)
from ..contracts.geo import CRSRef
from ..logging_config import get_module_logger
from ..ports.feature_store import FeatureStorePort

gdal.UseExceptions()
ogr.UseExceptions()

logger = get_module_logger(__name__)

_OGR_FIELD_TYPE = {
    FieldKind.REAL: ogr.OFTReal,
    FieldKind.INTEGER: ogr.OFTInteger,
    FieldKind.INTEGER64: ogr.OFTInteger64,
}


class OgrFeatureStore(FeatureStorePort):
    """Capa OGR abierta en modo update.

    - Las transacciones son de capa (`OGR_L_StartTransaction`); en drivers sin
      soporte GDAL las resuelve como no-op.
    - `get_point()` deja la feature en caché para que `write_value()` no la
      vuelva a leer.
    """

    def __init__(self, uri: str, layer_name: str):
        self.uri = uri
        try:
            ds = gdal.OpenEx(uri, gdal.OF_VECTOR | gdal.OF_UPDATE)
        except RuntimeError as e:
            raise DatasetOpenError(uri, "vectorial", str(e)) from e
        if ds is None:
            raise DatasetOpenError(uri, "vectorial")
        self._ds: Optional[gdal.Dataset] = ds
        self._current: Optional[ogr.Feature] = None
        self._in_tx = False
        self._layer = ds.GetLayerByName(layer_name)
        if self._layer is None:
            self.close()
            raise LayerNotFoundError(layer_name, uri)
        self.layer_name = layer_name
        logger.info("Capa abierta: %s:%s", uri, layer_name)

    # --------------- FeatureStorePort ---------------
    @property
    def crs(self) -> Optional[CRSRef]:
        srs = self._layer.GetSpatialRef()
        if srs is None:
            return None
        return CRSRef.from_wkt(srs.ExportToWkt())

    def feature_count(self) -> int:
        return int(self._layer.GetFeatureCount(force=1))

    def iter_fids(self) -> Iterator[int]:
        layer = self._layer
        layer.ResetReading()
        feat = layer.GetNextFeature()
        while feat is not None:
            yield int(feat.GetFID())
            feat = layer.GetNextFeature()

    def field_index(self, name: str) -> int:
        return int(self._layer.GetLayerDefn().GetFieldIndex(name))

    def create_field(self, name: str, kind: FieldKind) -> int:
        defn = self._layer.GetLayerDefn()
        before = defn.GetFieldCount()
        field_defn = ogr.FieldDefn(name, _OGR_FIELD_TYPE[kind])
        try:
            rc = self._layer.CreateField(field_defn, approx_ok=1)
        except RuntimeError as e:
            raise FieldCreationError(f"No se pudo crear el campo '{name}': {e}") from e
        finally:
            field_defn = None
        if rc not in (None, ogr.OGRERR_NONE):
            raise FieldCreationError(f"No se pudo crear el campo '{name}' (OGRErr {rc})")
        idx = self.field_index(name)
        if idx < 0:
            defn = self._layer.GetLayerDefn()
            if defn.GetFieldCount() <= before:
                raise FieldCreationError(f"El campo '{name}' no aparece tras crearlo")
            # el driver normalizó el nombre (p.ej. Shapefile trunca a 10 caracteres)
            idx = defn.GetFieldCount() - 1
            logger.warning("El driver renombró '%s' a '%s'", name,
                           defn.GetFieldDefn(idx).GetName())
        return idx

    def get_point(self, fid: int) -> Tuple[float, float]:
        try:
            feat = self._layer.GetFeature(int(fid))
        except RuntimeError as e:
            raise GeometryError(f"no se pudo leer la feature: {e}") from e
        if feat is None:
            raise GeometryError("feature inexistente")
        self._current = feat
        geom = feat.GetGeometryRef()
        if geom is None or geom.IsEmpty():
            raise GeometryError("geometría vacía")
        if ogr.GT_Flatten(geom.GetGeometryType()) != ogr.wkbPoint:
            raise GeometryError(f"geometría no puntual: {geom.GetGeometryName()}")
        return float(geom.GetX()), float(geom.GetY())

    def write_value(self, fid: int, field_index: int, value: float | int | None) -> None:
        feat = self._current
        if feat is None or feat.GetFID() != fid:
            feat = self._layer.GetFeature(int(fid))
            if feat is None:
                raise FeatureWriteError("feature inexistente")
        if value is None:
            feat.SetFieldNull(field_index)
        elif isinstance(value, float):
            feat.SetFieldDouble(field_index, value)
        else:
            feat.SetFieldInteger64(field_index, int(value))
        try:
            self._layer.SetFeature(feat)
        except RuntimeError as e:
            raise FeatureWriteError(f"SetFeature falló: {e}") from e
        finally:
            self._current = None

    def start_transaction(self) -> None:
        try:
            self._layer.StartTransaction()
        except RuntimeError as e:
            raise TransactionError(f"StartTransaction falló: {e}") from e
        self._in_tx = True

    def commit_transaction(self) -> None:
        try:
            self._layer.CommitTransaction()
        except RuntimeError as e:
            raise TransactionError(f"CommitTransaction falló: {e}") from e
        finally:
            self._in_tx = False

    def rollback_transaction(self) -> None:
        if not self._in_tx:
            return
        try:
            self._layer.RollbackTransaction()
        except RuntimeError as e:
            raise TransactionError(f"RollbackTransaction falló: {e}") from e
        finally:
            self._in_tx = False

    def close(self) -> None:
        if self._ds is not None and self._in_tx:
            logger.warning("Transacción abierta al cerrar %s; se descarta", self.uri)
            self.rollback_transaction()
        self._current = None
        self._layer = None
        self._ds = None  # flush + cierre

    def __enter__(self) -> "OgrFeatureStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
