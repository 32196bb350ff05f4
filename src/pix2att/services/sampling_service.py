# src/pix2att/services/sampling_service.py
from __future__ import annotations

"""
Servicio de muestreo raster -> atributo vectorial (contracts-first).

Secuencia de `run()`:
  1. invierte el geotransform del raster (geo -> pixel/line)
  2. crea (o reutiliza) el campo destino según el tipo de pixel
  3. reconcilia SRS: una sola transformación si raster y capa difieren
  4. pasada 1: recolecta todos los FID de la capa
  5. pasada 2: por FID lee el punto, reproyecta, mapea a pixel/line, lee 1x1,
     escribe el valor y persiste, agrupando en transacciones de N updates

El servicio sólo conoce *ports*; GDAL/OGR/OSR viven en adapters/.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from ..config import OnError, Settings
from ..contracts.core import (
    FeatureFailure, FieldKind, SampleReport, Stage, coerce_value,
    field_kind_for, is_nodata,
)
from ..contracts.errors import FeatureError, FieldCreationError, PixelOutOfRangeError
from ..contracts.geo import GeoTransform, geo_to_pixel, pretty_bounds
from ..logging_config import get_module_logger
from ..ports.coord_transform import CoordinateTransformPort, TransformFactoryPort
from ..ports.feature_store import FeatureStorePort
from ..ports.raster_read import RasterSamplerPort

logger = get_module_logger(__name__)

ProgressFn = Callable[[float], None]


# ----------------------
# DTOs
# ----------------------

@dataclass(frozen=True)
class SampleOptions:
    group_transactions: int = 1        # 0 -> cada update es una escritura implícita
    on_error: OnError = "abort"
    reuse_existing_field: bool = False
    nodata_as_null: bool = False

    @classmethod
    def from_settings(cls, s: Settings) -> "SampleOptions":
        return cls(
            group_transactions=s.group_transactions,
            on_error=s.on_error,
            reuse_existing_field=s.reuse_existing_field,
            nodata_as_null=s.nodata_as_null,
        )


class TransactionBatcher:
    """Agrupa updates en transacciones de `size`; commits == ceil(updates / size)."""

    def __init__(self, store: FeatureStorePort, size: int):
        self.store = store
        self.size = int(size)
        self.pending = 0
        self.committed = 0
        self.active = False

    def before_write(self) -> None:
        if self.size > 0 and not self.active:
            self.store.start_transaction()
            self.active = True

    def after_write(self) -> None:
        if self.size <= 0:
            return
        self.pending += 1
        if self.pending >= self.size:
            self._commit()

    def flush(self) -> None:
        if self.active:
            self._commit()

    def abort(self) -> None:
        if self.active:
            self.active = False
            self.pending = 0
            self.store.rollback_transaction()

    def discard_empty(self) -> None:
        # una escritura fallida no deja abierta una transacción sin updates
        if self.active and self.pending == 0:
            self.active = False
            self.store.rollback_transaction()

    def _commit(self) -> None:
        self.store.commit_transaction()
        self.committed += 1
        logger.debug("Commit #%d (%d updates)", self.committed, self.pending)
        self.pending = 0
        self.active = False


# ----------------------
# Servicio
# ----------------------

@dataclass
class PointSamplingService:
    raster: RasterSamplerPort
    store: FeatureStorePort
    transforms: TransformFactoryPort
    options: SampleOptions = SampleOptions()
    progress: Optional[ProgressFn] = None

    # --- pasos ---
    def provision_field(self, attribute: str, kind: FieldKind) -> int:
        idx = self.store.field_index(attribute)
        if idx >= 0:
            if not self.options.reuse_existing_field:
                raise FieldCreationError(f"El campo '{attribute}' ya existe en la capa")
            logger.info("Reutilizando campo existente '%s'", attribute)
            return idx
        idx = self.store.create_field(attribute, kind)
        logger.info("Campo '%s' creado (%s)", attribute, kind.value)
        return idx

    def reconcile_srs(self) -> Optional[CoordinateTransformPort]:
        raster_crs = self.raster.profile.crs
        vector_crs = self.store.crs
        if vector_crs is None or vector_crs.is_empty() or raster_crs.is_empty():
            logger.warning("Raster o capa sin SRS; se usan las coordenadas sin reproyectar")
            return None
        if self.transforms.is_same(raster_crs, vector_crs):
            return None
        logger.info("SRS distintos: se reproyectan los puntos al SRS del raster")
        return self.transforms.create(vector_crs, raster_crs)

    def collect_fids(self) -> List[int]:
        declared = self.store.feature_count()
        fids = list(self.store.iter_fids())
        if len(fids) != declared:
            logger.warning("La capa declara %d features pero se recorrieron %d", declared, len(fids))
        return fids

    def sample_point(self, x: float, y: float, inv_gt: GeoTransform,
                     kind: FieldKind) -> float | int | None:
        profile = self.raster.profile
        idx = geo_to_pixel(inv_gt, x, y)
        if not profile.contains(idx):
            raise PixelOutOfRangeError(idx.pixel, idx.line, profile.width, profile.height)
        value = coerce_value(kind, self.raster.read_pixel(idx.pixel, idx.line, kind))
        if self.options.nodata_as_null and is_nodata(value, profile.nodata):
            return None
        return value

    def _report(self, fraction: float) -> None:
        if self.progress is not None:
            self.progress(fraction)

    # --- orquestación ---
    def run(self, attribute: str) -> SampleReport:
        profile = self.raster.profile
        inv_gt = self.raster.inverse_transform()
        logger.debug("Extensión del raster: %s", pretty_bounds(profile.bounds))

        kind = field_kind_for(profile.dtype)
        field_idx = self.provision_field(attribute, kind)
        ct = self.reconcile_srs()
        fids = self.collect_fids()
        total = len(fids)

        report = SampleReport(attribute=attribute, field_kind=kind,
                              features_total=total, reprojected=ct is not None)
        batcher = TransactionBatcher(self.store, self.options.group_transactions)
        failures: List[FeatureFailure] = []
        updated = 0

        self._report(0.0)
        try:
            for i, fid in enumerate(fids):
                try:
                    x, y = self.store.get_point(fid)
                    if ct is not None:
                        x, y = ct.transform(x, y)
                    value = self.sample_point(x, y, inv_gt, kind)
                    batcher.before_write()
                    self.store.write_value(fid, field_idx, value)
                except FeatureError as e:
                    e.fid = fid
                    if self.options.on_error == "abort":
                        raise
                    batcher.discard_empty()
                    logger.warning("Feature omitida: %s", e)
                    failures.append(FeatureFailure(fid=fid, stage=Stage(e.stage), message=e.detail))
                else:
                    updated += 1
                    batcher.after_write()
                self._report((i + 1) / total)
            batcher.flush()
        except Exception:
            batcher.abort()
            raise
        self._report(1.0)

        return report.model_copy(update={
            "features_updated": updated,
            "features_skipped": len(failures),
            "transactions_committed": batcher.committed,
            "failures": tuple(failures),
        }).end_now()

