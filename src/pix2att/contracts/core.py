# src/pix2att/contracts/core.py
from __future__ import annotations

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .geo import DTypeStr

# -------------------------
# Tipo de campo destino
# -------------------------
class FieldKind(str, Enum):
    REAL = "Real"
    INTEGER = "Integer"
    INTEGER64 = "Integer64"

_FLOAT_DTYPES = frozenset({"float16", "float32", "float64", "complex64", "complex128"})
_WIDE_INT_DTYPES = frozenset({"uint32", "int64", "uint64"})

def field_kind_for(dtype: DTypeStr | str) -> FieldKind:
    """
    Despacho numérico por tipo de pixel:
      - float/complex -> REAL (lectura float64)
      - enteros que caben en int32 -> INTEGER (lectura int32)
      - uint32/int64/uint64 -> INTEGER64 (lectura int64)
    """
    d = str(dtype).strip().lower()
    if d in _FLOAT_DTYPES:
        return FieldKind.REAL
    if d in _WIDE_INT_DTYPES:
        return FieldKind.INTEGER64
    if d in {"int8", "uint8", "int16", "uint16", "int32"}:
        return FieldKind.INTEGER
    raise ValueError(f"dtype {dtype} no soportado")

def coerce_value(kind: FieldKind, value: float | int) -> float | int:
    if kind is FieldKind.REAL:
        return float(value)
    return int(value)

def is_nodata(value: float | int, nodata: Optional[float]) -> bool:
    if nodata is None:
        return False
    if isinstance(nodata, float) and math.isnan(nodata):
        return isinstance(value, float) and math.isnan(value)
    return float(value) == float(nodata)

# -------------------------
# Petición de muestreo
# -------------------------
class SampleRequest(BaseModel):
    model_config = ConfigDict(frozen=True)
    raster: str
    vector: str
    layer: str
    attribute: str

    @field_validator("raster", "vector", "layer", "attribute")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("no puede ser vacío")
        return v2

# -------------------------
# Ejecuciones / auditoría
# -------------------------
class Stage(str, Enum):
    GEOMETRY = "geometry"
    READ = "read"
    WRITE = "write"

class FeatureFailure(BaseModel):
    model_config = ConfigDict(frozen=True)
    fid: int
    stage: Stage
    message: str

class SampleReport(BaseModel):
    model_config = ConfigDict(frozen=True)
    attribute: str
    field_kind: FieldKind
    features_total: int = 0
    features_updated: int = 0
    features_skipped: int = 0
    transactions_committed: int = 0
    reprojected: bool = False
    failures: tuple[FeatureFailure, ...] = ()
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ended_at: datetime | None = None

    def end_now(self) -> "SampleReport":
        return self.model_copy(update={"ended_at": datetime.now(timezone.utc)})

    @property
    def duration_s(self) -> float | None:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def summary(self) -> str:
        return (f"{self.attribute} ({self.field_kind.value}): "
                f"{self.features_updated}/{self.features_total} actualizados, "
                f"{self.features_skipped} omitidos, "
                f"{self.transactions_committed} transacciones")
