# src/pix2att/ports/feature_store.py
from __future__ import annotations

from typing import Iterable, Optional, Protocol, Tuple, runtime_checkable
from ..contracts.core import FieldKind
from ..contracts.geo import CRSRef

@runtime_checkable
class FeatureStorePort(Protocol):
    """
    Capa vectorial abierta en lectura/escritura.
    Reglas:
      - `iter_fids()` recorre la capa completa una vez (pasada de identificadores).
      - `get_point()` re-lee la feature por FID; `write_value()` la persiste.
      - Transacciones a nivel de capa; `rollback_transaction()` es no-op sin transacción activa.
    """
    @property
    def crs(self) -> Optional[CRSRef]: ...
    def feature_count(self) -> int: ...
    def iter_fids(self) -> Iterable[int]: ...
    def field_index(self, name: str) -> int: ...  # -1 si no existe
    def create_field(self, name: str, kind: FieldKind) -> int: ...
    def get_point(self, fid: int) -> Tuple[float, float]: ...
    def write_value(self, fid: int, field_index: int, value: float | int | None) -> None: ...
    def start_transaction(self) -> None: ...
    def commit_transaction(self) -> None: ...
    def rollback_transaction(self) -> None: ...
    def close(self) -> None: ...

__all__ = ["FeatureStorePort"]
