# src/pix2att/composition/di.py
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

import yaml

from ..config import Settings, get_settings
from ..contracts.core import SampleRequest
from ..logging_config import get_module_logger
from ..services.sampling_service import PointSamplingService, SampleOptions

logger = get_module_logger(__name__)


def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{path}: se esperaba un mapeo YAML de opciones")
    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ValueError(f"{path}: opciones desconocidas: {', '.join(map(str, unknown))}")
    return Settings(**data)


def build_settings(config_path: Optional[Path] = None, **overrides: Any) -> Settings:
    """YAML (o entorno) + overrides de CLI; los `None` no pisan nada."""
    base = load_settings_from_yaml(config_path) if config_path else get_settings()
    upd = {k: v for k, v in overrides.items() if v is not None}
    if not upd:
        return base
    return Settings(**{**base.model_dump(), **upd})


@contextmanager
def open_sampling_service(request: SampleRequest, settings: Settings) -> Iterator[PointSamplingService]:
    """
    Abre raster (solo lectura) y capa (update) y entrega el servicio cableado.
    Los recursos se liberan en orden inverso en toda salida, incluidas las de error.
    """
    # imports diferidos: los adapters cargan GDAL
    from ..adapters.gdal_progress import term_progress
    from ..adapters.gdal_raster_reader import GdalRasterSampler
    from ..adapters.ogr_feature_store import OgrFeatureStore
    from ..adapters.osr_transform import OsrTransformFactory

    with GdalRasterSampler(request.raster, band_index=settings.band) as raster:
        with OgrFeatureStore(request.vector, request.layer) as store:
            yield PointSamplingService(
                raster=raster,
                store=store,
                transforms=OsrTransformFactory(),
                options=SampleOptions.from_settings(settings),
                progress=term_progress if settings.progress else None,
            )
