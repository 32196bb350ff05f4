# src/pix2att/adapters/gdal_raster_reader.py
from __future__ import annotations

from typing import Optional

import numpy as np
from osgeo import gdal, gdal_array

from ..contracts.core import FieldKind
from ..contracts.errors import (
    BandNotFoundError, DatasetOpenError, GeoTransformError, PixelReadError,
)
from ..contracts.geo import CRSRef, DTypeStr, GeoProfile, GeoTransform
from ..logging_config import get_module_logger
from ..ports.raster_read import RasterSamplerPort

gdal.UseExceptions()

logger = get_module_logger(__name__)

# Tipo de buffer de la lectura 1x1 según el campo destino
_READ_BUFFER = {
    FieldKind.REAL: (gdal.GDT_Float64, np.float64),
    FieldKind.INTEGER: (gdal.GDT_Int32, np.int32),
    FieldKind.INTEGER64: (gdal.GDT_Int64, np.int64),
}

_SUPPORTED = {
    "int8", "uint8", "int16", "uint16", "int32", "uint32", "int64", "uint64",
    "float16", "float32", "float64", "complex64", "complex128",
}


def _gdal_datatype_to_dtype_str(dt_code: int) -> DTypeStr:
    """Mapea GDALDataType a nombre de dtype numpy sin leer la banda."""
    np_code = gdal_array.GDALTypeCodeToNumericTypeCode(dt_code)
    if np_code is not None:
        name = np.dtype(np_code).name
        if name in _SUPPORTED:
            return name  # type: ignore[return-value]
    type_name = gdal.GetDataTypeName(dt_code) or str(dt_code)
    raise ValueError(f"tipo de pixel GDAL {type_name} no soportado")


def _invert(gt: GeoTransform) -> GeoTransform:
    inv = gdal.InvGeoTransform(gt)
    if inv is None:
        raise GeoTransformError(f"GeoTransform no invertible: {tuple(gt)}")
    return tuple(float(c) for c in inv)  # type: ignore[return-value]


class GdalRasterSampler(RasterSamplerPort):
    """Raster GDAL abierto en solo lectura, acotado a una banda.

    Uso:
        with GdalRasterSampler(uri, band_index=1) as r:
            inv = r.inverse_transform()
            v = r.read_pixel(px, ln, FieldKind.REAL)
    """

    def __init__(self, uri: str, band_index: int = 1):
        self.uri = uri
        try:
            ds = gdal.OpenEx(uri, gdal.OF_RASTER | gdal.OF_READONLY)
        except RuntimeError as e:
            raise DatasetOpenError(uri, "raster", str(e)) from e
        if ds is None:
            raise DatasetOpenError(uri, "raster")
        self._ds: Optional[gdal.Dataset] = ds
        self._band = None
        try:
            count = ds.RasterCount
            if not 1 <= int(band_index) <= count:
                raise BandNotFoundError(int(band_index), count)
            self._band = ds.GetRasterBand(int(band_index))
            self._profile = self._build_profile(int(band_index))
        except Exception:
            self.close()
            raise
        logger.info("Raster abierto: %s (banda %d, %s, %dx%d)", uri, band_index,
                    self._profile.dtype, self._profile.width, self._profile.height)

    def _build_profile(self, band_index: int) -> GeoProfile:
        ds, band = self._ds, self._band
        gt = ds.GetGeoTransform()
        srs_wkt = ds.GetProjection() or None
        nodata = band.GetNoDataValue()
        return GeoProfile(
            band=band_index,
            count=ds.RasterCount,
            dtype=_gdal_datatype_to_dtype_str(band.DataType),
            width=ds.RasterXSize,
            height=ds.RasterYSize,
            transform=tuple(float(c) for c in gt),  # type: ignore[arg-type]
            crs=CRSRef.from_wkt(srs_wkt) if srs_wkt else CRSRef(),
            nodata=float(nodata) if nodata is not None else None,  # NaN se conserva
        )

    # --------------- RasterSamplerPort ---------------
    @property
    def profile(self) -> GeoProfile:
        return self._profile

    def inverse_transform(self) -> GeoTransform:
        gt = self._ds.GetGeoTransform(can_return_null=True)
        if gt is None:
            raise GeoTransformError(f"El raster no está georreferenciado: {self.uri}")
        return _invert(tuple(gt))  # type: ignore[arg-type]

    def read_pixel(self, pixel: int, line: int, kind: FieldKind) -> float | int:
        gdt, np_type = _READ_BUFFER[kind]
        try:
            buf = self._band.ReadRaster(int(pixel), int(line), 1, 1, buf_type=gdt)
        except RuntimeError as e:
            raise PixelReadError(f"lectura ({pixel}, {line}) falló: {e}") from e
        if buf is None:
            raise PixelReadError(f"lectura ({pixel}, {line}) sin datos")
        return np.frombuffer(buf, dtype=np_type)[0].item()

    def close(self) -> None:
        self._band = None
        self._ds = None  # cierre explícito

    def __enter__(self) -> "GdalRasterSampler":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
