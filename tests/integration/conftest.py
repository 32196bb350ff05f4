# tests/integration/conftest.py
# Helpers GDAL para construir datasets mínimos en tmp_path.
# Los módulos de test hacen importorskip("osgeo.gdal"); aquí los imports son diferidos.
import numpy as np
import pytest

GT = (100.0, 10.0, 0.0, 200.0, 0.0, -10.0)


def _srs(epsg):
    from osgeo import osr
    srs = osr.SpatialReference()
    srs.ImportFromEPSG(epsg)
    srs.SetAxisMappingStrategy(osr.OAMS_TRADITIONAL_GIS_ORDER)
    return srs


def grid(w, h, dtype):
    # valor = line * 100 + pixel
    return (np.arange(h)[:, None] * 100 + np.arange(w)[None, :]).astype(dtype)


def write_tif(path, data, gt=GT, epsg=32719, gdt=None, nodata=None, bands=1):
    from osgeo import gdal
    gdt = gdal.GDT_Int16 if gdt is None else gdt
    h, w = data.shape
    ds = gdal.GetDriverByName("GTiff").Create(str(path), w, h, bands, gdt)
    if gt is not None:
        ds.SetGeoTransform(gt)
    if epsg:
        ds.SetProjection(_srs(epsg).ExportToWkt())
    for i in range(bands):
        band = ds.GetRasterBand(i + 1)
        band.WriteArray(data + i * 10000 if bands > 1 else data)
        if nodata is not None:
            band.SetNoDataValue(nodata)
    ds.FlushCache()
    ds = None
    return str(path)


def write_gpkg(path, layer, wkts, epsg=32719, geom_type=None):
    from osgeo import ogr
    geom_type = ogr.wkbPoint if geom_type is None else geom_type
    ds = ogr.GetDriverByName("GPKG").CreateDataSource(str(path))
    lyr = ds.CreateLayer(layer, _srs(epsg) if epsg else None, geom_type)
    for wkt in wkts:
        f = ogr.Feature(lyr.GetLayerDefn())
        f.SetGeometry(ogr.CreateGeometryFromWkt(wkt))
        lyr.CreateFeature(f)
        f = None
    ds = None
    return str(path)


def center_wkt(pixel, line, gt=GT):
    x = gt[0] + (pixel + 0.5) * gt[1]
    y = gt[3] + (line + 0.5) * gt[5]
    return f"POINT ({x} {y})"


def read_field(path, layer, field):
    from osgeo import ogr
    ds = ogr.Open(str(path))
    lyr = ds.GetLayerByName(layer)
    defn = lyr.GetLayerDefn()
    idx = defn.GetFieldIndex(field)
    ftype = defn.GetFieldDefn(idx).GetType() if idx >= 0 else None
    values = {}
    for f in lyr:
        values[f.GetFID()] = f.GetField(field) if idx >= 0 else None
    ds = None
    return ftype, values


@pytest.fixture
def helpers():
    class H:
        pass
    h = H()
    h.grid, h.write_tif, h.write_gpkg = grid, write_tif, write_gpkg
    h.center_wkt, h.read_field = center_wkt, read_field
    return h
