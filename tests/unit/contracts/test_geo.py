import math
import pytest
from pix2att.contracts.errors import GeoTransformError
from pix2att.contracts.geo import (
    CRSRef, GeoProfile, PixelIndex, geo_to_pixel, geotransform_bounds, gt_close,
    invert_geotransform, pixel_center,
)

TRANSFORMS = [
    (0.0, 10.0, 0.0, 100.0, 0.0, -10.0),
    (350000.0, 30.0, 0.0, 6300000.0, 0.0, -30.0),
    (-71.5, 0.00025, 0.0, -33.2, 0.0, -0.00025),
    (1000.0, 2.0, 0.5, 2000.0, 0.25, -2.0),     # rotado
]

@pytest.mark.parametrize("gt", TRANSFORMS)
def test_invert_twice_roundtrip(gt):
    back = invert_geotransform(invert_geotransform(gt))
    assert gt_close(gt, back)

@pytest.mark.parametrize("gt", TRANSFORMS)
def test_pixel_center_maps_to_same_pixel(gt):
    inv = invert_geotransform(gt)
    for pixel, line in [(0, 0), (3, 7), (9, 1), (123, 45)]:
        x, y = pixel_center(pixel, line, gt)
        assert geo_to_pixel(inv, x, y) == PixelIndex(pixel, line)

def test_geo_to_pixel_floors_outside_origin():
    inv = invert_geotransform((0.0, 10.0, 0.0, 100.0, 0.0, -10.0))
    # a la izquierda/arriba del origen -> índices negativos, sin clamp
    assert geo_to_pixel(inv, -0.5, 100.5) == PixelIndex(-1, -1)
    assert geo_to_pixel(inv, 10.0, 90.0) == PixelIndex(1, 1)

def test_singular_transform_raises():
    with pytest.raises(GeoTransformError):
        invert_geotransform((0.0, 0.0, 0.0, 0.0, 0.0, 0.0))
    with pytest.raises(GeoTransformError):
        invert_geotransform((0.0, 1.0, 2.0, 0.0, 2.0, 4.0))

def test_profile_contains_and_bounds():
    p = GeoProfile(1, 1, "float32", 4, 3, (0, 10, 0, 0, 0, -10), CRSRef.from_epsg(32719))
    assert p.contains(PixelIndex(0, 0)) and p.contains(PixelIndex(3, 2))
    assert not p.contains(PixelIndex(4, 0)) and not p.contains(PixelIndex(0, -1))
    b = geotransform_bounds(p.transform, p.width, p.height)
    assert (b.minx, b.miny, b.maxx, b.maxy) == (0, -30, 40, 0)

def test_crsref_equals():
    assert CRSRef.from_epsg(4326).equals(CRSRef.from_epsg(4326))
    assert not CRSRef.from_epsg(4326).equals(CRSRef.from_epsg(32719))
    assert CRSRef.from_wkt('GEOGCS["x", DATUM["y"]]').equals(CRSRef.from_wkt('geogcs["x",datum["y"]]'))
    assert CRSRef().is_empty()
    with pytest.raises(ValueError):
        CRSRef().to_wkt()
