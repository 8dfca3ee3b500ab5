# tests/integration/adapters/test_gdal_utilities.py
from pathlib import Path

import numpy as np
import pytest

pytest.importorskip("osgeo.gdal")

from gdalbridge.adapters import gdal_utilities as utils
from gdalbridge.adapters.gdal_dataset import DataType, Dataset, Driver, FieldType, GeometryType
from gdalbridge.adapters.gdal_osr import SpatialReference
from gdalbridge.contracts.errors import UtilityError
from tests.factories import make_ramp

pytestmark = pytest.mark.gdal

@pytest.fixture
def ramp():
    """DEM 10x10 en memoria: valor = col*10 + 5, EPSG:32719."""
    r = make_ramp()
    ds = Driver.by_name("MEM").create("", 10, 10, 1, DataType.FLOAT32)
    ds.set_geo_transform(r.profile.transform)
    with SpatialReference.from_epsg(32719) as srs:
        ds.set_projection(srs.export_to_wkt())
    ds.raster_band(1).write_array(np.array(r.data))
    yield ds
    ds.close()

def test_warp_to_memory(ramp):
    with utils.warp(None, [ramp], ["-t_srs", "EPSG:4326"]) as out:
        assert out.driver_name == "MEM"
        assert out.raster_count == 1
        srs = out.spatial_reference()
        assert srs is not None and srs.is_geographic()
        srs.destroy()

def test_translate_to_memory(ramp):
    with utils.translate(None, ramp, ["-outsize", "5", "5"]) as out:
        assert out.driver_name == "MEM"
        assert (out.raster_x_size, out.raster_y_size) == (5, 5)

def test_explicit_vrt_wins(ramp):
    with utils.translate(None, ramp, ["-of", "VRT"]) as out:
        assert out.driver_name == "VRT"

def test_translate_to_file(ramp, tmp_path: Path):
    dest = tmp_path / "ramp.tif"
    with utils.translate(dest, ramp, ["-of", "GTiff"]):
        pass
    assert dest.exists()
    with Dataset.open(dest) as ds:
        r = ds.read_raster()
    assert r.profile.crs.epsg == 32719
    assert float(r.data[0, 9]) == 95.0

def test_dem_hillshade_to_memory(ramp):
    with utils.dem_processing(None, ramp, "hillshade") as out:
        assert out.driver_name == "MEM"
        assert out.raster_count == 1

def test_bad_option_raises(ramp):
    with pytest.raises(UtilityError) as ei:
        utils.warp(None, [ramp], ["-bogus_flag"])
    assert str(ei.value).startswith("warp falló con código")

def test_missing_source_raises():
    with pytest.raises(UtilityError) as ei:
        utils.translate(None, "/no/existe.tif")
    assert str(ei.value).startswith("translate falló con código")
    assert ei.value.code != 0

def test_rasterize_and_vector_translate(ramp):
    vec = Driver.by_name(utils.memory_vector_format()).create_vector("")
    try:
        with SpatialReference.from_epsg(32719) as srs:
            lyr = vec.create_layer("roi", srs, GeometryType.POLYGON)
        lyr.create_field("val", FieldType.INTEGER)
        ogr = pytest.importorskip("osgeo.ogr")
        feat = ogr.Feature(lyr.handle.GetLayerDefn())
        feat.SetField("val", 7)
        feat.SetGeometry(ogr.CreateGeometryFromWkt("POLYGON((0 0,50 0,50 -50,0 -50,0 0))"))
        lyr.handle.CreateFeature(feat)

        with utils.rasterize(None, vec, ["-a", "val", "-tr", 10, 10, "-ot", "Byte"]) as out:
            arr = out.raster_band(1).read_array()
            assert arr.max() == 7

        with utils.vector_translate(None, [vec], ["-t_srs", "EPSG:4326"]) as copy:
            assert copy.layer(0).feature_count() == 1
    finally:
        vec.close()

def test_contour_generate_ramp(ramp):
    vec = Driver.by_name(utils.memory_vector_format()).create_vector("")
    try:
        lyr = vec.create_layer("contour", None, GeometryType.LINESTRING)
        id_idx = lyr.create_field("ID", FieldType.INTEGER)
        elev_idx = lyr.create_field("ELEV", FieldType.REAL)
        calls = []
        utils.contour_generate(
            ramp.raster_band(1), lyr,
            ["LEVEL_INTERVAL=20", f"ID_FIELD={id_idx}", f"ELEV_FIELD={elev_idx}"],
            lambda c, m, d: calls.append(d) or True, "ctx",
        )
        assert lyr.feature_count() == 4
        assert calls and set(calls) == {"ctx"}
    finally:
        vec.close()
