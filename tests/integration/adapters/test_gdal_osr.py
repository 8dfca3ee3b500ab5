# tests/integration/adapters/test_gdal_osr.py
import pytest

pytest.importorskip("osgeo.gdal")

from gdalbridge.adapters.gdal_osr import AxisMappingStrategy, CoordinateTransform, SpatialReference
from gdalbridge.contracts.errors import OGRError
from gdalbridge.contracts.geo import CRSRef

pytestmark = pytest.mark.gdal  # corre sólo si hay GDAL

def test_epsg_4326_exports_wgs84():
    with SpatialReference.from_epsg(4326) as srs:
        assert "WGS 84" in srs.export_to_wkt()
        assert srs.is_geographic()
        assert not srs.is_projected()
        assert srs.authority_code() == "4326"
        assert srs.to_crs_ref() == CRSRef.from_epsg(4326)

def test_unknown_epsg_raises():
    with pytest.raises(OGRError):
        SpatialReference.from_epsg(999999)

def test_utm_roundtrip():
    with SpatialReference() as srs:
        srs.set_well_known_geographic_cs("WGS84")
        srs.set_utm(19, north=False)
        assert srs.is_projected()
        assert srs.utm_zone() == (19, False)
        assert srs.projection_parameter("central_meridian") == pytest.approx(-69.0)
        assert srs.linear_units()[1] == pytest.approx(1.0)

def test_clone_and_same():
    with SpatialReference.from_epsg(32719) as a:
        b = a.clone()
        try:
            assert a.is_same(b)
            assert a.is_same_geographic_cs(b)
        finally:
            b.destroy()

def test_proj4_export():
    with SpatialReference.from_user_input("EPSG:3857") as srs:
        assert "+proj=merc" in srs.export_to_proj4()

def test_transform_lonlat_to_web_mercator():
    with SpatialReference.from_epsg(4326) as src, SpatialReference.from_epsg(3857) as dst:
        src.set_axis_mapping_strategy(AxisMappingStrategy.TRADITIONAL_GIS_ORDER)
        dst.set_axis_mapping_strategy(AxisMappingStrategy.TRADITIONAL_GIS_ORDER)
        with CoordinateTransform.create(src, dst) as ct:
            xs, ys = [10.0], [0.0]
            assert ct.transform(1, xs, ys)
    assert xs[0] == pytest.approx(1113194.9, abs=0.5)
    assert ys[0] == pytest.approx(0.0, abs=1e-6)

def test_transform_count_guard():
    with SpatialReference.from_epsg(4326) as src, SpatialReference.from_epsg(3857) as dst:
        with CoordinateTransform.create(src, dst) as ct:
            with pytest.raises(ValueError):
                ct.transform(5, [0.0], [0.0])

# (setter, args, {parámetro WKT1: valor esperado})
_SETTERS = [
    ("set_acea", (-5.0, -42.0, -32.0, -60.0, 500000.0, 100000.0),
     {"standard_parallel_1": -5.0, "standard_parallel_2": -42.0, "latitude_of_center": -32.0,
      "longitude_of_center": -60.0, "false_easting": 500000.0, "false_northing": 100000.0}),
    ("set_tm", (0.0, -69.0, 0.9996, 500000.0, 10000000.0),
     {"latitude_of_origin": 0.0, "central_meridian": -69.0, "scale_factor": 0.9996,
      "false_easting": 500000.0, "false_northing": 10000000.0}),
    ("set_lcc", (-20.0, -40.0, -30.0, -70.0, 1000000.0, 2000000.0),
     {"standard_parallel_1": -20.0, "standard_parallel_2": -40.0, "latitude_of_origin": -30.0,
      "central_meridian": -70.0, "false_easting": 1000000.0, "false_northing": 2000000.0}),
    ("set_mercator", (0.0, -70.0, 0.9, 100.0, 200.0),
     {"latitude_of_origin": 0.0, "central_meridian": -70.0, "scale_factor": 0.9,
      "false_easting": 100.0, "false_northing": 200.0}),
    ("set_stereographic", (-33.0, -70.5, 0.99, 300.0, 400.0),
     {"latitude_of_origin": -33.0, "central_meridian": -70.5, "scale_factor": 0.99,
      "false_easting": 300.0, "false_northing": 400.0}),
    ("set_sinusoidal", (-70.0, 1000.0, 2000.0),
     {"longitude_of_center": -70.0, "false_easting": 1000.0, "false_northing": 2000.0}),
    ("set_mollweide", (15.0, 1000.0, 2000.0),
     {"central_meridian": 15.0, "false_easting": 1000.0, "false_northing": 2000.0}),
    ("set_robinson", (-45.0, 1000.0, 2000.0),
     {"longitude_of_center": -45.0, "false_easting": 1000.0, "false_northing": 2000.0}),
]

@pytest.mark.parametrize("setter,args,expected", _SETTERS, ids=[s[0] for s in _SETTERS])
def test_projection_setter_roundtrip(setter, args, expected):
    with SpatialReference() as srs:
        srs.set_projected_cs(setter)
        srs.set_well_known_geographic_cs("WGS84")
        getattr(srs, setter)(*args)
        assert srs.is_projected()
        for name, value in expected.items():
            assert srs.projection_parameter(name) == pytest.approx(value), name
            assert srs.normalized_projection_parameter(name) == pytest.approx(value), name

_ESRI_WGS84 = (
    'GEOGCS["GCS_WGS_1984",DATUM["D_WGS_1984",SPHEROID["WGS_1984",6378137.0,298.257223563]],'
    'PRIMEM["Greenwich",0.0],UNIT["Degree",0.0174532925199433]]'
)

def _assert_wgs84_geographic(srs):
    wkt = srs.export_to_wkt()
    assert wkt.startswith("GEOGCS")
    assert "WGS" in wkt
    assert srs.semi_major_axis() == pytest.approx(6378137.0)

def test_import_from_esri_prj():
    with SpatialReference() as srs:
        srs.import_from_esri(_ESRI_WGS84)
        _assert_wgs84_geographic(srs)

def test_import_from_xml_roundtrip():
    with SpatialReference.from_epsg(4326) as src:
        xml = src.export_to_xml()
    assert xml.lstrip().startswith("<")
    with SpatialReference() as srs:
        srs.import_from_xml(xml)
        _assert_wgs84_geographic(srs)
        assert "WGS 84" in srs.export_to_wkt()

def test_import_from_pci():
    with SpatialReference() as srs:
        srs.import_from_pci("LONG/LAT    D000", "DEGREE")
        _assert_wgs84_geographic(srs)

def test_import_from_usgs_utm():
    with SpatialReference() as srs:
        srs.import_from_usgs(1, 19, None, 12)  # UTM zona 19 norte, datum 12 = WGS84
        assert srs.is_projected()
        assert srs.utm_zone() == (19, True)
        assert "PROJCS" in srs.export_to_wkt()
        assert srs.semi_major_axis() == pytest.approx(6378137.0)

def test_import_from_erm():
    with SpatialReference() as srs:
        srs.import_from_erm("GEODETIC", "WGS84", "METERS")
        _assert_wgs84_geographic(srs)

def test_import_from_mi_coord_sys():
    with SpatialReference() as srs:
        srs.import_from_mi_coord_sys("Earth Projection 1, 104")
        _assert_wgs84_geographic(srs)
