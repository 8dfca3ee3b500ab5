# tests/unit/adapters/test_gdal_osr.py
import math

import pytest
from gdalbridge.adapters.gdal_osr import AxisMappingStrategy, CoordinateTransform, SpatialReference
from gdalbridge.contracts.errors import HandleReleasedError, OGRErr, OGRError
from gdalbridge.contracts.geo import CRSRef
from tests.factories import FakeCT

def test_from_epsg_forwards_code(fake_native):
    srs = SpatialReference.from_epsg(4326)
    native = fake_native.osr.created[-1]
    assert native.called("ImportFromEPSG") == [(4326,)]
    assert srs.handle is native

def test_import_failure_raises_ogr_error(fake_native):
    fake_native.osr.srs_fail = {"ImportFromEPSG": "OGR Error: Unsupported SRS"}
    with pytest.raises(OGRError) as ei:
        SpatialReference.from_epsg(999999)
    assert ei.value.code is OGRErr.UNSUPPORTED_SRS

def test_nonzero_return_code_raises(fake_native):
    fake_native.osr.srs_values = {"Validate": 5}
    srs = SpatialReference()
    with pytest.raises(OGRError) as ei:
        srs.validate()
    assert ei.value.code is OGRErr.CORRUPT_DATA

def test_released_srs_is_unusable(fake_native):
    srs = SpatialReference.from_wkt('GEOGCS["x"]')
    srs.release()
    with pytest.raises(HandleReleasedError):
        srs.export_to_wkt()

def test_reference_counting(fake_native):
    srs = SpatialReference()
    srs.reference()
    srs.release()
    assert not srs.released
    srs.release()
    assert srs.released

def test_pci_params_padded(fake_native):
    srs = SpatialReference()
    srs.import_from_pci("UTM    19 S", "METRE", [1.0, 2.0])
    (proj, units, params), = srs.handle.called("ImportFromPCI")
    assert len(params) == 17 and params[:2] == [1.0, 2.0] and params[2:] == [0.0] * 15
    with pytest.raises(ValueError):
        srs.import_from_pci("LONG/LAT", "DEGREE", [0.0] * 18)

def test_usgs_params_padded(fake_native):
    srs = SpatialReference()
    srs.import_from_usgs(1, 19)
    (sys_, zone, params, datum), = srs.handle.called("ImportFromUSGS")
    assert (sys_, zone, datum) == (1, 19, 0) and len(params) == 15

def test_esri_and_url_use_their_own_importers(fake_native):
    srs = SpatialReference()
    srs.import_from_esri('GEOGCS["GCS_WGS_1984"]\nUNIT["Degree"]')
    srs.import_from_url("http://spatialreference.org/ref/epsg/4326/")
    assert srs.handle.called("ImportFromESRI") == [(['GEOGCS["GCS_WGS_1984"]', 'UNIT["Degree"]'],)]
    assert srs.handle.called("ImportFromUrl") == [("http://spatialreference.org/ref/epsg/4326/",)]
    assert srs.handle.called("ImportFromProj4") == []
    assert srs.handle.called("ImportFromXML") == []

def test_export_to_usgs_unpacks(fake_native):
    fake_native.osr.srs_values = {"ExportToUSGS": (1, 19, [0.0] * 15, 12)}
    srs = SpatialReference()
    proj, zone, params, datum = srs.export_to_usgs()
    assert (proj, zone, datum) == (1, 19, 12)
    assert params == (0.0,) * 15

def test_attr_value_missing(fake_native):
    fake_native.osr.srs_values = {"GetAttrValue": None}
    assert SpatialReference().attr_value("PROJCS") == ("", False)

def test_normalized_getter_uses_norm_entry_point(fake_native):
    fake_native.osr.srs_values = {"GetNormProjParm": 0.9996, "GetProjParm": 1.0}
    srs = SpatialReference()
    assert srs.normalized_projection_parameter("scale_factor") == 0.9996
    assert srs.handle.called("GetProjParm") == []

def test_utm_setter_and_getter(fake_native):
    fake_native.osr.srs_values = {"GetUTMZone": -19}
    srs = SpatialReference()
    srs.set_utm(19, north=False)
    assert srs.handle.called("SetUTM") == [(19, 0)]
    assert srs.utm_zone() == (19, False)

def test_projection_setters_forward_numbers(fake_native):
    srs = SpatialReference()
    srs.set_tm(0.0, -69.0, 0.9996, 500000.0, 10000000.0)
    srs.set_lcc(-20.0, -40.0, -30.0, -70.0, 0.0, 0.0)
    assert srs.handle.called("SetTM") == [(0.0, -69.0, 0.9996, 500000.0, 10000000.0)]
    assert srs.handle.called("SetLCC") == [(-20.0, -40.0, -30.0, -70.0, 0.0, 0.0)]

def test_axis_mapping(fake_native):
    fake_native.osr.srs_values = {"GetAxisMappingStrategy": 0}
    srs = SpatialReference()
    srs.set_axis_mapping_strategy(AxisMappingStrategy.TRADITIONAL_GIS_ORDER)
    assert srs.handle.called("SetAxisMappingStrategy") == [(0,)]
    assert srs.axis_mapping_strategy() is AxisMappingStrategy.TRADITIONAL_GIS_ORDER

def test_to_crs_ref_prefers_epsg(fake_native):
    fake_native.osr.srs_values = {"GetAuthorityName": "EPSG", "GetAuthorityCode": "32719"}
    assert SpatialReference().to_crs_ref() == CRSRef.from_epsg(32719)

def test_from_crs_ref_uses_user_input(fake_native):
    SpatialReference.from_crs_ref(CRSRef.from_epsg(3857))
    assert fake_native.osr.created[-1].called("SetFromUserInput") == [("EPSG:3857",)]

def test_clone_is_independent(fake_native):
    srs = SpatialReference()
    other = srs.clone()
    srs.release()
    assert not other.released
    assert other.handle is not fake_native.osr.created[-1]


# ---------- CoordinateTransform ----------
def _ct(fake_native, **kw):
    fake_native.osr.ct = FakeCT(**kw)
    return CoordinateTransform.create(SpatialReference(), SpatialReference())

def test_transform_in_place(fake_native):
    ct = _ct(fake_native)
    xs, ys, zs = [1.0, 2.0, 3.0], [10.0, 20.0, 30.0], [0.0, 0.0, 0.0]
    assert ct.transform(2, xs, ys, zs)
    assert xs == [2.0, 4.0, 3.0]
    assert ys == [20.0, 40.0, 30.0]
    assert zs == [1.0, 1.0, 0.0]

def test_transform_without_z(fake_native):
    ct = _ct(fake_native)
    xs, ys = [1.0], [1.0]
    assert ct.transform(1, xs, ys)
    assert (xs, ys) == ([2.0], [2.0])

def test_count_larger_than_arrays_rejected_before_native(fake_native):
    ct = _ct(fake_native)
    with pytest.raises(ValueError):
        ct.transform(3, [1.0, 2.0], [1.0, 2.0])
    with pytest.raises(ValueError):
        ct.transform(1, [1.0, 2.0], [1.0])
    assert fake_native.osr.ct.calls == []

def test_zero_points_is_success(fake_native):
    assert _ct(fake_native).transform(0, [], [])

def test_per_point_status(fake_native):
    ct = _ct(fake_native, fn=lambda x, y, z: (math.inf, math.inf, z) if x < 0 else (x, y, z))
    xs, ys = [1.0, -1.0, 2.0], [0.0, 0.0, 0.0]
    res = ct.transform_with_status(3, xs, ys)
    assert not res.success
    assert res.point_ok == (True, False, True)
    assert xs[0] == 1.0 and xs[2] == 2.0

def test_native_failure_leaves_arrays(fake_native):
    ct = _ct(fake_native, fail="Invalid coordinate")
    xs, ys = [1.0, 2.0], [3.0, 4.0]
    assert ct.transform(2, xs, ys) is False
    assert (xs, ys) == ([1.0, 2.0], [3.0, 4.0])

def test_transform_after_destroy(fake_native):
    ct = _ct(fake_native)
    ct.destroy()
    with pytest.raises(HandleReleasedError):
        ct.transform(1, [0.0], [0.0])
