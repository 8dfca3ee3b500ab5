# src/gdalbridge/adapters/gdal_osr.py
from __future__ import annotations

"""
Wrappers de OSR: SpatialReference y CoordinateTransform.

Cada método reenvía a un único punto de entrada nativo; los números se pasan
tal cual (sin validar) y los códigos OGRErr se traducen a OGRError.
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, MutableSequence, Optional, Sequence, Tuple, Union

from ..contracts.errors import OGRErr, OGRError
from ..contracts.geo import CRSRef
from .gdal_native import NativeHandle, get_osr, native_call, ogr_call

logger = logging.getLogger(__name__)

_PCI_PARAMS = 17
_USGS_PARAMS = 15


class AxisMappingStrategy(IntEnum):
    """OAMS_*: orden de ejes de los datos frente al CRS."""
    TRADITIONAL_GIS_ORDER = 0
    AUTHORITY_COMPLIANT = 1
    CUSTOM = 2


def _padded(params: Optional[Sequence[float]], size: int, what: str) -> list[float]:
    # el nativo lee exactamente `size` doubles
    vals = [float(v) for v in (params or ())]
    if len(vals) > size:
        raise ValueError(f"{what}: se esperaban como máximo {size} parámetros, hay {len(vals)}")
    return vals + [0.0] * (size - len(vals))


class SpatialReference(NativeHandle):
    kind = "SpatialReference"

    def __init__(self, wkt: str = "", *, handle: Any = None):
        if handle is None:
            handle = native_call("OSRNewSpatialReference", get_osr().SpatialReference, wkt)
        super().__init__(handle)

    # ---------- Constructores ----------
    @classmethod
    def _imported(cls, method: str, *args: Any) -> "SpatialReference":
        sr = cls()
        try:
            getattr(sr, method)(*args)
        except Exception:
            sr.destroy()
            raise
        return sr

    @classmethod
    def from_epsg(cls, code: int) -> "SpatialReference":
        return cls._imported("import_from_epsg", code)

    @classmethod
    def from_wkt(cls, wkt: str) -> "SpatialReference":
        return cls._imported("import_from_wkt", wkt)

    @classmethod
    def from_user_input(cls, text: str) -> "SpatialReference":
        return cls._imported("set_from_user_input", text)

    @classmethod
    def from_crs_ref(cls, ref: CRSRef) -> "SpatialReference":
        return cls.from_user_input(ref.to_user_input())

    def clone(self) -> "SpatialReference":
        return SpatialReference(handle=native_call("OSRClone", self._h().Clone))

    def clone_geog_cs(self) -> "SpatialReference":
        return SpatialReference(handle=native_call("OSRCloneGeogCS", self._h().CloneGeogCS))

    # ---------- marshaling ----------
    def _call(self, method: str, *args: Any) -> Any:
        return ogr_call(method, getattr(self._h(), method), *args)

    def _get(self, method: str, *args: Any) -> Any:
        return native_call(method, getattr(self._h(), method), *args)

    def _flag(self, method: str, *args: Any) -> bool:
        return bool(self._get(method, *args))

    def validate(self) -> None:
        self._call("Validate")

    # ---------- Import ----------
    def import_from_wkt(self, wkt: str) -> None:
        self._call("ImportFromWkt", wkt)

    def import_from_epsg(self, code: int) -> None:
        self._call("ImportFromEPSG", int(code))

    def import_from_epsga(self, code: int) -> None:
        """EPSG respetando el orden lat/long de la autoridad."""
        self._call("ImportFromEPSGA", int(code))

    def import_from_proj4(self, proj4: str) -> None:
        self._call("ImportFromProj4", proj4)

    def import_from_esri(self, prj: Union[str, Sequence[str]]) -> None:
        """Contenido de un .prj ESRI (texto completo o lista de líneas)."""
        lines = prj.splitlines() if isinstance(prj, str) else list(prj)
        self._call("ImportFromESRI", lines)

    def import_from_pci(self, proj: str, units: str = "METRE", params: Optional[Sequence[float]] = None) -> None:
        self._call("ImportFromPCI", proj, units, _padded(params, _PCI_PARAMS, "PCI"))

    def import_from_usgs(self, proj_sys: int, zone: int = 0, params: Optional[Sequence[float]] = None, datum: int = 0) -> None:
        self._call("ImportFromUSGS", int(proj_sys), int(zone), _padded(params, _USGS_PARAMS, "USGS"), int(datum))

    def import_from_xml(self, xml: str) -> None:
        self._call("ImportFromXML", xml)

    def import_from_erm(self, proj: str, datum: str, units: str) -> None:
        self._call("ImportFromERM", proj, datum, units)

    def import_from_url(self, url: str) -> None:
        self._call("ImportFromUrl", url)

    def import_from_mi_coord_sys(self, coord_sys: str) -> None:
        self._call("ImportFromMICoordSys", coord_sys)

    def set_from_user_input(self, text: str) -> None:
        """EPSG:n, WKT, PROJ, URN, nombres conocidos (WGS84, NAD27...)."""
        self._call("SetFromUserInput", text)

    # ---------- Export ----------
    def export_to_wkt(self, options: Optional[Sequence[str]] = None) -> str:
        if options:
            return self._get("ExportToWkt", list(options))
        return self._get("ExportToWkt")

    def export_to_pretty_wkt(self, simplify: bool = False) -> str:
        return self._get("ExportToPrettyWkt", int(simplify))

    def export_to_proj4(self) -> str:
        return self._get("ExportToProj4")

    def export_to_projjson(self) -> str:
        return self._get("ExportToPROJJSON")

    def export_to_pci(self) -> Tuple[str, str, Tuple[float, ...]]:
        proj, units, params = self._get("ExportToPCI")
        return str(proj), str(units), tuple(float(p) for p in params)

    def export_to_usgs(self) -> Tuple[int, int, Tuple[float, ...], int]:
        proj, zone, params, datum = self._get("ExportToUSGS")
        return int(proj), int(zone), tuple(float(p) for p in params), int(datum)

    def export_to_xml(self, dialect: str = "") -> str:
        return self._get("ExportToXML", dialect)

    def export_to_mi_coord_sys(self) -> str:
        return self._get("ExportToMICoordSys")

    def morph_to_esri(self) -> None:
        self._call("MorphToESRI")

    def morph_from_esri(self) -> None:
        self._call("MorphFromESRI")

    def to_crs_ref(self) -> CRSRef:
        if (self.authority_name() or "").upper() == "EPSG" and self.authority_code():
            return CRSRef.from_epsg(int(self.authority_code()))  # type: ignore[arg-type]
        return CRSRef.from_wkt(self.export_to_wkt())

    # ---------- Atributos / unidades ----------
    def attr_value(self, key: str, child: int = 0) -> Tuple[str, bool]:
        val = self._get("GetAttrValue", key, int(child))
        return (val or ""), val is not None

    def set_attr_value(self, path: str, value: str) -> None:
        self._call("SetAttrValue", path, value)

    def set_angular_units(self, units: str, radians: float) -> None:
        self._call("SetAngularUnits", units, radians)

    def angular_units(self) -> Tuple[str, float]:
        return self._get("GetAngularUnitsName") or "", float(self._get("GetAngularUnits"))

    def set_linear_units(self, name: str, to_meters: float) -> None:
        self._call("SetLinearUnits", name, to_meters)

    def set_target_linear_units(self, target: str, units: str, to_meters: float) -> None:
        self._call("SetTargetLinearUnits", target, units, to_meters)

    def set_linear_units_and_update_parameters(self, name: str, to_meters: float) -> None:
        self._call("SetLinearUnitsAndUpdateParameters", name, to_meters)

    def linear_units(self) -> Tuple[str, float]:
        return self._get("GetLinearUnitsName") or "", float(self._get("GetLinearUnits"))

    def target_linear_units(self, target: str) -> Tuple[str, float]:
        factor = float(self._get("GetTargetLinearUnits", target))
        name = self._get("GetAttrValue", f"{target}|UNIT", 0) if target else None
        return name or "", factor

    def prime_meridian(self) -> Tuple[str, float]:
        name = self._get("GetAttrValue", "PRIMEM", 0)
        offset = self._get("GetAttrValue", "PRIMEM", 1)
        return name or "", float(offset) if offset else 0.0

    # ---------- Predicados ----------
    def is_geographic(self) -> bool:
        return self._flag("IsGeographic")

    def is_local(self) -> bool:
        return self._flag("IsLocal")

    def is_projected(self) -> bool:
        return self._flag("IsProjected")

    def is_compound(self) -> bool:
        return self._flag("IsCompound")

    def is_geocentric(self) -> bool:
        return self._flag("IsGeocentric")

    def is_vertical(self) -> bool:
        return self._flag("IsVertical")

    def is_same_geographic_cs(self, other: "SpatialReference") -> bool:
        return self._flag("IsSameGeogCS", other.handle)

    def is_same_vertical_cs(self, other: "SpatialReference") -> bool:
        return self._flag("IsSameVertCS", other.handle)

    def is_same(self, other: "SpatialReference") -> bool:
        return self._flag("IsSame", other.handle)

    # ---------- Definición de CS ----------
    def set_local_cs(self, name: str) -> None:
        self._call("SetLocalCS", name)

    def set_projected_cs(self, name: str) -> None:
        self._call("SetProjCS", name)

    def set_geocentric_cs(self, name: str) -> None:
        self._call("SetGeocCS", name)

    def set_well_known_geographic_cs(self, name: str) -> None:
        self._call("SetWellKnownGeogCS", name)

    def copy_geographic_cs_from(self, other: "SpatialReference") -> None:
        self._call("CopyGeogCSFrom", other.handle)

    def set_towgs84(self, dx: float, dy: float, dz: float, ex: float = 0.0, ey: float = 0.0, ez: float = 0.0, ppm: float = 0.0) -> None:
        self._call("SetTOWGS84", dx, dy, dz, ex, ey, ez, ppm)

    def towgs84(self) -> Tuple[float, ...]:
        coeffs = self._get("GetTOWGS84")
        return tuple(float(c) for c in coeffs)

    def set_compound_cs(self, name: str, horizontal: "SpatialReference", vertical: "SpatialReference") -> None:
        self._call("SetCompoundCS", name, horizontal.handle, vertical.handle)

    def set_geographic_cs(
        self,
        geog_name: str,
        datum_name: str,
        spheroid_name: str,
        semi_major: float,
        inv_flattening: float,
        pm_name: str = "Greenwich",
        pm_offset: float = 0.0,
        angular_units: str = "degree",
        to_radians: float = 0.0174532925199433,
    ) -> None:
        self._call("SetGeogCS", geog_name, datum_name, spheroid_name, semi_major, inv_flattening,
                   pm_name, pm_offset, angular_units, to_radians)

    def set_vertical_cs(self, cs_name: str, datum_name: str, datum_type: int = 2005) -> None:
        self._call("SetVertCS", cs_name, datum_name, int(datum_type))

    def semi_major_axis(self) -> float:
        return float(self._get("GetSemiMajor"))

    def semi_minor_axis(self) -> float:
        return float(self._get("GetSemiMinor"))

    def inverse_flattening(self) -> float:
        return float(self._get("GetInvFlattening"))

    def set_authority(self, target: str, authority: str, code: int) -> None:
        self._call("SetAuthority", target, authority, int(code))

    def authority_code(self, target: Optional[str] = None) -> Optional[str]:
        return self._get("GetAuthorityCode", target)

    def authority_name(self, target: Optional[str] = None) -> Optional[str]:
        return self._get("GetAuthorityName", target)

    def auto_identify_epsg(self) -> None:
        self._call("AutoIdentifyEPSG")

    def epsg_treats_as_lat_long(self) -> bool:
        return self._flag("EPSGTreatsAsLatLong")

    def set_axis_mapping_strategy(self, strategy: AxisMappingStrategy) -> None:
        self._get("SetAxisMappingStrategy", int(strategy))

    def axis_mapping_strategy(self) -> AxisMappingStrategy:
        return AxisMappingStrategy(int(self._get("GetAxisMappingStrategy")))

    # ---------- Parámetros de proyección ----------
    def set_projection_by_name(self, name: str) -> None:
        self._call("SetProjection", name)

    def set_projection_parameter(self, name: str, value: float) -> None:
        self._call("SetProjParm", name, value)

    def projection_parameter(self, name: str, default: float = 0.0) -> float:
        return float(self._get("GetProjParm", name, default))

    def set_normalized_projection_parameter(self, name: str, value: float) -> None:
        self._call("SetNormProjParm", name, value)

    def normalized_projection_parameter(self, name: str, default: float = 0.0) -> float:
        return float(self._get("GetNormProjParm", name, default))

    def set_utm(self, zone: int, north: bool = True) -> None:
        self._call("SetUTM", int(zone), int(north))

    def utm_zone(self) -> Tuple[int, bool]:
        """(zona, hemisferio norte). Zona 0 si no es UTM."""
        z = int(self._get("GetUTMZone"))
        return abs(z), z > 0

    def set_state_plane(self, zone: int, nad83: bool = True) -> None:
        self._call("SetStatePlane", int(zone), int(nad83))

    def set_state_plane_with_units(self, zone: int, nad83: bool, unit_name: str, factor: float) -> None:
        self._call("SetStatePlane", int(zone), int(nad83), unit_name, factor)

    # ---------- Familias de proyección ----------
    def set_acea(self, stdp1: float, stdp2: float, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Albers Conic Equal Area."""
        self._call("SetACEA", stdp1, stdp2, center_lat, center_long, false_easting, false_northing)

    def set_ae(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Azimuthal Equidistant."""
        self._call("SetAE", center_lat, center_long, false_easting, false_northing)

    def set_bonne(self, standard_parallel: float, central_meridian: float, false_easting: float, false_northing: float) -> None:
        self._call("SetBonne", standard_parallel, central_meridian, false_easting, false_northing)

    def set_cea(self, stdp1: float, central_meridian: float, false_easting: float, false_northing: float) -> None:
        """Cylindrical Equal Area."""
        self._call("SetCEA", stdp1, central_meridian, false_easting, false_northing)

    def set_cs(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Cassini-Soldner."""
        self._call("SetCS", center_lat, center_long, false_easting, false_northing)

    def set_ec(self, stdp1: float, stdp2: float, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Equidistant Conic."""
        self._call("SetEC", stdp1, stdp2, center_lat, center_long, false_easting, false_northing)

    def set_eckert(self, variation: int, central_meridian: float, false_easting: float, false_northing: float) -> None:
        """Eckert I-VI (variation 1..6)."""
        self._call("SetEckert", int(variation), central_meridian, false_easting, false_northing)

    def set_equirectangular(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetEquirectangular", center_lat, center_long, false_easting, false_northing)

    def set_equirectangular_generalized(self, center_lat: float, center_long: float, pseudo_std_parallel: float, false_easting: float, false_northing: float) -> None:
        self._call("SetEquirectangular2", center_lat, center_long, pseudo_std_parallel, false_easting, false_northing)

    def set_gs(self, central_meridian: float, false_easting: float, false_northing: float) -> None:
        """Gall Stereographic."""
        self._call("SetGS", central_meridian, false_easting, false_northing)

    def set_gh(self, central_meridian: float, false_easting: float, false_northing: float) -> None:
        """Goode Homolosine."""
        self._call("SetGH", central_meridian, false_easting, false_northing)

    def set_igh(self) -> None:
        """Interrupted Goode Homolosine."""
        self._call("SetIGH")

    def set_geos(self, central_meridian: float, satellite_height: float, false_easting: float, false_northing: float) -> None:
        """Geostationary Satellite View."""
        self._call("SetGEOS", central_meridian, satellite_height, false_easting, false_northing)

    def set_gstm(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Gauss Schreiber Transverse Mercator."""
        self._call("SetGaussSchreiberTMercator", center_lat, center_long, scale, false_easting, false_northing)

    def set_gnomonic(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetGnomonic", center_lat, center_long, false_easting, false_northing)

    def set_hom(self, center_lat: float, center_long: float, azimuth: float, rect_to_skew: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Hotine Oblique Mercator (ángulo de azimut)."""
        self._call("SetHOM", center_lat, center_long, azimuth, rect_to_skew, scale, false_easting, false_northing)

    def set_hom2pno(self, center_lat: float, lat1: float, long1: float, lat2: float, long2: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Hotine Oblique Mercator (dos puntos sobre la línea central)."""
        self._call("SetHOM2PNO", center_lat, lat1, long1, lat2, long2, scale, false_easting, false_northing)

    def set_iwm_polyconic(self, lat1: float, lat2: float, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetIWMPolyconic", lat1, lat2, center_long, false_easting, false_northing)

    def set_krovak(self, center_lat: float, center_long: float, azimuth: float, pseudo_std_parallel: float, scale: float, false_easting: float, false_northing: float) -> None:
        self._call("SetKrovak", center_lat, center_long, azimuth, pseudo_std_parallel, scale, false_easting, false_northing)

    def set_laea(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Lambert Azimuthal Equal Area."""
        self._call("SetLAEA", center_lat, center_long, false_easting, false_northing)

    def set_lcc(self, stdp1: float, stdp2: float, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Lambert Conformal Conic (2SP)."""
        self._call("SetLCC", stdp1, stdp2, center_lat, center_long, false_easting, false_northing)

    def set_lcc1sp(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        self._call("SetLCC1SP", center_lat, center_long, scale, false_easting, false_northing)

    def set_lccb(self, stdp1: float, stdp2: float, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Lambert Conformal Conic (Bélgica)."""
        self._call("SetLCCB", stdp1, stdp2, center_lat, center_long, false_easting, false_northing)

    def set_mc(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Miller Cylindrical."""
        self._call("SetMC", center_lat, center_long, false_easting, false_northing)

    def set_mercator(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        self._call("SetMercator", center_lat, center_long, scale, false_easting, false_northing)

    def set_mollweide(self, central_meridian: float, false_easting: float, false_northing: float) -> None:
        self._call("SetMollweide", central_meridian, false_easting, false_northing)

    def set_nzmg(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """New Zealand Map Grid."""
        self._call("SetNZMG", center_lat, center_long, false_easting, false_northing)

    def set_os(self, origin_lat: float, meridian: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Oblique Stereographic."""
        self._call("SetOS", origin_lat, meridian, scale, false_easting, false_northing)

    def set_orthographic(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetOrthographic", center_lat, center_long, false_easting, false_northing)

    def set_polyconic(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetPolyconic", center_lat, center_long, false_easting, false_northing)

    def set_ps(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Polar Stereographic."""
        self._call("SetPS", center_lat, center_long, scale, false_easting, false_northing)

    def set_robinson(self, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetRobinson", center_long, false_easting, false_northing)

    def set_sinusoidal(self, center_long: float, false_easting: float, false_northing: float) -> None:
        self._call("SetSinusoidal", center_long, false_easting, false_northing)

    def set_stereographic(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        self._call("SetStereographic", center_lat, center_long, scale, false_easting, false_northing)

    def set_soc(self, latitude_of_origin: float, central_meridian: float, false_easting: float, false_northing: float) -> None:
        """Swiss Oblique Cylindrical."""
        self._call("SetSOC", latitude_of_origin, central_meridian, false_easting, false_northing)

    def set_tm(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Transverse Mercator."""
        self._call("SetTM", center_lat, center_long, scale, false_easting, false_northing)

    def set_tm_variant(self, variant_name: str, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        self._call("SetTMVariant", variant_name, center_lat, center_long, scale, false_easting, false_northing)

    def set_tmg(self, center_lat: float, center_long: float, false_easting: float, false_northing: float) -> None:
        """Tunisia Mining Grid."""
        self._call("SetTMG", center_lat, center_long, false_easting, false_northing)

    def set_tmso(self, center_lat: float, center_long: float, scale: float, false_easting: float, false_northing: float) -> None:
        """Transverse Mercator (South Oriented)."""
        self._call("SetTMSO", center_lat, center_long, scale, false_easting, false_northing)

    def set_vdg(self, center_long: float, false_easting: float, false_northing: float) -> None:
        """Van der Grinten."""
        self._call("SetVDG", center_long, false_easting, false_northing)


# ---------- Transformación de coordenadas ----------
@dataclass(frozen=True)
class TransformResult:
    success: bool                    # agregado, igual que OCTTransform
    point_ok: Tuple[bool, ...]       # estado por punto (no finito => falló)


Coords = MutableSequence[float]


def _check_counts(count: int, xs: Coords, ys: Coords, zs: Optional[Coords]) -> int:
    lengths = [len(xs), len(ys)] + ([len(zs)] if zs is not None else [])
    if len(set(lengths)) != 1:
        raise ValueError(f"los arrays de coordenadas deben tener igual largo: {lengths}")
    if count < 0 or count > lengths[0]:
        raise ValueError(f"count={count} fuera de rango (largo={lengths[0]})")
    return int(count)


class CoordinateTransform(NativeHandle):
    kind = "CoordinateTransform"

    def __init__(self, *, handle: Any):
        super().__init__(handle)

    @classmethod
    def create(cls, source: SpatialReference, dest: SpatialReference) -> "CoordinateTransform":
        osr = get_osr()
        h = native_call("OCTNewCoordinateTransformation", osr.CoordinateTransformation, source.handle, dest.handle)
        if h is None:
            raise OGRError(OGRErr.FAILURE, "OCTNewCoordinateTransformation")
        return cls(handle=h)

    def transform(self, count: int, xs: Coords, ys: Coords, zs: Optional[Coords] = None) -> bool:
        """Transforma en sitio los primeros `count` puntos; True si todos salieron bien."""
        return self.transform_with_status(count, xs, ys, zs).success

    def transform_with_status(self, count: int, xs: Coords, ys: Coords, zs: Optional[Coords] = None) -> TransformResult:
        n = _check_counts(count, xs, ys, zs)
        h = self._h()
        if n == 0:
            return TransformResult(True, ())
        pts = [(float(xs[i]), float(ys[i]), float(zs[i]) if zs is not None else 0.0) for i in range(n)]
        try:
            out = h.TransformPoints(pts)
        except RuntimeError as exc:
            # el nativo no transformó nada: arrays intactos
            logger.debug("OCTTransform falló para %d puntos: %s", n, exc)
            return TransformResult(False, (False,) * n)

        ok: list[bool] = []
        for i, p in enumerate(out):
            x, y = float(p[0]), float(p[1])
            xs[i] = x
            ys[i] = y
            if zs is not None and len(p) > 2:
                zs[i] = float(p[2])
            ok.append(math.isfinite(x) and math.isfinite(y))
        return TransformResult(all(ok), tuple(ok))


__all__ = ["SpatialReference", "CoordinateTransform", "TransformResult", "AxisMappingStrategy"]
