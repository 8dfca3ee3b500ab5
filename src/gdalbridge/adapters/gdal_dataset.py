# src/gdalbridge/adapters/gdal_dataset.py
from __future__ import annotations

"""
Colaboradores mínimos: Dataset, RasterBand, Layer y Driver.

Solo lo que las utilidades batch y la generación de contornos necesitan para
recibir y devolver handles. Bandas y capas dependen de su Dataset: si el
Dataset se cerró, usarlas lanza HandleReleasedError.
"""

import math
import os
from enum import IntEnum, IntFlag
from typing import Any, Optional, Sequence, Union

import numpy as np

from ..contracts.errors import CPLErrorNum, DatasetOpenError, GdalBridgeError
from ..contracts.geo import CRSRef, DTypeStr, GeoProfile, GeoRaster, GeoTransform
from .gdal_native import NativeHandle, cpl_call, get_gdal, get_ogr, last_error, ogr_call
from .gdal_osr import SpatialReference

PathLike = Union[str, "os.PathLike[str]"]


class OpenFlag(IntFlag):
    """GDAL_OF_*"""
    READONLY = 0x00
    UPDATE = 0x01
    RASTER = 0x02
    VECTOR = 0x04
    GNM = 0x08
    MULTIDIM_RASTER = 0x10
    SHARED = 0x20
    VERBOSE_ERROR = 0x40


class DataType(IntEnum):
    """GDALDataType"""
    UNKNOWN = 0
    BYTE = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    FLOAT64 = 7


class FieldType(IntEnum):
    """OGRFieldType"""
    INTEGER = 0
    REAL = 2
    STRING = 4
    INTEGER64 = 12


class GeometryType(IntEnum):
    """OGRwkbGeometryType (subconjunto)"""
    UNKNOWN = 0
    POINT = 1
    LINESTRING = 2
    POLYGON = 3
    MULTIPOLYGON = 6
    LINESTRING_25D = 0x80000002


_NP2GDAL = {
    np.dtype("uint8"): DataType.BYTE,
    np.dtype("uint16"): DataType.UINT16,
    np.dtype("int16"): DataType.INT16,
    np.dtype("uint32"): DataType.UINT32,
    np.dtype("int32"): DataType.INT32,
    np.dtype("float32"): DataType.FLOAT32,
    np.dtype("float64"): DataType.FLOAT64,
}
_GDAL2NP = {v: k for k, v in _NP2GDAL.items()}


def data_type_for(dtype: Any) -> DataType:
    try:
        return _NP2GDAL[np.dtype(dtype)]
    except KeyError as e:
        raise ValueError(f"dtype {dtype} no soportado") from e


def _np_to_dtype_str(dt: np.dtype) -> DTypeStr:
    if np.dtype(dt) not in _NP2GDAL:
        raise ValueError(f"dtype {dt} no soportado")
    return np.dtype(dt).name  # type: ignore[return-value]


# ---------- Dataset ----------
class Dataset(NativeHandle):
    kind = "Dataset"

    def __init__(self, *, handle: Any):
        super().__init__(handle)

    @classmethod
    def open(cls, path: PathLike, readonly: bool = True) -> "Dataset":
        g = get_gdal()
        uri = os.fspath(path)
        try:
            h = g.Open(uri, g.GA_ReadOnly if readonly else g.GA_Update)
        except RuntimeError as exc:
            code, _ = last_error(g)
            raise DatasetOpenError(uri, code or CPLErrorNum.OPEN_FAILED, str(exc)) from exc
        if h is None:
            raise DatasetOpenError(uri, CPLErrorNum.OPEN_FAILED)
        return cls(handle=h)

    @classmethod
    def open_ex(
        cls,
        path: PathLike,
        flags: OpenFlag = OpenFlag.READONLY,
        allowed_drivers: Optional[Sequence[str]] = None,
        open_options: Optional[Sequence[str]] = None,
        sibling_files: Optional[Sequence[str]] = None,
    ) -> "Dataset":
        g = get_gdal()
        uri = os.fspath(path)
        try:
            h = g.OpenEx(
                uri,
                int(flags),
                list(allowed_drivers) if allowed_drivers else None,
                list(open_options) if open_options else None,
                list(sibling_files) if sibling_files else None,
            )
        except RuntimeError as exc:
            code, _ = last_error(g)
            raise DatasetOpenError(uri, code or CPLErrorNum.OPEN_FAILED, str(exc)) from exc
        if h is None:
            raise DatasetOpenError(uri, CPLErrorNum.OPEN_FAILED)
        return cls(handle=h)

    def _close_native(self, handle: Any) -> None:
        close = getattr(handle, "Close", None)  # GDAL >= 3.8
        if callable(close):
            close()
        else:
            handle.FlushCache()

    def close(self) -> None:
        self.destroy()

    def flush(self) -> None:
        self._h().FlushCache()

    # --- propiedades ---
    @property
    def raster_x_size(self) -> int:
        return int(self._h().RasterXSize)

    @property
    def raster_y_size(self) -> int:
        return int(self._h().RasterYSize)

    @property
    def raster_count(self) -> int:
        return int(self._h().RasterCount)

    @property
    def layer_count(self) -> int:
        return int(self._h().GetLayerCount())

    @property
    def projection(self) -> str:
        return self._h().GetProjection() or ""

    @property
    def geo_transform(self) -> GeoTransform:
        gt = self._h().GetGeoTransform()
        return (gt[0], gt[1], gt[2], gt[3], gt[4], gt[5])

    @property
    def driver_name(self) -> str:
        return str(self._h().GetDriver().ShortName)

    def spatial_reference(self) -> Optional[SpatialReference]:
        """Copia propia del SRS del dataset (None si no tiene)."""
        srs = self._h().GetSpatialRef()
        if srs is None:
            return None
        return SpatialReference(handle=srs.Clone())

    def set_projection(self, wkt: str) -> None:
        cpl_call("SetProjection", self._h().SetProjection, wkt)

    def set_geo_transform(self, gt: GeoTransform) -> None:
        cpl_call("SetGeoTransform", self._h().SetGeoTransform, list(gt))

    # --- hijos ---
    def raster_band(self, index: int) -> "RasterBand":
        h = cpl_call("GetRasterBand", self._h().GetRasterBand, int(index))
        if h is None:
            raise GdalBridgeError(f"banda {index} inexistente (RasterCount={self.raster_count})")
        return RasterBand(self, h)

    def layer(self, index: int = 0) -> "Layer":
        h = self._h().GetLayer(int(index))
        if h is None:
            raise GdalBridgeError(f"capa {index} inexistente (LayerCount={self.layer_count})")
        return Layer(self, h)

    def layer_by_name(self, name: str) -> "Layer":
        h = self._h().GetLayerByName(name)
        if h is None:
            raise GdalBridgeError(f"capa {name!r} inexistente")
        return Layer(self, h)

    def create_layer(
        self,
        name: str,
        srs: Optional[SpatialReference] = None,
        geom_type: GeometryType = GeometryType.UNKNOWN,
        options: Optional[Sequence[str]] = None,
    ) -> "Layer":
        h = cpl_call(
            "CreateLayer",
            self._h().CreateLayer,
            name,
            srs.handle if srs is not None else None,
            int(geom_type),
            list(options or []),
        )
        if h is None:
            raise GdalBridgeError(f"no se pudo crear la capa {name!r}")
        return Layer(self, h)

    # --- lectura a contrato de dominio ---
    def read_raster(self, band_index: int = 1) -> GeoRaster:
        band = self.raster_band(band_index)
        arr = band.read_array()
        srs = self.spatial_reference()
        crs = CRSRef()
        if srs is not None:
            with srs:
                crs = srs.to_crs_ref()
        nodata = band.nodata
        profile = GeoProfile(
            count=1,
            dtype=_np_to_dtype_str(arr.dtype),
            width=self.raster_x_size,
            height=self.raster_y_size,
            transform=self.geo_transform,
            crs=crs,
            nodata=float(nodata) if nodata is not None and not math.isnan(nodata) else None,
        )
        return GeoRaster(data=arr, profile=profile)


# ---------- RasterBand ----------
class RasterBand:
    def __init__(self, dataset: Dataset, handle: Any):
        self._dataset = dataset  # mantiene vivo el dataset
        self._handle = handle

    def _h(self) -> Any:
        self._dataset._h()
        return self._handle

    @property
    def handle(self) -> Any:
        return self._h()

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def x_size(self) -> int:
        return int(self._h().XSize)

    @property
    def y_size(self) -> int:
        return int(self._h().YSize)

    @property
    def data_type(self) -> DataType:
        return DataType(int(self._h().DataType))

    @property
    def nodata(self) -> Optional[float]:
        return self._h().GetNoDataValue()

    def set_nodata(self, value: float) -> None:
        cpl_call("SetNoDataValue", self._h().SetNoDataValue, float(value))

    def read_array(self) -> np.ndarray:
        arr = cpl_call("ReadAsArray", self._h().ReadAsArray)
        if arr is None:
            raise GdalBridgeError("ReadAsArray devolvió None")
        return arr

    def write_array(self, data: np.ndarray) -> None:
        cpl_call("WriteArray", self._h().WriteArray, data)


# ---------- Layer ----------
class Layer:
    def __init__(self, dataset: Dataset, handle: Any):
        self._dataset = dataset
        self._handle = handle

    def _h(self) -> Any:
        self._dataset._h()
        return self._handle

    @property
    def handle(self) -> Any:
        return self._h()

    @property
    def name(self) -> str:
        return str(self._h().GetName())

    def feature_count(self, force: bool = True) -> int:
        return int(self._h().GetFeatureCount(int(force)))

    def create_field(self, name: str, field_type: FieldType = FieldType.STRING) -> int:
        """Crea el campo y devuelve su índice."""
        fd = get_ogr().FieldDefn(name, int(field_type))
        ogr_call("OGR_L_CreateField", self._h().CreateField, fd)
        return self.field_index(name)

    def field_index(self, name: str) -> int:
        return int(self._h().GetLayerDefn().GetFieldIndex(name))


# ---------- Driver ----------
class Driver:
    def __init__(self, handle: Any):
        if handle is None:
            raise ValueError("Driver: handle nulo")
        self._handle = handle

    @classmethod
    def by_name(cls, name: str) -> "Driver":
        h = get_gdal().GetDriverByName(name)
        if h is None:
            raise GdalBridgeError(f"driver GDAL desconocido: {name!r}")
        return cls(h)

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def short_name(self) -> str:
        return str(self._handle.ShortName)

    def has_capability(self, cap: str) -> bool:
        """cap sin prefijo: 'RASTER', 'VECTOR', 'CREATE'..."""
        return (self._handle.GetMetadataItem(f"DCAP_{cap.upper()}") or "").upper() == "YES"

    def create(
        self,
        path: PathLike,
        x_size: int,
        y_size: int,
        bands: int = 1,
        data_type: DataType = DataType.FLOAT32,
        options: Optional[Sequence[str]] = None,
    ) -> Dataset:
        h = cpl_call("GDALCreate", self._handle.Create, os.fspath(path), int(x_size), int(y_size),
                     int(bands), int(data_type), list(options or []))
        if h is None:
            raise GdalBridgeError(f"no se pudo crear {os.fspath(path)!r} con {self.short_name}")
        return Dataset(handle=h)

    def create_vector(self, path: PathLike, options: Optional[Sequence[str]] = None) -> Dataset:
        return self.create(path, 0, 0, 0, DataType.UNKNOWN, options)

    def delete(self, path: PathLike) -> None:
        cpl_call("GDALDeleteDataset", self._handle.Delete, os.fspath(path))


__all__ = [
    "Dataset", "RasterBand", "Layer", "Driver", "OpenFlag", "DataType",
    "FieldType", "GeometryType", "data_type_for",
]
