# src/gdalbridge/adapters/gdal_raster_writer.py
from __future__ import annotations

import os
from typing import Optional

import numpy as np

from ..contracts.geo import GeoProfile, GeoRaster
from ..ports.raster_write import RasterWriterPort
from .gdal_dataset import Driver, data_type_for
from .gdal_osr import SpatialReference


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


class GdalRasterWriter(RasterWriterPort):
    def __init__(self, driver: str = "GTiff"):
        self.driver = driver

    def _creation_options(self, compress: Optional[str], tiled: bool) -> list[str]:
        if self.driver != "GTiff":
            return []
        return [f"COMPRESS={(compress or 'DEFLATE').upper()}", "TILED=YES" if tiled else "TILED=NO"]

    def write(self, uri: str, raster: GeoRaster, *, compress: Optional[str] = None, tiled: bool = True) -> str:
        _ensure_dir(uri)
        data = raster.data
        p = raster.profile
        count = 1 if data.ndim == 2 else data.shape[0]

        drv = Driver.by_name(self.driver)
        with drv.create(uri, p.width, p.height, count, data_type_for(data.dtype),
                        self._creation_options(compress, tiled)) as ds:
            ds.set_geo_transform(p.transform)
            if not p.crs.is_empty:
                with SpatialReference.from_crs_ref(p.crs) as srs:
                    ds.set_projection(srs.export_to_wkt())
            for i in range(count):
                band = ds.raster_band(i + 1)
                band.write_array(data if data.ndim == 2 else data[i])
                if p.nodata is not None:
                    band.set_nodata(float(p.nodata))
            ds.flush()
        return uri

    def write_profile(self, uri: str, profile: GeoProfile) -> str:
        # raster vacío (todo nodata) con el perfil dado
        fill = profile.nodata if profile.nodata is not None else 0
        data = np.full((profile.height, profile.width), fill, dtype=np.dtype(profile.dtype))
        return self.write(uri, GeoRaster(data=data, profile=profile))
