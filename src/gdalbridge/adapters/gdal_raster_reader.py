# src/gdalbridge/adapters/gdal_raster_reader.py
from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Tuple

from ..contracts.geo import CRSRef, GeoProfile, GeoRaster
from ..ports.raster_read import RasterReaderPort
from .gdal_dataset import Dataset, _GDAL2NP, _np_to_dtype_str


@dataclass(frozen=True)
class GdalRasterReader(RasterReaderPort):
    """Lector de raster sobre `Dataset`.

    Regla: `read()` devuelve un **GeoRaster count==1**. Para datasets multibanda
    pasa `band_index` (1-based, como en GDAL).
    """

    def read(self, uri: str, band_index: int | None = None) -> GeoRaster:
        with Dataset.open(uri) as ds:
            return ds.read_raster(1 if band_index is None else int(band_index))

    def profile(self, uri: str) -> GeoProfile:
        with Dataset.open(uri) as ds:
            band = ds.raster_band(1)
            srs = ds.spatial_reference()
            crs = CRSRef()
            if srs is not None:
                with srs:
                    crs = srs.to_crs_ref()
            nodata = band.nodata
            return GeoProfile(
                count=ds.raster_count,
                dtype=_np_to_dtype_str(_GDAL2NP[band.data_type]),
                width=ds.raster_x_size,
                height=ds.raster_y_size,
                transform=ds.geo_transform,
                crs=crs,
                nodata=float(nodata) if nodata is not None and not math.isnan(nodata) else None,
            )

    def size(self, uri: str) -> Tuple[int, int]:
        with Dataset.open(uri) as ds:
            return ds.raster_x_size, ds.raster_y_size

    def exists(self, uri: str) -> bool:
        return os.path.exists(uri)
