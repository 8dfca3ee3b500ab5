# src/gdalbridge/contracts/geo.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Literal, NamedTuple, Tuple, Optional

import numpy as np
import numpy.typing as npt

GeoTransform = Tuple[float, float, float, float, float, float]
DTypeStr = Literal["uint8","uint16","int16","uint32","int32","float32","float64"]

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

# ---------- CRS (puro dominio, sin GDAL) ----------
@dataclass(frozen=True)
class CRSRef:
    """Referencia textual a un CRS. La interpretación la hace SpatialReference."""
    wkt: Optional[str] = None
    epsg: Optional[int] = None

    @staticmethod
    def from_epsg(code: int) -> "CRSRef":
        return CRSRef(epsg=int(code))

    @staticmethod
    def from_wkt(wkt: str) -> "CRSRef":
        return CRSRef(wkt=wkt)

    @staticmethod
    def parse(text: str) -> "CRSRef":
        """'EPSG:4326' -> epsg; cualquier otra cosa se guarda como texto."""
        s = text.strip()
        if not s:
            raise ValueError("CRS vacío")
        if s.upper().startswith("EPSG:"):
            return CRSRef.from_epsg(int(s.split(":", 1)[1]))
        return CRSRef.from_wkt(s)

    @property
    def is_empty(self) -> bool:
        return not self.wkt and self.epsg is None

    def to_user_input(self) -> str:
        """
        Texto aceptable por OSRSetFromUserInput.
        - Si hay EPSG -> 'EPSG:<code>'.
        - Si no, el WKT (o PROJ string) tal cual.
        """
        if self.epsg is not None:
            return f"EPSG:{int(self.epsg)}"
        if self.wkt:
            return self.wkt
        raise ValueError("CRSRef vacío: no hay WKT ni EPSG.")

# ---------- Perfil y Raster (puro dominio) ----------
@dataclass(frozen=True)
class GeoProfile:
    count: int
    dtype: DTypeStr
    width: int
    height: int
    transform: GeoTransform
    crs: CRSRef
    nodata: Optional[float] = None

    @property
    def bounds(self) -> Bounds:
        return geotransform_bounds(self.transform, self.width, self.height)

@dataclass(frozen=True)
class GeoRaster:
    data: "npt.NDArray[Any]"  # type: ignore[valid-type]
    profile: GeoProfile

    def __post_init__(self):
        # Bloquea mutaciones accidentales sobre los datos
        if hasattr(self.data, "setflags"):
            self.data.setflags(write=False)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape  # type: ignore[no-any-return]

    def is_single_band(self) -> bool:
        return self.profile.count == 1 or getattr(self.data, "ndim", 2) == 2

# ---------- GeoTransform helpers ----------
def geotransform_bounds(gt: GeoTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

def bounds_to_geotransform(bounds: Bounds, width: int, height: int) -> GeoTransform:
    minx, miny, maxx, maxy = bounds
    px = (maxx - minx) / float(width)
    py = (miny - maxy) / float(height)  # negativo (origen en esquina sup-izq)
    return (minx, px, 0.0, maxy, 0.0, py)

__all__ = [
    "GeoTransform","Bounds","CRSRef","GeoProfile","GeoRaster","geotransform_bounds",
    "bounds_to_geotransform","DTypeStr",
]
