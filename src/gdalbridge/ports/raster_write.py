# src/gdalbridge/ports/raster_write.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Optional
from ..contracts.geo import GeoRaster, GeoProfile

URI = str

@runtime_checkable
class RasterWriterPort(Protocol):
    """Escritor de GeoRaster a disco (GTiff por defecto)."""
    def write(self, uri: URI, raster: GeoRaster, *, compress: Optional[str] = None, tiled: bool = True) -> URI: ...
    def write_profile(self, uri: URI, profile: GeoProfile) -> URI: ...

__all__ = ["RasterWriterPort", "URI"]
