# src/gdalbridge/ports/raster_read.py
from __future__ import annotations

from typing import Protocol, runtime_checkable, Tuple
from ..contracts.geo import GeoRaster, GeoProfile

URI = str

@runtime_checkable
class RasterReaderPort(Protocol):
    """
    Lector de raster a contratos de dominio.
    Reglas: `read` devuelve SIEMPRE un GeoRaster de una banda.
    """
    def read(self, uri: URI, band_index: int | None = None) -> GeoRaster: ...
    def profile(self, uri: URI) -> GeoProfile: ...
    def size(self, uri: URI) -> Tuple[int, int]: ...  # (width, height)
    def exists(self, uri: URI) -> bool: ...

__all__ = ["RasterReaderPort", "URI"]
