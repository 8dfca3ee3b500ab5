# src/gdalbridge/services/contour_service.py
from __future__ import annotations

"""
Contour Service: raster (DEM) -> capa vectorial de isolíneas.

Flujo:
  1) abre el raster y toma la banda pedida;
  2) crea el dataset vectorial destino y una capa con campos id/elevación
     en el CRS del raster;
  3) delega en `contour_generate` (gdal_contour en proceso);
  4) devuelve el conteo de features generadas.

Si `dst_uri` es vacío el destino queda en memoria (útil para inspección y
tests); el resultado solo informa el conteo.

Si algo falla tras crear un destino en disco, se borra con el driver
para no dejar archivos a medio escribir.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from ..config import Settings, get_settings
from ..contracts.errors import GdalBridgeError
from ..adapters.gdal_dataset import Dataset, Driver, FieldType, GeometryType
from ..adapters.gdal_utilities import contour_generate, memory_vector_format
from ..ports.progress import ProgressFunc

logger = logging.getLogger(__name__)


# ----------------------
# DTOs
# ----------------------

@dataclass(frozen=True)
class ContourSpec:
    interval: Optional[float] = 10.0
    base: float = 0.0
    fixed_levels: Tuple[float, ...] = ()   # si no está vacío, prima sobre interval
    band_index: int = 1
    driver: str = "GPKG"
    layer_name: str = "contour"
    id_field: str = "ID"
    elev_field: str = "ELEV"
    nodata: Optional[float] = None
    overwrite: bool = False

    def __post_init__(self):
        if not self.fixed_levels and (self.interval is None or self.interval <= 0):
            raise ValueError("ContourSpec: interval > 0 o fixed_levels requeridos")

    def native_options(self, id_index: int, elev_index: int) -> list[str]:
        opts = [f"ID_FIELD={id_index}", f"ELEV_FIELD={elev_index}"]
        if self.fixed_levels:
            opts.append("FIXED_LEVELS=" + ",".join(repr(float(v)) for v in self.fixed_levels))
        else:
            opts += [f"LEVEL_INTERVAL={float(self.interval)!r}", f"LEVEL_BASE={float(self.base)!r}"]
        if self.nodata is not None:
            opts.append(f"NODATA={float(self.nodata)!r}")
        return opts


@dataclass(frozen=True)
class ContourResult:
    feature_count: int
    dst_uri: str


# ----------------------
# Servicio
# ----------------------

@dataclass
class ContourService:
    settings: Settings = field(default_factory=get_settings)

    def _open_destination(self, dst_uri: str, spec: ContourSpec) -> Dataset:
        if not dst_uri:
            return Driver.by_name(memory_vector_format(self.settings)).create_vector("")
        drv = Driver.by_name(spec.driver)
        if os.path.exists(dst_uri):
            if not spec.overwrite:
                raise FileExistsError(dst_uri)
            drv.delete(dst_uri)
        d = os.path.dirname(dst_uri)
        if d:
            os.makedirs(d, exist_ok=True)
        return drv.create_vector(dst_uri)

    def _discard(self, dst_uri: str, spec: ContourSpec) -> None:
        """Borra un destino a medio escribir; un fallo aquí no tapa el error original."""
        try:
            Driver.by_name(spec.driver).delete(dst_uri)
        except GdalBridgeError as ex:
            logger.warning("contour: no se pudo borrar %s: %s", dst_uri, ex)

    def run(
        self,
        src_uri: str,
        dst_uri: str,
        spec: ContourSpec,
        *,
        progress: Optional[ProgressFunc] = None,
        progress_data: Any = None,
    ) -> ContourResult:
        with Dataset.open(src_uri) as src:
            band = src.raster_band(spec.band_index)
            srs = src.spatial_reference()
            out = self._open_destination(dst_uri, spec)
            try:
                with out:
                    try:
                        layer = out.create_layer(spec.layer_name, srs, GeometryType.LINESTRING)
                    finally:
                        if srs is not None:
                            srs.destroy()
                    id_idx = layer.create_field(spec.id_field, FieldType.INTEGER)
                    elev_idx = layer.create_field(spec.elev_field, FieldType.REAL)
                    contour_generate(band, layer, spec.native_options(id_idx, elev_idx), progress, progress_data)
                    n = layer.feature_count()
            except Exception:
                if dst_uri:
                    self._discard(dst_uri, spec)
                raise
        logger.info("contour %s -> %s: %d features", src_uri, dst_uri or "<memoria>", n)
        return ContourResult(feature_count=n, dst_uri=dst_uri)


__all__ = ["ContourSpec", "ContourResult", "ContourService"]
