# src/gdalbridge/adapters/gdal_utilities.py
from __future__ import annotations

"""
Utilidades batch de GDAL (gdalwarp, gdal_translate, ogr2ogr, gdal_rasterize,
gdaldem, gdal_contour) expuestas como llamadas en proceso.

Reglas comunes:
  - `dest` vacío/None => destino en memoria; se antepone la flag de formato
    del driver en memoria salvo que el llamador ya pase `-of`/`-f`.
  - las opciones se reenvían tal cual (flags de la CLI de GDAL).
  - un fallo lanza UtilityError con el número de error CPL; nunca se
    devuelve un Dataset en ese camino.
"""

import logging
import os
from typing import Any, Callable, Optional, Sequence, Union

from ..config import Settings, get_settings
from ..contracts.errors import CPLErrorNum, GdalBridgeError, UtilityError
from ..contracts.options import OptionValue, normalize_options, resolve_destination
from ..ports.progress import ProgressFunc, as_native_callback
from .gdal_dataset import Dataset, Driver, Layer, RasterBand
from .gdal_native import get_gdal, last_error

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
Source = Union[Dataset, PathLike]
Dest = Optional[PathLike]


def _source(src: Source) -> Any:
    """Dataset -> handle nativo; ruta -> str (la abre el binding)."""
    if isinstance(src, Dataset):
        return src.handle
    if isinstance(src, (str, os.PathLike)):
        return os.fspath(src)
    raise TypeError(f"fuente no soportada: {src!r}")


def memory_vector_format(settings: Optional[Settings] = None) -> str:
    """Driver vectorial en memoria: el configurado, o MEM (GDAL >= 3.11) / Memory."""
    s = settings or get_settings()
    if s.memory_vector_format:
        return s.memory_vector_format
    get_gdal()  # sin binding: NativeUnavailableError se propaga
    try:
        mem = Driver.by_name("MEM")
    except GdalBridgeError:
        return "Memory"
    return "MEM" if mem.has_capability("VECTOR") else "Memory"


def _run(
    operation: str,
    opts: Sequence[str],
    call: Callable[..., Any],
    progress: Optional[ProgressFunc],
    progress_data: Any,
) -> Any:
    g = get_gdal()
    logger.debug("%s %s", operation, " ".join(opts))
    try:
        ret = call(list(opts), as_native_callback(progress, progress_data))
    except RuntimeError as exc:
        code, _ = last_error(g)
        code = code or CPLErrorNum.APP_DEFINED
        logger.warning("%s falló (código %d): %s", operation, code, exc)
        raise UtilityError(operation, code, str(exc)) from exc
    if ret is None:
        code, msg = last_error(g)
        code = code or CPLErrorNum.APP_DEFINED
        logger.warning("%s falló (código %d): %s", operation, code, msg)
        raise UtilityError(operation, code, msg or None)
    return ret


def _wrap(ret: Any, dest_ds: Optional[Dataset]) -> Dataset:
    # con dataset destino el binding devuelve un int (1 = ok)
    if dest_ds is not None:
        return dest_ds
    return Dataset(handle=ret)


# ---------- gdalwarp ----------
def warp(
    dest: Dest,
    sources: Sequence[Source],
    options: Optional[Sequence[OptionValue]] = None,
    *,
    dest_ds: Optional[Dataset] = None,
    progress: Optional[ProgressFunc] = None,
    progress_data: Any = None,
    settings: Optional[Settings] = None,
) -> Dataset:
    if not sources:
        raise ValueError("warp: se requiere al menos una fuente")
    srcs = [_source(s) for s in sources]
    if dest_ds is not None:
        target: Any = dest_ds.handle
        opts = normalize_options(options)
    else:
        d = resolve_destination(dest, options, memory_format=(settings or get_settings()).memory_raster_format)
        target, opts = d.name, list(d.options)
    g = get_gdal()
    ret = _run("warp", opts, lambda o, cb: g.Warp(target, srcs, options=o, callback=cb), progress, progress_data)
    return _wrap(ret, dest_ds)


# ---------- gdal_translate ----------
def translate(
    dest: Dest,
    source: Source,
    options: Optional[Sequence[OptionValue]] = None,
    *,
    progress: Optional[ProgressFunc] = None,
    progress_data: Any = None,
    settings: Optional[Settings] = None,
) -> Dataset:
    src = _source(source)
    d = resolve_destination(dest, options, memory_format=(settings or get_settings()).memory_raster_format)
    g = get_gdal()
    ret = _run("translate", d.options, lambda o, cb: g.Translate(d.name, src, options=o, callback=cb), progress, progress_data)
    return Dataset(handle=ret)


# ---------- ogr2ogr ----------
def vector_translate(
    dest: Dest,
    sources: Sequence[Source],
    options: Optional[Sequence[OptionValue]] = None,
    *,
    progress: Optional[ProgressFunc] = None,
    progress_data: Any = None,
    settings: Optional[Settings] = None,
) -> Dataset:
    if len(sources) != 1:
        # GDALVectorTranslate solo admite una fuente
        raise ValueError(f"vector_translate: se espera exactamente 1 fuente, hay {len(sources)}")
    src = _source(sources[0])
    d = resolve_destination(dest, options, memory_format=memory_vector_format(settings), inject_flag="-f")
    g = get_gdal()
    ret = _run("vector translate", d.options, lambda o, cb: g.VectorTranslate(d.name, src, options=o, callback=cb), progress, progress_data)
    return Dataset(handle=ret)


# ---------- gdal_rasterize ----------
def rasterize(
    dest: Dest,
    source: Source,
    options: Optional[Sequence[OptionValue]] = None,
    *,
    dest_ds: Optional[Dataset] = None,
    progress: Optional[ProgressFunc] = None,
    progress_data: Any = None,
    settings: Optional[Settings] = None,
) -> Dataset:
    src = _source(source)
    if dest_ds is not None:
        target: Any = dest_ds.handle
        opts = normalize_options(options)
    else:
        d = resolve_destination(dest, options, memory_format=(settings or get_settings()).memory_raster_format)
        target, opts = d.name, list(d.options)
    g = get_gdal()
    ret = _run("rasterize", opts, lambda o, cb: g.Rasterize(target, src, options=o, callback=cb), progress, progress_data)
    return _wrap(ret, dest_ds)


# ---------- gdaldem ----------
DEM_PROCESSINGS = ("hillshade", "slope", "aspect", "color-relief", "TRI", "TPI", "roughness")


def dem_processing(
    dest: Dest,
    source: Source,
    processing: str,
    color_filename: Optional[PathLike] = None,
    options: Optional[Sequence[OptionValue]] = None,
    *,
    progress: Optional[ProgressFunc] = None,
    progress_data: Any = None,
    settings: Optional[Settings] = None,
) -> Dataset:
    """`processing` en DEM_PROCESSINGS; `color_filename` solo para color-relief."""
    src = _source(source)
    d = resolve_destination(dest, options, memory_format=(settings or get_settings()).memory_raster_format)
    color = os.fspath(color_filename) if color_filename else None
    g = get_gdal()
    ret = _run(
        "dem processing",
        d.options,
        lambda o, cb: g.DEMProcessing(d.name, src, processing, options=o, colorFilename=color, callback=cb),
        progress,
        progress_data,
    )
    return Dataset(handle=ret)


# ---------- gdal_contour ----------
def contour_generate(
    band: RasterBand,
    layer: Layer,
    options: Optional[Sequence[OptionValue]] = None,
    progress: Optional[ProgressFunc] = None,
    data: Any = None,
) -> None:
    """
    Genera isolíneas de `band` en `layer`.
    `options` son pares KEY=VALUE (LEVEL_INTERVAL=10, ELEV_FIELD=1, ...).
    """
    opts = normalize_options(options)
    g = get_gdal()
    ret = _run(
        "contour generate",
        opts,
        lambda o, cb: g.ContourGenerateEx(band.handle, layer.handle, o, cb),
        progress,
        data,
    )
    if int(ret) != 0:
        _, msg = last_error(g)
        raise UtilityError("contour generate", int(ret), msg or None)


__all__ = [
    "warp", "translate", "vector_translate", "rasterize", "dem_processing",
    "contour_generate", "memory_vector_format", "DEM_PROCESSINGS",
]
