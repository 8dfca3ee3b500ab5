# src/gdalbridge/adapters/gdal_native.py
from __future__ import annotations

"""
Acceso a los bindings oficiales de GDAL (`osgeo`) y helpers de marshaling
compartidos por todos los adapters.

Regla: el modo excepción de GDAL se activa la primera vez que se pide un
módulo nativo. Los fallos nativos llegan como RuntimeError y se traducen una
sola vez a las excepciones de `contracts.errors`.
"""

import logging
from typing import Any, Callable, Optional, Tuple

from ..contracts.errors import (
    CPLError,
    CPLErrorNum,
    HandleReleasedError,
    NativeUnavailableError,
    OGRError,
    check_ogr_err,
    ogr_err_from_message,
)

try:  # GDAL path
    from osgeo import gdal, ogr, osr  # type: ignore
    _HAS_GDAL = True
except Exception:  # pragma: no cover
    gdal = ogr = osr = None  # type: ignore[assignment]
    _HAS_GDAL = False

logger = logging.getLogger(__name__)

_exceptions_enabled = False


def has_gdal() -> bool:
    return _HAS_GDAL


def _require() -> None:
    global _exceptions_enabled
    if not _HAS_GDAL:
        raise NativeUnavailableError("GDAL no disponible: instala los bindings de Python (paquete 'GDAL')")
    if not _exceptions_enabled:
        gdal.UseExceptions()
        ogr.UseExceptions()
        osr.UseExceptions()
        _exceptions_enabled = True
        logger.debug("GDAL %s en modo excepción", gdal.__version__)


def get_gdal():
    _require()
    return gdal


def get_ogr():
    _require()
    return ogr


def get_osr():
    _require()
    return osr


def last_error(native=None) -> Tuple[int, str]:
    """(CPLGetLastErrorNo, CPLGetLastErrorMsg) del módulo gdal dado."""
    g = native if native is not None else get_gdal()
    return int(g.GetLastErrorNo()), str(g.GetLastErrorMsg() or "")


# ---------- Llamadas OSR/OGR ----------
def ogr_call(operation: str, fn: Callable[..., Any], *args: Any) -> Any:
    """
    Invoca una función que devuelve OGRErr.
    - modo excepción: RuntimeError -> OGRError (código inferido del mensaje)
    - modo clásico: código != 0 -> OGRError
    """
    try:
        ret = fn(*args)
    except RuntimeError as exc:
        msg = str(exc)
        raise OGRError(ogr_err_from_message(msg), f"{operation}: {msg}") from exc
    if isinstance(ret, int) and not isinstance(ret, bool):
        check_ogr_err(ret, operation)
    return ret


def native_call(operation: str, fn: Callable[..., Any], *args: Any) -> Any:
    """Invoca una función que devuelve un valor (no un OGRErr)."""
    try:
        return fn(*args)
    except RuntimeError as exc:
        msg = str(exc)
        raise OGRError(ogr_err_from_message(msg), f"{operation}: {msg}") from exc


# ---------- Llamadas GDAL (CPLErr) ----------
def cpl_call(operation: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Invoca una función GDAL; RuntimeError -> CPLError con CPLGetLastErrorNo."""
    try:
        return fn(*args, **kwargs)
    except RuntimeError as exc:
        code = last_error()[0] if _HAS_GDAL else 0
        raise CPLError(code or CPLErrorNum.APP_DEFINED, f"{operation}: {exc}") from exc


# ---------- Handles ----------
class NativeHandle:
    """
    Un único handle nativo con vida acotada.

    - `reference()` / `dereference()` ajustan el contador explícito.
    - `release()` decrementa y destruye al llegar a cero.
    - `destroy()` suelta el handle sin mirar el contador.
    Tras destruir, cualquier uso lanza HandleReleasedError.
    """
    kind = "handle"

    def __init__(self, handle: Any):
        if handle is None:
            raise ValueError(f"{self.kind}: handle nulo")
        self._handle: Optional[Any] = handle
        self._refs = 1

    def _h(self) -> Any:
        if self._handle is None:
            raise HandleReleasedError(self.kind)
        return self._handle

    @property
    def handle(self) -> Any:
        """Objeto nativo subyacente (para pasar a otros bindings)."""
        return self._h()

    @property
    def released(self) -> bool:
        return self._handle is None

    def reference(self) -> int:
        self._h()
        self._refs += 1
        return self._refs

    def dereference(self) -> int:
        self._h()
        self._refs -= 1
        return self._refs

    def release(self) -> None:
        self._h()
        self._refs -= 1
        if self._refs <= 0:
            self.destroy()

    def _close_native(self, handle: Any) -> None:
        """Hook para subclases que deben cerrar explícitamente (datasets)."""

    def destroy(self) -> None:
        handle, self._handle = self._handle, None
        self._refs = 0
        if handle is not None:
            self._close_native(handle)

    def __enter__(self):
        self._h()
        return self

    def __exit__(self, *exc) -> None:
        if not self.released:
            self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else f"refs={self._refs}"
        return f"<{type(self).__name__} {state}>"


__all__ = [
    "has_gdal", "get_gdal", "get_ogr", "get_osr", "last_error",
    "ogr_call", "native_call", "cpl_call", "NativeHandle",
]
