# src/gdalbridge/contracts/errors.py
from __future__ import annotations

from enum import IntEnum
from typing import Optional

# ---------- Espacios de códigos nativos ----------
class OGRErr(IntEnum):
    """Códigos OGRERR_* devueltos por las funciones OSR/OGR."""
    NONE = 0
    NOT_ENOUGH_DATA = 1
    NOT_ENOUGH_MEMORY = 2
    UNSUPPORTED_GEOMETRY_TYPE = 3
    UNSUPPORTED_OPERATION = 4
    CORRUPT_DATA = 5
    FAILURE = 6
    UNSUPPORTED_SRS = 7
    INVALID_HANDLE = 8
    NON_EXISTING_FEATURE = 9


class CPLErrorNum(IntEnum):
    """Números de error CPLE_* (CPLGetLastErrorNo)."""
    NONE = 0
    APP_DEFINED = 1
    OUT_OF_MEMORY = 2
    FILE_IO = 3
    OPEN_FAILED = 4
    ILLEGAL_ARG = 5
    NOT_SUPPORTED = 6
    ASSERTION_FAILED = 7
    NO_WRITE_ACCESS = 8
    USER_INTERRUPT = 9
    OBJECT_NULL = 10


# Fragmentos de OGRErrMessages(); en modo excepción el código se pierde y
# solo queda el texto.
_OGR_MESSAGES = (
    ("not enough data", OGRErr.NOT_ENOUGH_DATA),
    ("not enough memory", OGRErr.NOT_ENOUGH_MEMORY),
    ("unsupported geometry type", OGRErr.UNSUPPORTED_GEOMETRY_TYPE),
    ("unsupported operation", OGRErr.UNSUPPORTED_OPERATION),
    ("corrupt data", OGRErr.CORRUPT_DATA),
    ("unsupported srs", OGRErr.UNSUPPORTED_SRS),
    ("invalid handle", OGRErr.INVALID_HANDLE),
    ("non existing feature", OGRErr.NON_EXISTING_FEATURE),
)


# ---------- Excepciones del host ----------
class GdalBridgeError(RuntimeError):
    """Base de todos los errores de la librería."""


class NativeUnavailableError(GdalBridgeError):
    """No se pudo importar `osgeo` (GDAL no instalado)."""


class HandleReleasedError(GdalBridgeError):
    """Uso de un handle ya liberado/destruido."""

    def __init__(self, kind: str):
        super().__init__(f"{kind}: handle ya liberado")
        self.kind = kind


class OGRError(GdalBridgeError):
    def __init__(self, code: int, message: Optional[str] = None):
        self.code = _as_ogr_err(code)
        self.message = message
        text = f"OGR error {int(self.code)} ({self.code.name})"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class CPLError(GdalBridgeError):
    def __init__(self, code: int, message: Optional[str] = None):
        self.code = int(code)
        self.message = message
        super().__init__(message or f"CPL error {self.code}")


class DatasetOpenError(CPLError):
    def __init__(self, path: str, code: int, message: Optional[str] = None):
        self.path = path
        super().__init__(code, f"no se pudo abrir {path!r}" + (f": {message}" if message else ""))


class UtilityError(CPLError):
    """Fallo de una utilidad batch (warp, translate, ...)."""

    def __init__(self, operation: str, code: int, message: Optional[str] = None):
        self.operation = operation
        text = f"{operation} falló con código {int(code)}"
        if message:
            text = f"{text}: {message}"
        super().__init__(code, text)
        self.detail = message


# ---------- Mapeo ----------
def _as_ogr_err(code: int) -> OGRErr:
    try:
        return OGRErr(int(code))
    except ValueError:
        return OGRErr.FAILURE


def err_from_ogr_err(code: Optional[int], message: Optional[str] = None) -> Optional[OGRError]:
    """Traduce un OGRErr nativo: None si es éxito, OGRError si no."""
    if code is None or int(code) == OGRErr.NONE:
        return None
    return OGRError(code, message)


def check_ogr_err(code: Optional[int], message: Optional[str] = None) -> None:
    err = err_from_ogr_err(code, message)
    if err is not None:
        raise err


def ogr_err_from_message(text: str) -> OGRErr:
    """Recupera el OGRErr a partir del mensaje de una excepción nativa.
    Si el texto no corresponde a un mensaje estándar, devuelve FAILURE.
    """
    low = (text or "").lower()
    for frag, code in _OGR_MESSAGES:
        if frag in low:
            return code
    return OGRErr.FAILURE


__all__ = [
    "OGRErr", "CPLErrorNum", "GdalBridgeError", "NativeUnavailableError",
    "HandleReleasedError", "OGRError", "CPLError", "DatasetOpenError",
    "UtilityError", "err_from_ogr_err", "check_ogr_err", "ogr_err_from_message",
]
