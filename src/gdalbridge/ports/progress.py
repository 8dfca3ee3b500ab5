# src/gdalbridge/ports/progress.py
from __future__ import annotations

import sys
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class ProgressFunc(Protocol):
    """
    Callback de progreso invocado de forma síncrona desde una llamada nativa.
    Reglas:
      - `complete` en [0, 1].
      - devuelve True para continuar, False para abortar la operación.
    """
    def __call__(self, complete: float, message: str, data: Any) -> bool: ...


def dummy_progress(complete: float, message: str, data: Any) -> bool:
    return True


def term_progress(complete: float, message: str, data: Any) -> bool:
    """Barra mínima en stderr (0..100%)."""
    pct = int(round(max(0.0, min(1.0, complete)) * 100))
    sys.stderr.write(f"\r{pct:3d}% {message or ''}")
    if pct >= 100:
        sys.stderr.write("\n")
    sys.stderr.flush()
    return True


def as_native_callback(
    progress: Optional[ProgressFunc], data: Any = None
) -> Optional[Callable[[float, str, Any], int]]:
    """
    Adapta un ProgressFunc a la firma que esperan los bindings de GDAL
    (`callback(complete, message, callback_data) -> int`).
    El `data` del llamador queda capturado en el cierre; lo que GDAL pase
    como callback_data se ignora.
    """
    if progress is None:
        return None

    def _proxy(complete: float, message: Optional[str], _native_data: Any) -> int:
        return 1 if progress(float(complete), message or "", data) else 0

    return _proxy


__all__ = ["ProgressFunc", "dummy_progress", "term_progress", "as_native_callback"]
