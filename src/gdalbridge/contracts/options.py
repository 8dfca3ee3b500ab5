# src/gdalbridge/contracts/options.py
from __future__ import annotations

"""
Arrays de opciones estilo línea de comandos (`-of GTiff -t_srs EPSG:3857 ...`).

Los nombres de flags son los de las herramientas GDAL y se pasan tal cual;
aquí solo se normalizan los tipos y se aplica la regla del destino en memoria.
"""

import os
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

OptionValue = Union[str, "os.PathLike[str]", int, float]
Options = Sequence[OptionValue]

# Flags que fijan el formato de salida en las utilidades GDAL
FORMAT_FLAGS: Tuple[str, ...] = ("-of", "-f")


def normalize_options(options: Optional[Iterable[OptionValue]]) -> list[str]:
    """Copia la lista de opciones convirtiendo PathLike/números a str.
    Nunca modifica la secuencia del llamador.
    """
    if options is None:
        return []
    if isinstance(options, (str, bytes)):
        raise TypeError("options debe ser una secuencia de flags, no un string")
    out: list[str] = []
    for o in options:
        if isinstance(o, bool):
            raise TypeError(f"opción booleana no soportada: {o!r}")
        if isinstance(o, (int, float)):
            out.append(repr(o) if isinstance(o, float) else str(o))
        elif isinstance(o, (str, os.PathLike)):
            out.append(os.fspath(o))
        else:
            raise TypeError(f"opción no soportada: {o!r}")
    return out


def has_flag(options: Sequence[str], *flags: str) -> bool:
    """True si alguna de las flags aparece literalmente en `options`."""
    wanted = set(flags)
    return any(o in wanted for o in options)


@dataclass(frozen=True)
class Destination:
    """Destino resuelto de una utilidad batch."""
    name: str
    options: Tuple[str, ...]
    in_memory: bool


def resolve_destination(
    dest: Optional[Union[str, "os.PathLike[str]"]],
    options: Optional[Iterable[OptionValue]],
    *,
    memory_format: str,
    inject_flag: str = "-of",
    memory_name: str = "",
) -> Destination:
    """
    Regla del destino en memoria:
      - si `dest` es vacío/None -> destino en memoria;
      - se antepone `inject_flag memory_format` SOLO si el llamador no pasó
        ya una flag de formato (-of / -f). La flag explícita siempre gana.
    """
    opts = normalize_options(options)
    name = "" if dest is None else os.fspath(dest)
    if name:
        return Destination(name=name, options=tuple(opts), in_memory=False)
    if not has_flag(opts, *FORMAT_FLAGS):
        opts = [inject_flag, memory_format, *opts]
    return Destination(name=memory_name, options=tuple(opts), in_memory=True)


__all__ = [
    "OptionValue", "Options", "FORMAT_FLAGS", "normalize_options", "has_flag",
    "Destination", "resolve_destination",
]
