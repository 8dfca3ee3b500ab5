# src/gdalbridge/cli.py
from __future__ import annotations

"""
CLI para el binding GDAL (utilidades en proceso + OSR).

Comandos:
  - srs: convierte un CRS (EPSG:n, WKT, PROJ...) a wkt/pretty/proj4/projjson/xml.
  - transform: transforma puntos x,y[,z] entre dos CRS.
  - warp / translate / vector-translate / rasterize / dem: utilidades batch.
  - contour: genera isolíneas de un DEM a un archivo vectorial.

Las opciones de la herramienta GDAL van después de `--` y se reenvían tal cual.

Ejemplos rápidos:
  python -m gdalbridge.cli srs EPSG:32719 --format proj4

  python -m gdalbridge.cli warp ./out.tif ./dem.tif -- -t_srs EPSG:3857 -r bilinear

  python -m gdalbridge.cli transform --t-srs EPSG:32719 -70.6,-33.4

  python -m gdalbridge.cli contour ./dem.tif ./curvas.gpkg --interval 20
"""

import argparse
import re
import sys
from pathlib import Path
from typing import Sequence, Tuple

# Config / composición
from .config import Settings, get_settings
from .composition.di import build_settings, configure_gdal, configure_logging, load_settings_from_yaml

# Adapters
from .adapters.gdal_osr import AxisMappingStrategy, CoordinateTransform, SpatialReference
from .adapters import gdal_utilities as utils
from .ports.progress import term_progress

# Services
from .services.contour_service import ContourService, ContourSpec

_SRS_FORMATS = ("wkt", "pretty", "proj4", "projjson", "xml")
_TOOL_COMMANDS = ("warp", "translate", "vector-translate", "rasterize", "dem")
_COMMANDS = ("srs", "transform", "contour") + _TOOL_COMMANDS

# x,y[,z] con signo y exponente opcionales
_NUM = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_POINT_RE = re.compile(rf"^{_NUM},{_NUM}(?:,{_NUM})?$")

# ----------------------
# Utilidades locales
# ----------------------

def _split_tool_options(argv: Sequence[str]) -> Tuple[list[str], list[str]]:
    """
    Separa `argv` en (args del CLI, opciones de la herramienta tras `--`).

    Solo las utilidades batch reenvían opciones. En `transform` los puntos
    (p.ej. `-70.6,-33.4`) se mueven tras un `--` para que argparse no los
    tome por flags.
    """
    argv = list(argv)
    cmd_i = next((i for i, a in enumerate(argv) if a in _COMMANDS), None)
    if cmd_i is None:
        return argv, []
    cmd = argv[cmd_i]
    rest = argv[cmd_i + 1:]
    if cmd in _TOOL_COMMANDS and "--" in rest:
        i = argv.index("--", cmd_i)
        return argv[:i], argv[i + 1:]
    if cmd == "transform" and "--" not in rest:
        points = [a for a in rest if _POINT_RE.match(a)]
        if points:
            flags = [a for a in rest if not _POINT_RE.match(a)]
            return argv[:cmd_i + 1] + flags + ["--"] + points, []
    return argv, []


def _settings(args: argparse.Namespace) -> Settings:
    if getattr(args, "config", None):
        return load_settings_from_yaml(Path(args.config))
    if getattr(args, "root", None):
        return build_settings(Path(args.root))
    return get_settings()


def _parse_point(text: str) -> Tuple[float, float, float]:
    parts = [p for p in text.replace(" ", "").split(",") if p]
    if len(parts) not in (2, 3):
        raise ValueError(f"Punto inválido: {text!r}. Usa x,y o x,y,z")
    vals = [float(p) for p in parts]
    return vals[0], vals[1], vals[2] if len(vals) == 3 else 0.0


def _progress(args: argparse.Namespace):
    return term_progress if getattr(args, "progress", False) else None


# ----------------------
# Comandos
# ----------------------

def cmd_srs(args: argparse.Namespace) -> int:
    with SpatialReference.from_user_input(args.input) as srs:
        if args.format == "wkt":
            out = srs.export_to_wkt()
        elif args.format == "pretty":
            out = srs.export_to_pretty_wkt()
        elif args.format == "proj4":
            out = srs.export_to_proj4()
        elif args.format == "projjson":
            out = srs.export_to_projjson()
        else:
            out = srs.export_to_xml()
    print(out)
    return 0


def cmd_transform(args: argparse.Namespace) -> int:
    pts = [_parse_point(p) for p in args.point]
    xs = [p[0] for p in pts]
    ys = [p[1] for p in pts]
    zs = [p[2] for p in pts]

    s_srs = args.s_srs or args.settings.default_crs_ref().to_user_input()
    with SpatialReference.from_user_input(s_srs) as src, SpatialReference.from_user_input(args.t_srs) as dst:
        if not args.authority_order:
            src.set_axis_mapping_strategy(AxisMappingStrategy.TRADITIONAL_GIS_ORDER)
            dst.set_axis_mapping_strategy(AxisMappingStrategy.TRADITIONAL_GIS_ORDER)
        with CoordinateTransform.create(src, dst) as ct:
            res = ct.transform_with_status(len(pts), xs, ys, zs)

    for x, y, z, ok in zip(xs, ys, zs, res.point_ok):
        print(f"{x!r} {y!r} {z!r}" if ok else "[FALLO]")
    return 0 if res.success else 1


def cmd_warp(args: argparse.Namespace) -> int:
    with utils.warp(args.dest, args.src, args.tool_options, progress=_progress(args), settings=args.settings):
        pass
    print(args.dest)
    return 0


def cmd_translate(args: argparse.Namespace) -> int:
    with utils.translate(args.dest, args.src, args.tool_options, progress=_progress(args), settings=args.settings):
        pass
    print(args.dest)
    return 0


def cmd_vector_translate(args: argparse.Namespace) -> int:
    with utils.vector_translate(args.dest, [args.src], args.tool_options, progress=_progress(args), settings=args.settings):
        pass
    print(args.dest)
    return 0


def cmd_rasterize(args: argparse.Namespace) -> int:
    with utils.rasterize(args.dest, args.src, args.tool_options, progress=_progress(args), settings=args.settings):
        pass
    print(args.dest)
    return 0


def cmd_dem(args: argparse.Namespace) -> int:
    if args.processing == "color-relief" and not args.color_file:
        raise ValueError("color-relief requiere --color-file")
    with utils.dem_processing(
        args.dest, args.src, args.processing, args.color_file, args.tool_options,
        progress=_progress(args), settings=args.settings,
    ):
        pass
    print(args.dest)
    return 0


def cmd_contour(args: argparse.Namespace) -> int:
    spec = ContourSpec(
        interval=args.interval,
        base=args.base,
        fixed_levels=tuple(args.fixed_levels or ()),
        band_index=args.band,
        driver=args.driver,
        layer_name=args.layer,
        nodata=args.nodata,
        overwrite=args.overwrite,
    )
    res = ContourService(settings=args.settings).run(args.src, args.dest, spec, progress=_progress(args))
    print(f"{res.dst_uri} ({res.feature_count} features)")
    return 0


# ----------------------
# Parser
# ----------------------

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gdalbridge", description="Utilidades GDAL/OSR en proceso")
    p.add_argument("--config", help="settings.yaml explícito")
    p.add_argument("--root", help="raíz de proyecto (lee <root>/config/settings.yaml)")
    p.add_argument("--progress", action="store_true", help="muestra progreso en stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    # srs
    pr = sub.add_parser("srs", help="convierte un CRS entre representaciones")
    pr.add_argument("input", help="EPSG:n, WKT, PROJ string, URN...")
    pr.add_argument("--format", choices=_SRS_FORMATS, default="wkt")
    pr.set_defaults(func=cmd_srs)

    # transform
    pt = sub.add_parser("transform", help="transforma puntos entre dos CRS")
    pt.add_argument("--s-srs", help="CRS origen (por defecto Settings.default_crs)")
    pt.add_argument("--t-srs", required=True, help="CRS destino")
    pt.add_argument("--authority-order", action="store_true", help="respeta el orden de ejes de la autoridad (lat,lon en EPSG:4326)")
    pt.add_argument("point", nargs="+", help="x,y[,z] (admite negativos: -70.6,-33.4)")
    pt.set_defaults(func=cmd_transform)

    # warp
    pw = sub.add_parser("warp", help="gdalwarp en proceso")
    pw.add_argument("dest")
    pw.add_argument("src", nargs="+")
    pw.set_defaults(func=cmd_warp)

    # translate
    pl = sub.add_parser("translate", help="gdal_translate en proceso")
    pl.add_argument("dest")
    pl.add_argument("src")
    pl.set_defaults(func=cmd_translate)

    # vector-translate
    pv = sub.add_parser("vector-translate", help="ogr2ogr en proceso")
    pv.add_argument("dest")
    pv.add_argument("src")
    pv.set_defaults(func=cmd_vector_translate)

    # rasterize
    pz = sub.add_parser("rasterize", help="gdal_rasterize en proceso")
    pz.add_argument("dest")
    pz.add_argument("src")
    pz.set_defaults(func=cmd_rasterize)

    # dem
    pd = sub.add_parser("dem", help="gdaldem en proceso")
    pd.add_argument("processing", choices=utils.DEM_PROCESSINGS)
    pd.add_argument("dest")
    pd.add_argument("src")
    pd.add_argument("--color-file", help="tabla de colores (solo color-relief)")
    pd.set_defaults(func=cmd_dem)

    # contour
    pc = sub.add_parser("contour", help="isolíneas de un DEM")
    pc.add_argument("src")
    pc.add_argument("dest")
    pc.add_argument("--interval", type=float, default=10.0)
    pc.add_argument("--base", type=float, default=0.0)
    pc.add_argument("--fixed-levels", type=float, nargs="*", default=None)
    pc.add_argument("--band", type=int, default=1)
    pc.add_argument("--driver", default="GPKG")
    pc.add_argument("--layer", default="contour")
    pc.add_argument("--nodata", type=float, default=None)
    pc.add_argument("--overwrite", action="store_true")
    pc.set_defaults(func=cmd_contour)

    return p


def main(argv: list[str] | None = None) -> int:
    argv, tool_options = _split_tool_options(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    args.tool_options = tool_options
    try:
        s = args.settings = _settings(args)  # una sola carga por invocación
        configure_logging(s)
        configure_gdal(s)
        return int(bool(args.func(args)))  # 0 si todo bien
    except KeyboardInterrupt:
        return 130
    except Exception as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
